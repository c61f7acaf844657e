"""CLI entry point for groupby"""

import logging
import sys

import click

from groupby.__version__ import __version__
from groupby.build_groups import build_groups
from groupby.grouped_collections import SortedGroupedCollection
from groupby.groupers import Runner
from groupby.models import (
    CounterGrouping,
    FileExtension,
    FirstChars,
    GroupByOptions,
    InputOptions,
    LastChars,
    OutputOptions,
    RegexGrouping,
    Separator,
)
from groupby.output import build_response, output_results, run_group_commands
from groupby.run_commands import current_shell
from groupby.utils import configure_logging


logger = logging.getLogger(__name__)


def parse_capture_group(value: str | None) -> int | str | None:
    """Capture groups are numbers when they look like numbers, names otherwise."""
    if value is None:
        return None
    if value.isdigit():
        return int(value)
    return value


def build_options(
    split_on_whitespace: bool,
    split_on_null: bool,
    split_on,
    first_chars,
    last_chars,
    regex,
    extension: bool,
    counter: bool,
    capture_group,
    print0: bool,
    printspace: bool,
    only_group_names: bool,
    run_command,
    sequential: bool,
    stats: bool,
) -> GroupByOptions:
    """Turn raw flag values into GroupByOptions, enforcing the choose-one rules."""
    input_flags = [split_on_whitespace, split_on_null, split_on is not None]
    if sum(input_flags) > 1:
        raise click.UsageError('Choose at most one of -w, -0 and --split.')

    groupers = [first_chars is not None, last_chars is not None, regex is not None, extension, counter]
    if sum(groupers) != 1:
        raise click.UsageError('Choose exactly one grouper: -f, -l, -r/--regex, --extension or --counter.')

    if capture_group is not None and regex is None:
        raise click.UsageError('--capture-group can only be used with -r/--regex.')

    if print0 and printspace:
        raise click.UsageError('Choose at most one of --print0 and --printspace.')

    if split_on_whitespace:
        input_separator = Separator.space()
    elif split_on_null:
        input_separator = Separator.null()
    elif split_on is not None:
        input_separator = Separator.custom(split_on)
    else:
        input_separator = Separator.line()

    if first_chars is not None:
        grouping = FirstChars(n=first_chars)
    elif last_chars is not None:
        grouping = LastChars(n=last_chars)
    elif regex is not None:
        grouping = RegexGrouping(pattern=regex, capture_group=parse_capture_group(capture_group))
    elif extension:
        grouping = FileExtension()
    else:
        grouping = CounterGrouping()

    if print0:
        output_separator = Separator.null()
    elif printspace:
        output_separator = Separator.space()
    else:
        output_separator = Separator.line()

    return GroupByOptions(
        input=InputOptions(separator=input_separator),
        grouping=grouping,
        output=OutputOptions(
            separator=output_separator,
            only_group_names=only_group_names,
            run_command=run_command,
            sequential=sequential,
            stats=stats,
        ),
    )


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(version=__version__, prog_name='groupby')
@click.option('-w', 'split_on_whitespace', is_flag=True, help="Group words instead of lines; split input on whitespace.")
@click.option('-0', 'split_on_null', is_flag=True, help="Split input by null characters rather than lines.")
@click.option('--split', 'split_on', metavar='DELIM', help="Split input on a custom delimiter.")
@click.option('-f', 'first_chars', type=click.IntRange(min=0), metavar='N', help="Group by the first N characters.")
@click.option('-l', 'last_chars', type=click.IntRange(min=0), metavar='N', help="Group by the last N characters.")
@click.option('-r', '--regex', metavar='PATTERN', help="Group by the first match of PATTERN.")
@click.option('--extension', is_flag=True, help="Group by file extension (excluding the leading period).")
@click.option('--counter', is_flag=True, help="Place each token in its own numbered group, starting from 0.")
@click.option('--capture-group', metavar='NUM|NAME', help="With -r, group by this capture group (0 = whole match).")
@click.option('--print0', is_flag=True, help="Separate output records with null characters (for xargs -0).")
@click.option('--printspace', is_flag=True, help="Separate output records with spaces.")
@click.option('--only-group-names', is_flag=True, help="Output only group names; with -c, feed names to commands.")
@click.option('-c', '--run-command', metavar='CMD', help="Run CMD with $SHELL -c for each group, fed via stdin.")
@click.option('--sequential', is_flag=True, help="With -c, run commands one at a time in group order.")
@click.option('--stats', is_flag=True, help="Print item counts and overall statistics.")
@click.option('--json', 'output_json', is_flag=True, help="Output groups (and command results) as JSON.")
@click.option('--debug', is_flag=True, help="Log debug information to stderr.")
def groupby_command(
    split_on_whitespace,
    split_on_null,
    split_on,
    first_chars,
    last_chars,
    regex,
    extension,
    counter,
    capture_group,
    print0,
    printspace,
    only_group_names,
    run_command,
    sequential,
    stats,
    output_json,
    debug,
):
    """
    Read tokens from standard input and group them by common substrings.

    By default, prints each group as a "key:" header followed by its
    members. With -c, runs a shell command per group instead and prints
    each command's output under its group's header.

    \b
    Examples:
      groupby -f 10 < app.log
      groupby -r '\\w+\\W+(\\w+)' < moves.txt
      find ~/Pictures -type f -print0 | groupby -0 --extension --print0 -c "xargs -0 du -chL | tail -n1"
      ls | groupby --counter -c "wc -c"

    \b
    Environment:
      SHELL                 Shell used to run -c commands (required with -c)
      GROUPBY_MAX_WORKERS   Parallel command limit (default: logical CPU count)
      GROUPBY_LOG_LEVEL     Log level for stderr diagnostics (default: WARNING)
    """
    configure_logging(debug)

    try:
        options = build_options(
            split_on_whitespace,
            split_on_null,
            split_on,
            first_chars,
            last_chars,
            regex,
            extension,
            counter,
            capture_group,
            print0,
            printspace,
            only_group_names,
            run_command,
            sequential,
            stats,
        )

        # Resolve every configuration error before reading any input.
        shell = current_shell() if options.output.run_command is not None else None
        collection = SortedGroupedCollection()
        runner = Runner(collection, options.grouping)

        stdin = click.get_binary_stream('stdin')
        build_groups(stdin, collection, options, runner=runner)

        if output_json:
            results = run_group_commands(collection, options, shell) if options.output.run_command else None
            click.echo(build_response(collection, results, stats=stats).model_dump_json(indent=2))
        else:
            stdout = click.get_binary_stream('stdout')
            output_results(stdout, collection, options, shell)
            stdout.flush()

    except (ValueError, RuntimeError, OSError) as e:
        logger.debug('[CLI] Run failed', exc_info=True)
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


def main():
    """Entry point for the CLI"""
    groupby_command()


if __name__ == '__main__':
    main()
