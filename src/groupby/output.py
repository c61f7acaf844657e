"""Write groups, command results and statistics"""

import logging
from typing import BinaryIO

from groupby.command import RecordWriter
from groupby.grouped_collections import GroupedCollection
from groupby.models import GroupByOptions, GroupsResponse, GroupStatistics, OutputOptions, item_count
from groupby.report import Report
from groupby.run_commands import run_commands_in_parallel, run_commands_sequentially, shell_command_options


logger = logging.getLogger(__name__)


def statistics_for(collection: GroupedCollection) -> GroupStatistics:
    return GroupStatistics.from_sizes([len(values) for _, values in collection.iter()])


def write_results(
    output: BinaryIO,
    collection: GroupedCollection,
    results: Report | None,
    options: OutputOptions,
) -> None:
    """
    Write every group in collection order.

    When results is given (commands were run), the output options reset to defaults
    except for stats, and each group's header is followed by its command output
    instead of its contents.

    Args:
        output: Binary destination, usually stdout
        collection: Grouped tokens
        results: Command output per group key, or None
        options: Output options chosen by the user
    """
    if results is not None:
        options = options.defaults_for_command_results()

    writer = RecordWriter(output, options.separator.sep())

    for key, values in collection.iter():
        if options.only_group_names:
            if options.stats:
                writer.write(f'{key} ({item_count(len(values))})')
            else:
                writer.write(key)
            continue

        if options.stats:
            writer.write(f'{key}: ({item_count(len(values))})')
        else:
            writer.write(f'{key}:')

        if results is not None:
            writer.write(results[key].decode('utf-8', errors='replace'))
        else:
            writer.write_all(values)

    if options.stats:
        writer.write('')
        writer.write(statistics_for(collection).to_cli())


def run_group_commands(
    collection: GroupedCollection, options: GroupByOptions, shell: str | None = None
) -> Report:
    """Run the requested command over every group with the requested strategy."""
    command_options = shell_command_options(options, shell)
    if options.output.sequential:
        return run_commands_sequentially(collection, command_options)
    return run_commands_in_parallel(collection, command_options)


def output_results(
    output: BinaryIO,
    collection: GroupedCollection,
    options: GroupByOptions,
    shell: str | None = None,
) -> Report | None:
    """Run commands if requested, then write the final report. Returns command results, if any."""
    results = None
    if options.output.run_command is not None:
        results = run_group_commands(collection, options, shell)

    write_results(output, collection, results, options.output)
    return results


def build_response(
    collection: GroupedCollection, results: Report | None, stats: bool = False
) -> GroupsResponse:
    """Build the JSON document for --json output."""
    decoded = None
    if results is not None:
        decoded = {key: value.decode('utf-8', errors='replace') for key, value in results.items()}
    return GroupsResponse(
        groups={key: list(values) for key, values in collection.iter()},
        results=decoded,
        statistics=statistics_for(collection) if stats else None,
    )
