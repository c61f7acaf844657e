"""Run one shell command per group, sequentially or on a thread pool

Both strategies share capture_command_output() as the unit of work and differ only
in how groups are scheduled and how results are reported. Exit statuses are never
treated as failures; any I/O error while talking to a child aborts the run.
"""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

import psutil

from groupby.command import run
from groupby.grouped_collections import GroupedCollection
from groupby.models import GroupByOptions, ShellCommandOptions
from groupby.report import LockedReport, Report, Reporter
from groupby.utils import get_int_env


logger = logging.getLogger(__name__)

SHELL_VAR = 'SHELL'
MAX_WORKERS_VAR = 'GROUPBY_MAX_WORKERS'


def current_shell() -> str:
    """
    Return the user's shell from $SHELL.

    Raises:
        RuntimeError: if SHELL is unset or empty
    """
    shell = os.environ.get(SHELL_VAR, '')
    if not shell:
        raise RuntimeError(f"Couldn't retrieve environment variable {SHELL_VAR}")
    return shell


def shell_args(cmd: str) -> tuple[str, ...]:
    return ('-c', cmd)


def shell_command_options(options: GroupByOptions, shell: str | None = None) -> ShellCommandOptions:
    """Build the per-run command configuration from program options."""
    if options.output.run_command is None:
        raise ValueError('No command was requested')
    return ShellCommandOptions(
        shell=shell if shell is not None else current_shell(),
        shell_args=shell_args(options.output.run_command),
        line_separator=options.output.separator.sep(),
        only_group_names=options.output.only_group_names,
    )


def default_max_workers() -> int:
    """Pool size: GROUPBY_MAX_WORKERS, else the number of logical CPUs."""
    configured = get_int_env(MAX_WORKERS_VAR)
    if configured:
        return configured
    return psutil.cpu_count(logical=True) or 1


def capture_command_output(options: ShellCommandOptions, key: str, values: list[str]) -> bytes:
    """
    Run the configured command for one group and return its standard output.

    The command receives the group's key if options.only_group_names is set, otherwise
    every value in the group; each item is followed by options.line_separator.

    Raises:
        OSError: if the command cannot be spawned or its pipes fail
    """
    with run(options.shell, options.shell_args, options.line_separator) as handle:
        if options.only_group_names:
            handle.stdin.write(key)
        else:
            handle.stdin.write_all(values)
        output = handle.wait_with_output()

    if output.returncode != 0:
        logger.debug(f'[RUN] Command for group {key!r} exited with status {output.returncode}')
    return output.stdout


def run_commands_sequentially(
    collection: GroupedCollection,
    options: ShellCommandOptions,
    results: Report | None = None,
) -> Report:
    """Run each group's command on the calling thread, in collection order."""
    if results is None:
        results = Report()

    start_time = time.time()
    for key, values in collection.iter():
        results.report(key, capture_command_output(options, key, values))

    logger.info(f'[SEQUENTIAL] Ran {len(results)} command(s) in {time.time() - start_time:.3f}s')
    return results


def _run_group(options: ShellCommandOptions, key: str, values: list[str], results: Reporter) -> str:
    thread_id = threading.current_thread().name
    logger.debug(f'[PARALLEL {thread_id}] Running command for group {key!r} ({len(values)} item(s))')
    results.report(key, capture_command_output(options, key, values))
    return key


def run_commands_in_parallel(
    collection: GroupedCollection,
    options: ShellCommandOptions,
    results: Report | None = None,
    max_workers: int | None = None,
) -> Report:
    """
    Run each group's command on a thread pool.

    Commands finish in arbitrary order; the returned Report holds exactly one entry per
    group. The first failing group cancels every group not yet started and its error
    propagates to the caller.

    Args:
        collection: Groups to process; must not be mutated while this runs
        options: Shared command configuration
        results: Report to fill, a fresh key-sorted Report by default
        max_workers: Pool size, default_max_workers() by default

    Returns:
        The filled Report
    """
    if results is None:
        results = Report()
    if max_workers is None:
        max_workers = default_max_workers()

    shared = LockedReport(results)
    start_time = time.time()

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='GroupWorker') as executor:
        futures = {
            executor.submit(_run_group, options, key, values, shared): key for key, values in collection.iter()
        }
        logger.info(f'[PARALLEL] Dispatched {len(futures)} group(s) to {max_workers} worker(s)')

        for future in as_completed(futures):
            key = futures[future]
            try:
                future.result()
            except Exception as e:
                logger.error(f'[PARALLEL] Group {key!r} failed: {e}')
                for pending in futures:
                    pending.cancel()
                raise

    results = shared.into_inner()
    logger.info(f'[PARALLEL] Ran {len(results)} command(s) in {time.time() - start_time:.3f}s')
    return results
