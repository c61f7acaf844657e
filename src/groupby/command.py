"""Subprocess handles with record-oriented standard input

A CommandHandle owns one child process. Its stdin is exposed as a RecordWriter; its
stdout is drained on a background thread from the moment the process starts, so a
child that echoes a large feed can never fill its stdout pipe and stall our writes.

The only way to finish with a handle is wait_with_output(), which closes stdin before
waiting on the child. Closing first is required: a child reading to EOF would
otherwise never exit.
"""

import logging
import subprocess
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import BinaryIO


logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class RecordWriter:
    """Writes text records to a binary stream, each followed by a separator."""

    def __init__(self, writer: BinaryIO, separator: bytes | str):
        if isinstance(separator, str):
            separator = separator.encode('utf-8')
        self.writer = writer
        self.separator = separator

    def _write(self, value: str) -> None:
        self.writer.write(str(value).encode('utf-8'))
        self.writer.write(self.separator)

    def write(self, value: str) -> None:
        """Write one record and flush."""
        self._write(value)
        self.writer.flush()

    def write_all(self, values: Iterable[str]) -> None:
        """Write every value as a record, then flush once."""
        for value in values:
            self._write(value)
        self.writer.flush()

    def close(self) -> None:
        if not self.writer.closed:
            self.writer.close()

    @property
    def closed(self) -> bool:
        return self.writer.closed


@dataclass(frozen=True)
class CommandOutput:
    """Exit status and captured standard output of a finished command."""

    returncode: int
    stdout: bytes


def take_stdin(process: subprocess.Popen) -> BinaryIO:
    """Detach the stdin pipe from process. The pipe can only be taken once."""
    pipe = process.stdin
    if pipe is None:
        raise RuntimeError('Standard input has already been taken or was not piped')
    process.stdin = None
    return pipe


class CommandHandle:
    """A running child process plus a record writer on its stdin.

    Example:
        with run('/bin/sh', ['-c', 'sort'], '\\n') as handle:
            handle.stdin.write_all(['b', 'a'])
            output = handle.wait_with_output()
    """

    def __init__(self, process: subprocess.Popen, separator: bytes | str):
        self.process = process
        self.stdin = RecordWriter(take_stdin(process), separator)
        self._stdout_chunks: list[bytes] = []
        self._reader_error: BaseException | None = None
        self._finished = False
        self._reader = threading.Thread(
            target=self._drain_stdout,
            name=f'StdoutReader-{process.pid}',
            daemon=True,
        )
        self._reader.start()

    def _drain_stdout(self) -> None:
        stdout = self.process.stdout
        if stdout is None:
            return
        try:
            while True:
                chunk = stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                self._stdout_chunks.append(chunk)
        except OSError as e:
            self._reader_error = e
        finally:
            stdout.close()

    def wait_with_output(self) -> CommandOutput:
        """
        Close stdin, wait for the process to exit, and return its output.

        The handle is consumed; calling this twice raises RuntimeError.

        Raises:
            OSError: if flushing stdin or reading stdout failed
        """
        if self._finished:
            raise RuntimeError('Command output has already been collected')
        self._finished = True

        try:
            self.stdin.close()
        finally:
            returncode = self.process.wait()
            self._reader.join()

        if self._reader_error is not None:
            raise self._reader_error

        stdout = b''.join(self._stdout_chunks)
        logger.debug(f'[COMMAND] pid={self.process.pid} exited with {returncode}, {len(stdout)} byte(s) of output')
        return CommandOutput(returncode=returncode, stdout=stdout)

    def __enter__(self) -> 'CommandHandle':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # No-op once output has been collected.
        if self._finished:
            return
        self._finished = True
        try:
            self.stdin.close()
        except OSError:
            logger.debug(f'[COMMAND] pid={self.process.pid} stdin was already broken during cleanup')
        self.process.wait()
        self._reader.join()


def run(program: str, args: Sequence[str], separator: bytes | str) -> CommandHandle:
    """
    Spawn program with piped stdin and stdout. Stderr is inherited.

    Args:
        program: Executable to run, usually the user's shell
        args: Arguments for the program
        separator: Written after every record fed to stdin

    Raises:
        OSError: if the process cannot be spawned
    """
    cmd = [program, *args]
    logger.debug(f'[COMMAND] Spawning: {" ".join(cmd)}')
    process = subprocess.Popen(cmd, stdin=subprocess.PIPE, stdout=subprocess.PIPE)
    return CommandHandle(process, separator)
