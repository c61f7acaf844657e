"""Result reporters: collect one captured output per group key

Report is the exclusive, single-writer form used by the sequential strategy.
LockedReport wraps a Report behind a mutex for the parallel strategy; once every
worker has finished, into_inner() hands the plain Report back to the caller.
"""

import threading
from collections.abc import Iterator
from typing import Protocol


class Reporter(Protocol):
    def report(self, key: str, value: bytes) -> None:
        """Insert or overwrite the result for key."""
        ...


class Report:
    """Key -> captured output map.

    With sort_keys=True (the default), items() yields keys in sorted order no
    matter in which order results were reported.
    """

    def __init__(self, sort_keys: bool = True):
        self.sort_keys = sort_keys
        self._results: dict[str, bytes] = {}

    def report(self, key: str, value: bytes) -> None:
        self._results[key] = value

    def get(self, key: str) -> bytes | None:
        return self._results.get(key)

    def keys(self) -> list[str]:
        return [key for key, _ in self.items()]

    def items(self) -> Iterator[tuple[str, bytes]]:
        if self.sort_keys:
            return iter(sorted(self._results.items()))
        return iter(self._results.items())

    def to_dict(self) -> dict[str, bytes]:
        return dict(self.items())

    def __getitem__(self, key: str) -> bytes:
        return self._results[key]

    def __contains__(self, key: object) -> bool:
        return key in self._results

    def __len__(self) -> int:
        return len(self._results)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Report):
            return self._results == other._results
        if isinstance(other, dict):
            return self._results == other
        return NotImplemented

    def __repr__(self) -> str:
        return f'Report({self.to_dict()!r})'


class LockedReport:
    """Thread-safe reporter shared by worker threads."""

    def __init__(self, inner: Report | None = None):
        self._inner = inner if inner is not None else Report()
        self._lock = threading.Lock()

    def report(self, key: str, value: bytes) -> None:
        with self._lock:
            self._inner.report(key, value)

    def into_inner(self) -> Report:
        """Return the wrapped Report. Call only after all writers have finished."""
        with self._lock:
            return self._inner
