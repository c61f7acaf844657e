"""Grouped collections: key -> list of values, with a defined iteration order

Two implementations share one small protocol (add, get, iter):

- HashGroupedCollection iterates keys in first-insertion order, which callers must
  treat as arbitrary.
- SortedGroupedCollection iterates keys in sorted order. Use it whenever output has
  to be deterministic.
"""

import bisect
from collections.abc import Iterator
from typing import Protocol


class GroupedCollection(Protocol):
    """Capability set shared by every grouped collection."""

    def add(self, key: str, value: str) -> None:
        """Append value to key's group, creating the group if needed."""
        ...

    def get(self, key: str) -> list[str] | None:
        """Return key's group, or None if there is no such group."""
        ...

    def iter(self) -> Iterator[tuple[str, list[str]]]:
        """Yield every (key, values) pair exactly once."""
        ...

    def __len__(self) -> int: ...


class HashGroupedCollection:
    """Dictionary-backed grouped collection with no ordering guarantee."""

    def __init__(self):
        self._groups: dict[str, list[str]] = {}

    def add(self, key: str, value: str) -> None:
        group = self._groups.get(key)
        if group is None:
            self._groups[key] = [value]
        else:
            group.append(value)

    def get(self, key: str) -> list[str] | None:
        return self._groups.get(key)

    def iter(self) -> Iterator[tuple[str, list[str]]]:
        return iter(self._groups.items())

    def keys(self) -> list[str]:
        return list(self._groups)

    def __iter__(self) -> Iterator[tuple[str, list[str]]]:
        return self.iter()

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key: object) -> bool:
        return key in self._groups

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._groups!r})'


class SortedGroupedCollection(HashGroupedCollection):
    """Grouped collection that iterates keys in sorted order.

    Keys are kept in a sorted list alongside the groups; new keys are inserted
    with bisect so iteration never has to re-sort.
    """

    def __init__(self):
        super().__init__()
        self._sorted_keys: list[str] = []

    def add(self, key: str, value: str) -> None:
        if key not in self._groups:
            bisect.insort(self._sorted_keys, key)
        super().add(key, value)

    def iter(self) -> Iterator[tuple[str, list[str]]]:
        for key in self._sorted_keys:
            yield key, self._groups[key]

    def keys(self) -> list[str]:
        return list(self._sorted_keys)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({dict(self.iter())!r})'
