"""Shared test doubles"""

SHELL = '/bin/sh'


class FakeCollection:
    """Grouped collection that records every add() as 'key:value'."""

    def __init__(self):
        self.calls = []

    def add(self, key, value):
        self.calls.append(f'{key}:{value}')

    def get(self, key):
        values = [call.split(':', 1)[1] for call in self.calls if call.split(':', 1)[0] == key]
        return values or None

    def iter(self):
        groups = {}
        for call in self.calls:
            key, value = call.split(':', 1)
            groups.setdefault(key, []).append(value)
        return iter(groups.items())

    def __len__(self):
        return len({call.split(':', 1)[0] for call in self.calls})
