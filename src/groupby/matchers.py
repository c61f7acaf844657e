"""Matchers: pure functions that compute a group key fragment from a token

Every matcher works on characters, never on raw bytes, so multi-byte UTF-8
characters are never split. Matchers that can fail to produce a key return
None; the groupers decide what key such tokens are filed under.
"""

import itertools
import re
import threading

from groupby.models import CaptureGroup


def match_first_n_chars(string: str, n: int) -> str:
    """Return the first n characters of string, or all of it if n exceeds its length."""
    return string[:n]


def match_last_n_chars(string: str, n: int) -> str:
    """Return the last n characters of string, or all of it if n exceeds its length."""
    if n <= 0:
        return ''
    return string[-n:]


def match_regex(string: str, regex: re.Pattern, capture_group: CaptureGroup = 0) -> str | None:
    """
    Match string against a compiled regex and return the selected capture group.

    Group 0 is the entire match. If the requested group did not take part in the
    match, the entire match is returned instead.

    Args:
        string: Token to match
        regex: Compiled pattern
        capture_group: Group number or group name

    Returns:
        Matched text, or None if the pattern does not match at all
    """
    match = regex.search(string)
    if match is None:
        return None

    text = match.group(capture_group)
    if text is None:
        return match.group(0)
    return text


def match_file_extension(filename: str) -> str | None:
    """
    Return the final extension of filename, excluding the period.

    'a.tar.gz' -> 'gz'. Dotfiles ('.bashrc'), names without a period ('Gemfile') and
    names ending in a period ('trailing.') have no extension.
    """
    index = filename.rfind('.')
    if index <= 0 or index == len(filename) - 1:
        return None
    return filename[index + 1 :]


class Counter:
    """Thread-safe increasing sequence starting at 0.

    Each Runner owns its own Counter, so independent runs never share numbering.
    """

    def __init__(self, start: int = 0):
        self._count = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._count)

    __call__ = next


def match_counter(counter: Counter) -> int:
    """Return the next value from counter; every call yields a distinct key."""
    return counter.next()
