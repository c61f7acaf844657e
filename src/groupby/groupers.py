"""Groupers: bind one grouping specifier to one grouped collection

The specifier is inspected once, when the Runner is built. Regex compilation and
capture-group validation happen there too, so configuration errors surface before
any input is read. After that, run() is a single bound call per token.
"""

import logging
import re
from collections.abc import Callable

from groupby.grouped_collections import GroupedCollection
from groupby.matchers import (
    Counter,
    match_counter,
    match_file_extension,
    match_first_n_chars,
    match_last_n_chars,
    match_regex,
)
from groupby.models import (
    CaptureGroup,
    CounterGrouping,
    FileExtension,
    FirstChars,
    GroupingSpecifier,
    LastChars,
    RegexGrouping,
)


logger = logging.getLogger(__name__)

# Tokens that yield no key (regex non-match, no extension) share this group.
BLANK_KEY = ''


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a grouping pattern, raising RuntimeError with a readable message."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise RuntimeError(f'Invalid regex pattern: {e}') from e


def resolve_capture_group(regex: re.Pattern, capture_group: CaptureGroup | None) -> CaptureGroup:
    """
    Check a capture group against a compiled pattern.

    None selects the first capture group when the pattern has one, else the whole match.

    Raises:
        ValueError: if the group number is out of range or the name is unknown
    """
    if capture_group is None:
        return 1 if regex.groups >= 1 else 0

    if isinstance(capture_group, int):
        if capture_group < 0 or capture_group > regex.groups:
            raise ValueError(
                f'Capture group {capture_group} is out of range; pattern has {regex.groups} group(s)'
            )
        return capture_group

    if capture_group not in regex.groupindex:
        raise ValueError(f'Pattern has no capture group named {capture_group!r}')
    return capture_group


def bind_matcher(spec: GroupingSpecifier, counter: Counter | None = None) -> Callable[[str], str]:
    """Return a function computing the group key for a token under spec."""
    if isinstance(spec, FirstChars):
        n = spec.n
        return lambda token: match_first_n_chars(token, n)

    if isinstance(spec, LastChars):
        n = spec.n
        return lambda token: match_last_n_chars(token, n)

    if isinstance(spec, RegexGrouping):
        regex = compile_pattern(spec.pattern)
        group = resolve_capture_group(regex, spec.capture_group)
        logger.debug(f'[GROUPER] Regex {spec.pattern!r} bound to capture group {group!r}')

        def regex_key(token: str) -> str:
            key = match_regex(token, regex, group)
            return BLANK_KEY if key is None else key

        return regex_key

    if isinstance(spec, FileExtension):

        def extension_key(token: str) -> str:
            key = match_file_extension(token)
            return BLANK_KEY if key is None else key

        return extension_key

    if isinstance(spec, CounterGrouping):
        if counter is None:
            counter = Counter()
        return lambda token: str(match_counter(counter))

    raise TypeError(f'Unknown grouping specifier: {spec!r}')


class Runner:
    """Feeds tokens into a grouped collection under one grouping specifier.

    Example:
        collection = SortedGroupedCollection()
        runner = Runner(collection, FirstChars(n=1))
        for word in ['apple', 'avocado', 'banana']:
            runner.run(word)
    """

    def __init__(self, collection: GroupedCollection, spec: GroupingSpecifier, counter: Counter | None = None):
        self.collection = collection
        self.spec = spec
        self._key_for = bind_matcher(spec, counter)

    def key_for(self, token: str) -> str:
        return self._key_for(token)

    def run(self, token: str) -> None:
        self.collection.add(self._key_for(token), token)

    __call__ = run
