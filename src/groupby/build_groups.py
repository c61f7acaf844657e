"""Split an input stream into tokens and file them into a grouped collection

Example:
    collection = SortedGroupedCollection()
    options = GroupByOptions(
        input=InputOptions(separator=Separator.space()),
        grouping=FirstChars(n=1),
    )
    build_groups(io.BytesIO(b'I have some words for you'), collection, options)
    collection.get('w')  # ['words']
"""

import logging
from collections.abc import Iterator
from typing import BinaryIO

from groupby.grouped_collections import GroupedCollection
from groupby.groupers import Runner
from groupby.matchers import Counter
from groupby.models import GroupByOptions, Separator, SeparatorKind


logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


def decode_token(raw: bytes) -> str:
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ValueError(f'Input is not valid UTF-8: {e}') from e


def _split_lines(stream: BinaryIO) -> Iterator[bytes]:
    for raw in stream:
        if raw.endswith(b'\n'):
            raw = raw[:-1]
            if raw.endswith(b'\r'):
                raw = raw[:-1]
        yield raw


def _split_on_byte(stream: BinaryIO, delimiter: bytes) -> Iterator[bytes]:
    # A trailing delimiter does not produce an extra empty token.
    pending = b''
    while True:
        chunk = stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        pending += chunk
        *tokens, pending = pending.split(delimiter)
        yield from tokens
    if pending:
        yield pending


def split_tokens(stream: BinaryIO, separator: Separator) -> Iterator[str]:
    """
    Yield decoded tokens from a binary stream.

    Args:
        stream: Binary input stream
        separator: How tokens are delimited

    Raises:
        ValueError: if a token is not valid UTF-8
    """
    if separator.kind == SeparatorKind.NULL:
        for raw in _split_on_byte(stream, b'\0'):
            yield decode_token(raw)

    elif separator.kind == SeparatorKind.SPACE:
        for raw in _split_lines(stream):
            for word in decode_token(raw).split():
                yield word

    elif separator.kind == SeparatorKind.CUSTOM:
        # Custom delimiters may span chunk boundaries, so read everything up front.
        text = decode_token(stream.read())
        yield from text.split(separator.delimiter)

    else:
        for raw in _split_lines(stream):
            yield decode_token(raw)


def build_groups(
    stream: BinaryIO,
    collection: GroupedCollection,
    options: GroupByOptions,
    runner: Runner | None = None,
    counter: Counter | None = None,
) -> int:
    """
    Read every token from stream and add it to collection.

    A prebuilt runner can be passed so that grouping configuration errors are raised
    before the stream is touched.

    Returns:
        Number of tokens read
    """
    if runner is None:
        runner = Runner(collection, options.grouping, counter)

    count = 0
    for token in split_tokens(stream, options.input.separator):
        runner.run(token)
        count += 1

    logger.info(f'[INPUT] Read {count} token(s) into {len(collection)} group(s)')
    return count
