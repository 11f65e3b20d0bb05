"""A small DER reader: tags, lengths and nested values."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator
from typing import TypeVar

from pkiverify.errors import ErrorKind, PkiError

R = TypeVar("R")

CONSTRUCTED = 0x20
CONTEXT_SPECIFIC = 0x80

# Tags in the high tag number form (31 and above) are not supported.
_HIGH_TAG_RANGE_START = 31

# Lengths below this fit in one short-form octet.
_SHORT_FORM_LEN_MAX = 128

_LONG_FORM_LEN_ONE_BYTE = 0x81
_LONG_FORM_LEN_ONE_BYTE_MAX = 0xFF
_LONG_FORM_LEN_TWO_BYTES = 0x82
_LONG_FORM_LEN_TWO_BYTES_MAX = 0xFFFF
_LONG_FORM_LEN_THREE_BYTES = 0x83
_LONG_FORM_LEN_THREE_BYTES_MAX = 0xFFFFFF
_LONG_FORM_LEN_FOUR_BYTES = 0x84
_LONG_FORM_LEN_FOUR_BYTES_MAX = 0xFFFFFFFF

# The largest value readable with at most a two-byte long-form length.
TWO_BYTE_DER_SIZE = _LONG_FORM_LEN_TWO_BYTES_MAX

# The largest value that can be read for any purpose.
MAX_DER_SIZE = _LONG_FORM_LEN_FOUR_BYTES_MAX

# (length-prefix octet) -> (number of length octets, largest value a shorter form can express)
_LONG_FORMS = {
    _LONG_FORM_LEN_ONE_BYTE: (1, _SHORT_FORM_LEN_MAX - 1),
    _LONG_FORM_LEN_TWO_BYTES: (2, _LONG_FORM_LEN_ONE_BYTE_MAX),
    _LONG_FORM_LEN_THREE_BYTES: (3, _LONG_FORM_LEN_TWO_BYTES_MAX),
    _LONG_FORM_LEN_FOUR_BYTES: (4, _LONG_FORM_LEN_THREE_BYTES_MAX),
}


class Tag(enum.IntEnum):
    """DER tags understood by the parser."""

    BOOLEAN = 0x01
    INTEGER = 0x02
    BIT_STRING = 0x03
    OCTET_STRING = 0x04
    OID = 0x06
    ENUM = 0x0A
    UTF8_STRING = 0x0C
    SEQUENCE = CONSTRUCTED | 0x10
    SET = CONSTRUCTED | 0x11
    UTC_TIME = 0x17
    GENERALIZED_TIME = 0x18
    CONTEXT_SPECIFIC_CONSTRUCTED_0 = CONTEXT_SPECIFIC | CONSTRUCTED | 0
    CONTEXT_SPECIFIC_CONSTRUCTED_1 = CONTEXT_SPECIFIC | CONSTRUCTED | 1
    CONTEXT_SPECIFIC_CONSTRUCTED_3 = CONTEXT_SPECIFIC | CONSTRUCTED | 3


def _bad_der() -> PkiError:
    return PkiError(ErrorKind.BAD_DER)


class Reader:
    """A forward-only cursor over a byte string.

    Running past the end raises a BadDer error.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0

    def __repr__(self) -> str:
        return f"Reader(position={self._pos}, length={len(self._data)})"

    def at_end(self) -> bool:
        """True when every byte has been consumed."""
        return self._pos >= len(self._data)

    def peek(self, tag: int) -> bool:
        """True when the next byte equals `tag`; nothing is consumed."""
        return not self.at_end() and self._data[self._pos] == int(tag)

    def read_byte(self) -> int:
        """Consume and return one byte."""
        if self.at_end():
            raise _bad_der()
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_bytes(self, length: int) -> bytes:
        """Consume and return exactly `length` bytes."""
        end = self._pos + length
        if length < 0 or end > len(self._data):
            raise _bad_der()
        value = self._data[self._pos:end]
        self._pos = end
        return value

    def read_bytes_to_end(self) -> bytes:
        """Consume and return everything that is left."""
        value = self._data[self._pos:]
        self._pos = len(self._data)
        return value

    def read_partial(self, decoder: Callable[[Reader], R]) -> tuple[bytes, R]:
        """Run `decoder` and return the bytes it consumed along with its result."""
        start = self._pos
        result = decoder(self)
        return self._data[start:self._pos], result


def read_all(data: bytes, error: PkiError, decoder: Callable[[Reader], R]) -> R:
    """Decode all of `data`; raise `error` if anything is left over."""
    reader = Reader(data)
    result = decoder(reader)
    if not reader.at_end():
        raise error
    return result


def iter_der(data: bytes, parser: Callable[[Reader], R]) -> Iterator[R]:
    """Yield values parsed from `data` one after another until it is used up."""
    reader = Reader(data)
    while not reader.at_end():
        yield parser(reader)


def read_tag_and_get_value(reader: Reader) -> tuple[int, bytes]:
    """Read one tag and its value, with at most a two-byte length."""
    return read_tag_and_get_value_limited(reader, TWO_BYTE_DER_SIZE)


def read_tag_and_get_value_limited(reader: Reader, size_limit: int) -> tuple[int, bytes]:
    """Read one tag and its value, whose length must be below `size_limit`."""
    tag = reader.read_byte()
    if tag & _HIGH_TAG_RANGE_START == _HIGH_TAG_RANGE_START:
        raise _bad_der()

    first = reader.read_byte()
    if first & _SHORT_FORM_LEN_MAX == 0:
        length = first
    else:
        form = _LONG_FORMS.get(first)
        if form is None:
            raise _bad_der()
        octets, shorter_max = form
        length = 0
        for _ in range(octets):
            length = (length << 8) | reader.read_byte()
        if length <= shorter_max:
            raise _bad_der()  # Not the canonical encoding.

    if length >= size_limit:
        raise _bad_der()

    return tag, reader.read_bytes(length)


def expect_tag(reader: Reader, tag: int) -> bytes:
    """Read a value that must carry `tag`, with at most a two-byte length."""
    return expect_tag_and_get_value_limited(reader, tag, TWO_BYTE_DER_SIZE)


def expect_tag_and_get_value_limited(reader: Reader, tag: int, size_limit: int) -> bytes:
    """Read a value that must carry `tag` and be shorter than `size_limit`."""
    actual, value = read_tag_and_get_value_limited(reader, size_limit)
    if actual != int(tag):
        raise _bad_der()
    return value


def nested_limited(
    reader: Reader,
    tag: int,
    error: PkiError,
    decoder: Callable[[Reader], R],
    size_limit: int,
) -> R:
    """Decode the whole of a `tag` value with `decoder`.

    Any failure to read the tagged value, or data left over inside it,
    raises `error`.
    """
    try:
        value = expect_tag_and_get_value_limited(reader, tag, size_limit)
    except PkiError:
        raise error from None
    return read_all(value, error, decoder)


def nested(reader: Reader, tag: int, error: PkiError, decoder: Callable[[Reader], R]) -> R:
    """Like `nested_limited` with the two-byte length limit."""
    return nested_limited(reader, tag, error, decoder, TWO_BYTE_DER_SIZE)


def nested_of(
    reader: Reader,
    outer_tag: int,
    inner_tag: int,
    error: PkiError,
    decoder: Callable[[Reader], R],
) -> list[R]:
    """Decode an `outer_tag` value holding one or more `inner_tag` values.

    Returns the decoder's result for each inner value, in order.
    """

    def decode_outer(outer: Reader) -> list[R]:
        results = [nested(outer, inner_tag, error, decoder)]
        while not outer.at_end():
            results.append(nested(outer, inner_tag, error, decoder))
        return results

    return nested(reader, outer_tag, error, decode_outer)