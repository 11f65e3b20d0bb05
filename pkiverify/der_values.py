"""Decoders for DER primitive values: bit strings, integers and booleans."""

from __future__ import annotations

from dataclasses import dataclass

from pkiverify.der import Reader, Tag, expect_tag, nested, read_all
from pkiverify.errors import DerTypeId, ErrorKind, PkiError, trailing_data


def _bad_der() -> PkiError:
    return PkiError(ErrorKind.BAD_DER)


@dataclass(frozen=True)
class BitStringFlags:
    """A set of flags carried in the value bits of a DER BIT STRING."""

    raw_bits: bytes

    def bit_set(self, bit: int) -> bool:
        """True when flag number `bit` (counting from the most significant bit) is set."""
        byte_index, offset = divmod(bit, 8)
        if byte_index >= len(self.raw_bits):
            return False
        return (self.raw_bits[byte_index] >> (7 - offset)) & 1 != 0


def bit_string_with_no_unused_bits(reader: Reader) -> bytes:
    """Read a BIT STRING whose final octet has no padding bits and return its bits."""

    def decode(value: Reader) -> bytes:
        if value.read_byte() != 0:
            raise _bad_der()
        return value.read_bytes_to_end()

    return nested(reader, Tag.BIT_STRING, trailing_data(DerTypeId.BIT_STRING), decode)


def bit_string_flags(data: bytes) -> BitStringFlags:
    """Decode the contents of a BIT STRING used as a set of flags.

    The first octet gives the number of padding bits in the final octet;
    it must be at most seven, zero when there are no flag octets, and the
    padding bits themselves must be clear.
    """

    def decode(bit_string: Reader) -> BitStringFlags:
        padding_bits = bit_string.read_byte()
        raw_bits = bit_string.read_bytes_to_end()

        if padding_bits > 7 or (not raw_bits and padding_bits != 0):
            raise _bad_der()
        if padding_bits and raw_bits[-1] & ((1 << padding_bits) - 1):
            raise _bad_der()
        return BitStringFlags(raw_bits)

    return read_all(data, _bad_der(), decode)


def nonnegative_integer(reader: Reader) -> bytes:
    """Read a non-negative INTEGER and return its magnitude octets.

    A necessary leading zero octet is stripped; zero itself is returned
    as a single zero octet. Negative values and unnecessary leading zeros
    raise BadDer.
    """
    value = expect_tag(reader, Tag.INTEGER)
    if not value:
        raise _bad_der()

    first, rest = value[0], value[1:]
    if first == 0:
        if not rest:
            return value
        if rest[0] & 0x80:
            return rest
        raise _bad_der()
    if first & 0x80 == 0:
        return value
    raise _bad_der()


def read_u8(reader: Reader) -> int:
    """Read a non-negative INTEGER that fits in one octet."""
    value = nonnegative_integer(reader)
    if len(value) != 1:
        raise _bad_der()
    return value[0]


def read_bool(reader: Reader) -> bool:
    """Read an optional BOOLEAN, which defaults to False when absent.

    The explicit encoding of False is accepted for compatibility.
    """
    if not reader.peek(Tag.BOOLEAN):
        return False

    def decode(value: Reader) -> bool:
        octet = value.read_byte()
        if octet == 0xFF:
            return True
        if octet == 0x00:
            return False
        raise _bad_der()

    return nested(reader, Tag.BOOLEAN, trailing_data(DerTypeId.BOOL), decode)