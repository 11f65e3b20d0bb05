import pytest

from pkiverify.der import Reader, Tag
from pkiverify.der_values import (
    BitStringFlags,
    bit_string_flags,
    bit_string_with_no_unused_bits,
    nonnegative_integer,
    read_bool,
    read_u8,
)
from pkiverify.errors import DerTypeId, ErrorKind, PkiError, trailing_data

BAD_DER = PkiError(ErrorKind.BAD_DER)


def reader(data):
    return Reader(bytes(data))


# Optional booleans


def test_bool_empty_input_is_false():
    assert read_bool(reader([])) is False


def test_bool_other_type_is_false_and_not_consumed():
    r = reader([0x05, 0x00])
    assert read_bool(r) is False
    assert r.read_byte() == 0x05


def test_bool_invalid_value():
    with pytest.raises(PkiError) as exc:
        read_bool(reader([0x01, 0x01, 0x42]))
    assert exc.value == BAD_DER


def test_bool_true():
    assert read_bool(reader([0x01, 0x01, 0xFF])) is True


def test_bool_explicit_false():
    assert read_bool(reader([0x01, 0x01, 0x00])) is False


def test_bool_trailing_data():
    with pytest.raises(PkiError) as exc:
        read_bool(reader([0x01, 0x02, 0xFF, 0x00]))
    assert exc.value == trailing_data(DerTypeId.BOOL)


# Bit strings with no unused bits


@pytest.mark.parametrize(
    "data",
    [
        [0x01, 0x01, 0xFF],  # unexpected type
        [0x42, 0xFF, 0xFF],  # unexpected nonexistent type
        [],  # unexpected empty input
    ],
)
def test_bit_string_wrong_or_missing_value(data):
    with pytest.raises(PkiError) as exc:
        bit_string_with_no_unused_bits(reader(data))
    assert exc.value == trailing_data(DerTypeId.BIT_STRING)


def test_bit_string_nonzero_unused_bits():
    with pytest.raises(PkiError) as exc:
        bit_string_with_no_unused_bits(reader([0x03, 0x03, 0x04, 0x12, 0x34]))
    assert exc.value == BAD_DER


def test_bit_string_valid():
    value = bit_string_with_no_unused_bits(reader([0x03, 0x03, 0x00, 0x12, 0x34]))
    assert value == b"\x12\x34"


def test_bit_string_empty_value():
    with pytest.raises(PkiError) as exc:
        bit_string_with_no_unused_bits(reader([0x03, 0x00]))
    assert exc.value == BAD_DER


# Bit string flags


def test_bit_string_flags_too_much_padding():
    with pytest.raises(PkiError) as exc:
        bit_string_flags(bytes([0x08, 0x06]))
    assert exc.value == BAD_DER


def test_bit_string_flags_padding_without_flags():
    with pytest.raises(PkiError) as exc:
        bit_string_flags(bytes([0x01]))
    assert exc.value == BAD_DER


def test_bit_string_flags_padding_bits_must_be_clear():
    with pytest.raises(PkiError) as exc:
        bit_string_flags(bytes([0x01, 0x07]))
    assert exc.value == BAD_DER


def test_bit_string_flags_empty_input():
    with pytest.raises(PkiError) as exc:
        bit_string_flags(b"")
    assert exc.value == BAD_DER


def test_bit_string_flags_no_flags_no_padding():
    flags = bit_string_flags(bytes([0x00]))
    assert flags.raw_bits == b""
    assert flags.bit_set(0) is False


def test_valid_bit_string_flags():
    flags = bit_string_flags(bytes([0x01, 0x06]))
    assert flags.raw_bits == b"\x06"
    expected = {5, 6}
    for bit in range(9):
        assert flags.bit_set(bit) is (bit in expected)
    assert flags.bit_set(256) is False


def test_bit_set_across_bytes():
    flags = BitStringFlags(bytes([0x80, 0x01]))
    assert [bit for bit in range(16) if flags.bit_set(bit)] == [0, 15]


# Non-negative integers


@pytest.mark.parametrize("value", range(0, 128))
def test_small_u8_single_octet(value):
    assert read_u8(reader([Tag.INTEGER, 1, value])) == value


@pytest.mark.parametrize("value", range(128, 256))
def test_small_u8_with_leading_zero(value):
    assert read_u8(reader([Tag.INTEGER, 2, 0x00, value])) == value


@pytest.mark.parametrize(
    "data",
    [
        [Tag.SEQUENCE, 1, 1],  # not an integer
        [Tag.INTEGER, 1, 0xFF],  # negative
        [Tag.INTEGER, 2, 0x01, 0x00],  # positive but too large
        [Tag.INTEGER, 2, 0x00, 0x05],  # unnecessary leading zero
        [],  # truncations
        [Tag.INTEGER],
        [Tag.INTEGER, 1],
        [Tag.INTEGER, 2, 0],
    ],
)
def test_u8_rejects(data):
    with pytest.raises(PkiError) as exc:
        read_u8(reader(data))
    assert exc.value == BAD_DER


def test_nonnegative_integer_zero():
    assert nonnegative_integer(reader([Tag.INTEGER, 1, 0x00])) == b"\x00"


def test_nonnegative_integer_strips_necessary_leading_zero():
    assert nonnegative_integer(reader([Tag.INTEGER, 3, 0x00, 0x80, 0x01])) == b"\x80\x01"


def test_nonnegative_integer_multi_octet_positive():
    assert nonnegative_integer(reader([Tag.INTEGER, 2, 0x12, 0x34])) == b"\x12\x34"


def test_nonnegative_integer_empty_value():
    with pytest.raises(PkiError) as exc:
        nonnegative_integer(reader([Tag.INTEGER, 0]))
    assert exc.value == BAD_DER


def test_nonnegative_integer_leaves_rest_of_input():
    r = reader([Tag.INTEGER, 1, 0x07, 0xAA])
    assert nonnegative_integer(r) == b"\x07"
    assert r.read_bytes_to_end() == b"\xaa"