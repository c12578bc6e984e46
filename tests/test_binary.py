"""Tests for the byte helpers."""

from oasth_mcp.codec.binary import (
    ascii_printable,
    bits,
    group_blocks,
    parse_hex,
    read_u8,
    read_u32_le,
    to_hex,
)


def test_read_u32_le_reads_little_endian():
    """Least significant byte comes first."""
    assert read_u32_le(b"\x0a\x00\x00\x00") == 10
    assert read_u32_le(b"\x78\x56\x34\x12") == 0x12345678


def test_read_u32_le_with_offset():
    """Offset selects the starting byte."""
    assert read_u32_le(b"\xff\xff\x01\x00\x00\x00", offset=2) == 1


def test_read_u32_le_short_buffer_returns_none():
    """Fewer than 4 bytes from offset is not an error, just no value."""
    assert read_u32_le(b"\x01\x02\x03") is None
    assert read_u32_le(b"\x01\x02\x03\x04", offset=1) is None
    assert read_u32_le(b"") is None


def test_read_u32_le_is_unsigned():
    """All-ones is the maximum value, not -1."""
    assert read_u32_le(b"\xff\xff\xff\xff") == 0xFFFFFFFF


def test_read_u8_bounds():
    """Out of range offsets return None."""
    assert read_u8(b"\x05", 0) == 5
    assert read_u8(b"\x05", 1) is None
    assert read_u8(b"\x05", -1) is None


def test_bits_extracts_field():
    assert bits(0b1011_0100, 2, 3) == 0b101


def test_to_hex_lowercase_with_separator():
    assert to_hex(b"\x04\x94\x2e") == "04942e"
    assert to_hex(b"\x04\x94", " ") == "04 94"


def test_parse_hex_ignores_separators():
    """Reader tag IDs may use colons or spaces."""
    assert parse_hex("04:94:2E") == b"\x04\x94\x2e"
    assert parse_hex("04 94 2e") == b"\x04\x94\x2e"


def test_parse_hex_drops_odd_trailing_nibble():
    assert parse_hex("0494f") == b"\x04\x94"


def test_group_blocks_groups_in_fours():
    assert group_blocks("300101000002163954") == "3001 0100 0002 1639 54"


def test_group_blocks_regroups_prespaced_text():
    """Existing spaces do not shift the grouping."""
    assert group_blocks("3001 0100 0002163954") == "3001 0100 0002 1639 54"


def test_group_blocks_empty():
    assert group_blocks("") == ""


def test_ascii_printable_drops_control_bytes():
    assert ascii_printable(b"1TA\x00\x7f") == "1TA"
