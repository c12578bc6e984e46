"""Low-level byte helpers shared by the card decoders.

All functions are pure and tolerate short input: reads past the end of a
buffer return None instead of raising.
"""

import re

_NON_HEX = re.compile(r"[^0-9A-Fa-f]")


def read_u8(data: bytes, offset: int) -> int | None:
    """Read one byte, or None when offset is out of range."""
    if offset < 0 or offset >= len(data):
        return None
    return data[offset]


def read_u32_le(data: bytes, offset: int = 0) -> int | None:
    """Read an unsigned little-endian 32-bit integer.

    Args:
        data: Source buffer.
        offset: Index of the least significant byte.

    Returns:
        The integer value, or None if fewer than 4 bytes are available.
    """
    if offset < 0 or offset + 4 > len(data):
        return None
    return int.from_bytes(data[offset : offset + 4], byteorder="little", signed=False)


def bits(value: int, shift: int, width: int) -> int:
    """Extract a `width`-bit field starting at bit `shift`."""
    return (value >> shift) & ((1 << width) - 1)


def to_hex(data: bytes, sep: str = "") -> str:
    """Lower-case hex rendering of a byte sequence."""
    return sep.join(f"{b:02x}" for b in data)


def parse_hex(text: str) -> bytes:
    """Convert a hex string to bytes, ignoring separators and other noise.

    Readers deliver tag IDs as strings like "04942E6A264480" or "04:94:2e".
    A trailing odd nibble is dropped.

    Example: "04 94 2E" -> b"\\x04\\x94\\x2e"
    """
    digits = _NON_HEX.sub("", text)
    if len(digits) % 2:
        digits = digits[:-1]
    return bytes.fromhex(digits)


def group_blocks(text: str, size: int = 4) -> str:
    """Regroup text into fixed-size blocks separated by single spaces.

    Existing spaces are removed first, so a pre-spaced prefix does not shift
    the grouping.

    Example: "3001 0100 0002163954" -> "3001 0100 0002 1639 54"
    """
    compact = text.replace(" ", "")
    return " ".join(compact[i : i + size] for i in range(0, len(compact), size))


def ascii_printable(data: bytes) -> str:
    """Keep only the printable ASCII characters (32..126) of a byte sequence."""
    return "".join(chr(b) for b in data if 32 <= b < 127)
