"""Decoding of the DESFire GetVersion response.

Layout of the 28-byte response (three frames concatenated):

    0-6    hardware: vendor, type, subtype, major, minor, storage size, protocol
    7-13   software: same fields
    14-20  UID
    21-25  batch number
    26     production week (1-53)
    27     production year (two digits)

Readers sometimes return only the first frame or two, so every field is
decoded only when its bytes are present.
"""

import logging

from oasth_mcp.codec.binary import to_hex
from oasth_mcp.models.card import CardVersionInfo, DesfireVersion, VersionBlock

logger = logging.getLogger(__name__)

VENDOR_NXP = 0x04
TYPE_DESFIRE = 0x01

MANUFACTURERS: dict[int, str] = {
    VENDOR_NXP: "NXP Semiconductors",
}

GENERATIONS: dict[int, str] = {
    0x01: "DESFire EV1",
    0x02: "DESFire EV2",
    0x03: "DESFire EV3",
}

HARDWARE_LEN = 7
SOFTWARE_LEN = 14
UID_LEN = 21
BATCH_LEN = 26
FULL_LEN = 28


def storage_bytes(size_code: int) -> int:
    """Capacity in bytes for a storage-size byte: 2 ** (code >> 1).

    The low bit flags "between this and the next power of two" and is ignored.
    """
    return 1 << (size_code >> 1)


def storage_capacity(size_code: int) -> str:
    """Human-readable capacity, e.g. 0x18 -> "4 KB", 0x08 -> "16 bytes"."""
    size = storage_bytes(size_code)
    if size >= 1024:
        return f"{size // 1024} KB"
    return f"{size} bytes"


def production_year(two_digit: int) -> int:
    """Expand a two-digit year: below 50 is 20xx, otherwise 19xx."""
    return 2000 + two_digit if two_digit < 50 else 1900 + two_digit


def production_date(week: int, year: int) -> str:
    """Format the production date, or "" for an invalid week/year."""
    if not 0 < week <= 53 or year <= 0:
        return ""
    return f"Week {week}, {production_year(year)}"


def _block(data: bytes, start: int) -> VersionBlock:
    return VersionBlock(
        vendor=data[start],
        type=data[start + 1],
        subtype=data[start + 2],
        major=data[start + 3],
        minor=data[start + 4],
        storage_size=data[start + 5],
        protocol=data[start + 6],
    )


def decode_version_details(data: bytes) -> DesfireVersion:
    """Split a GetVersion response into its blocks.

    Args:
        data: Concatenated response frames, without status words.

    Returns:
        DesfireVersion with absent blocks left as None.
    """
    details = DesfireVersion()
    if len(data) >= HARDWARE_LEN:
        details.hardware = _block(data, 0)
    if len(data) >= SOFTWARE_LEN:
        details.software = _block(data, HARDWARE_LEN)
    if len(data) >= UID_LEN:
        details.uid = to_hex(data[SOFTWARE_LEN:UID_LEN])
    if len(data) >= BATCH_LEN:
        details.batch_no = to_hex(data[UID_LEN:BATCH_LEN])
    if len(data) >= FULL_LEN:
        details.production_week = data[26]
        details.production_year = data[27]
    return details


def decode_version(data: bytes) -> CardVersionInfo:
    """Derive display labels from a GetVersion response.

    Never fails: a short or empty response yields the defaults
    ("DESFire", "Unknown", "Unknown", "").
    """
    details = decode_version_details(data)

    card_type = "DESFire"
    manufacturer = "Unknown"
    capacity = "Unknown"
    date = ""

    hw = details.hardware
    if hw is not None:
        manufacturer = MANUFACTURERS.get(hw.vendor, "Unknown")
        if hw.type == TYPE_DESFIRE:
            card_type = GENERATIONS.get(hw.subtype, f"DESFire ({hw.major}.{hw.minor})")
        capacity = storage_capacity(hw.storage_size)
        logger.debug(
            f"Hardware: vendor={hw.vendor:#04x} type={hw.type} subtype={hw.subtype} "
            f"storage={storage_bytes(hw.storage_size)} bytes protocol={hw.protocol}"
        )

    if details.production_week is not None and details.production_year is not None:
        date = production_date(details.production_week, details.production_year)

    return CardVersionInfo(
        card_type=card_type,
        manufacturer=manufacturer,
        capacity=capacity,
        production_date=date,
    )
