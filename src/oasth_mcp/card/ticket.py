"""ATH.ENA ticket decoding from DESFire data files.

Files used (application "1TA"):

    2   card info: user category at byte 9, card number at bytes 12-16
    4   personalization: type code at bytes 4-6 ("PKP" personalized, "ZLZ" anonymous)
    6   trip history (cyclic records, only logged)
    12  value file: remaining trips, u32 little-endian
    16  products: up to two 32-byte records

Product record layout (32 bytes):

    0      status (0xFF = empty slot)
    1      product type (0x31 = monthly pass, 0x32 = trip bundle)
    4-7    load timestamp, u32 LE
    8-11   validation expiry, u32 LE
    16     trip count

The layout is reverse-engineered. Fields whose bytes are missing keep their
defaults; nothing here raises.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from types import MappingProxyType

from oasth_mcp.card.timestamps import decode_card_timestamp, end_of_month, format_timestamp
from oasth_mcp.card.version import decode_version
from oasth_mcp.codec.binary import group_blocks, read_u8, read_u32_le, to_hex
from oasth_mcp.models.card import (
    CardDump,
    CardReadKind,
    CardReadResult,
    ProductInfo,
    ProductStatus,
    TicketInfo,
    TripsRemaining,
)

logger = logging.getLogger(__name__)

FILE_CARD_INFO = 2
FILE_PERSONALIZATION = 4
FILE_TRIPS = 12
FILE_PRODUCTS = 16

CARD_ID_PREFIX = "30010100"

PRODUCT_RECORD_SIZE = 32
PRODUCT_TYPE_MONTHLY = 0x31
SLOT_EMPTY = 0xFF

PERSONALIZED_TYPE_CODE = "PKP"
PERSONALIZED_MARKER = 0x37

USER_CATEGORIES = MappingProxyType(
    {
        0x00: "Adult",
        0x01: "Adult",
        0x10: "Student",
        0x20: "Senior",
        0x30: "Adult",  # personalized adult card
        0x40: "Child",
        0x50: "Disabled",
        0x60: "Military",
        0x70: "Unemployed",
        0x80: "University student",
    }
)


@dataclass(frozen=True)
class ProductRecord:
    """Raw fields of one product slot."""

    status: int
    product_type: int | None
    trips: int | None
    load_raw: int | None
    expiry_raw: int | None

    @classmethod
    def parse(cls, data: bytes) -> "ProductRecord":
        return cls(
            status=data[0],
            product_type=read_u8(data, 1),
            trips=read_u8(data, 16),
            load_raw=read_u32_le(data, 4),
            expiry_raw=read_u32_le(data, 8),
        )

    @property
    def is_monthly(self) -> bool:
        return self.product_type == PRODUCT_TYPE_MONTHLY

    @property
    def is_period_pass(self) -> bool:
        """Monthly type code, or a non-empty slot without a trip count."""
        return self.is_monthly or (self.trips == 0 and self.status != SLOT_EMPTY)

    def to_product(self) -> ProductInfo | None:
        if self.is_period_pass:
            return ProductInfo(name="Monthly", trips=0)
        if self.trips:
            return ProductInfo(name=f"{self.trips} trips", trips=self.trips)
        return None


@dataclass(frozen=True)
class Validity:
    """Decoded validity window of the active product."""

    expiry: int | None
    load: int | None


def format_card_id(file2: bytes) -> str:
    """Card number printed on the card: fixed prefix plus bytes 12-16.

    Example: ... 00 02 16 39 54 -> "3001 0100 0002 1639 54"
    """
    return group_blocks((CARD_ID_PREFIX + to_hex(file2[12:17])).upper())


def decode_user_category(file2: bytes | None, file4: bytes | None) -> str:
    """User category from file 2, overridden by file 4 personalization."""
    category = "Unknown"
    if file2 is not None and len(file2) >= 20:
        category = USER_CATEGORIES.get(file2[9], "Regular")
        logger.debug(f"User category byte (file 2): {file2[9]:#04x} -> {category}")

    if file4 is not None and len(file4) >= 10:
        type_code = file4[4:7].decode("latin-1")
        logger.debug(f"Card type code (file 4): {type_code}")
        if type_code == PERSONALIZED_TYPE_CODE or file4[3] == PERSONALIZED_MARKER:
            personalized = file4[9]
            if personalized != 0 and personalized in USER_CATEGORIES:
                category = USER_CATEGORIES[personalized]
            if category == "Adult" and type_code == PERSONALIZED_TYPE_CODE:
                category = "University student"

    return category


def decode_trip_counter(file12: bytes | None) -> int | None:
    """Remaining trips from the value file, or None if unreadable."""
    if file12 is None:
        return None
    return read_u32_le(file12, 0)


def product_records(file16: bytes | None) -> list[ProductRecord]:
    """Parse the (up to two) complete product slots of file 16."""
    if file16 is None:
        return []
    records = []
    for start in (0, PRODUCT_RECORD_SIZE):
        chunk = file16[start : start + PRODUCT_RECORD_SIZE]
        if len(chunk) < PRODUCT_RECORD_SIZE:
            break
        records.append(ProductRecord.parse(chunk))
    return records


def decode_validity(file16: bytes, now: datetime, tz: tzinfo) -> Validity:
    """Load and expiry instants of the first product slot.

    Monthly passes run to the end of the calendar month of their load date
    (or of `now` when no load date is readable). Trip bundles store their
    validation expiry in bytes 8-11.
    """
    record = ProductRecord.parse(file16)
    load = decode_card_timestamp(record.load_raw)
    logger.debug(f"Product load raw: {record.load_raw} -> {load}")

    if record.is_monthly:
        reference = datetime.fromtimestamp(load, UTC) if load is not None else now
        expiry = int(end_of_month(reference, tz).timestamp())
    else:
        expiry = decode_card_timestamp(record.expiry_raw)
        logger.debug(f"Product expiry raw: {record.expiry_raw} -> {expiry}")

    return Validity(expiry=expiry, load=load)


def decode_ticket(
    dump: CardDump,
    now: datetime | None = None,
    tz: tzinfo = UTC,
) -> TicketInfo:
    """Decode a card dump into a TicketInfo.

    Args:
        dump: Reader inputs (version bytes, files, AID, auth flag, UID).
        now: Reference instant for activity checks (default: current time).
        tz: Timezone for rendered dates and calendar-month boundaries.

    Returns:
        A complete TicketInfo. When the card requires authentication, file
        contents are ignored and trips_remaining is "encrypted".
    """
    now = now or datetime.now(UTC)
    now_ts = int(now.timestamp())

    version = decode_version(dump.version)
    uid = to_hex(dump.uid).upper()

    card_id = uid
    trips_remaining: TripsRemaining = "encrypted" if dump.requires_auth else 0
    user_category = "Unknown"
    active_product: ProductInfo | None = None
    expired_product: ProductInfo | None = None
    is_active = False
    remaining = 0
    expiry_date: str | None = None
    load_date: str | None = None

    if not dump.requires_auth:
        for file_id, data in sorted(dump.files.items()):
            logger.debug(f"File {file_id} ({len(data)} bytes): {to_hex(data, ' ')}")

        file2 = dump.files.get(FILE_CARD_INFO)
        if file2 is not None and len(file2) >= 20:
            card_id = format_card_id(file2)

        user_category = decode_user_category(file2, dump.files.get(FILE_PERSONALIZATION))

        trips = decode_trip_counter(dump.files.get(FILE_TRIPS))
        if trips is not None:
            trips_remaining = trips

        file16 = dump.files.get(FILE_PRODUCTS)
        records = product_records(file16)
        if records:
            first = records[0]
            active_product = first.to_product()
            if first.is_period_pass:
                trips_remaining = "unlimited"
            if len(records) > 1:
                expired_product = records[1].to_product()
            # value file missing or empty: fall back to the bundle size
            if trips_remaining == 0 and active_product is not None and active_product.trips:
                trips_remaining = active_product.trips

        if file16 is not None and len(file16) >= 12:
            validity = decode_validity(file16, now, tz)
            if validity.load is not None:
                load_date = format_timestamp(validity.load, tz)
            if validity.expiry is not None:
                expiry_date = format_timestamp(validity.expiry, tz)
                is_active = validity.expiry > now_ts
                remaining = validity.expiry - now_ts if is_active else 0
                if active_product is not None:
                    active_product = active_product.model_copy(
                        update={
                            "status": ProductStatus.ACTIVE if is_active else ProductStatus.EXPIRED,
                            "valid_until": datetime.fromtimestamp(validity.expiry, UTC),
                        }
                    )
                logger.debug(f"Expiry {expiry_date}, active={is_active}, remaining={remaining}s")

    return TicketInfo(
        card_id=card_id,
        uid=uid,
        card_type=version.card_type,
        manufacturer=version.manufacturer,
        capacity=version.capacity,
        production_date=version.production_date,
        trips_remaining=trips_remaining,
        active_product=active_product,
        expired_product=expired_product,
        user_category=user_category,
        is_active=is_active,
        remaining_time_seconds=remaining,
        expiry_date=expiry_date,
        load_date=load_date,
        is_encrypted=dump.requires_auth,
        application_id=dump.application_id,
    )


def decode_card(
    dump: CardDump,
    now: datetime | None = None,
    tz: tzinfo = UTC,
) -> CardReadResult:
    """Decode a card dump and report whether anything was actually read."""
    ticket = decode_ticket(dump, now=now, tz=tz)
    if dump.is_empty:
        kind = CardReadKind.NO_DATA
    elif dump.requires_auth:
        kind = CardReadKind.ENCRYPTED
    else:
        kind = CardReadKind.DECODED
    return CardReadResult(kind=kind, ticket=ticket)
