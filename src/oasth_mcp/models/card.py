"""Pydantic models for DESFire / ATH.ENA card data."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from oasth_mcp.codec.binary import parse_hex, to_hex

TripsRemaining = int | Literal["unlimited", "encrypted"]


class CardVersionInfo(BaseModel):
    """Display labels derived from a GetVersion response."""

    model_config = ConfigDict(frozen=True)

    card_type: str = "DESFire"
    manufacturer: str = "Unknown"
    capacity: str = "Unknown"
    production_date: str = ""


class VersionBlock(BaseModel):
    """Hardware or software part of a GetVersion response (7 bytes)."""

    vendor: int
    type: int
    subtype: int
    major: int
    minor: int
    storage_size: int
    protocol: int


class DesfireVersion(BaseModel):
    """Full GetVersion layout; blocks absent from a short response are None."""

    hardware: VersionBlock | None = None
    software: VersionBlock | None = None
    uid: str | None = None  # hex
    batch_no: str | None = None  # hex
    production_week: int | None = None
    production_year: int | None = None


class ProductStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    INACTIVE = "inactive"


class ProductInfo(BaseModel):
    """A fare product stored on the card."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: ProductStatus | None = None
    valid_until: datetime | None = None
    trips: int | None = None


class TicketInfo(BaseModel):
    """Everything the decoders recover from one card read.

    Always fully populated; file-derived fields keep their defaults when the
    card is encrypted or the files are missing.
    """

    model_config = ConfigDict(frozen=True)

    card_id: str = ""
    uid: str = ""

    card_type: str = "Unknown"
    manufacturer: str = "Unknown"
    capacity: str = "Unknown"
    production_date: str = ""

    trips_remaining: TripsRemaining = 0
    active_product: ProductInfo | None = None
    expired_product: ProductInfo | None = None
    user_category: str = "Unknown"
    is_active: bool = False
    remaining_time_seconds: int = 0
    expiry_date: str | None = None
    load_date: str | None = None

    is_encrypted: bool = False
    application_id: str = ""


class CardDump(BaseModel):
    """The five inputs a card reader hands to the decoders.

    Accepts hex strings for byte fields, so captured dumps can be stored as
    JSON:

        {"uid": "04942E6A264480", "version": "0401...", "application_id": "1TA",
         "requires_auth": false, "files": {"2": "b03201...", "12": "0a000000"}}
    """

    uid: bytes = b""
    version: bytes = b""
    application_id: str = ""
    requires_auth: bool = False
    files: dict[int, bytes] = Field(default_factory=dict)

    @field_validator("uid", "version", mode="before")
    @classmethod
    def _hex_to_bytes(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_hex(value)
        if isinstance(value, list):
            return bytes(value)
        return value

    @field_validator("files", mode="before")
    @classmethod
    def _hex_files(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        files = {}
        for file_id, data in value.items():
            if isinstance(data, str):
                data = parse_hex(data)
            elif isinstance(data, list):
                data = bytes(data)
            files[int(file_id)] = data
        return files

    @field_serializer("uid", "version")
    def _bytes_to_hex(self, value: bytes) -> str:
        return to_hex(value)

    @field_serializer("files")
    def _files_to_hex(self, value: dict[int, bytes]) -> dict[str, str]:
        return {str(file_id): to_hex(data) for file_id, data in value.items()}

    @property
    def is_empty(self) -> bool:
        """True when the reader delivered nothing at all."""
        return not self.uid and not self.version and not self.files


class CardReadKind(str, Enum):
    NO_DATA = "no_data"
    ENCRYPTED = "encrypted"
    DECODED = "decoded"


class CardReadResult(BaseModel):
    """Explicit outcome of decoding a card dump."""

    kind: CardReadKind
    ticket: TicketInfo
