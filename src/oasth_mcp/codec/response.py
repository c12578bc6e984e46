"""Decoding of raw OASTH response bodies.

The service's content type and payload shape are inconsistent across
endpoints: bodies may be gzip-compressed or plain, and the text may be JSON,
tuple format, or a degenerate "no data" marker. `decode_payload` reports which
case applied; `decode_response` collapses everything unusable to [].
"""

import gzip
import json
import logging
import zlib
from enum import Enum
from typing import Any

from pydantic import BaseModel

from oasth_mcp.codec.tuples import parse_tuples

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

EMPTY_MARKERS = frozenset({"null", "[]", "()"})


class PayloadKind(str, Enum):
    """How a response body was interpreted."""

    EMPTY = "empty"  # legitimate "no data" answer
    JSON = "json"
    TUPLES = "tuples"
    MALFORMED = "malformed"  # non-empty but nothing recoverable


class DecodedPayload(BaseModel):
    """Result of decoding one response body.

    `value` holds the parsed JSON value for JSON payloads (list or object,
    returned unchanged) and the rows for tuple payloads.
    """

    kind: PayloadKind
    value: Any = None

    @property
    def records(self) -> list:
        """Records as a list; a JSON value that is not an array has none."""
        if self.kind in (PayloadKind.JSON, PayloadKind.TUPLES) and isinstance(self.value, list):
            return self.value
        return []


def decompress(buffer: bytes) -> str:
    """Turn a response buffer into text.

    Gzip is detected by its magic number; anything else is read as UTF-8.
    A corrupt gzip stream falls back to decoding the raw bytes.
    """
    try:
        if buffer[:2] == GZIP_MAGIC:
            return gzip.decompress(buffer).decode("utf-8")
        return buffer.decode("utf-8")
    except (OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
        logger.warning(f"Decompression error: {e}")
        return buffer.decode("utf-8", errors="replace")


def is_empty_text(text: str) -> bool:
    """True for bodies that mean "no data" rather than an error."""
    return not text or not text.strip() or text in EMPTY_MARKERS


def decode_text(text: str) -> DecodedPayload:
    """Sniff the format of already-decompressed text and parse it."""
    if is_empty_text(text):
        return DecodedPayload(kind=PayloadKind.EMPTY)

    trimmed = text.strip()
    if trimmed.startswith(("[", "{")):
        try:
            return DecodedPayload(kind=PayloadKind.JSON, value=json.loads(text))
        except json.JSONDecodeError:
            logger.debug("Body looks like JSON but does not parse, trying tuple format")

    rows = parse_tuples(text)
    if not rows:
        return DecodedPayload(kind=PayloadKind.MALFORMED)
    return DecodedPayload(kind=PayloadKind.TUPLES, value=rows)


def decode_payload(buffer: bytes) -> DecodedPayload:
    """Decode a raw response buffer (gzip or plain) into a DecodedPayload.

    Args:
        buffer: Bytes exactly as received from the server.

    Returns:
        DecodedPayload. Never raises; unexpected failures are MALFORMED.
    """
    try:
        return decode_text(decompress(buffer))
    except Exception as e:
        logger.warning(f"Failed to decode response body: {e}")
        return DecodedPayload(kind=PayloadKind.MALFORMED)


def decode_response(buffer: bytes) -> list | dict:
    """Decode a response buffer for callers that only want data.

    JSON values come back unchanged, tuple bodies as rows of strings, and
    every other case as an empty list.
    """
    payload = decode_payload(buffer)
    if payload.kind in (PayloadKind.JSON, PayloadKind.TUPLES):
        return payload.value
    return []
