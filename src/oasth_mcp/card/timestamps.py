"""Timestamp handling for ATH.ENA product records.

Product records store 32-bit instants whose origin is not documented.
Observed cards use either the Unix epoch or seconds since 1997-01-01 UTC, so
a raw value is accepted as Unix time when it lands in a plausible window and
otherwise shifted by the 1997 origin and checked again. This is a heuristic:
it has not been validated against a corpus of known card dumps.
"""

import calendar
from datetime import UTC, datetime, tzinfo

# 1997-01-01 00:00:00 UTC
CARD_EPOCH_OFFSET = 852_076_800

# [2015-01-01, 2040-01-01)
PLAUSIBLE_MIN = 1_420_070_400
PLAUSIBLE_MAX = 2_208_988_800


def is_plausible(timestamp: int) -> bool:
    """True when a Unix timestamp falls in the accepted validity window."""
    return PLAUSIBLE_MIN <= timestamp < PLAUSIBLE_MAX


def decode_card_timestamp(raw: int | None) -> int | None:
    """Resolve a raw card timestamp to Unix seconds.

    Args:
        raw: Unsigned 32-bit value read from the card, or None if absent.

    Returns:
        Unix timestamp, or None when neither interpretation is plausible.
    """
    if raw is None or raw <= 0:
        return None
    if is_plausible(raw):
        return raw
    shifted = raw + CARD_EPOCH_OFFSET
    if is_plausible(shifted):
        return shifted
    return None


def end_of_month(instant: datetime, tz: tzinfo = UTC) -> datetime:
    """Last second (23:59:59) of the calendar month containing `instant` in `tz`."""
    local = instant.astimezone(tz)
    last_day = calendar.monthrange(local.year, local.month)[1]
    return datetime(local.year, local.month, last_day, 23, 59, 59, tzinfo=tz)


def format_timestamp(timestamp: int, tz: tzinfo = UTC) -> str:
    """Render Unix seconds as "dd/mm/YYYY HH:MM:SS" in `tz`."""
    return datetime.fromtimestamp(timestamp, tz).strftime("%d/%m/%Y %H:%M:%S")


def format_remaining_time(seconds: int) -> str:
    """Countdown label: "MM:SS", "HH:MM:SS" or "{d}d HH:MM:SS".

    Example: 90061 -> "1d 01:01:01"
    """
    if seconds <= 0:
        return "00:00"

    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    mins, secs = divmod(rest, 60)

    if days > 0:
        return f"{days}d {hours:02d}:{mins:02d}:{secs:02d}"
    if hours > 0:
        return f"{hours:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"
