"""Search over decoded lines and stops."""

from oasth_mcp.matching.models import (
    LineMatch,
    MatchConfidence,
    MatchType,
    StopMatch,
)
from oasth_mcp.matching.normalizers import normalize_text, remove_accents
from oasth_mcp.matching.search import search_lines, search_stops

__all__ = [
    # Search
    "search_lines",
    "search_stops",
    # Models
    "LineMatch",
    "MatchConfidence",
    "MatchType",
    "StopMatch",
    # Normalizers
    "normalize_text",
    "remove_accents",
]
