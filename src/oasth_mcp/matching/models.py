from enum import Enum

from pydantic import BaseModel, Field

from oasth_mcp.models.transit import Line, Stop


class MatchConfidence(str, Enum):
    """Confidence level for a match.

    - EXACT: code match or substring match
    - HIGH: fuzzy score >= 85
    - MEDIUM: fuzzy score >= 70
    - LOW: fuzzy score below 70 (but above the caller's minimum)
    """

    EXACT = "exact"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchType(str, Enum):
    """Type of match found."""

    CODE_EXACT = "code_exact"  # stop code / line id equality
    SUBSTRING = "substring"  # query contained in a name
    FUZZY_NAME = "fuzzy_name"


def confidence_from_score(score: float, match_type: MatchType) -> MatchConfidence:
    """Determine confidence level from score and match type."""
    if match_type in (MatchType.CODE_EXACT, MatchType.SUBSTRING):
        return MatchConfidence.EXACT
    if score >= 85:
        return MatchConfidence.HIGH
    if score >= 70:
        return MatchConfidence.MEDIUM
    return MatchConfidence.LOW


class LineMatch(BaseModel):
    """A matched line with confidence information."""

    line: Line
    score: float = Field(ge=0, le=100)
    confidence: MatchConfidence
    match_type: MatchType


class StopMatch(BaseModel):
    """A matched stop with confidence information."""

    stop: Stop
    score: float = Field(ge=0, le=100)
    confidence: MatchConfidence
    match_type: MatchType
