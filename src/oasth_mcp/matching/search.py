"""Line and stop search over decoded OASTH listings.

Substring matches on the normalized names come first (score 100); fuzzy
matches fill the remaining slots. Names are compared accent- and
case-insensitively, so "καμαρα" finds "ΚΑΜΑΡΑ".
"""

from collections.abc import Iterable

from rapidfuzz import fuzz

from oasth_mcp.matching.models import (
    LineMatch,
    MatchType,
    StopMatch,
    confidence_from_score,
)
from oasth_mcp.matching.normalizers import normalize_text
from oasth_mcp.models.transit import Line, Stop


def _compute_fuzzy_score(query_normalized: str, target_normalized: str) -> float:
    """Compute fuzzy match score for names."""
    token_score = fuzz.token_set_ratio(query_normalized, target_normalized)
    partial_score = fuzz.partial_ratio(query_normalized, target_normalized)
    return token_score * 0.7 + partial_score * 0.3


def _best_score(query: str, names: Iterable[str | None]) -> float:
    return max(
        (_compute_fuzzy_score(query, normalize_text(name)) for name in names if name),
        default=0.0,
    )


def _contains(query: str, names: Iterable[str | None]) -> bool:
    return any(query in normalize_text(name) for name in names if name)


def search_lines(
    lines: Iterable[Line],
    query: str,
    limit: int = 20,
    min_score: float = 60.0,
) -> list[LineMatch]:
    """Find lines by number or description.

    Args:
        lines: Lines to search.
        query: Line number (e.g. "31") or part of a description.
        limit: Maximum number of matches.
        min_score: Minimum fuzzy score (0-100) for non-substring matches.

    Returns:
        Matches ordered by score; an empty query matches every line.
    """
    lines = list(lines)
    query_normalized = normalize_text(query)
    if not query_normalized:
        return [
            LineMatch(
                line=line,
                score=100.0,
                confidence=confidence_from_score(100.0, MatchType.SUBSTRING),
                match_type=MatchType.SUBSTRING,
            )
            for line in lines[:limit]
        ]

    exact: list[LineMatch] = []
    fuzzy: list[LineMatch] = []
    for line in lines:
        if normalize_text(line.line_id) == query_normalized:
            match_type, score = MatchType.CODE_EXACT, 100.0
        elif _contains(query_normalized, (line.line_id, line.descr, line.descr_eng)):
            match_type, score = MatchType.SUBSTRING, 100.0
        else:
            score = _best_score(query_normalized, (line.descr, line.descr_eng))
            if score < min_score:
                continue
            match_type = MatchType.FUZZY_NAME

        match = LineMatch(
            line=line,
            score=score,
            confidence=confidence_from_score(score, match_type),
            match_type=match_type,
        )
        (fuzzy if match_type is MatchType.FUZZY_NAME else exact).append(match)

    # exact line-id hits before substring hits, input order otherwise
    exact.sort(key=lambda m: m.match_type is not MatchType.CODE_EXACT)
    fuzzy.sort(key=lambda m: m.score, reverse=True)
    return (exact + fuzzy)[:limit]


def search_stops(
    stops: Iterable[Stop],
    query: str,
    limit: int = 20,
    min_score: float = 60.0,
) -> list[StopMatch]:
    """Find stops by code, name or street.

    Args:
        stops: Stops to search.
        query: Stop code (e.g. "1029") or part of a name/street.
        limit: Maximum number of matches.
        min_score: Minimum fuzzy score (0-100) for non-substring matches.

    Returns:
        Matches ordered by score.
    """
    query_normalized = normalize_text(query)
    if not query_normalized:
        return []

    exact: list[StopMatch] = []
    fuzzy: list[StopMatch] = []
    for stop in stops:
        names = (stop.descr, stop.descr_eng, stop.street, stop.street_eng)
        if stop.stop_code == query.strip():
            match_type, score = MatchType.CODE_EXACT, 100.0
        elif _contains(query_normalized, names):
            match_type, score = MatchType.SUBSTRING, 100.0
        else:
            score = _best_score(query_normalized, names)
            if score < min_score:
                continue
            match_type = MatchType.FUZZY_NAME

        match = StopMatch(
            stop=stop,
            score=score,
            confidence=confidence_from_score(score, match_type),
            match_type=match_type,
        )
        (fuzzy if match_type is MatchType.FUZZY_NAME else exact).append(match)

    exact.sort(key=lambda m: m.match_type is not MatchType.CODE_EXACT)
    fuzzy.sort(key=lambda m: m.score, reverse=True)
    return (exact + fuzzy)[:limit]
