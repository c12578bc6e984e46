from pydantic import BaseModel, Field

from oasth_mcp.matching.models import MatchConfidence, MatchType
from oasth_mcp.models.card import CardReadKind, TicketInfo
from oasth_mcp.models.transit import (
    BusLocation,
    Line,
    LineGroup,
    Route,
    RoutePoint,
    Stop,
    StopArrival,
    StopRoute,
)


class LineResult(BaseModel):
    line: Line
    score: float = Field(description="Match score 0-100 (100 for substring/exact)")
    confidence: MatchConfidence
    match_type: MatchType


class ListLinesResponse(BaseModel):
    lines: list[LineResult]
    query: str | None = None
    count: int = Field(description="Number of lines returned")


class LineRoutesResponse(BaseModel):
    line_code: str
    routes: list[Route]
    count: int = Field(description="Number of routes (directions/variants) returned")


class RouteShapeResponse(BaseModel):
    route_code: str
    points: list[RoutePoint]
    count: int = Field(description="Number of polyline points")


class ArrivalGroup(BaseModel):
    """Arrivals of one route at a stop, soonest first."""

    route_code: str
    arrivals: list[StopArrival]
    next_minutes: int | None = Field(
        default=None, description="Minutes until the first arrival, if known"
    )


class StopArrivalsResponse(BaseModel):
    stop_code: str
    routes: list[ArrivalGroup]
    count: int = Field(description="Total number of arrivals across routes")


class BusLocationsResponse(BaseModel):
    route_code: str
    buses: list[BusLocation]
    count: int = Field(description="Number of vehicles on the route")


class StopsResponse(BaseModel):
    stops: list[Stop]
    count: int = Field(description="Number of stops returned")


class StopResult(BaseModel):
    stop: Stop
    score: float = Field(description="Match score 0-100")
    confidence: MatchConfidence
    match_type: MatchType


class SearchStopsResponse(BaseModel):
    stops: list[StopResult]
    query: str
    count: int = Field(description="Number of stops returned")


class StopRoutesResponse(BaseModel):
    stop_code: str
    routes: list[StopRoute]
    count: int = Field(description="Number of distinct routes with a bus on the way")


class TicketResponse(BaseModel):
    """Decoded card ticket, as returned by the decode_card tool."""

    kind: CardReadKind
    ticket: TicketInfo
    remaining_time_formatted: str = Field(
        description="Countdown until expiry (MM:SS, HH:MM:SS or 'Nd HH:MM:SS')"
    )


class LineGroupsResponse(BaseModel):
    groups: list[LineGroup]
    count: int = Field(description="Number of distinct line numbers")
