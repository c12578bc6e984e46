"""Pydantic models for OASTH transit entities.

Numeric fields stay strings, as delivered by the server; every field has a
concrete default ('' or '0') so consumers never see a missing value. Only the
street names and the nearest-stop distance are nullable.
"""

from pydantic import BaseModel, ConfigDict, Field


class Stop(BaseModel):
    """Bus stop from getStopsB."""

    model_config = ConfigDict(frozen=True)

    stop_code: str = ""
    stop_id: str = ""
    descr: str = ""
    descr_eng: str = ""
    street: str | None = None
    street_eng: str | None = None
    heading: str = "0"  # not provided by the server
    lat: str = "0"
    lng: str = "0"
    distance: str | None = Field(
        default=None, description="Distance in km with 2 decimals (nearest-stop queries only)"
    )


class Line(BaseModel):
    """Bus line from getLines."""

    model_config = ConfigDict(frozen=True)

    line_code: str = ""
    line_id: str = ""  # human-facing number, e.g. "31"
    descr: str = ""
    descr_eng: str = ""


class Route(BaseModel):
    """One direction/variant of a line, from getRoutes."""

    model_config = ConfigDict(frozen=True)

    route_code: str = ""
    line_code: str = ""
    descr: str = ""
    descr_eng: str = ""
    route_type: str = "1"
    distance: str = ""


class RoutePoint(BaseModel):
    """Polyline vertex from getRouteDetailPerRoute."""

    model_config = ConfigDict(frozen=True)

    x: str = "0"  # longitude
    y: str = "0"  # latitude
    order: str = "0"  # position in the response, zero-based


class BusLocation(BaseModel):
    """Live vehicle position from getBusLocation."""

    model_config = ConfigDict(frozen=True)

    veh_no: str = ""
    cs_date: str = ""
    lat: str = "0"
    lng: str = "0"
    route_code: str = ""  # supplied by the caller, not the row


class StopArrival(BaseModel):
    """Predicted arrival at a stop from getStopArrivals."""

    model_config = ConfigDict(frozen=True)

    route_code: str = ""
    veh_code: str = ""
    btime2: str = ""  # minutes until arrival

    @property
    def minutes(self) -> int | None:
        """Minutes until arrival, or None when not an integer."""
        try:
            return int(self.btime2)
        except ValueError:
            return None


class StopRoute(BaseModel):
    """Route serving a stop, synthesized from live arrivals.

    The server has no "lines at this stop" endpoint, so these records are a
    best-effort placeholder built from route codes only.
    """

    model_config = ConfigDict(frozen=True)

    route_code: str
    route_descr: str
    route_descr_eng: str
    route_type: str = "1"
    line_code: str
    line_id: str
    line_descr: str
    line_descr_eng: str
    master_line_code: str


class LineGroup(BaseModel):
    """Lines sharing one human-facing line id."""

    line_id: str
    lines: list[Line]
    primary_line: Line


class LineSchedule(BaseModel):
    """Timetable for a line (the API exposes no schedule endpoint)."""

    departure: list[str] = []
    return_: list[str] = Field(default=[], alias="return")

    model_config = ConfigDict(populate_by_name=True)
