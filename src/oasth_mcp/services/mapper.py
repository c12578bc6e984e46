"""Mapping of decoded OASTH records to transit entities.

Decoded records are either positional rows (tuple format, or JSON arrays) or
named objects (JSON objects). `normalize_record` narrows a raw value to one of
the two; each entity then has a single mapping function reading fields by
index or by name, defaulting any field that is missing.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

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

logger = logging.getLogger(__name__)

# Earth's radius in kilometers for haversine calculation
EARTH_RADIUS_KM = 6371

# hard cap on nearest-stop results, whatever the caller asks for
NEAREST_STOPS_LIMIT = 30

# distance given to stops whose coordinates are present but not numeric
UNPARSEABLE_DISTANCE = "999"

# sort key for arrivals without integer minutes
UNKNOWN_MINUTES = 999


@dataclass(frozen=True)
class PositionalRow:
    """Record addressed by field position."""

    values: tuple[Any, ...]

    def get(self, index: int, default: str = "") -> str:
        """Field at `index` as a string; missing, None or empty gives `default`."""
        if index >= len(self.values):
            return default
        return _text(self.values[index]) or default


@dataclass(frozen=True)
class NamedObject:
    """Record addressed by field name."""

    fields: dict[str, Any]

    def get(self, name: str, default: str = "") -> str:
        return _text(self.fields.get(name)) or default


Record = PositionalRow | NamedObject


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_record(value: Any) -> Record | None:
    """Narrow a decoded value to a PositionalRow or NamedObject.

    Returns:
        The record, or None for values that are neither (skipped by mappers).
    """
    if isinstance(value, (list, tuple)):
        return PositionalRow(tuple(value))
    if isinstance(value, dict):
        return NamedObject(value)
    return None


def _rows(records: Iterable[Any]) -> list[PositionalRow]:
    """Positional rows only; endpoints with fixed field maps ignore the rest."""
    rows = []
    for value in records:
        record = normalize_record(value)
        if isinstance(record, PositionalRow):
            rows.append(record)
        else:
            logger.debug(f"Skipping non-positional record: {value!r}")
    return rows


def map_stop(row: PositionalRow) -> Stop:
    descr = row.get(2)
    return Stop(
        stop_id=row.get(0),
        stop_code=row.get(1),
        descr=descr,
        descr_eng=row.get(3, descr),
        street=row.get(4) or None,
        street_eng=row.get(5) or None,
        lng=row.get(7, "0"),
        lat=row.get(8, "0"),
    )


def map_stops(records: Iterable[Any]) -> list[Stop]:
    """Stops from getStopsB rows."""
    return [map_stop(row) for row in _rows(records)]


def map_line(row: PositionalRow) -> Line:
    descr = row.get(2)
    return Line(
        line_code=row.get(0),
        line_id=row.get(1),
        descr=descr,
        descr_eng=row.get(3, descr),
    )


def map_lines(records: Iterable[Any]) -> list[Line]:
    """Lines from getLines rows."""
    return [map_line(row) for row in _rows(records)]


def map_route(row: PositionalRow) -> Route:
    descr = row.get(2)
    return Route(
        line_code=row.get(0),
        route_code=row.get(1),
        descr=descr,
        descr_eng=row.get(3, descr),
    )


def map_routes_for_line(records: Iterable[Any], line_code: str) -> list[Route]:
    """Routes of one line from the full getRoutes listing (column 0 is the line)."""
    return [map_route(row) for row in _rows(records) if row.get(0) == line_code]


def map_route_points(records: Iterable[Any]) -> list[RoutePoint]:
    """Polyline vertices; order comes from position in the response."""
    return [
        RoutePoint(x=row.get(0, "0"), y=row.get(1, "0"), order=str(index))
        for index, row in enumerate(_rows(records))
    ]


def map_bus_locations(records: Iterable[Any], route_code: str) -> list[BusLocation]:
    """Vehicle positions; the route code comes from the request."""
    return [
        BusLocation(
            veh_no=row.get(0),
            cs_date=row.get(1),
            lat=row.get(2, "0"),
            lng=row.get(3, "0"),
            route_code=route_code,
        )
        for row in _rows(records)
    ]


def map_stop_arrival(record: Record) -> StopArrival:
    """Arrival from either a JSON object or a positional [btime2, route_code, veh_code] row."""
    if isinstance(record, NamedObject):
        return StopArrival(
            route_code=record.get("route_code"),
            veh_code=record.get("veh_code"),
            btime2=record.get("btime2"),
        )
    return StopArrival(
        btime2=record.get(0),
        route_code=record.get(1),
        veh_code=record.get(2),
    )


def map_stop_arrivals(records: Iterable[Any]) -> list[StopArrival]:
    arrivals = []
    for value in records:
        record = normalize_record(value)
        if record is not None:
            arrivals.append(map_stop_arrival(record))
    return arrivals


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Args:
        lat1, lon1: First point coordinates in degrees.
        lat2, lon2: Second point coordinates in degrees.

    Returns:
        Distance in kilometers.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def _parse_coordinate(value: str) -> float | None:
    try:
        result = float(value)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def nearest_stops(
    stops: Iterable[Stop], lat: float, lng: float, limit: int = NEAREST_STOPS_LIMIT
) -> list[Stop]:
    """Stops sorted by distance from a point, nearest first.

    Stops with an empty or "0" coordinate are dropped. Stops whose coordinates
    are present but unparseable are kept with a sentinel distance of "999" so
    they sort last.

    Args:
        stops: Candidate stops.
        lat, lng: Reference point in degrees.
        limit: Maximum number of stops to return, capped at 30.

    Returns:
        At most `limit` stops, each with `distance` set (km, 2 decimals).
    """
    measured: list[tuple[float, Stop]] = []
    for stop in stops:
        if not stop.lat or not stop.lng or stop.lat == "0" or stop.lng == "0":
            continue

        stop_lat = _parse_coordinate(stop.lat)
        stop_lng = _parse_coordinate(stop.lng)
        if stop_lat is None or stop_lng is None:
            distance = UNPARSEABLE_DISTANCE
        else:
            distance = f"{haversine_km(lat, lng, stop_lat, stop_lng):.2f}"

        measured.append((float(distance), stop.model_copy(update={"distance": distance})))

    measured.sort(key=lambda item: item[0])
    return [stop for _, stop in measured[: max(min(limit, NEAREST_STOPS_LIMIT), 0)]]


def routes_for_stop(records: Iterable[Any]) -> list[StopRoute]:
    """Placeholder route records for the route codes seen in a stop's arrivals.

    The line id shown to users is the last two characters of the route code.
    """
    codes: list[str] = []
    for value in records:
        record = normalize_record(value)
        if isinstance(record, NamedObject):
            code = record.get("route_code")
        elif isinstance(record, PositionalRow):
            code = record.get(1)
        else:
            continue
        if code and code not in codes:
            codes.append(code)

    return [
        StopRoute(
            route_code=code,
            route_descr=f"Route {code}",
            route_descr_eng=f"Route {code}",
            line_code=code,
            line_id=code[-2:] or code,
            line_descr=f"Line {code}",
            line_descr_eng=f"Line {code}",
            master_line_code=code,
        )
        for code in codes
    ]


def group_arrivals(arrivals: Iterable[StopArrival]) -> dict[str, list[StopArrival]]:
    """Arrivals grouped by route code, each group soonest first."""
    groups: dict[str, list[StopArrival]] = {}
    for arrival in arrivals:
        groups.setdefault(arrival.route_code, []).append(arrival)
    for group in groups.values():
        group.sort(key=lambda a: UNKNOWN_MINUTES if a.minutes is None else a.minutes)
    return groups


def dedupe_routes_by_line(routes: Iterable[StopRoute]) -> list[StopRoute]:
    """First route of each line code."""
    seen: set[str] = set()
    unique = []
    for route in routes:
        if route.line_code in seen:
            continue
        seen.add(route.line_code)
        unique.append(route)
    return unique


def group_lines(lines: Iterable[Line]) -> list[LineGroup]:
    """Lines grouped by their human-facing id, in first-seen order."""
    groups: dict[str, list[Line]] = {}
    for line in lines:
        groups.setdefault(line.line_id, []).append(line)
    return [
        LineGroup(line_id=line_id, lines=members, primary_line=members[0])
        for line_id, members in groups.items()
    ]
