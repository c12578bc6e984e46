"""MCP tools for OASTH lines, routes, stops and live data."""

from oasth_mcp.app import mcp
from oasth_mcp.matching import search_lines, search_stops as _search_stops
from oasth_mcp.models.responses import (
    ArrivalGroup,
    BusLocationsResponse,
    LineGroupsResponse,
    LineResult,
    LineRoutesResponse,
    ListLinesResponse,
    RouteShapeResponse,
    SearchStopsResponse,
    StopArrivalsResponse,
    StopResult,
    StopRoutesResponse,
    StopsResponse,
)
from oasth_mcp.services import transit_service
from oasth_mcp.services.mapper import dedupe_routes_by_line, group_arrivals, group_lines


@mcp.tool()
async def list_lines(query: str | None = None, limit: int = 50) -> ListLinesResponse:
    """List OASTH bus lines, optionally filtered by number or name.

    Examples:
        list_lines()  # All lines
        list_lines(query="31")  # Line 31 first, then lines containing "31"
        list_lines(query="Καμάρα")  # Lines whose description mentions Kamara

    Args:
        query: Line number or part of the Greek/English description.
        limit: Maximum number of lines to return (default 50, max 500).

    Returns:
        ListLinesResponse with matched lines, scores and count.
    """
    limit = max(1, min(500, limit))

    lines = await transit_service.get_lines()
    matches = search_lines(lines, query or "", limit=limit)
    results = [
        LineResult(
            line=m.line, score=m.score, confidence=m.confidence, match_type=m.match_type
        )
        for m in matches
    ]
    return ListLinesResponse(lines=results, query=query, count=len(results))


@mcp.tool()
async def list_line_groups() -> LineGroupsResponse:
    """List lines grouped by their displayed number.

    Several internal lines can share one number (e.g. seasonal or night
    variants); the first listed is the primary line of the group.
    """
    groups = group_lines(await transit_service.get_lines())
    return LineGroupsResponse(groups=groups, count=len(groups))


@mcp.tool()
async def get_line_routes(line_code: str) -> LineRoutesResponse:
    """Get the routes (directions and variants) of a line.

    Args:
        line_code: Internal line code from list_lines (not the displayed number).

    Returns:
        LineRoutesResponse with the line's routes.
    """
    routes = await transit_service.get_routes_for_line(line_code)
    return LineRoutesResponse(line_code=line_code, routes=routes, count=len(routes))


@mcp.tool()
async def get_route_shape(route_code: str) -> RouteShapeResponse:
    """Get the polyline of a route as ordered longitude/latitude points.

    Args:
        route_code: Route code from get_line_routes.
    """
    points = await transit_service.get_route_details(route_code)
    return RouteShapeResponse(route_code=route_code, points=points, count=len(points))


@mcp.tool()
async def get_stop_arrivals(stop_code: str) -> StopArrivalsResponse:
    """Get live predicted arrivals at a stop, grouped by route.

    Within each route, arrivals are sorted by minutes until arrival; routes
    appear in the order the server lists them.

    Args:
        stop_code: Stop code (e.g., "1029"), see search_stops.

    Returns:
        StopArrivalsResponse with one group per route.
    """
    arrivals = await transit_service.get_stop_arrivals(stop_code)
    groups = [
        ArrivalGroup(route_code=route_code, arrivals=items, next_minutes=items[0].minutes)
        for route_code, items in group_arrivals(arrivals).items()
    ]
    return StopArrivalsResponse(stop_code=stop_code, routes=groups, count=len(arrivals))


@mcp.tool()
async def get_bus_locations(route_code: str) -> BusLocationsResponse:
    """Get live positions of the buses running on a route.

    Args:
        route_code: Route code from get_line_routes.
    """
    buses = await transit_service.get_bus_locations(route_code)
    return BusLocationsResponse(route_code=route_code, buses=buses, count=len(buses))


@mcp.tool()
async def find_nearest_stops(lat: float, lng: float, limit: int = 30) -> StopsResponse:
    """Find the stops closest to a point.

    Examples:
        find_nearest_stops(lat=40.6264, lng=22.9484)  # Around Aristotelous square

    Args:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        limit: Maximum number of stops (default and maximum 30).

    Returns:
        StopsResponse sorted by distance; each stop carries `distance` in km.
    """
    limit = max(1, min(30, limit))

    stops = await transit_service.get_closest_stops(lat, lng, limit=limit)
    return StopsResponse(stops=stops, count=len(stops))


@mcp.tool()
async def search_stops(
    query: str,
    limit: int = 20,
    min_score: float = 60.0,
) -> SearchStopsResponse:
    """Search stops by code, name or street.

    Exact stop codes come first, then names containing the query, then fuzzy
    matches. Accents and case are ignored.

    Args:
        query: Stop code or part of a stop/street name (Greek or English).
        limit: Maximum number of results (default 20, max 100).
        min_score: Minimum fuzzy score 0-100 (default 60).
    """
    limit = max(1, min(100, limit))
    min_score = max(0.0, min(100.0, min_score))

    stops = await transit_service.get_stops()
    matches = _search_stops(stops, query, limit=limit, min_score=min_score)
    results = [
        StopResult(
            stop=m.stop, score=m.score, confidence=m.confidence, match_type=m.match_type
        )
        for m in matches
    ]
    return SearchStopsResponse(stops=results, query=query, count=len(results))


@mcp.tool()
async def get_stop_routes(stop_code: str) -> StopRoutesResponse:
    """Get the routes currently serving a stop.

    Derived from live arrivals: only routes with a bus on the way are listed,
    and descriptions are placeholders built from the route code.

    Args:
        stop_code: Stop code (e.g., "1029").
    """
    routes = dedupe_routes_by_line(await transit_service.get_routes_for_stop(stop_code))
    return StopRoutesResponse(stop_code=stop_code, routes=routes, count=len(routes))
