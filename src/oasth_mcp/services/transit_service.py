"""Transit service for fetching OASTH data with caching.

Each public function fetches one upstream endpoint, decodes the body and maps
it to entities. All errors are caught and logged - functions return an empty
list on failure, which callers treat as "no data available".
"""

import logging

from oasth_mcp.data.cache import ResponseCache
from oasth_mcp.data.config import OASTHConfig, get_oasth_config
from oasth_mcp.data.oasth_client import Endpoint, OASTHClient
from oasth_mcp.models.transit import (
    BusLocation,
    Line,
    LineSchedule,
    Route,
    RoutePoint,
    Stop,
    StopArrival,
    StopRoute,
)
from oasth_mcp.services import mapper

logger = logging.getLogger(__name__)

# Module-level caches (lazy-initialized)
_static_cache: ResponseCache[list] | None = None
_live_cache: ResponseCache[list] | None = None
_config: OASTHConfig | None = None


def _get_config() -> OASTHConfig:
    """Get or create the OASTH config singleton."""
    global _config
    if _config is None:
        _config = get_oasth_config()
    return _config


def _get_cache(live: bool) -> ResponseCache[list]:
    """Get or create the cache for static listings or live data."""
    global _static_cache, _live_cache
    config = _get_config()
    if live:
        if _live_cache is None:
            _live_cache = ResponseCache[list](ttl=config.live_cache_ttl_seconds)
        return _live_cache
    if _static_cache is None:
        _static_cache = ResponseCache[list](ttl=config.static_cache_ttl_seconds)
    return _static_cache


async def fetch_records(
    endpoint: Endpoint,
    param: str | None = None,
    live: bool = False,
    force_refresh: bool = False,
) -> list:
    """Fetch and decode one endpoint, with caching.

    Args:
        endpoint: Upstream endpoint.
        param: Optional path parameter (stop or route code).
        live: Use the short-lived cache (arrivals, bus locations).
        force_refresh: If True, bypass cache and fetch fresh data.

    Returns:
        Decoded records (rows or JSON values), [] if unavailable or error.
    """
    cache = _get_cache(live)
    key = f"{endpoint.value}/{param or ''}"

    # Check cache first (unless force refresh)
    if not force_refresh:
        cached = cache.get(key)
        if cached is not None:
            return cached

    # Acquire lock to prevent concurrent fetches
    async with cache.lock(key):
        # Double-check cache after acquiring lock
        if not force_refresh:
            cached = cache.get(key)
            if cached is not None:
                return cached

        try:
            async with OASTHClient(_get_config()) as client:
                payload = await client.fetch(endpoint, param)
        except Exception as e:
            logger.warning(f"Failed to fetch {key}: {e}")
            return []

        records = payload.records
        logger.debug(f"Fetched {key}: {payload.kind.value}, {len(records)} records")
        # empty answers are not cached so the next call retries
        if records:
            cache.set(key, records)
        return records


async def get_stops() -> list[Stop]:
    """Get all bus stops."""
    return mapper.map_stops(await fetch_records(Endpoint.STOPS))


async def get_lines() -> list[Line]:
    """Get all bus lines."""
    return mapper.map_lines(await fetch_records(Endpoint.LINES))


async def get_routes_for_line(line_code: str) -> list[Route]:
    """Get the routes (directions/variants) of one line."""
    return mapper.map_routes_for_line(await fetch_records(Endpoint.ROUTES), line_code)


async def get_route_details(route_code: str) -> list[RoutePoint]:
    """Get the polyline of a route."""
    records = await fetch_records(Endpoint.ROUTE_DETAILS, route_code)
    return mapper.map_route_points(records)


async def get_stop_arrivals(stop_code: str, force_refresh: bool = False) -> list[StopArrival]:
    """Get predicted arrivals at a stop."""
    records = await fetch_records(
        Endpoint.STOP_ARRIVALS, stop_code, live=True, force_refresh=force_refresh
    )
    return mapper.map_stop_arrivals(records)


async def get_bus_locations(route_code: str, force_refresh: bool = False) -> list[BusLocation]:
    """Get live vehicle positions on a route."""
    records = await fetch_records(
        Endpoint.BUS_LOCATION, route_code, live=True, force_refresh=force_refresh
    )
    return mapper.map_bus_locations(records, route_code)


async def get_closest_stops(lat: float, lng: float, limit: int | None = None) -> list[Stop]:
    """Get the stops nearest to a point, with distances in km.

    Args:
        lat, lng: Reference point in degrees.
        limit: Maximum number of stops (default from config, 30).
    """
    stops = await get_stops()
    if not stops:
        return []
    if limit is None:
        limit = _get_config().nearest_stops_limit
    return mapper.nearest_stops(stops, lat, lng, limit=limit)


async def get_routes_for_stop(stop_code: str) -> list[StopRoute]:
    """Get the routes serving a stop.

    The API has no such endpoint; routes are derived from the stop's live
    arrivals, so only routes with a bus on the way are listed.
    """
    records = await fetch_records(Endpoint.STOP_ARRIVALS, stop_code, live=True)
    return mapper.routes_for_stop(records)


async def get_line_schedule(route_code: str, line_code: str) -> LineSchedule:
    """Get the timetable of a line.

    The API exposes no schedule endpoint, so this is always empty.
    """
    logger.debug(f"No schedule source for line {line_code} route {route_code}")
    return LineSchedule()


def clear_caches() -> None:
    """Clear all response caches.

    Useful for testing or forcing fresh data on next request.
    """
    if _static_cache:
        _static_cache.clear()
    if _live_cache:
        _live_cache.clear()


def reset_service() -> None:
    """Reset the service state completely.

    Clears caches and resets config. Useful for testing.
    """
    global _static_cache, _live_cache, _config
    _static_cache = None
    _live_cache = None
    _config = None
    # Clear the lru_cache on get_oasth_config so it re-reads .env/environment
    # (hasattr check handles case where function is mocked in tests)
    if hasattr(get_oasth_config, "cache_clear"):
        get_oasth_config.cache_clear()
