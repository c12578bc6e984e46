"""Tests for the MCP tools."""

from unittest.mock import AsyncMock, patch

import pytest

from oasth_mcp.matching import MatchType
from oasth_mcp.models.card import CardReadKind
from oasth_mcp.models.transit import Line, Stop, StopArrival, StopRoute
from oasth_mcp.tools import card_tools, transit_tools

LINES = [
    Line(line_code="1", line_id="31", descr="ΚΑΛΑΜΑΡΙΑ", descr_eng="KALAMARIA"),
    Line(line_code="2", line_id="01N", descr="ΣΤΑΘΜΟΣ", descr_eng="STATION"),
    Line(line_code="3", line_id="31", descr="ΚΑΛΑΜΑΡΙΑ (ΝΥΧΤΑ)", descr_eng="KALAMARIA (NIGHT)"),
]


@pytest.mark.asyncio
async def test_list_lines_without_query():
    with patch.object(transit_tools.transit_service, "get_lines", AsyncMock(return_value=LINES)):
        response = await transit_tools.list_lines()

    assert response.count == 3
    assert [r.line.line_code for r in response.lines] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_list_lines_with_query():
    with patch.object(transit_tools.transit_service, "get_lines", AsyncMock(return_value=LINES)):
        response = await transit_tools.list_lines(query="31")

    assert response.query == "31"
    assert {r.line.line_code for r in response.lines} == {"1", "3"}
    assert all(r.match_type == MatchType.CODE_EXACT for r in response.lines)


@pytest.mark.asyncio
async def test_list_line_groups():
    with patch.object(transit_tools.transit_service, "get_lines", AsyncMock(return_value=LINES)):
        response = await transit_tools.list_line_groups()

    assert response.count == 2
    assert response.groups[0].line_id == "31"
    assert len(response.groups[0].lines) == 2


@pytest.mark.asyncio
async def test_get_stop_arrivals_grouped():
    arrivals = [
        StopArrival(route_code="A", veh_code="1", btime2="12"),
        StopArrival(route_code="B", veh_code="2", btime2="3"),
        StopArrival(route_code="A", veh_code="3", btime2="4"),
    ]
    with patch.object(
        transit_tools.transit_service, "get_stop_arrivals", AsyncMock(return_value=arrivals)
    ):
        response = await transit_tools.get_stop_arrivals("1029")

    assert response.count == 3
    assert [g.route_code for g in response.routes] == ["A", "B"]
    assert response.routes[0].next_minutes == 4
    assert [a.veh_code for a in response.routes[0].arrivals] == ["3", "1"]


@pytest.mark.asyncio
async def test_get_stop_arrivals_empty():
    with patch.object(
        transit_tools.transit_service, "get_stop_arrivals", AsyncMock(return_value=[])
    ):
        response = await transit_tools.get_stop_arrivals("1029")

    assert response.count == 0
    assert response.routes == []


@pytest.mark.asyncio
async def test_find_nearest_stops_clamps_limit():
    mock = AsyncMock(return_value=[])
    with patch.object(transit_tools.transit_service, "get_closest_stops", mock):
        await transit_tools.find_nearest_stops(40.6, 22.9, limit=1000)

    mock.assert_awaited_once_with(40.6, 22.9, limit=30)


@pytest.mark.asyncio
async def test_find_nearest_stops_never_exceeds_30():
    """A large request still returns at most 30 stops."""
    stops = [
        Stop(stop_code=str(i), lat=f"{40.0 + i / 1000:.3f}", lng="22.0") for i in range(1, 80)
    ]
    with patch.object(transit_tools.transit_service, "get_stops", AsyncMock(return_value=stops)):
        response = await transit_tools.find_nearest_stops(40.0, 22.0, limit=100)

    assert response.count == 30
    assert response.stops[0].stop_code == "1"


@pytest.mark.asyncio
async def test_search_stops_tool():
    stops = [
        Stop(stop_code="1029", descr="ΚΑΜΑΡΑ", descr_eng="KAMARA"),
        Stop(stop_code="1030", descr="ΑΓΙΑ ΣΟΦΙΑ", descr_eng="AGIA SOFIA"),
    ]
    with patch.object(transit_tools.transit_service, "get_stops", AsyncMock(return_value=stops)):
        response = await transit_tools.search_stops("kamara")

    assert response.count == 1
    assert response.stops[0].stop.stop_code == "1029"


@pytest.mark.asyncio
async def test_get_stop_routes_dedupes_lines():
    route = StopRoute(
        route_code="100",
        route_descr="Route 100",
        route_descr_eng="Route 100",
        line_code="100",
        line_id="00",
        line_descr="Line 100",
        line_descr_eng="Line 100",
        master_line_code="100",
    )
    routes = [route, route.model_copy(update={"route_code": "101"})]
    with patch.object(
        transit_tools.transit_service, "get_routes_for_stop", AsyncMock(return_value=routes)
    ):
        response = await transit_tools.get_stop_routes("1029")

    assert response.count == 1
    assert response.routes[0].route_code == "100"


def test_decode_card_tool_trips():
    response = card_tools.decode_card(uid="04942E6A264480", files={"12": "0a000000"})

    assert response.kind == CardReadKind.DECODED
    assert response.ticket.trips_remaining == 10
    assert response.remaining_time_formatted == "00:00"


def test_decode_card_tool_no_data():
    response = card_tools.decode_card(uid="")

    assert response.kind == CardReadKind.NO_DATA
    assert response.ticket.card_id == ""
