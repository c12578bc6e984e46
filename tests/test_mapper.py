"""Tests for mapping decoded records to transit entities."""

import pytest

from oasth_mcp.codec.response import decode_payload
from oasth_mcp.models.transit import Line, Stop, StopArrival
from oasth_mcp.services.mapper import (
    NamedObject,
    PositionalRow,
    dedupe_routes_by_line,
    group_arrivals,
    group_lines,
    haversine_km,
    map_bus_locations,
    map_lines,
    map_route_points,
    map_routes_for_line,
    map_stop_arrivals,
    map_stops,
    nearest_stops,
    normalize_record,
    routes_for_stop,
)


def make_stop(code: str, lat: str, lng: str) -> Stop:
    return Stop(stop_code=code, stop_id=code, descr=f"Stop {code}", lat=lat, lng=lng)


# Records


def test_normalize_record_shapes():
    assert isinstance(normalize_record(["1", "2"]), PositionalRow)
    assert isinstance(normalize_record({"a": "1"}), NamedObject)
    assert normalize_record("text") is None
    assert normalize_record(5) is None


def test_positional_row_defaults():
    row = PositionalRow(("a", None, ""))
    assert row.get(0) == "a"
    assert row.get(1, "0") == "0"
    assert row.get(2, "x") == "x"
    assert row.get(10, "0") == "0"


# Stops


def test_map_stops_full_row():
    rows = [["10", "1029", "ΚΑΜΑΡΑ", "KAMARA", "ΕΓΝΑΤΙΑ", "EGNATIA", "x", "22.95", "40.63"]]
    stop = map_stops(rows)[0]
    assert stop.stop_id == "10"
    assert stop.stop_code == "1029"
    assert stop.descr == "ΚΑΜΑΡΑ"
    assert stop.descr_eng == "KAMARA"
    assert stop.street == "ΕΓΝΑΤΙΑ"
    assert stop.street_eng == "EGNATIA"
    assert stop.lng == "22.95"
    assert stop.lat == "40.63"
    assert stop.heading == "0"
    assert stop.distance is None


def test_map_stops_short_row_defaults():
    """Missing English description falls back to Greek; coordinates to '0'."""
    stop = map_stops([["10", "1029", "ΚΑΜΑΡΑ"]])[0]
    assert stop.descr_eng == "ΚΑΜΑΡΑ"
    assert stop.street is None
    assert stop.street_eng is None
    assert stop.lat == "0"
    assert stop.lng == "0"


def test_map_stops_skips_named_objects():
    assert map_stops([{"StopCode": "1"}, ["1", "2", "A"]]) == map_stops([["1", "2", "A"]])


# Lines and routes


def test_map_lines():
    lines = map_lines([["1", "01N", "ΝΕΟΣ ΣΤΑΘΜΟΣ", "NEW STATION"], ["2", "31"]])
    assert lines[0] == Line(
        line_code="1", line_id="01N", descr="ΝΕΟΣ ΣΤΑΘΜΟΣ", descr_eng="NEW STATION"
    )
    assert lines[1].descr == ""
    assert lines[1].descr_eng == ""


def test_map_routes_for_line_filters_by_line_code():
    rows = [
        ["10", "100", "ΠΡΟΣ Α", "TO A"],
        ["11", "110", "ΠΡΟΣ Β"],
        ["10", "101", "ΠΡΟΣ Γ", "TO C"],
    ]
    routes = map_routes_for_line(rows, "10")
    assert [r.route_code for r in routes] == ["100", "101"]
    assert all(r.route_type == "1" for r in routes)
    assert routes[0].distance == ""


def test_map_route_points_order_is_position():
    points = map_route_points([["22.9", "40.6"], ["22.8", "40.5"], ["22.7"]])
    assert [p.order for p in points] == ["0", "1", "2"]
    assert points[0].x == "22.9"
    assert points[0].y == "40.6"
    assert points[2].y == "0"


def test_map_bus_locations_uses_requested_route():
    buses = map_bus_locations([["1234", "2024-01-01 10:00", "40.6", "22.9"]], "555")
    assert buses[0].veh_no == "1234"
    assert buses[0].cs_date == "2024-01-01 10:00"
    assert buses[0].lat == "40.6"
    assert buses[0].lng == "22.9"
    assert buses[0].route_code == "555"


# Arrivals


def test_map_stop_arrivals_named_and_positional():
    records = [
        {"route_code": "100", "veh_code": "V1", "btime2": "5"},
        ["7", "200", "V2"],
        "ignored",
    ]
    arrivals = map_stop_arrivals(records)
    assert arrivals == [
        StopArrival(route_code="100", veh_code="V1", btime2="5"),
        StopArrival(route_code="200", veh_code="V2", btime2="7"),
    ]


def test_map_stop_arrivals_json_object_body_has_no_arrivals():
    """An object body (e.g. an error message) is not an arrival list."""
    payload = decode_payload(b'{"error": "no data"}')
    assert map_stop_arrivals(payload.records) == []


def test_stop_arrival_minutes():
    assert StopArrival(btime2="12").minutes == 12
    assert StopArrival(btime2="").minutes is None
    assert StopArrival(btime2="soon").minutes is None


def test_group_arrivals_sorts_within_route():
    arrivals = [
        StopArrival(route_code="A", btime2="9"),
        StopArrival(route_code="B", btime2="2"),
        StopArrival(route_code="A", btime2="?"),
        StopArrival(route_code="A", btime2="0"),
    ]
    groups = group_arrivals(arrivals)
    assert list(groups) == ["A", "B"]
    assert [a.btime2 for a in groups["A"]] == ["0", "9", "?"]


# Geography


def test_haversine_zero_distance():
    assert haversine_km(40.63, 22.95, 40.63, 22.95) == 0


def test_haversine_known_distance():
    """One degree of latitude is about 111.19 km."""
    assert haversine_km(40.0, 22.0, 41.0, 22.0) == pytest.approx(111.19, abs=0.01)


def test_nearest_stops_excludes_zero_coordinates():
    stops = [make_stop("1", "0", "22.9"), make_stop("2", "40.6", ""), make_stop("3", "40.6", "22.9")]
    result = nearest_stops(stops, 40.6, 22.9)
    assert [s.stop_code for s in result] == ["3"]
    assert result[0].distance == "0.00"


def test_nearest_stops_sorted_and_limited():
    stops = [make_stop(str(i), f"{40.0 + i / 100}", "22.0") for i in range(40, 0, -1)]
    result = nearest_stops(stops, 40.0, 22.0)
    assert len(result) == 30
    distances = [float(s.distance) for s in result]
    assert distances == sorted(distances)
    assert result[0].stop_code == "1"


def test_nearest_stops_caps_large_limit():
    stops = [make_stop(str(i), f"{40.0 + i / 100}", "22.0") for i in range(1, 80)]
    assert len(nearest_stops(stops, 40.0, 22.0, limit=100)) == 30


def test_nearest_stops_unparseable_coordinates_sort_last():
    stops = [make_stop("bad", "abc", "22.0"), make_stop("good", "40.1", "22.0")]
    result = nearest_stops(stops, 40.0, 22.0, limit=5)
    assert [s.stop_code for s in result] == ["good", "bad"]
    assert result[1].distance == "999"


def test_nearest_stops_distance_formatting():
    result = nearest_stops([make_stop("1", "41.0", "22.0")], 40.0, 22.0)
    assert result[0].distance == "111.19"


def test_nearest_stops_does_not_modify_input():
    stop = make_stop("1", "40.1", "22.0")
    nearest_stops([stop], 40.0, 22.0)
    assert stop.distance is None


# Stop routes


def test_routes_for_stop_synthesizes_records():
    records = [
        {"route_code": "1234", "btime2": "3"},
        ["5", "77", "V"],
        {"route_code": "1234", "btime2": "8"},
    ]
    routes = routes_for_stop(records)
    assert [r.route_code for r in routes] == ["1234", "77"]

    first = routes[0]
    assert first.line_id == "34"
    assert first.line_code == "1234"
    assert first.master_line_code == "1234"
    assert first.route_descr == "Route 1234"
    assert first.line_descr == "Line 1234"
    assert first.route_type == "1"


def test_routes_for_stop_single_char_code():
    routes = routes_for_stop([{"route_code": "7"}])
    assert routes[0].line_id == "7"


def test_dedupe_routes_by_line_keeps_first():
    routes = routes_for_stop([{"route_code": "10"}, {"route_code": "20"}])
    duplicated = routes + [routes[0].model_copy(update={"route_code": "99"})]
    unique = dedupe_routes_by_line(duplicated)
    assert [r.route_code for r in unique] == ["10", "20"]


def test_group_lines_by_line_id():
    lines = [
        Line(line_code="1", line_id="31"),
        Line(line_code="2", line_id="01N"),
        Line(line_code="3", line_id="31"),
    ]
    groups = group_lines(lines)
    assert [g.line_id for g in groups] == ["31", "01N"]
    assert [line.line_code for line in groups[0].lines] == ["1", "3"]
    assert groups[0].primary_line.line_code == "1"
