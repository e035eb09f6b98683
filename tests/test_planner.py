import pytest
import requests

from conftest import FakeGeocoder, FakeResponse, FakeSession, FakeSource, node, way
from routego.load_map import GraphCache
from routego.models import Congestion
from routego.osrm_client import OSRMClient
from routego.planner import RoutePlanner


def osrm_payload(*distances):
    return {"code": "Ok", "routes": [
        {"distance": d, "duration": d / 10, "geometry": {"coordinates": [[0.0, 0.0], [0.1, 0.0]]}, "legs": []}
        for d in distances
    ]}


def test_empty_map_data_falls_back_to_straight_line():
    source = FakeSource([])
    planner = RoutePlanner(source=source)

    rs = planner.plan_between((0.0, 0.0), (0.0, 0.1))

    assert len(source.calls) == 1
    assert len(rs) == 1
    route = rs.selected
    assert len(route.geometry) == 2
    assert route.distance == pytest.approx(11119, abs=1)
    assert route.duration == pytest.approx(1000, abs=1)
    assert route.is_estimate
    assert route.toll == 0.0 and route.congestion is Congestion.UNKNOWN
    assert rs.is_degraded


def test_road_path_is_used_when_available(equator_elements):
    rs = RoutePlanner(source=FakeSource(equator_elements)).plan_between((0.0, 0.0), (0.0, 0.1))

    route = rs.selected
    assert not route.is_estimate
    assert route.geometry == ((0.0, 0.0), (0.05, 0.0), (0.1, 0.0))
    assert route.distance == pytest.approx(11119.49, abs=0.1)
    assert route.duration == pytest.approx(1000.75, abs=0.1)
    assert route.congestion is Congestion.LOW
    assert route.toll == 0.0


def test_long_road_path_carries_no_toll():
    # ~111km along the equator, well past the toll threshold
    elements = [node(1, 0.0, 0.0), node(2, 0.0, 0.5), node(3, 0.0, 1.0), way(10, [1, 2, 3])]
    rs = RoutePlanner(source=FakeSource(elements)).plan_between((0.0, 0.0), (0.0, 1.0))
    assert rs.selected.distance > 100000
    assert rs.selected.toll == 0.0
    assert rs.selected.congestion is Congestion.LOW


def test_disconnected_roads_fall_back():
    elements = [
        node(1, 0.0, 0.0), node(2, 0.0, 0.01),
        node(3, 0.0, 0.09), node(4, 0.0, 0.1),
        way(10, [1, 2]), way(11, [3, 4]),
    ]
    rs = RoutePlanner(source=FakeSource(elements)).plan_between((0.0, 0.0), (0.0, 0.1))
    assert rs.selected.is_estimate


def test_endpoints_on_same_node_fall_back():
    elements = [node(1, 0.0, 0.05), node(2, 1.0, 1.0), way(10, [1, 2])]
    rs = RoutePlanner(source=FakeSource(elements)).plan_between((0.0, 0.049), (0.0, 0.051))
    assert rs.selected.is_estimate


def test_osrm_candidates_are_ranked():
    client = OSRMClient("http://osrm.test", session=FakeSession(FakeResponse(osrm_payload(15000, 15000, 5000))))
    source = FakeSource([])
    rs = RoutePlanner(source=source, osrm_client=client).plan_between((0.0, 0.0), (0.0, 0.1), method="osrm")

    assert [r.toll for r in rs] == pytest.approx([1.5, 3.0, 0.0])
    assert [r.congestion for r in rs] == [Congestion.LOW, Congestion.MEDIUM, Congestion.HIGH]
    assert source.calls == []


def test_osrm_failure_falls_through_to_graph(equator_elements):
    client = OSRMClient("http://osrm.test", session=FakeSession(exc=requests.Timeout("slow")))
    rs = RoutePlanner(source=FakeSource(equator_elements), osrm_client=client).plan_between(
        (0.0, 0.0), (0.0, 0.1), method="osrm", vehicle="bike")
    assert len(rs) == 1
    assert not rs.selected.is_estimate


@pytest.mark.parametrize("route", [
    {"distance": 900, "duration": 90, "geometry": {"coordinates": [[0.0], [0.1, 0.0]]}},
    {"distance": 900, "duration": 90, "geometry": {"coordinates": [[0.0, 0.0], [0.1, 0.0]]}, "legs": ["oops"]},
])
def test_malformed_osrm_payload_falls_back_to_graph(equator_elements, route):
    payload = {"code": "Ok", "routes": [route]}
    client = OSRMClient("http://osrm.test", session=FakeSession(FakeResponse(payload)))
    rs = RoutePlanner(source=FakeSource(equator_elements), osrm_client=client).plan_between(
        (0.0, 0.0), (0.0, 0.1), method="osrm")
    assert len(rs) == 1
    assert not rs.selected.is_estimate
    assert rs.selected.distance == pytest.approx(11119.49, abs=0.1)


def test_osrm_profile_follows_vehicle():
    session = FakeSession(FakeResponse(osrm_payload(1000)))
    client = OSRMClient("http://osrm.test", session=session)
    RoutePlanner(osrm_client=client).plan_between((0.0, 0.0), (0.0, 0.1), method="osrm", vehicle="walking")
    assert "/route/v1/walking/" in session.calls[0][1]


def test_plan_with_place_names(equator_elements):
    geocoder = FakeGeocoder({"West End": (0.0, 0.0), "East End": (0.0, 0.1)})
    planner = RoutePlanner(source=FakeSource(equator_elements), geocoder=geocoder)
    rs = planner.plan("West End", "East End")
    assert len(rs) == 1
    assert sorted(geocoder.queries) == ["East End", "West End"]


def test_unresolved_place_builds_nothing():
    source = FakeSource([])
    planner = RoutePlanner(source=source, geocoder=FakeGeocoder({"West End": (0.0, 0.0)}))
    rs = planner.plan("West End", "Nowhere")
    assert len(rs) == 0
    assert rs.selected is None
    assert source.calls == []


def test_new_request_cancels_build_in_flight(equator_elements):
    planner = RoutePlanner()

    class SupersededSource(FakeSource):
        def __call__(self, bbox):
            # a newer request arrives while this fetch is running
            planner.cancel()
            return super().__call__(bbox)

    planner.source = SupersededSource(equator_elements)
    rs = planner.plan_between((0.0, 0.0), (0.0, 0.1))
    assert rs.selected.is_estimate


def test_shared_cache_between_plans(equator_elements):
    source = FakeSource(equator_elements)
    planner = RoutePlanner(source=source, cache=GraphCache())
    planner.plan_between((0.0, 0.0), (0.0, 0.1))
    planner.plan_between((0.0, 0.0), (0.0, 0.1))
    assert len(source.calls) == 1


@pytest.mark.parametrize("kwargs", [{"method": "teleport"}, {"vehicle": "boat"}])
def test_bad_options_raise(kwargs):
    with pytest.raises(ValueError):
        RoutePlanner(source=FakeSource()).plan_between((0.0, 0.0), (0.0, 0.1), **kwargs)


def test_invalid_coordinates_raise():
    with pytest.raises(ValueError):
        RoutePlanner(source=FakeSource()).plan_between((0.0, float("inf")), (0.0, 0.1))
