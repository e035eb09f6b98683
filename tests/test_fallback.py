import pytest

from routego.fallback import estimate_duration_s, fallback_route
from routego.models import Congestion


def test_fallback_is_straight_line_estimate():
    route = fallback_route((0.0, 0.0), (0.0, 0.1))
    assert route.distance == pytest.approx(11119.49, abs=0.1)
    assert route.duration == pytest.approx(1000.75, abs=0.1)
    assert route.geometry == ((0.0, 0.0), (0.1, 0.0))
    assert route.toll == 0.0
    assert route.congestion is Congestion.UNKNOWN
    assert route.is_estimate


@pytest.mark.parametrize("origin, destination", [
    ((51.5074, -0.1278), (51.4545, -0.9781)),
    ((-33.86, 151.21), (-33.87, 151.20)),
    ((0.0, 179.9), (0.0, -179.9)),
])
def test_fallback_always_has_positive_distance_and_duration(origin, destination):
    route = fallback_route(origin, destination)
    assert len(route.geometry) == 2
    assert route.distance > 0
    assert route.duration > 0


def test_fallback_for_identical_points():
    route = fallback_route((10.0, 10.0), (10.0, 10.0))
    assert route.distance == 0.0
    assert route.duration == 0.0
    assert len(route.geometry) == 2


def test_fallback_speed_is_configurable():
    assert estimate_duration_s(20000, speed_kmh=80) == pytest.approx(900.0)
    with pytest.raises(ValueError):
        estimate_duration_s(1000, speed_kmh=0)


def test_fallback_rejects_non_finite_coordinates():
    with pytest.raises(ValueError):
        fallback_route((float("nan"), 0.0), (0.0, 0.1))
