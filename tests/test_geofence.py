"""
Geofence evaluation: haversine distance and zone selection
"""
from types import SimpleNamespace

import pytest

from checkin.services.geofence.evaluate import evaluate, haversine_m

pytestmark = pytest.mark.unit


def zone(name, lat, lng, radius, active=True):
    return SimpleNamespace(name=name, center_lat=lat, center_lng=lng, radius_m=radius, active=active)


class TestHaversine:

    def test_zero_distance(self):
        assert haversine_m(-25.43, -49.27, -25.43, -49.27) == 0.0

    def test_hundredth_of_degree_on_equator(self):
        """0.01 degree of longitude on the equator is about 1113 m"""
        assert haversine_m(0, 0, 0, 0.01) == pytest.approx(1111.95, abs=1.0)

    def test_symmetric(self):
        a = haversine_m(48.8566, 2.3522, 51.5074, -0.1278)
        b = haversine_m(51.5074, -0.1278, 48.8566, 2.3522)
        assert a == pytest.approx(b)
        # Paris - London
        assert a == pytest.approx(343_500, rel=0.01)


class TestEvaluate:

    def test_point_outside_zone_is_reported(self):
        assert evaluate(0, 0.01, [zone('Home', 0, 0, 500)]) == ['Home']

    def test_point_inside_all_zones(self):
        zones = [zone('Home', 0, 0, 500), zone('School', 0, 0.005, 1000)]
        assert evaluate(0, 0.001, zones) == []

    def test_boundary_is_inside(self):
        d = haversine_m(0, 0, 0, 0.01)
        assert evaluate(0, 0.01, [zone('Edge', 0, 0, d)]) == []

    def test_inactive_zones_never_reported(self):
        zones = [zone('Off', 0, 0, 10, active=False), zone('On', 0, 0, 10)]
        assert evaluate(1, 1, zones) == ['On']

    def test_order_follows_input_and_names_not_deduplicated(self):
        zones = [
            zone('B', 10, 10, 100),
            zone('A', 0, 0, 5_000_000),
            zone('B', -10, -10, 100),
            zone('C', 20, 20, 100),
        ]
        assert evaluate(0, 0, zones) == ['B', 'B', 'C']

    def test_no_zones(self):
        assert evaluate(0, 0, []) == []
