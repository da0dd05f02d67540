"""
Pytest configuration and fixtures for the inverse geocoding tests.

Provides:
- FakeGeoIndex: in-memory implementation of the geo index contract
- feature / geometry factories around a fixed test point
"""
import math
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from shapely.geometry import Point, shape

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.index import GeoIndexClient
from api.models import Feature, GeoPoint

METERS_PER_DEGREE = 111_320.0

# Test point (lon, lat)
LON = 37.6200
LAT = 55.7500


def haversine_m(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    r = 6_371_000.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * r * math.asin(math.sqrt(a))


class FakeGeoIndex(GeoIndexClient):
    """In-memory geo index. Records every call for assertions."""

    def __init__(self, features: Optional[List[Feature]] = None,
                 related: Optional[Dict[str, List[Feature]]] = None):
        self.features = list(features or [])
        self._related = related
        self.calls: List[tuple] = []

    def add(self, **attrs: Any) -> Feature:
        feature = Feature.model_validate(attrs)
        self.features.append(feature)
        return feature

    def contains_point(self, types, point):
        types = list(types)
        self.calls.append(("contains_point", types))
        p = Point(point.lon, point.lat)
        return [
            f for f in self.features
            if f.type in types and f.full_geometry and shape(f.full_geometry).intersects(p)
        ]

    def nearest_by_distance(self, types, point, max_radius_m, limit):
        types = list(types)
        self.calls.append(("nearest_by_distance", types, max_radius_m, limit))
        found = []
        for f in self.features:
            if f.type not in types or f.center_point is None:
                continue
            distance = haversine_m(point.lon, point.lat, f.center_point.lon, f.center_point.lat)
            if distance <= max_radius_m:
                found.append((distance, f))
        found.sort(key=lambda pair: pair[0])
        return [f for _, f in found][:limit]

    def intersects_shape(self, types, point, radius_m, limit):
        types = list(types)
        self.calls.append(("intersects_shape", types, radius_m, limit))
        p = Point(point.lon, point.lat)
        found = [
            f for f in self.features
            if f.type in types and f.full_geometry
            and shape(f.full_geometry).distance(p) * METERS_PER_DEGREE <= radius_m
        ]
        return found[:limit]

    def related(self, feature):
        self.calls.append(("related", feature.id))
        return self._related


def square(lon: float, lat: float, half: float) -> Dict[str, Any]:
    """GeoJSON square polygon centred on (lon, lat)."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [lon - half, lat - half],
            [lon + half, lat - half],
            [lon + half, lat + half],
            [lon - half, lat + half],
            [lon - half, lat - half],
        ]]
    }


def line(lon1: float, lat1: float, lon2: float, lat2: float) -> Dict[str, Any]:
    return {"type": "LineString", "coordinates": [[lon1, lat1], [lon2, lat2]]}


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def point() -> GeoPoint:
    return GeoPoint(lat=LAT, lon=LON)


@pytest.fixture
def index() -> FakeGeoIndex:
    return FakeGeoIndex()


@pytest.fixture
def make_square():
    return square


@pytest.fixture
def make_line():
    return line


@pytest.fixture
def moscow_boundaries(index):
    """Country, region and city boundaries around the test point."""
    index.add(id="r1", type="admbnd", addr_level="admin0", name="Россия",
              center_point={"lat": LAT, "lon": LON}, full_geometry=square(LON, LAT, 5.0))
    index.add(id="r2", type="admbnd", addr_level="admin1", name="Москва",
              center_point={"lat": LAT, "lon": LON}, full_geometry=square(LON, LAT, 0.5))
    index.add(id="r3", type="admbnd", addr_level="neighborhood", name="Тверской",
              center_point={"lat": LAT, "lon": LON}, full_geometry=square(LON, LAT, 0.02))
    return index
