"""
Геометрические операции над GeoJSON объектов индекса
"""
import math
import logging
from typing import Any, Dict, Optional

from shapely.errors import GEOSException
from shapely.geometry import Point, mapping, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

logger = logging.getLogger(__name__)

# Метров в градусе широты
METERS_PER_DEGREE = 111_320.0


def parse_geometry(geojson: Optional[Dict[str, Any]]) -> Optional[BaseGeometry]:
    """GeoJSON -> shapely геометрия. None, если геометрии нет или она битая"""
    if not geojson:
        return None
    try:
        geometry = shape(geojson)
    except (GEOSException, ValueError, TypeError, KeyError, AttributeError) as e:
        logger.debug(f"Не удалось разобрать геометрию: {e}")
        return None
    if geometry.is_empty:
        return None
    return geometry


def contains_point(geometry: BaseGeometry, lon: float, lat: float) -> bool:
    return geometry.contains(Point(lon, lat))


def circle_polygon(lon: float, lat: float, radius_m: float, quad_segs: int = 8) -> Dict[str, Any]:
    """Полигон, аппроксимирующий круг радиуса radius_m метров вокруг точки"""
    lon_scale = METERS_PER_DEGREE * max(math.cos(math.radians(lat)), 1e-6)

    def to_degrees(x, y, z=None):
        return lon + x / lon_scale, lat + y / METERS_PER_DEGREE

    local = Point(0.0, 0.0).buffer(radius_m, quad_segs=quad_segs)
    return mapping(transform(to_degrees, local))
