"""
Поиск границ и ближайшей улицы для точки
"""
import logging
from typing import Dict, Optional

from config import settings
from .index import GeoIndexClient
from .models import AddressLevel, Feature, FeatureType, GeoPoint, HIGHWAY_TYPES

logger = logging.getLogger(__name__)


class BoundaryResolver:
    """Административные границы, содержащие точку, по уровням"""

    def __init__(self, index: GeoIndexClient, place_radius_m: Optional[float] = None):
        self.index = index
        self.place_radius_m = place_radius_m or settings.PLACE_RADIUS_M

    def levels(self, point: GeoPoint) -> Dict[str, Feature]:
        levels: Dict[str, Feature] = {}
        for boundary in self.index.contains_point([FeatureType.BOUNDARY.value], point):
            if not boundary.addr_level:
                logger.debug(f"Граница {boundary.id} без уровня, пропускаем")
                continue
            levels[boundary.addr_level] = boundary

        # Границ населённых пунктов мало, точек населённых пунктов больше
        if AddressLevel.LOCALITY.value not in levels:
            places = self.index.nearest_by_distance(
                [FeatureType.PLACE_POINT.value], point, self.place_radius_m, 1
            )
            if places:
                levels[AddressLevel.LOCALITY.value] = places[0]

        return levels


class HighwayResolver:
    """Ближайшая улица в заданном радиусе"""

    def __init__(self, index: GeoIndexClient):
        self.index = index

    def nearest(self, point: GeoPoint, radius_m: float) -> Optional[Feature]:
        highways = self.index.intersects_shape(HIGHWAY_TYPES, point, radius_m, 1)
        return highways[0] if highways else None
