"""
Клиент геоиндекса Elasticsearch
"""
import json
import logging
import time
from abc import ABC, abstractmethod
from contextvars import ContextVar
from typing import Any, Dict, Iterable, List, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError

from config import settings
from .errors import IndexUnavailable
from .geometry import circle_polygon
from .models import Feature, GeoPoint, OBJECT_TYPES

logger = logging.getLogger(__name__)

# Сколько границ может содержать одна точка
CONTAINS_QUERY_SIZE = 100
RELATED_QUERY_SIZE = 50

# Крайний срок текущего запроса по time.monotonic(), выставляется геокодером
query_deadline: ContextVar[Optional[float]] = ContextVar("query_deadline", default=None)


class GeoIndexClient(ABC):
    """Контракт геоиндекса, которым пользуется геокодер.

    Все операции только читают индекс. Реализация должна бросать
    IndexUnavailable, если запрос выполнить не удалось.
    """

    @abstractmethod
    def contains_point(self, types: Iterable[str], point: GeoPoint) -> List[Feature]:
        """Объекты, чья геометрия содержит точку"""

    @abstractmethod
    def nearest_by_distance(
        self, types: Iterable[str], point: GeoPoint, max_radius_m: float, limit: int
    ) -> List[Feature]:
        """Объекты в радиусе max_radius_m, отсортированные по расстоянию"""

    @abstractmethod
    def intersects_shape(
        self, types: Iterable[str], point: GeoPoint, radius_m: float, limit: int
    ) -> List[Feature]:
        """Объекты, чья геометрия пересекает круг радиуса radius_m"""

    def related(self, feature: Feature) -> Optional[Dict[str, List[Feature]]]:
        """Связанные объекты. По умолчанию не поддерживается"""
        return None


def _point(point: GeoPoint) -> Dict[str, float]:
    return {"lat": point.lat, "lon": point.lon}


def _distance_sort(point: GeoPoint) -> List[Dict[str, Any]]:
    return [{
        "_geo_distance": {
            "center_point": _point(point),
            "order": "asc",
            "unit": "m"
        }
    }]


def build_contains_query(types: Iterable[str], point: GeoPoint) -> Dict[str, Any]:
    return {
        "query": {
            "bool": {
                "filter": [
                    {"terms": {"type": list(types)}},
                    {"geo_shape": {
                        "full_geometry": {
                            "shape": {"type": "point", "coordinates": [point.lon, point.lat]},
                            "relation": "intersects"
                        }
                    }}
                ]
            }
        },
        "size": CONTAINS_QUERY_SIZE
    }


def build_distance_query(types: Iterable[str], point: GeoPoint, max_radius_m: float, limit: int) -> Dict[str, Any]:
    return {
        "query": {
            "bool": {
                "filter": [
                    {"terms": {"type": list(types)}},
                    {"geo_distance": {
                        "distance": f"{max_radius_m}m",
                        "center_point": _point(point)
                    }}
                ]
            }
        },
        "sort": _distance_sort(point),
        "size": limit
    }


def build_intersects_query(types: Iterable[str], point: GeoPoint, radius_m: float, limit: int) -> Dict[str, Any]:
    return {
        "query": {
            "bool": {
                "filter": [
                    {"terms": {"type": list(types)}},
                    {"geo_shape": {
                        "full_geometry": {
                            "shape": circle_polygon(point.lon, point.lat, radius_m),
                            "relation": "intersects"
                        }
                    }}
                ]
            }
        },
        "size": limit
    }


class ElasticsearchGeoIndex(GeoIndexClient):
    """Геоиндекс поверх Elasticsearch"""

    def __init__(
        self,
        es_client: Elasticsearch,
        index_name: str,
        resend_on_fail: bool = True,
        request_timeout: Optional[float] = None
    ):
        self.es = es_client
        self.index = index_name
        self.resend_on_fail = resend_on_fail
        self.request_timeout = request_timeout or settings.ES_TIMEOUT

    def _timeout(self) -> float:
        """Таймаут запроса, не больше остатка времени на текущий запрос"""
        deadline = query_deadline.get()
        if deadline is None:
            return self.request_timeout
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise IndexUnavailable(f"Время на запрос к индексу {self.index} исчерпано")
        return min(self.request_timeout, remaining)

    def _search(self, body: Dict[str, Any]) -> List[Feature]:
        attempts = 2 if self.resend_on_fail else 1
        response = None
        for attempt in range(1, attempts + 1):
            try:
                logger.debug(f"ES query: {json.dumps(body, ensure_ascii=False)[:2000]}")
                response = self.es.options(request_timeout=self._timeout()).search(
                    index=self.index, body=body
                )
                break
            except (ApiError, TransportError) as e:
                if attempt < attempts:
                    logger.warning(f"Запрос к индексу {self.index} не выполнен, отправляем повторно: {e}")
                    continue
                logger.error(f"Запрос к индексу {self.index} не выполнен: {e}")
                raise IndexUnavailable(f"Запрос к индексу {self.index} не выполнен") from e

        hits = response["hits"]["hits"]
        return [Feature.from_source(hit["_source"], hit.get("_id")) for hit in hits]

    def contains_point(self, types, point):
        return self._search(build_contains_query(types, point))

    def nearest_by_distance(self, types, point, max_radius_m, limit):
        return self._search(build_distance_query(types, point, max_radius_m, limit))

    def intersects_shape(self, types, point, radius_m, limit):
        return self._search(build_intersects_query(types, point, radius_m, limit))

    def related(self, feature: Feature) -> Optional[Dict[str, List[Feature]]]:
        """Объекты в том же здании и объекты того же класса поблизости"""
        related: Dict[str, List[Feature]] = {}
        exclude_self = {"ids": {"values": [feature.id]}}

        if feature.full_geometry:
            body = {
                "query": {
                    "bool": {
                        "filter": [
                            {"terms": {"type": OBJECT_TYPES}},
                            {"geo_shape": {
                                "center_point": {
                                    "shape": feature.full_geometry,
                                    "relation": "intersects"
                                }
                            }}
                        ],
                        "must_not": [exclude_self]
                    }
                },
                "size": RELATED_QUERY_SIZE
            }
            same_building = self._search(body)
            if same_building:
                related["_same_building"] = same_building

        poi_class = (feature.model_extra or {}).get("poi_class")
        if poi_class and feature.center_point is not None:
            classes = poi_class if isinstance(poi_class, list) else [poi_class]
            body = build_distance_query(
                [feature.type], feature.center_point, settings.NEIGHBOURS_RADIUS_M, RELATED_QUERY_SIZE
            )
            body["query"]["bool"]["filter"].append({"terms": {"poi_class": classes}})
            body["query"]["bool"]["must_not"] = [exclude_self]
            same_type = self._search(body)
            if same_type:
                related["_same_type"] = same_type

        return related or None
