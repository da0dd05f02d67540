"""
Обратное геокодирование: объект, улица или границы по точке
"""
import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from config import settings
from .detail import project
from .errors import ResolutionCancelled
from .geometry import contains_point, parse_geometry
from .index import GeoIndexClient, query_deadline
from .merger import merge_by_id, sort_by_area
from .models import (
    Feature, GeoPoint, LargestLevel, OBJECT_TYPES, ResolutionAnswer, ResolutionRequest
)
from .parts import from_boundaries, from_highway, join_parts, strip_geometry
from .resolvers import BoundaryResolver, HighwayResolver

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Этапы каскада, от самого точного к самому общему"""
    OBJECTS = "objects"
    HIGHWAYS = "highways"
    BOUNDARIES = "boundaries"


# Какие этапы разрешены для каждого уровня запроса
CASCADE = {
    LargestLevel.OBJECTS: (Stage.OBJECTS,),
    LargestLevel.HIGHWAYS: (Stage.OBJECTS, Stage.HIGHWAYS),
    LargestLevel.ALL: (Stage.OBJECTS, Stage.HIGHWAYS, Stage.BOUNDARIES),
    # TODO: уточнить, нужен ли поиск соседей для places; пока отдаётся пустой список
    LargestLevel.PLACES: (Stage.BOUNDARIES,),
}


@dataclass
class _Context:
    request: ResolutionRequest
    point: GeoPoint
    # None, если поиск соседей выключен
    neighbours: Optional[List[Feature]] = field(default_factory=list)
    cancelled: Optional[threading.Event] = None

    def check_cancelled(self):
        if self.cancelled is not None and self.cancelled.is_set():
            logger.info(f"Точка ({self.request.lon}, {self.request.lat}): запрос отменён по таймауту")
            raise ResolutionCancelled("Запрос отменён")

    def strip(self, feature: Feature) -> Feature:
        return feature if self.request.full_geometry else feature.without_geometry()


class GeoResolver:
    """Каскадный поиск: объекты -> улица -> границы.

    Каждый этап либо возвращает ответ, либо передаёт управление следующему.
    Если разрешённые этапы ничего не нашли, в ответе остаются только соседи.
    """

    def __init__(
        self,
        index: GeoIndexClient,
        boundaries: Optional[BoundaryResolver] = None,
        highways: Optional[HighwayResolver] = None
    ):
        self.index = index
        self.boundaries = boundaries or BoundaryResolver(index)
        self.highways = highways or HighwayResolver(index)
        self._stages = {
            Stage.OBJECTS: self._resolve_objects,
            Stage.HIGHWAYS: self._resolve_highway,
            Stage.BOUNDARIES: self._resolve_boundaries,
        }

    async def inverse(self, request: ResolutionRequest, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Ответ API: поиск в отдельном потоке, затем нужная детализация.

        По таймауту поток получает сигнал отмены и не выполняет оставшиеся этапы,
        а запросы к индексу ограничены остатком времени.
        """
        timeout = timeout or settings.REQUEST_TIMEOUT
        cancelled = threading.Event()
        deadline = time.monotonic() + timeout
        try:
            answer = await asyncio.wait_for(
                asyncio.to_thread(self.resolve, request, cancelled, deadline),
                timeout=timeout
            )
        except (asyncio.TimeoutError, asyncio.CancelledError):
            cancelled.set()
            raise
        return project(answer.to_dict(), request.detail)

    def resolve(
        self,
        request: ResolutionRequest,
        cancelled: Optional[threading.Event] = None,
        deadline: Optional[float] = None
    ) -> ResolutionAnswer:
        token = query_deadline.set(deadline)
        try:
            return self._run_cascade(request, cancelled)
        finally:
            query_deadline.reset(token)

    def _run_cascade(self, request: ResolutionRequest, cancelled: Optional[threading.Event]) -> ResolutionAnswer:
        context = _Context(request=request, point=GeoPoint(lat=request.lat, lon=request.lon), cancelled=cancelled)

        for stage in CASCADE[request.largest_level]:
            context.check_cancelled()
            answer = self._stages[stage](context)
            if answer is not None:
                answer.stage = stage.value
                logger.info(
                    f"Точка ({request.lon}, {request.lat}), уровень {request.largest_level.value}: "
                    f"ответ на этапе {stage.value}"
                )
                return answer

        logger.info(
            f"Точка ({request.lon}, {request.lat}), уровень {request.largest_level.value}: "
            f"только соседи ({len(context.neighbours or [])})"
        )
        return ResolutionAnswer(neighbours=context.neighbours)

    def _resolve_objects(self, context: _Context) -> Optional[ResolutionAnswer]:
        """Адреса и POI, геометрия которых содержит точку"""
        request = context.request
        size = request.max_neighbours or settings.MIN_ENCLOSING_QUERY_SIZE
        candidates = self.index.nearest_by_distance(
            OBJECT_TYPES, context.point, settings.NEIGHBOURS_RADIUS_M, size
        )

        contained: List[Feature] = []
        neighbours: List[Feature] = []
        for feature in candidates:
            geometry = parse_geometry(feature.full_geometry)
            if geometry is not None and contains_point(geometry, request.lon, request.lat):
                contained.append(feature.with_area(geometry.area))
            else:
                # Уже отсортированы индексом по расстоянию
                neighbours.append(context.strip(feature))

        context.neighbours = neighbours if request.max_neighbours > 0 else None

        contained = sort_by_area(merge_by_id(contained))
        if not contained:
            return None

        main = contained[0]
        related = None
        if request.include_related:
            context.check_cancelled()
            related = self.index.related(main)
            if related:
                related = {key: [context.strip(f) for f in features] for key, features in related.items()}

        return ResolutionAnswer(
            main=context.strip(main),
            enclosed=[context.strip(f) for f in contained[1:]],
            neighbours=context.neighbours,
            related=related
        )

    def _resolve_highway(self, context: _Context) -> Optional[ResolutionAnswer]:
        """Ближайшая улица рядом с точкой"""
        highway = self.highways.nearest(context.point, settings.HIGHWAY_RADIUS_M)
        if highway is None:
            return None

        parts = from_highway(highway)
        return ResolutionAnswer(
            highway=context.strip(highway),
            parts=parts,
            text=join_parts(parts),
            neighbours=context.neighbours
        )

    def _resolve_boundaries(self, context: _Context) -> ResolutionAnswer:
        """Административные границы, содержащие точку"""
        levels = self.boundaries.levels(context.point)
        parts = from_boundaries(levels)
        return ResolutionAnswer(
            boundaries=strip_geometry(levels, context.request.full_geometry),
            parts=parts,
            text=join_parts(parts),
            neighbours=context.neighbours
        )
