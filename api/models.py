"""
Модели данных для API
"""
from enum import Enum
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import settings


class GeoPoint(BaseModel):
    """Географические координаты"""
    lat: float
    lon: float


class FeatureType(str, Enum):
    """Типы объектов в геоиндексе"""
    ADDRESS_POINT = "adrpnt"
    POI_POINT = "poipnt"
    HIGHWAY = "hghway"
    HIGHWAY_NETWORK = "hghnet"
    PLACE_POINT = "plcpnt"
    BOUNDARY = "admbnd"


OBJECT_TYPES = [FeatureType.ADDRESS_POINT.value, FeatureType.POI_POINT.value]
HIGHWAY_TYPES = [FeatureType.HIGHWAY.value, FeatureType.HIGHWAY_NETWORK.value]


class AddressLevel(str, Enum):
    """Уровни адреса. Порядок объявления задаёт порядок частей адреса"""
    ADMIN0 = "admin0"
    ADMIN1 = "admin1"
    ADMIN2 = "admin2"
    LOCAL_ADMIN = "local_admin"
    LOCALITY = "locality"
    NEIGHBORHOOD = "neighborhood"
    STREET = "street"
    HOUSENUMBER = "housenumber"


class LargestLevel(str, Enum):
    """Насколько далеко разрешено откатываться при поиске объекта по точке"""
    OBJECTS = "objects"
    HIGHWAYS = "highways"
    ALL = "all"
    PLACES = "places"


class AnswerDetail(str, Enum):
    """Детализация ответа"""
    FULL = "full"
    SHORT = "short"


class Feature(BaseModel):
    """Объект геоиндекса: адрес, POI, улица, населённый пункт или граница"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    type: str
    name: Optional[str] = None
    center_point: Optional[GeoPoint] = None
    full_geometry: Optional[Dict[str, Any]] = None

    # Уровень границы (admin0 ... neighborhood)
    addr_level: Optional[str] = None

    # Имена уровней адресной иерархии
    admin0_name: Optional[str] = None
    admin1_name: Optional[str] = None
    admin2_name: Optional[str] = None
    local_admin_name: Optional[str] = None
    locality_name: Optional[str] = None
    neighborhood_name: Optional[str] = None
    street_name: Optional[str] = None
    housenumber: Optional[str] = None

    # Ближайшие именованные объекты, если своего значения нет
    nearest_place: Optional[Dict[str, Any]] = None
    nearest_neighborhood: Optional[Dict[str, Any]] = None

    address: Optional[Dict[str, Any]] = None

    # Площадь геометрии, посчитанная при поиске (для сортировки)
    geometry_area: Optional[float] = Field(default=None, alias="_geometry_area")

    @field_validator(
        "id", "name", "addr_level", "admin0_name", "admin1_name", "admin2_name",
        "local_admin_name", "locality_name", "neighborhood_name", "street_name", "housenumber",
        mode="before"
    )
    @classmethod
    def scalar_to_str(cls, value: Any) -> Any:
        """Числовые значения из дампа (например, номер дома 15) приводятся к строке"""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_source(cls, source: Dict[str, Any], doc_id: Optional[str] = None) -> "Feature":
        """Создаёт объект из _source документа Elasticsearch"""
        data = dict(source)
        if not data.get("id") and doc_id is not None:
            data["id"] = doc_id
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def without_geometry(self) -> "Feature":
        return self.model_copy(update={"full_geometry": None})

    def with_area(self, area: float) -> "Feature":
        return self.model_copy(update={"geometry_area": area})


class ResolutionRequest(BaseModel):
    """Параметры обратного геокодирования"""
    lon: float
    lat: float
    max_neighbours: int = 15
    largest_level: LargestLevel = LargestLevel.HIGHWAYS
    include_related: bool = False
    full_geometry: bool = False
    detail: AnswerDetail = AnswerDetail.FULL

    @field_validator("max_neighbours")
    @classmethod
    def clamp_max_neighbours(cls, value: int) -> int:
        return max(0, min(value, settings.MAX_NEIGHBOURS_LIMIT))


class ResolutionAnswer(BaseModel):
    """Результат обратного геокодирования"""
    main: Optional[Feature] = None
    enclosed: List[Feature] = []
    # None означает, что поиск соседей выключен (max_neighbours == 0)
    neighbours: Optional[List[Feature]] = None
    related: Optional[Dict[str, List[Feature]]] = None
    parts: Optional[Dict[str, str]] = None
    text: Optional[str] = None
    boundaries: Optional[Dict[str, Feature]] = None
    highway: Optional[Feature] = None

    # Этап каскада, который дал ответ (для логов)
    stage: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Структура ответа API"""
        if self.main is not None:
            result = self.main.to_dict()
            if self.related:
                result["_related"] = {
                    key: [f.to_dict() for f in features]
                    for key, features in self.related.items()
                }
            if self.neighbours is not None:
                result["_neighbours"] = [f.to_dict() for f in self.neighbours]
            if self.enclosed:
                result["_enclosed"] = [f.to_dict() for f in self.enclosed]
            return result

        result: Dict[str, Any] = {}
        if self.highway is not None:
            result["highway"] = self.highway.to_dict()
        if self.boundaries is not None:
            result["boundaries"] = {level: f.to_dict() for level, f in self.boundaries.items()}
        if self.parts is not None:
            result["parts"] = dict(self.parts)
            result["text"] = self.text or ""
        if self.neighbours is not None:
            result["_neighbours"] = [f.to_dict() for f in self.neighbours]
        return result
