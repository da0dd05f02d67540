"""
Разбор параметров запроса
"""
from enum import Enum
from typing import Optional, Type, TypeVar

from config import settings
from .errors import InvalidInput
from .models import AnswerDetail, LargestLevel, ResolutionRequest

E = TypeVar("E", bound=Enum)


def parse_double(value: Optional[str]) -> Optional[float]:
    """Число с плавающей точкой или None, если не разбирается"""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_bool(value: Optional[str], default: bool) -> bool:
    """Нет значения -> default.
    При default=True ложью считается только "false",
    при default=False истиной считается только "true".
    """
    if value is None:
        return default
    if default:
        return value.lower() != "false"
    return value.lower() == "true"


def parse_enum(value: Optional[str], enum_cls: Type[E], default: E) -> E:
    """Значение перечисления без учёта регистра, иначе default"""
    if value is None:
        return default
    try:
        return enum_cls(value.lower())
    except ValueError:
        return default


def build_request(
    lat: Optional[str],
    lon: Optional[str],
    related: Optional[str] = None,
    max_neighbours: Optional[str] = None,
    largest_level: Optional[str] = None,
    full_geometry: Optional[str] = None,
    detail: Optional[str] = None,
    with_related: bool = False,
) -> ResolutionRequest:
    """Параметры HTTP запроса -> ResolutionRequest.

    Координаты обязательны. Остальное при ошибке разбора
    молча получает значение по умолчанию.
    """
    lat_value = parse_double(lat)
    lon_value = parse_double(lon)
    if lat_value is None or lon_value is None:
        raise InvalidInput("Параметры lat и lon обязательны и должны быть числами")
    if not -90.0 <= lat_value <= 90.0 or not -180.0 <= lon_value <= 180.0:
        raise InvalidInput(f"Координаты вне допустимого диапазона: lat={lat_value}, lon={lon_value}")

    default_level = parse_enum(settings.DEFAULT_LARGEST_LEVEL, LargestLevel, LargestLevel.HIGHWAYS)
    default_detail = parse_enum(settings.DEFAULT_DETAIL, AnswerDetail, AnswerDetail.FULL)

    return ResolutionRequest(
        lat=lat_value,
        lon=lon_value,
        include_related=with_related or parse_bool(related, False),
        max_neighbours=parse_int(max_neighbours, settings.DEFAULT_MAX_NEIGHBOURS),
        largest_level=parse_enum(largest_level, LargestLevel, default_level),
        full_geometry=parse_bool(full_geometry, False),
        detail=parse_enum(detail, AnswerDetail, default_detail),
    )
