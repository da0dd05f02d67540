"""
Сборка частей адреса по улице или по набору границ
"""
from typing import Dict, Optional

from .models import AddressLevel, Feature

# Уровень -> (атрибут объекта, ссылка на ближайший именованный объект)
LEVEL_ATTRIBUTES = {
    AddressLevel.ADMIN0: ("admin0_name", None),
    AddressLevel.ADMIN1: ("admin1_name", None),
    AddressLevel.ADMIN2: ("admin2_name", None),
    AddressLevel.LOCAL_ADMIN: ("local_admin_name", None),
    AddressLevel.LOCALITY: ("locality_name", "nearest_place"),
    AddressLevel.NEIGHBORHOOD: ("neighborhood_name", "nearest_neighborhood"),
    AddressLevel.STREET: ("street_name", None),
    AddressLevel.HOUSENUMBER: ("housenumber", None),
}


def _attribute_value(feature: Feature, attribute: str, nearest: Optional[str]) -> Optional[str]:
    value = getattr(feature, attribute, None)
    if value is None and nearest:
        reference = getattr(feature, nearest, None) or {}
        value = reference.get("name")
    return value


def from_highway(highway: Feature) -> Dict[str, str]:
    """Части адреса из атрибутов улицы, в порядке уровней"""
    parts: Dict[str, str] = {}
    for level in AddressLevel:
        attribute, nearest = LEVEL_ATTRIBUTES[level]
        value = _attribute_value(highway, attribute, nearest)
        if value is not None:
            parts[level.value] = str(value)
    return parts


def from_boundaries(levels: Dict[str, Feature]) -> Dict[str, str]:
    """Части адреса из имён границ, в порядке уровней"""
    parts: Dict[str, str] = {}
    for level in AddressLevel:
        boundary = levels.get(level.value)
        if boundary is not None and boundary.name is not None:
            parts[level.value] = boundary.name
    return parts


def join_parts(parts: Dict[str, str]) -> str:
    return ", ".join(parts.values())


def strip_geometry(features: Dict[str, Feature], full_geometry: bool) -> Dict[str, Feature]:
    if full_geometry:
        return features
    return {key: f.without_geometry() for key, f in features.items()}
