"""
Слияние и сортировка найденных объектов
"""
from typing import Any, Dict, List

from .models import Feature


def merge_by_id(features: List[Feature]) -> List[Feature]:
    """Сливает объекты с одинаковым id.

    Один и тот же объект может прийти несколько раз (например, через
    пересекающиеся фильтры по типам). Атрибуты дублей объединяются:
    непустое значение побеждает, при конфликте остаётся первое увиденное.
    Порядок первого появления сохраняется.
    """
    merged: Dict[str, Dict[str, Any]] = {}
    for feature in features:
        data = feature.to_dict()
        existing = merged.get(feature.id)
        if existing is None:
            merged[feature.id] = data
            continue
        for key, value in data.items():
            existing.setdefault(key, value)

    if len(merged) == len(features):
        return list(features)
    return [Feature.model_validate(data) for data in merged.values()]


def sort_by_area(features: List[Feature]) -> List[Feature]:
    """Стабильная сортировка по возрастанию площади.

    Меньшая геометрия (здание) важнее большей (участок, на котором оно стоит).
    Объекты без площади идут первыми.
    """
    return sorted(
        features,
        key=lambda f: (f.geometry_area is not None, f.geometry_area or 0.0)
    )
