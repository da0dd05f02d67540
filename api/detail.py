"""
Детализация ответа обратного геокодирования (full / short)
"""
from typing import Any, Dict, Optional

from .models import AnswerDetail

SHORT_KEYS = ("id", "type", "name", "center_point")
RELATED_KEYS = ("_same_type", "_same_building")


def _address_text(feature: Dict[str, Any]) -> Optional[str]:
    address = feature.get("address")
    if isinstance(address, dict):
        return address.get("text")
    # Уже сокращённый объект
    if isinstance(address, str):
        return address
    return None


def short_feature(feature: Dict[str, Any]) -> Dict[str, Any]:
    """Оставляет только id, type, name, center_point и текст адреса"""
    short = {key: feature[key] for key in SHORT_KEYS if feature.get(key) is not None}
    text = _address_text(feature)
    if text is not None:
        short["address"] = text
    return short


def project(answer: Dict[str, Any], detail: AnswerDetail) -> Dict[str, Any]:
    """Приводит ответ к нужной детализации. Исходный словарь не меняется"""
    if AnswerDetail(detail) == AnswerDetail.FULL:
        return answer

    if "id" in answer:
        result = short_feature(answer)
    else:
        result = {key: answer[key] for key in ("parts", "text") if key in answer}
        if answer.get("highway") is not None:
            result["highway"] = short_feature(answer["highway"])
        if answer.get("boundaries") is not None:
            result["boundaries"] = {
                level: short_feature(boundary) for level, boundary in answer["boundaries"].items()
            }

    related = answer.get("_related")
    if related is not None:
        result["_related"] = {
            key: [short_feature(f) for f in related[key]]
            for key in RELATED_KEYS if related.get(key) is not None
        }

    if answer.get("_neighbours") is not None:
        result["_neighbours"] = [short_feature(f) for f in answer["_neighbours"]]

    return result
