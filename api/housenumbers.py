"""
Нечёткий индекс номеров домов.

Для номера дома строится набор написаний, по которым он должен находиться:
"15 строение1a" -> "15 строение 1a", "15 с1a", "15с1a", "15 1a", ...
Используется при загрузке объектов в индекс.
"""
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Set


# Каноническое сокращение -> варианты написания (первый: полное слово)
BUILDING_ALIASES = {
	"с": ["строение", "стр", "с"],
	"к": ["корпус", "корп", "кор", "к"],
	"вл": ["владение", "влад", "вл"],
}

_ALIAS_TO_CANON = {
	alias: canon
	for canon, aliases in BUILDING_ALIASES.items()
	for alias in aliases
}

# Длинные написания раньше коротких, иначе "с" съест "строение"
_ALIAS_PATTERN = "|".join(
	re.escape(alias) for alias in sorted(_ALIAS_TO_CANON, key=len, reverse=True)
)

_LETTER = r"[^\W\d_]"

HOUSENUMBER_RE = re.compile(
	r"(?:(?P<prefix>" + _LETTER + r"+\.?)\s*)?"
	r"(?P<number>\d+)"
	r"(?:[-\s]?(?P<letter>" + _LETTER + r"))?"
	r"(?:/(?P<slash>\d+" + _LETTER + r"?))?"
	r"(?:\s*(?P<building>" + _ALIAS_PATTERN + r")\.?\s*(?P<sub>\d+" + _LETTER + r"?))?",
	re.IGNORECASE
)


@dataclass(frozen=True)
class HousenumberParts:
	"""Разобранный номер дома: д. 15А/2 стр. 1б"""
	number: str
	letter: Optional[str] = None
	slash: Optional[str] = None
	# Каноническое сокращение: "с", "к", "вл"
	building: Optional[str] = None
	sub: Optional[str] = None
	prefix: Optional[str] = None


def parse_housenumber(text: str) -> Optional[HousenumberParts]:
	"""Разбор номера дома. None, если строка не похожа на номер"""
	if not text:
		return None
	text = re.sub(r"\s+", " ", text.strip())
	m = HOUSENUMBER_RE.fullmatch(text)
	if not m:
		return None

	building = m.group("building")
	return HousenumberParts(
		number=m.group("number"),
		letter=m.group("letter"),
		slash=m.group("slash"),
		building=_ALIAS_TO_CANON[building.lower()] if building else None,
		sub=m.group("sub"),
		prefix=m.group("prefix"),
	)


def fold_letter(letter: str) -> str:
	"""Регистр приводится только у латинских букв"""
	if letter.isascii():
		return letter.lower()
	return letter


def _unique(values: Iterable[str]) -> List[str]:
	seen = []
	for value in values:
		if value and value not in seen:
			seen.append(value)
	return seen


def house_variants(parts: HousenumberParts) -> List[str]:
	"""Номер с литерой: слитно и через пробел, в исходном и нижнем регистре"""
	if not parts.letter:
		return [parts.number]
	folded = fold_letter(parts.letter)
	return _unique([
		parts.number + parts.letter,
		parts.number + folded,
		f"{parts.number} {parts.letter}",
		f"{parts.number} {folded}",
	])


def compound_variants(parts: HousenumberParts) -> List[str]:
	"""Номер дома целиком, с дробью если она есть"""
	if not parts.slash:
		return house_variants(parts)
	return _unique(f"{house}/{parts.slash}" for house in house_variants(parts))


# Правила: каждое получает разобранный номер и отдаёт свои варианты

def rule_house(parts: HousenumberParts) -> Iterable[str]:
	# "д. 15-a" -> "15a"; "15/123" -> "15"; "15к1" -> "15"
	return house_variants(parts)


def rule_slash(parts: HousenumberParts) -> Iterable[str]:
	# "15A/123" -> "15a/123"
	if not parts.slash:
		return []
	return compound_variants(parts)


def rule_building(parts: HousenumberParts) -> Iterable[str]:
	# "15 стр.1б" -> "15 строение 1б", "15 с1б", "15с1б", "15 1б"
	# Без номера строения/корпуса сокращения не порождаются
	if not parts.building or not parts.sub:
		return []
	full = BUILDING_ALIASES[parts.building][0]
	short = parts.building
	variants = []
	for house in compound_variants(parts):
		variants.append(f"{house} {full} {parts.sub}")
		variants.append(f"{house} {short}{parts.sub}")
		variants.append(f"{house}{short}{parts.sub}")
		variants.append(f"{house} {parts.sub}")
	return variants


RULES: List[Callable[[HousenumberParts], Iterable[str]]] = [
	rule_house,
	rule_slash,
	rule_building,
]


def fuzzy_housenumber_index(raw: Optional[str]) -> Set[str]:
	"""Все написания номера дома, которые должны находить этот дом"""
	if raw is None:
		return set()
	text = raw.strip()
	if not text:
		return set()

	variants = {text}
	parts = parse_housenumber(text)
	if parts is None:
		return variants

	for rule in RULES:
		variants.update(rule(parts))
	return variants
