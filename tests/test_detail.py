"""Tests for full/short answer projection."""
import copy

from api.detail import project, short_feature
from api.models import AnswerDetail


def feature(id, **extra):
    data = {
        "id": id,
        "type": "poipnt",
        "name": f"Объект {id}",
        "center_point": {"lat": 55.75, "lon": 37.62},
        "full_geometry": {"type": "Point", "coordinates": [37.62, 55.75]},
        "address": {"text": f"Москва, {id}", "parts": []},
        "poi_class": ["cafe"],
    }
    data.update(extra)
    return data


MAIN_ANSWER = dict(
    feature("main"),
    _related={
        "_same_type": [feature("t1"), feature("t2")],
        "_same_building": [feature("b1")],
    },
    _neighbours=[feature("n1"), feature("n2"), feature("n3")],
    _enclosed=[feature("e1")],
)

FALLBACK_ANSWER = {
    "highway": feature("hw", type="hghway"),
    "parts": {"admin0": "Россия", "street": "Тверская"},
    "text": "Россия, Тверская",
    "_neighbours": [feature("n1")],
}


class TestShortFeature:

    def test_keeps_only_short_keys(self):
        assert short_feature(feature("a")) == {
            "id": "a",
            "type": "poipnt",
            "name": "Объект a",
            "center_point": {"lat": 55.75, "lon": 37.62},
            "address": "Москва, a",
        }

    def test_address_omitted_when_absent(self):
        raw = feature("a")
        del raw["address"]
        assert "address" not in short_feature(raw)

    def test_address_without_text(self):
        assert "address" not in short_feature(feature("a", address={"parts": []}))


class TestProject:

    def test_full_is_identity(self):
        assert project(MAIN_ANSWER, AnswerDetail.FULL) is MAIN_ANSWER

    def test_short_main_answer(self):
        short = project(MAIN_ANSWER, AnswerDetail.SHORT)
        assert short["id"] == "main"
        assert "full_geometry" not in short
        assert "poi_class" not in short
        assert [f["id"] for f in short["_related"]["_same_type"]] == ["t1", "t2"]
        assert [f["id"] for f in short["_related"]["_same_building"]] == ["b1"]
        assert [f["id"] for f in short["_neighbours"]] == ["n1", "n2", "n3"]
        for f in short["_neighbours"] + short["_related"]["_same_type"]:
            assert set(f) == {"id", "type", "name", "center_point", "address"}

    def test_short_does_not_touch_input(self):
        before = copy.deepcopy(MAIN_ANSWER)
        project(MAIN_ANSWER, AnswerDetail.SHORT)
        assert MAIN_ANSWER == before

    def test_short_is_idempotent(self):
        once = project(MAIN_ANSWER, AnswerDetail.SHORT)
        assert project(once, AnswerDetail.SHORT) == once

        once = project(FALLBACK_ANSWER, AnswerDetail.SHORT)
        assert project(once, AnswerDetail.SHORT) == once

    def test_short_fallback_answer(self):
        short = project(FALLBACK_ANSWER, AnswerDetail.SHORT)
        assert short["parts"] == FALLBACK_ANSWER["parts"]
        assert short["text"] == "Россия, Тверская"
        assert short["highway"] == short_feature(FALLBACK_ANSWER["highway"])
        assert short["_neighbours"] == [short_feature(FALLBACK_ANSWER["_neighbours"][0])]

    def test_short_boundaries(self):
        answer = {"boundaries": {"admin0": feature("r", type="admbnd")}, "parts": {}, "text": "", "_neighbours": []}
        short = project(answer, AnswerDetail.SHORT)
        assert set(short["boundaries"]["admin0"]) == {"id", "type", "name", "center_point", "address"}
        assert short["_neighbours"] == []

    def test_detail_given_as_string(self):
        assert project(FALLBACK_ANSWER, "full") is FALLBACK_ANSWER
