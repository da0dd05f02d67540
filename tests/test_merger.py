"""Tests for feature merging and area sorting."""
from api.merger import merge_by_id, sort_by_area
from api.models import Feature


def make(id, area=None, **attrs):
    feature = Feature(id=id, type="adrpnt", **attrs)
    return feature.with_area(area) if area is not None else feature


class TestMergeById:

    def test_no_duplicates_kept_in_order(self):
        features = [make("a"), make("b"), make("c")]
        assert [f.id for f in merge_by_id(features)] == ["a", "b", "c"]

    def test_duplicates_are_unioned(self):
        features = [
            make("a", name="Дом", street_name="Тверская"),
            make("b"),
            make("a", housenumber="7", poi_class=["shop"]),
        ]
        merged = merge_by_id(features)
        assert [f.id for f in merged] == ["a", "b"]
        a = merged[0]
        assert a.name == "Дом"
        assert a.street_name == "Тверская"
        assert a.housenumber == "7"
        assert a.model_extra["poi_class"] == ["shop"]

    def test_first_seen_wins_on_conflict(self):
        merged = merge_by_id([make("a", name="first"), make("a", name="second")])
        assert len(merged) == 1
        assert merged[0].name == "first"

    def test_null_does_not_override_value(self):
        merged = merge_by_id([make("a"), make("a", name="named")])
        assert merged[0].name == "named"

    def test_area_survives_merge(self):
        merged = merge_by_id([make("a", area=4.0), make("a", name="x")])
        assert merged[0].geometry_area == 4.0

    def test_empty(self):
        assert merge_by_id([]) == []


class TestSortByArea:

    def test_ascending(self):
        features = [make("big", 10.0), make("small", 1.0), make("mid", 5.0)]
        assert [f.id for f in sort_by_area(features)] == ["small", "mid", "big"]

    def test_unknown_area_first(self):
        features = [make("known", 0.5), make("unknown")]
        assert [f.id for f in sort_by_area(features)] == ["unknown", "known"]

    def test_stable(self):
        features = [make("x", 2.0), make("y", 2.0), make("z", 1.0), make("w", 2.0)]
        assert [f.id for f in sort_by_area(features)] == ["z", "x", "y", "w"]
