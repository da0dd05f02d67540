"""Tests for request parameter parsing."""
import pytest

from api.errors import InvalidInput
from api.models import AnswerDetail, LargestLevel
from api.params import build_request, parse_bool, parse_enum, parse_int


class TestBuildRequest:

    def test_defaults(self):
        req = build_request(lat="55.75", lon="37.62")
        assert (req.lat, req.lon) == (55.75, 37.62)
        assert req.max_neighbours == 15
        assert req.largest_level == LargestLevel.HIGHWAYS
        assert req.detail == AnswerDetail.FULL
        assert req.include_related is False
        assert req.full_geometry is False

    @pytest.mark.parametrize("raw, expected", [("150", 100), ("-5", 0), ("0", 0), ("42", 42), ("abc", 15)])
    def test_max_neighbours_clamped(self, raw, expected):
        assert build_request(lat="1", lon="1", max_neighbours=raw).max_neighbours == expected

    def test_unparseable_level_defaults_to_highways(self):
        assert build_request(lat="1", lon="1", largest_level="everything").largest_level == LargestLevel.HIGHWAYS

    def test_level_case_insensitive(self):
        assert build_request(lat="1", lon="1", largest_level="PLACES").largest_level == LargestLevel.PLACES
        assert build_request(lat="1", lon="1", detail="Short").detail == AnswerDetail.SHORT

    def test_flags(self):
        req = build_request(lat="1", lon="1", related="true", full_geometry="true")
        assert req.include_related and req.full_geometry
        assert build_request(lat="1", lon="1", with_related=True).include_related

    @pytest.mark.parametrize("lat, lon", [(None, "37.6"), ("55.7", None), ("north", "37.6"), ("95", "37.6"), ("55", "nan")])
    def test_bad_coordinates(self, lat, lon):
        with pytest.raises(InvalidInput):
            build_request(lat=lat, lon=lon)


class TestParsers:

    @pytest.mark.parametrize("value, default, expected", [
        (None, True, True),
        (None, False, False),
        ("true", False, True),
        ("false", True, False),
        ("asd", True, True),
        ("xzc", False, False),
    ])
    def test_parse_bool(self, value, default, expected):
        assert parse_bool(value, default) is expected

    def test_parse_int(self):
        assert parse_int("7", 1) == 7
        assert parse_int("7.5", 1) == 1
        assert parse_int(None, 3) == 3

    def test_parse_enum(self):
        assert parse_enum("all", LargestLevel, LargestLevel.OBJECTS) == LargestLevel.ALL
        assert parse_enum(None, LargestLevel, LargestLevel.OBJECTS) == LargestLevel.OBJECTS
