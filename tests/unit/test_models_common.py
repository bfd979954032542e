"""Tests for shared model types."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from backend.trips.models import ActivityType, Geo, parse_geo


@pytest.mark.parametrize(
    "text,expected",
    [
        ("6.0076,80.2476", (6.0076, 80.2476)),
        ("6.0076, 80.2476", (6.0076, 80.2476)),
        ("  -33.8688 , 151.2093 ", (-33.8688, 151.2093)),
        ("0,0", (0.0, 0.0)),
    ],
)
def test_parse_geo_accepts_coordinate_pairs(text: str, expected: tuple[float, float]) -> None:
    geo = parse_geo(text)
    assert geo is not None
    assert (geo.lat, geo.lon) == expected


@pytest.mark.parametrize(
    "text",
    [None, "", "Unawatuna Beach", "6.0076", "91,80", "6,181", "6.0;80.2", "lat,lon"],
)
def test_parse_geo_rejects_non_coordinates(text: str | None) -> None:
    assert parse_geo(text) is None


def test_geo_enforces_ranges() -> None:
    with pytest.raises(PydanticValidationError):
        Geo(lat=90.5, lon=0)
    with pytest.raises(PydanticValidationError):
        Geo(lat=0, lon=-180.5)


def test_activity_types() -> None:
    assert {t.value for t in ActivityType} == {"place", "stay", "food", "activity"}
