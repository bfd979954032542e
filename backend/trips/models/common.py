"""Common types and enums shared across all models."""

import re
from enum import Enum

from pydantic import BaseModel, Field

# "6.0076,80.2476" or "6.0076, 80.2476"
_COORDINATE_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class ActivityType(str, Enum):
    """Kind of itinerary activity."""

    place = "place"
    stay = "stay"
    food = "food"
    activity = "activity"


def parse_geo(text: str | None) -> Geo | None:
    """Parse a free-text "lat,lon" location into coordinates.

    Returns None for anything that is not a pair of in-range decimals.
    """
    if not text:
        return None

    match = _COORDINATE_PATTERN.match(text)
    if match is None:
        return None

    lat, lon = float(match.group(1)), float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None

    return Geo(lat=lat, lon=lon)
