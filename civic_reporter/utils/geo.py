"""Coordinate extraction from free-text locations."""

import math
from typing import NamedTuple, Optional


class Coordinates(NamedTuple):
    """Map position; either part is None when unknown."""

    latitude: Optional[float]
    longitude: Optional[float]


NO_POSITION = Coordinates(None, None)


def _parse_coordinate(text: str) -> Optional[float]:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    # nan/inf parse as floats but are not map positions
    return value if math.isfinite(value) else None


def parse_location(location: Optional[str]) -> Coordinates:
    """
    Read a ``"lat,lng"`` location string.

    Splits on the first comma and parses each side independently.
    Strings without a comma, and sides that are not finite numbers,
    degrade to None instead of raising.
    """
    if not location or "," not in location:
        return NO_POSITION

    lat_text, lng_text = location.split(",", 1)
    return Coordinates(_parse_coordinate(lat_text), _parse_coordinate(lng_text))
