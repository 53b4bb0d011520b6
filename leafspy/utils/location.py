"""
Location parsing for LeafSpy logs.

LeafSpy writes the position as three columns: latitude, longitude and
elevation. Coordinates appear either as decimal degrees ("37.7749") or as
degrees and decimal minutes ("37 46.494"), optionally tagged with a
hemisphere letter ("N37 46.494", "122 25.164W"). Columns are left empty or
set to "none" while the phone has no GPS fix.
"""

import re
from typing import Optional

from leafspy.models.location import Location


NO_VALUE_TOKENS = ("", "none")

LATITUDE_LIMIT = 90.0
LONGITUDE_LIMIT = 180.0

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_DEG_MIN_RE = re.compile(r"([+-]?)(\d{1,3})\s+(\d{1,2}(?:\.\d*)?)", re.ASCII)


class LocationParseError(ValueError):
    """Raised when the location columns of a row cannot be parsed."""


def _split_hemisphere(text: str) -> tuple[Optional[str], str]:
    upper = text.upper()
    if upper[0] in "NSEW":
        return upper[0], text[1:].strip()
    if upper[-1] in "NSEW":
        return upper[-1], text[:-1].strip()
    return None, text


def _parse_coordinate(
    text: str,
    kind: str,
    positive: str,
    negative: str,
    limit: float,
) -> Optional[float]:
    """
    Parse one coordinate into signed decimal degrees.

    Args:
        text: Raw column text
        kind: "latitude" or "longitude", used in error messages
        positive, negative: Hemisphere letters for this axis
        limit: Maximum absolute value in degrees

    Returns:
        Decimal degrees, or None when the column holds no value
    """
    text = text.strip()
    if text in NO_VALUE_TOKENS:
        return None

    hemisphere, body = _split_hemisphere(text)
    if hemisphere is not None and hemisphere not in (positive, negative):
        raise LocationParseError(f"Invalid hemisphere in {kind}: {text!r}")
    if not body:
        raise LocationParseError(f"Missing value in {kind}: {text!r}")

    match = _DEG_MIN_RE.fullmatch(body)
    if match:
        sign, degrees, minutes = match.groups()
        if float(minutes) >= 60.0:
            raise LocationParseError(f"Minutes out of range in {kind}: {text!r}")
        value = int(degrees) + float(minutes) / 60.0
        if sign == "-":
            value = -value
    elif _DECIMAL_RE.fullmatch(body):
        value = float(body)
    else:
        raise LocationParseError(f"Cannot parse {kind}: {text!r}")

    if hemisphere is not None:
        if body[0] in "+-":
            raise LocationParseError(f"Both sign and hemisphere in {kind}: {text!r}")
        if hemisphere == negative:
            value = -value

    if abs(value) > limit:
        raise LocationParseError(f"{kind.capitalize()} out of range: {text!r}")
    return value


def _parse_elevation(text: str) -> Optional[float]:
    text = text.strip()
    if text in NO_VALUE_TOKENS:
        return None
    if not _DECIMAL_RE.fullmatch(text):
        raise LocationParseError(f"Cannot parse elevation: {text!r}")
    return float(text)


def parse_location(latitude: str, longitude: str, elevation: str) -> Location:
    """
    Build a Location from the three raw location columns.

    Args:
        latitude: Latitude column text
        longitude: Longitude column text
        elevation: Elevation column text (meters)

    Returns:
        Location with decimal-degree coordinates

    Raises:
        LocationParseError: If any column is malformed or out of range
    """
    return Location(
        latitude=_parse_coordinate(latitude, "latitude", "N", "S", LATITUDE_LIMIT),
        longitude=_parse_coordinate(longitude, "longitude", "E", "W", LONGITUDE_LIMIT),
        elevation=_parse_elevation(elevation),
    )
