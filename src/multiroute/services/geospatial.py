"""Geospatial helper functions: viewport bounds for paths and route sets."""

from __future__ import annotations

from typing import Iterable, Sequence

from ..models.domain import GeoBoundingBox, GeoPoint
from .routing.errors import EmptyInputError

BORDER_RATIO = 0.05
MIN_BORDER_DEGREES = 0.01


def _longitude_extent(longitudes: Sequence[float]) -> tuple[float, float]:
    """Return (west, east) covering the sorted longitudes, excluding the largest empty arc."""

    west, east = longitudes[0], longitudes[-1]
    # the arc through the antimeridian, from the highest value round to the lowest
    largest_gap = (longitudes[0] + 180.0) + (180.0 - longitudes[-1])

    for lower, upper in zip(longitudes, longitudes[1:]):
        gap = upper - lower
        if gap > largest_gap:
            largest_gap = gap
            west, east = upper, lower

    return west, east


def _latitude_extent(latitudes: Sequence[float]) -> tuple[float, float]:
    """Return (south, north) for the sorted latitudes.

    Skipping the gap across a pole would need a box drawn over the pole,
    which a rectangular viewport cannot show, so the direct span is used.
    """

    return latitudes[0], latitudes[-1]


def _longitude_span(west: float, east: float) -> float:
    return east - west if east >= west else (east + 360.0) - west


def _wrap_longitude(value: float) -> float:
    if value < -180.0:
        return value + 360.0
    if value > 180.0:
        return value - 360.0
    return value


def compute_bounds(points: Iterable[GeoPoint]) -> GeoBoundingBox:
    """Calculate the smallest viewport containing every point, with a small border.

    Providers' own bounds may not account for detours, so the box is always
    derived from the full path. A result whose west edge is greater than its
    east edge crosses the antimeridian.
    """

    latitudes = set()
    longitudes = set()
    for point in points:
        latitudes.add(point.latitude)
        longitudes.add(point.longitude)

    if not latitudes:
        raise EmptyInputError("Cannot compute bounds of an empty set of points.")

    south, north = _latitude_extent(sorted(latitudes))
    west, east = _longitude_extent(sorted(longitudes))

    lat_border = max(BORDER_RATIO * (north - south), MIN_BORDER_DEGREES)
    north = min(north + lat_border, 90.0)
    south = max(south - lat_border, -90.0)

    lon_span = _longitude_span(west, east)
    lon_border = max(BORDER_RATIO * lon_span, MIN_BORDER_DEGREES)
    if lon_span + 2 * lon_border >= 360.0:
        west, east = -180.0, 180.0
    else:
        west = _wrap_longitude(west - lon_border)
        east = _wrap_longitude(east + lon_border)

    return GeoBoundingBox.from_edges(north=north, west=west, south=south, east=east)


def merge_bounds(boxes: Sequence[GeoBoundingBox]) -> GeoBoundingBox:
    """Merge the viewports of several routes into one that contains all of them.

    The boxes are expected to belong to alternative routes between the same
    endpoints, hence close to each other; this is a plain outer envelope and
    not a general antimeridian-safe merge.
    """

    if not boxes:
        raise EmptyInputError("Cannot merge an empty list of bounding boxes.")
    if len(boxes) == 1:
        return boxes[0]

    north = max(box.north for box in boxes)
    west = min(box.west for box in boxes)
    south = min(box.south for box in boxes)
    east = max(box.east for box in boxes)
    return GeoBoundingBox.from_edges(north=north, west=west, south=south, east=east)
