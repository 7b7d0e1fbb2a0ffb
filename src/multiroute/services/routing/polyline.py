"""Encoded polyline codec.

Coordinates are stored as 5-bit chunks, least significant chunk first,
each non-final chunk flagged with 0x20 and offset by 63 into printable
ASCII. Latitude and longitude alternate; after the first pair every value
is a delta from the previous value on the same axis.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ...models.domain import GeoPoint
from .errors import DecodeError

PRECISION = 1e5
_OFFSET = 63
_CONTINUATION = 0x20
_CHUNK_MASK = 0x1F
_MAX_DEGREES = 180 * 100_000
# a delta between two valid longitudes spans at most 360 degrees
_MAX_VALUE = 360 * 100_000


def _decode_numbers(encoded: str) -> List[int]:
    numbers: List[int] = []
    result = 0
    shift = 0
    pending = False

    for position, char in enumerate(encoded):
        chunk = ord(char) - _OFFSET
        if not 0 <= chunk <= 0x3F:
            raise DecodeError(
                f"Invalid character {char!r} at offset {position} in encoded polyline",
                context=encoded,
            )
        result |= (chunk & _CHUNK_MASK) << shift
        shift += 5
        if chunk & _CONTINUATION:
            pending = True
            continue

        # zig-zag: odd values carry a negative number in inverted form
        value = ~result if result & 1 else result
        value >>= 1
        if abs(value) > _MAX_VALUE:
            raise DecodeError(
                f"Decoded value {value / PRECISION} at offset {position} is outside [-360, 360]",
                context=encoded,
            )
        numbers.append(value)
        result = 0
        shift = 0
        pending = False

    if pending:
        raise DecodeError("Encoded polyline ends in the middle of a value", context=encoded)
    return numbers


def decode(encoded: str) -> List[GeoPoint]:
    """Decode an encoded polyline into a list of points."""
    numbers = _decode_numbers(encoded)
    if len(numbers) % 2:
        raise DecodeError(
            f"Encoded polyline holds an odd count of values ({len(numbers)})",
            context=encoded,
        )

    points: List[GeoPoint] = []
    lat = 0
    lon = 0
    for idx in range(0, len(numbers), 2):
        lat += numbers[idx]
        lon += numbers[idx + 1]
        if abs(lat) > _MAX_DEGREES or abs(lon) > _MAX_DEGREES:
            raise DecodeError(
                f"Decoded position #{idx // 2} ({lat / PRECISION}, {lon / PRECISION}) is out of range",
                context=encoded,
            )
        points.append(GeoPoint(lat / PRECISION, lon / PRECISION))
    return points


def _encode_number(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chars = []
    while value >= _CONTINUATION:
        chars.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= 5
    chars.append(chr(value + _OFFSET))
    return "".join(chars)


def encode(points: Iterable[GeoPoint | Sequence[float]]) -> str:
    """Encode points (or (lat, lon) pairs) rounding to 5 decimal places."""
    output = []
    prev_lat = 0
    prev_lon = 0
    for point in points:
        if isinstance(point, GeoPoint):
            latitude, longitude = point.latitude, point.longitude
        else:
            latitude, longitude = point[0], point[1]
        lat = int(round(latitude * PRECISION))
        lon = int(round(longitude * PRECISION))
        output.append(_encode_number(lat - prev_lat))
        output.append(_encode_number(lon - prev_lon))
        prev_lat, prev_lon = lat, lon
    return "".join(output)
