"""Domain models for waypoints, routes and geographic extents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Iterable, List, Optional


@dataclass(frozen=True, slots=True)
class GeoPoint:
    latitude: float
    longitude: float
    altitude: float = 0.0

    def as_pair(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class GeoBoundingBox:
    """Rectangular region given by its northwest and southeast corners.

    A box whose west longitude is greater than its east longitude wraps
    the antimeridian.
    """

    northwest: GeoPoint
    southeast: GeoPoint

    @classmethod
    def from_edges(cls, north: float, west: float, south: float, east: float) -> "GeoBoundingBox":
        return cls(GeoPoint(north, west), GeoPoint(south, east))

    @property
    def north(self) -> float:
        return self.northwest.latitude

    @property
    def south(self) -> float:
        return self.southeast.latitude

    @property
    def west(self) -> float:
        return self.northwest.longitude

    @property
    def east(self) -> float:
        return self.southeast.longitude

    @property
    def wraps_antimeridian(self) -> bool:
        return self.west > self.east

    def contains(self, point: GeoPoint) -> bool:
        if not self.south <= point.latitude <= self.north:
            return False
        if self.wraps_antimeridian:
            return point.longitude >= self.west or point.longitude <= self.east
        return self.west <= point.longitude <= self.east


class RouteRestriction(IntFlag):
    """Road features the caller asks providers to avoid."""

    NONE = 0x00
    AVOID_FERRIES = 0x01
    AVOID_DIRT = 0x02
    AVOID_TOLLS = 0x04
    AVOID_HIGHWAYS = 0x08


class TimeType(str, Enum):
    DEPARTURE = "departure"
    ARRIVAL = "arrival"


@dataclass(frozen=True, slots=True)
class TimeRequirement:
    """Required departure or arrival time, as seconds since the epoch."""

    epoch_time: int
    type: TimeType = TimeType.DEPARTURE


class RouteService(str, Enum):
    """Routing providers. ALL is a selection shorthand for every provider."""

    PLATFORM = "platform"
    GOOGLE = "google"
    TOMTOM = "tomtom"
    ALL = "all"

    @classmethod
    def expand(cls, selection: Iterable["RouteService | str"]) -> list["RouteService"]:
        """Resolve a selection into concrete providers, keeping order and dropping repeats."""
        resolved: list[RouteService] = []
        for entry in selection:
            service = cls(entry)
            members = [cls.PLATFORM, cls.GOOGLE, cls.TOMTOM] if service is cls.ALL else [service]
            for member in members:
                if member not in resolved:
                    resolved.append(member)
        return resolved


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A caller-specified point the route must pass through, in visiting order."""

    order: int
    location: GeoPoint
    address: Optional[str] = None
    geocode_hint: Optional[GeoPoint] = None

    @property
    def latitude(self) -> float:
        return self.location.latitude

    @property
    def longitude(self) -> float:
        return self.location.longitude


@dataclass(slots=True)
class Maneuver:
    points: List[GeoPoint] = field(default_factory=list)


@dataclass(slots=True)
class Leg:
    start: GeoPoint
    end: GeoPoint
    duration_secs: int = 0
    distance_meters: int = 0
    maneuvers: List[Maneuver] = field(default_factory=list)

    @property
    def path(self) -> List[GeoPoint]:
        """Start, every maneuver point, then end, with consecutive repeats collapsed."""
        path: List[GeoPoint] = []
        candidates = [self.start]
        for maneuver in self.maneuvers:
            candidates.extend(maneuver.points)
        candidates.append(self.end)
        for point in candidates:
            if not path or path[-1] != point:
                path.append(point)
        return path


@dataclass(slots=True)
class Route:
    provider: RouteService
    headline: str
    details: str
    legs: List[Leg]
    bounds: Optional[GeoBoundingBox] = None

    @property
    def path(self) -> List[GeoPoint]:
        path: List[GeoPoint] = []
        for leg in self.legs:
            path.extend(leg.path)
        return path
