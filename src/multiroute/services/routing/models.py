"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import List, Optional

from ...models.domain import GeoBoundingBox, GeoPoint, Route, RouteService
from .errors import RoutingError


class MapRouteRestrictions(IntFlag):
    """Restriction flags understood by the platform route finder."""

    NONE = 0
    HIGHWAYS = 1
    TOLL_ROADS = 2
    FERRIES = 4
    TUNNELS = 8
    DIRT_ROADS = 16
    MOTORAIL = 32


class MapRouteOptimization(Enum):
    TIME = "time"
    DISTANCE = "distance"
    TIME_WITH_TRAFFIC = "time_with_traffic"


class MapRouteFinderStatus(Enum):
    SUCCESS = "success"
    UNKNOWN_ERROR = "unknown_error"
    INVALID_CREDENTIALS = "invalid_credentials"
    NO_ROUTE_FOUND = "no_route_found"
    NO_ROUTE_FOUND_WITH_GIVEN_OPTIONS = "no_route_found_with_given_options"
    START_POINT_NOT_FOUND = "start_point_not_found"
    END_POINT_NOT_FOUND = "end_point_not_found"
    NO_PEDESTRIAN_ROUTE_FOUND = "no_pedestrian_route_found"
    NETWORK_FAILURE = "network_failure"
    NOT_SUPPORTED = "not_supported"


@dataclass(slots=True)
class NativeRoute:
    duration_secs: float
    distance_meters: float
    path: List[GeoPoint]


@dataclass(slots=True)
class RouteFinderResult:
    status: MapRouteFinderStatus
    route: Optional[NativeRoute] = None
    alternate_routes: List[NativeRoute] = field(default_factory=list)
    ignored_restrictions: MapRouteRestrictions = MapRouteRestrictions.NONE
    attribution: str = ""


@dataclass(slots=True)
class ProviderOutcome:
    provider: RouteService
    routes: List[Route] = field(default_factory=list)
    bounds: Optional[GeoBoundingBox] = None
    error: Optional[RoutingError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class RoutingResult:
    routes: List[Route]
    viewport: Optional[GeoBoundingBox]
    outcomes: List[ProviderOutcome]

    @property
    def failures(self) -> List[ProviderOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def succeeded(self) -> List[ProviderOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]

    @property
    def notification(self) -> Optional[str]:
        """One message describing every provider failure, or None when all succeeded."""
        failures = self.failures
        if not failures:
            return None
        return "\n\n".join(str(outcome.error) for outcome in failures)
