"""Adapter for the platform route finder (native asynchronous routing call)."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from ....models.domain import (
    GeoPoint,
    Leg,
    Maneuver,
    Route,
    RouteRestriction,
    RouteService,
    TimeRequirement,
    Waypoint,
)
from ..errors import SemanticError
from ..formatting import headline
from ..models import (
    MapRouteFinderStatus,
    MapRouteOptimization,
    MapRouteRestrictions,
    NativeRoute,
    RouteFinderResult,
)
from .base import BaseRouteProvider

logger = logging.getLogger(__name__)

STATUS_DESCRIPTIONS = {
    MapRouteFinderStatus.SUCCESS: "The query was successful.",
    MapRouteFinderStatus.UNKNOWN_ERROR: "The query returned an unknown error.",
    MapRouteFinderStatus.INVALID_CREDENTIALS: "The query provided credentials that are not valid.",
    MapRouteFinderStatus.NO_ROUTE_FOUND: "The query did not find a route.",
    MapRouteFinderStatus.NO_ROUTE_FOUND_WITH_GIVEN_OPTIONS: "The query did not find a route with the specified options.",
    MapRouteFinderStatus.START_POINT_NOT_FOUND: (
        "The specified starting point is not valid in a route. For example, the point is in an ocean or a desert."
    ),
    MapRouteFinderStatus.END_POINT_NOT_FOUND: (
        "The specified ending point is not valid in a route. For example, the point is in an ocean or a desert."
    ),
    MapRouteFinderStatus.NO_PEDESTRIAN_ROUTE_FOUND: "The query did not find a pedestrian route.",
    MapRouteFinderStatus.NETWORK_FAILURE: "The query encountered a network failure.",
    MapRouteFinderStatus.NOT_SUPPORTED: "The query is not supported.",
}

_NATIVE_RESTRICTIONS = (
    (RouteRestriction.AVOID_FERRIES, MapRouteRestrictions.FERRIES),
    (RouteRestriction.AVOID_DIRT, MapRouteRestrictions.DIRT_ROADS),
    (RouteRestriction.AVOID_TOLLS, MapRouteRestrictions.TOLL_ROADS),
    (RouteRestriction.AVOID_HIGHWAYS, MapRouteRestrictions.HIGHWAYS),
)

_RESTRICTION_LABELS = {
    MapRouteRestrictions.FERRIES: "ferries",
    MapRouteRestrictions.DIRT_ROADS: "dirt roads",
    MapRouteRestrictions.TOLL_ROADS: "toll roads",
    MapRouteRestrictions.HIGHWAYS: "highways",
}


class RouteFinder(Protocol):
    async def get_driving_route(
        self,
        points: Sequence[GeoPoint],
        optimization: MapRouteOptimization,
        restrictions: MapRouteRestrictions,
    ) -> RouteFinderResult:
        ...


def to_native_restrictions(restrictions: RouteRestriction) -> MapRouteRestrictions:
    result = MapRouteRestrictions.NONE
    for flag, native in _NATIVE_RESTRICTIONS:
        if restrictions & flag:
            result |= native
    return result


def describe_status(status: MapRouteFinderStatus) -> str:
    return STATUS_DESCRIPTIONS.get(status, "UNKNOWN STATUS")


class PlatformRouteProvider(BaseRouteProvider):
    service = RouteService.PLATFORM
    display_name = "platform routing service"

    def __init__(
        self,
        route_finder: Optional[RouteFinder] = None,
        optimization: MapRouteOptimization = MapRouteOptimization.TIME,
    ) -> None:
        if route_finder is None:
            from ..osrm_client import OSRMRouteFinder

            route_finder = OSRMRouteFinder()
        self.route_finder = route_finder
        self.optimization = optimization

    async def _fetch(
        self,
        waypoints: list[Waypoint],
        restrictions: RouteRestriction,
        time_requirement: Optional[TimeRequirement],
    ) -> list[Route]:
        if time_requirement is not None:
            logger.debug("Platform route finder does not take a time requirement; ignoring it")

        result = await self.route_finder.get_driving_route(
            [waypoint.location for waypoint in waypoints],
            self.optimization,
            to_native_restrictions(restrictions),
        )
        if result.status is not MapRouteFinderStatus.SUCCESS:
            raise SemanticError(
                f"Failed to find route using {self.display_name}: {describe_status(result.status)}"
            )
        if result.route is None:
            raise SemanticError(f"Failed to find route using {self.display_name}: no route in a successful result")

        natives = [result.route, *result.alternate_routes]
        return [
            self._to_route(native, index, waypoints, result)
            for index, native in enumerate(natives)
        ]

    def _to_route(
        self,
        native: NativeRoute,
        index: int,
        waypoints: list[Waypoint],
        result: RouteFinderResult,
    ) -> Route:
        path = native.path or [waypoint.location for waypoint in waypoints]
        leg = Leg(
            start=path[0],
            end=path[-1],
            duration_secs=int(round(native.duration_secs)),
            distance_meters=int(round(native.distance_meters)),
            maneuvers=[Maneuver(list(path))],
        )

        lines = ["Primary route" if index == 0 else f"Alternate route {index}"]
        if result.ignored_restrictions:
            ignored = ", ".join(
                label for flag, label in _RESTRICTION_LABELS.items() if result.ignored_restrictions & flag
            )
            lines.append(f"Restrictions not supported by the routing engine were ignored: {ignored}")
        if result.attribution:
            lines.append(result.attribution)

        return Route(
            provider=self.service,
            headline=headline(native.duration_secs, native.distance_meters),
            details="\n".join(lines),
            legs=[leg],
        )
