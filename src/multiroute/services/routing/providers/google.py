"""Adapter for the Google Maps Directions API."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from ....config import settings
from ....models.domain import (
    GeoPoint,
    Leg,
    Maneuver,
    Route,
    RouteRestriction,
    RouteService,
    TimeRequirement,
    TimeType,
    Waypoint,
)
from .. import polyline
from ..errors import HttpError, ProtocolError, SemanticError
from ..formatting import headline
from .base import HttpRouteProvider

logger = logging.getLogger(__name__)

# Google has no option to avoid unpaved roads
_AVOID_NAMES = (
    (RouteRestriction.AVOID_FERRIES, "ferries"),
    (RouteRestriction.AVOID_TOLLS, "tolls"),
    (RouteRestriction.AVOID_HIGHWAYS, "highways"),
)


def _format_position(waypoint: Waypoint) -> str:
    return f"{waypoint.latitude},{waypoint.longitude}"


def avoid_parameter(restrictions: RouteRestriction) -> str:
    return "|".join(name for flag, name in _AVOID_NAMES if restrictions & flag)


def _parse_location(node: dict) -> GeoPoint:
    return GeoPoint(float(node["lat"]), float(node["lng"]))


class GoogleDirectionsProvider(HttpRouteProvider):
    service = RouteService.GOOGLE
    display_name = "Google Maps Directions API"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            api_key=api_key if api_key is not None else settings.google_api_key,
            base_url=base_url or settings.google_base_url,
            timeout=timeout if timeout is not None else settings.http_timeout_seconds,
            client=client,
        )

    def build_params(
        self,
        waypoints: Sequence[Waypoint],
        restrictions: RouteRestriction,
        time_requirement: Optional[TimeRequirement],
    ) -> dict[str, str]:
        params = {
            "origin": _format_position(waypoints[0]),
            "destination": _format_position(waypoints[-1]),
        }
        if time_requirement is not None:
            key = "arrival_time" if time_requirement.type is TimeType.ARRIVAL else "departure_time"
            params[key] = str(int(time_requirement.epoch_time))
        if len(waypoints) > 2:
            params["waypoints"] = "|".join(_format_position(waypoint) for waypoint in waypoints[1:-1])
        avoid = avoid_parameter(restrictions)
        if avoid:
            params["avoid"] = avoid
        if restrictions & RouteRestriction.AVOID_DIRT:
            logger.debug("Google Directions cannot avoid dirt roads; restriction ignored")
        params.update(
            {
                "mode": "driving",
                "alternatives": "true",
                "units": "metric",
                "key": self.api_key or "",
            }
        )
        return params

    async def _fetch(
        self,
        waypoints: list[Waypoint],
        restrictions: RouteRestriction,
        time_requirement: Optional[TimeRequirement],
    ) -> list[Route]:
        params = self.build_params(waypoints, restrictions, time_requirement)
        response = await self._get(f"{self.base_url}/json", params)

        if response.status_code != 200:
            reason = response.reason_phrase
            raise HttpError(
                f"HTTP request to {self.display_name} has failed! HTTP {response.status_code} {reason}".rstrip(),
                status_code=response.status_code,
                reason=reason,
                context=response.text[:500],
            )

        return self.parse_response(self._parse_json(response))

    def parse_response(self, body: dict) -> list[Route]:
        status = body.get("status")
        if not isinstance(status, str):
            raise ProtocolError(
                f"Response from {self.display_name} has no 'status' field",
                context=str(body)[:500],
            )
        if status != "OK":
            message = f"Request to {self.display_name} returned status '{status}'"
            error_message = body.get("error_message")
            if error_message:
                message += f": {error_message}"
            raise SemanticError(message)

        try:
            return [self._parse_route(entry) for entry in body["routes"]]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ProtocolError(
                f"Failed to parse route JSON response from {self.display_name}: {exc!r}",
                context=str(body)[:500],
            ) from exc

    def _parse_leg(self, entry: dict) -> Leg:
        distance = entry.get("distance")
        duration = entry.get("duration")
        return Leg(
            start=_parse_location(entry["start_location"]),
            end=_parse_location(entry["end_location"]),
            duration_secs=int(duration["value"]) if duration is not None else 0,
            distance_meters=int(distance["value"]) if distance is not None else 0,
            maneuvers=[Maneuver(polyline.decode(step["polyline"]["points"])) for step in entry["steps"]],
        )

    def _parse_route(self, entry: dict) -> Route:
        legs = [self._parse_leg(leg) for leg in entry["legs"]]
        if not legs:
            raise ValueError("route has no legs")
        total_duration = sum(leg.duration_secs for leg in legs)
        total_distance = sum(leg.distance_meters for leg in legs)

        lines = []
        fare = entry.get("fare")
        if fare:
            lines.append(f"Fare: {fare['text']}")
        for warning in entry.get("warnings", []):
            lines.append(f"Warning! {warning}")
        copyrights = entry.get("copyrights")
        if copyrights:
            lines.append(f"Copyrights: {copyrights}")

        return Route(
            provider=self.service,
            headline=headline(total_duration, total_distance),
            details="\n".join(lines),
            legs=legs,
        )
