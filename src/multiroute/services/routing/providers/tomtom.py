"""Adapter for the TomTom Online Routing API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence
from xml.dom import minidom
from xml.parsers.expat import ExpatError

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
from ..errors import ProtocolError, SemanticError, TransportError
from ..formatting import duration_to_text, headline
from .base import HttpRouteProvider

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

HTTP_ERROR_DESCRIPTIONS = {
    400: (
        "Bad request: one or more parameters were incorrectly specified, are mutually exclusive, "
        "the points in the request are not connected by the road network or the points in the "
        "request are not near enough to a road."
    ),
    403: (
        "Permission, capacity, or authentication issues: Forbidden, Not authorized, Account inactive, "
        "Account over queries per second limit, Account over rate limit, Rate limit exceeded"
    ),
    404: "Not Found: the requested resource could not be found, but it may be available again in the future.",
    405: "Method Not Allowed: the client used a HTTP method other than GET or POST.",
    408: "Request timeout.",
    414: "Requested uri is too long.",
    500: "An error occurred while processing the request. Please try again later.",
    502: "Internal network connectivity issue.",
    503: "Service currently unavailable.",
    504: "Internal network connectivity issue or a request that has taken too long to complete.",
    596: "Service not found.",
}

_AVOID_NAMES = (
    (RouteRestriction.AVOID_FERRIES, "ferries"),
    (RouteRestriction.AVOID_DIRT, "unpavedRoads"),
    (RouteRestriction.AVOID_TOLLS, "tollRoads"),
    (RouteRestriction.AVOID_HIGHWAYS, "motorways"),
)

_TRAFFIC_LINES = (
    ("noTrafficTravelTimeInSeconds", "Travel time without traffic"),
    ("historicTrafficTravelTimeInSeconds", "With historical traffic data"),
    ("liveTrafficIncidentsTravelTimeInSeconds", "With live traffic data"),
)

_XML_PATH = "/calculateRouteResponse/error/@description"


def _xml_error_description(content: bytes) -> Optional[str]:
    """Walk calculateRouteResponse/error/@description; None when a node is missing."""
    document = minidom.parseString(content)
    root = document.documentElement
    if root is None or root.tagName != "calculateRouteResponse":
        return None
    for node in root.childNodes:
        if node.nodeType == node.ELEMENT_NODE and node.tagName == "error":
            if node.hasAttribute("description"):
                return node.getAttribute("description")
            return None
    return None


def describe_http_error(response: httpx.Response) -> str:
    """Build the detail text for a failed TomTom request from status and body."""
    lines = []
    if response.reason_phrase:
        lines.append(response.reason_phrase)
    description = HTTP_ERROR_DESCRIPTIONS.get(response.status_code, "UNEXPECTED")
    lines.append(f"HTTP {response.status_code} - {description}")

    content_type = response.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    try:
        if media_type == "application/json":
            detail = str(response.json()["error"]["description"])
        elif media_type in ("application/xml", "text/xml"):
            detail = _xml_error_description(response.content)
            if detail is None:
                detail = (
                    "Secondary failure parsing XML response prevented the retrieval of further "
                    f"details about the HTTP error: could not find '{_XML_PATH}'"
                )
        else:
            detail = (
                "Further details from error could not be retrieved because the content type "
                f"in the HTTP response is unexpected: {content_type or 'none'}"
            )
    except ExpatError as exc:
        detail = (
            "Secondary failure in XML parsing of response prevented the retrieval of further "
            f"details about the HTTP error: {exc}"
        )
    except (ValueError, KeyError, TypeError) as exc:
        detail = (
            "Secondary failure in JSON parsing of response prevented the retrieval of further "
            f"details about the HTTP error: {exc!r}"
        )

    return "\n".join(lines) + "\n\n" + detail


def format_time(epoch_time: int) -> str:
    return datetime.fromtimestamp(epoch_time, tz=timezone.utc).strftime(TIME_FORMAT)


class TomTomRoutingProvider(HttpRouteProvider):
    service = RouteService.TOMTOM
    display_name = "TomTom Online Routing API"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_alternatives: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            api_key=api_key if api_key is not None else settings.tomtom_api_key,
            base_url=base_url or settings.tomtom_base_url,
            timeout=timeout if timeout is not None else settings.http_timeout_seconds,
            client=client,
        )
        self.max_alternatives = (
            max_alternatives if max_alternatives is not None else settings.tomtom_max_alternatives
        )

    def build_url(self, waypoints: Sequence[Waypoint]) -> str:
        locations = ":".join(f"{waypoint.latitude},{waypoint.longitude}" for waypoint in waypoints)
        return f"{self.base_url}/{locations}/json"

    def build_params(
        self,
        restrictions: RouteRestriction,
        time_requirement: Optional[TimeRequirement],
    ) -> list[tuple[str, str]]:
        params = [
            ("maxAlternatives", str(self.max_alternatives)),
            ("sectionType", "ferry"),
            ("sectionType", "tollRoad"),
            ("sectionType", "travelMode"),
            ("computeTravelTimeFor", "all"),
        ]
        if time_requirement is not None:
            key = "arriveAt" if time_requirement.type is TimeType.ARRIVAL else "departAt"
            params.append((key, format_time(time_requirement.epoch_time)))
        params.extend(("avoid", name) for flag, name in _AVOID_NAMES if restrictions & flag)
        params.append(("key", self.api_key or ""))
        return params

    async def _fetch(
        self,
        waypoints: list[Waypoint],
        restrictions: RouteRestriction,
        time_requirement: Optional[TimeRequirement],
    ) -> list[Route]:
        url = self.build_url(waypoints)
        response = await self._get(url, self.build_params(restrictions, time_requirement))

        if response.status_code != 200:
            raise TransportError(
                f"HTTP request to {self.display_name} has failed!\n{describe_http_error(response)}",
                context=response.text[:500],
            )

        return self.parse_response(self._parse_json(response))

    def parse_response(self, body: dict) -> list[Route]:
        error = body.get("error")
        if error is not None:
            description = error.get("description") if isinstance(error, dict) else error
            raise SemanticError(f"Request to {self.display_name} returned error: {description}")

        try:
            copyright_text = str(body.get("copyright", ""))
            copyright_text = copyright_text.split(".", 1)[0]
            return [self._parse_route(entry, copyright_text) for entry in body["routes"]]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ProtocolError(
                f"Failed to parse route JSON response from {self.display_name}: {exc!r}",
                context=str(body)[:500],
            ) from exc

    def _parse_leg(self, entry: dict) -> Leg:
        positions = [
            GeoPoint(float(point["latitude"]), float(point["longitude"])) for point in entry["points"]
        ]
        if not positions:
            raise ValueError("leg has no points")
        summary = entry.get("summary") or {}
        return Leg(
            start=positions[0],
            end=positions[-1],
            duration_secs=int(summary.get("travelTimeInSeconds", 0)),
            distance_meters=int(summary.get("lengthInMeters", 0)),
            maneuvers=[Maneuver(positions)],
        )

    def _parse_route(self, entry: dict, copyright_text: str) -> Route:
        legs = [self._parse_leg(leg) for leg in entry["legs"]]
        if not legs:
            raise ValueError("route has no legs")

        summary = entry["summary"]
        lines = [
            f"{label} = {duration_to_text(summary[key])}" for key, label in _TRAFFIC_LINES if key in summary
        ]

        section_types = {section["sectionType"] for section in entry.get("sections", [])}
        if "TOLL_ROAD" in section_types:
            lines.append("This route has tolls!")
        if "FERRY" in section_types:
            lines.append("This route has ferries!")
        if copyright_text:
            lines.append(copyright_text)

        return Route(
            provider=self.service,
            headline=headline(summary["travelTimeInSeconds"], summary["lengthInMeters"]),
            details="\n".join(lines),
            legs=legs,
        )
