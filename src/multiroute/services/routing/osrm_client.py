"""HTTP client for the OSRM route service backing the platform route finder."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from ...config import settings
from ...models.domain import GeoPoint
from . import polyline
from .errors import ProtocolError
from .models import (
    MapRouteFinderStatus,
    MapRouteOptimization,
    MapRouteRestrictions,
    NativeRoute,
    RouteFinderResult,
)

OSRM_ATTRIBUTION = "Routing data © OpenStreetMap contributors"

# OSRM "exclude" classes available in the default car profile
_EXCLUDE_CLASSES = (
    (MapRouteRestrictions.FERRIES, "ferry"),
    (MapRouteRestrictions.TOLL_ROADS, "toll"),
    (MapRouteRestrictions.HIGHWAYS, "motorway"),
)
_SUPPORTED_RESTRICTIONS = MapRouteRestrictions.FERRIES | MapRouteRestrictions.TOLL_ROADS | MapRouteRestrictions.HIGHWAYS

logger = logging.getLogger(__name__)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or a new one owned by the caller."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))

    async def route(
        self,
        coordinates: Sequence[tuple[float, float]],
        alternatives: bool = True,
        exclude: Sequence[str] = (),
    ) -> httpx.Response:
        """Request driving routes through the given (lat, lon) coordinates.

        Returns the raw response; OSRM reports failures as JSON bodies with
        a ``code`` field, so status handling is left to the caller.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
            # OSRM only searches alternatives between exactly two coordinates
            "alternatives": "true" if alternatives and len(coordinates) == 2 else "false",
        }
        if exclude:
            params["exclude"] = ",".join(exclude)
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        logger.debug("OSRM route request: %s params=%s", url, params)

        client = self._get_client()
        try:
            return await client.get(url, params=params)
        finally:
            if client is not self._client:
                await client.aclose()


def _status_from_osrm(code: str | None, message: str, coordinate_count: int, excluded: bool) -> MapRouteFinderStatus:
    if code == "NoRoute":
        return MapRouteFinderStatus.NO_ROUTE_FOUND_WITH_GIVEN_OPTIONS if excluded else MapRouteFinderStatus.NO_ROUTE_FOUND
    if code == "NoSegment":
        # OSRM names the offending coordinate by index in the message
        if f"coordinate {coordinate_count - 1}" in message:
            return MapRouteFinderStatus.END_POINT_NOT_FOUND
        return MapRouteFinderStatus.START_POINT_NOT_FOUND
    if code in {"InvalidValue", "InvalidOptions"} and excluded:
        return MapRouteFinderStatus.NO_ROUTE_FOUND_WITH_GIVEN_OPTIONS
    if code in {"NotImplemented", "InvalidService", "InvalidVersion"}:
        return MapRouteFinderStatus.NOT_SUPPORTED
    return MapRouteFinderStatus.UNKNOWN_ERROR


class OSRMRouteFinder:
    """Platform route finder answering with native statuses on top of OSRM."""

    def __init__(self, client: OSRMClient | None = None) -> None:
        self.client = client or OSRMClient()

    async def get_driving_route(
        self,
        points: Sequence[GeoPoint],
        optimization: MapRouteOptimization,
        restrictions: MapRouteRestrictions,
    ) -> RouteFinderResult:
        if optimization is not MapRouteOptimization.TIME:
            return RouteFinderResult(status=MapRouteFinderStatus.NOT_SUPPORTED)

        exclude = [name for flag, name in _EXCLUDE_CLASSES if restrictions & flag]
        ignored = restrictions & ~_SUPPORTED_RESTRICTIONS
        if ignored:
            logger.warning("OSRM cannot honour restrictions %r; they will be ignored", ignored)

        coordinates = [(point.latitude, point.longitude) for point in points]
        try:
            response = await self.client.route(coordinates, exclude=exclude)
        except httpx.HTTPError as exc:
            logger.warning("OSRM route request failed: %s", exc)
            return RouteFinderResult(status=MapRouteFinderStatus.NETWORK_FAILURE)

        if response.status_code in (401, 403):
            return RouteFinderResult(status=MapRouteFinderStatus.INVALID_CREDENTIALS)

        try:
            data = response.json()
        except ValueError:
            logger.warning("OSRM answered HTTP %s with a non-JSON body", response.status_code)
            return RouteFinderResult(status=MapRouteFinderStatus.UNKNOWN_ERROR)

        code = data.get("code") if isinstance(data, dict) else None
        if code != "Ok":
            message = str(data.get("message", "")) if isinstance(data, dict) else ""
            logger.info("OSRM route request answered %s: %s", code, message)
            return RouteFinderResult(
                status=_status_from_osrm(code, message, len(coordinates), bool(exclude))
            )

        try:
            routes = [
                NativeRoute(
                    duration_secs=float(entry["duration"]),
                    distance_meters=float(entry["distance"]),
                    path=polyline.decode(entry["geometry"]),
                )
                for entry in data.get("routes", [])
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ProtocolError(
                f"Unexpected route object in OSRM response: {exc!r}",
                context=response.text[:500],
            ) from exc
        if not routes:
            return RouteFinderResult(status=MapRouteFinderStatus.NO_ROUTE_FOUND)

        return RouteFinderResult(
            status=MapRouteFinderStatus.SUCCESS,
            route=routes[0],
            alternate_routes=routes[1:],
            ignored_restrictions=ignored,
            attribution=OSRM_ATTRIBUTION,
        )


async def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health by making a minimal route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    client = OSRMClient(base_url=base, timeout=5.0)
    try:
        # Two points in Berlin, valid for public and self-hosted instances
        response = await client.route([(52.517037, 13.388860), (52.496891, 13.385983)], alternatives=False)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
