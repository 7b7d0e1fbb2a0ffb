"""Common plumbing for routing provider adapters."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

import httpx

from ....models.domain import Route, RouteRestriction, RouteService, TimeRequirement, Waypoint
from ...geospatial import compute_bounds
from ..errors import ProtocolError, RoutingError, TransportError

logger = logging.getLogger(__name__)


class RouteProvider(Protocol):
    service: RouteService

    async def fetch_routes(
        self,
        waypoints: Sequence[Waypoint],
        restrictions: RouteRestriction = RouteRestriction.NONE,
        time_requirement: Optional[TimeRequirement] = None,
    ) -> list[Route]:
        ...


class BaseRouteProvider:
    """Validates input and tags every routing error with the provider."""

    service: RouteService
    display_name: str

    async def fetch_routes(
        self,
        waypoints: Sequence[Waypoint],
        restrictions: RouteRestriction = RouteRestriction.NONE,
        time_requirement: Optional[TimeRequirement] = None,
    ) -> list[Route]:
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required to find a route.")
        try:
            routes = await self._fetch(list(waypoints), RouteRestriction(restrictions), time_requirement)
        except RoutingError as exc:
            if exc.provider is None:
                exc.provider = self.service
            raise
        for route in routes:
            route.bounds = compute_bounds(route.path)
        logger.info("%s returned %d route(s)", self.display_name, len(routes))
        return routes

    async def _fetch(
        self,
        waypoints: list[Waypoint],
        restrictions: RouteRestriction,
        time_requirement: Optional[TimeRequirement],
    ) -> list[Route]:
        raise NotImplementedError


class HttpRouteProvider(BaseRouteProvider):
    """Provider reached through a REST endpoint with an API key."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        if not api_key:
            logger.warning("%s API key is not configured; requests will be rejected.", self.display_name)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))

    async def _get(self, url: str, params: Any) -> httpx.Response:
        client = self._get_client()
        try:
            return await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransportError(f"HTTP request to {self.display_name} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"HTTP request to {self.display_name} has failed: {exc}") from exc
        finally:
            if client is not self._client:
                await client.aclose()

    def _parse_json(self, response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Failed to parse JSON response from {self.display_name}: {exc}",
                context=response.text[:500],
            ) from exc
        if not isinstance(body, dict):
            raise ProtocolError(
                f"Unexpected JSON document from {self.display_name}: expected an object",
                context=response.text[:500],
            )
        return body
