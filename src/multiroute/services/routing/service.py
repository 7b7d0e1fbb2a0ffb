"""Routing orchestration service."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping, Optional, Sequence

from ...config import settings
from ...models.domain import (
    GeoPoint,
    RouteRestriction,
    RouteService,
    TimeRequirement,
    TimeType,
    Waypoint,
)
from ...schemas.routing import RouteFindRequest, RouteFindResponse
from ..geospatial import compute_bounds, merge_bounds
from ..outputs.routing_formatter import routing_result_to_response
from .errors import ProtocolError, RoutingError, SemanticError, TransportError
from .models import ProviderOutcome, RoutingResult
from .providers import (
    GoogleDirectionsProvider,
    PlatformRouteProvider,
    RouteProvider,
    TomTomRoutingProvider,
)

logger = logging.getLogger(__name__)

PROVIDER_FACTORIES = {
    RouteService.PLATFORM: PlatformRouteProvider,
    RouteService.GOOGLE: GoogleDirectionsProvider,
    RouteService.TOMTOM: TomTomRoutingProvider,
}


def _validate_waypoints(waypoints: Sequence[Waypoint]) -> list[Waypoint]:
    if len(waypoints) < 2:
        raise ValueError("At least two waypoints are required to find a route.")

    ordered = sorted(waypoints, key=lambda waypoint: waypoint.order)
    orders = [waypoint.order for waypoint in ordered]
    if orders != list(range(1, len(ordered) + 1)):
        raise ValueError(f"Waypoint orders must be unique and contiguous starting at 1, got {orders}.")

    for waypoint in ordered:
        if not -90.0 <= waypoint.latitude <= 90.0:
            raise ValueError(f"Waypoint {waypoint.order} has latitude {waypoint.latitude} outside [-90, 90].")
        if not -180.0 <= waypoint.longitude <= 180.0:
            raise ValueError(f"Waypoint {waypoint.order} has longitude {waypoint.longitude} outside [-180, 180].")
    return ordered


def build_providers(services: Iterable[RouteService]) -> dict[RouteService, RouteProvider]:
    """Instantiate the adapters for the given providers from settings."""
    return {service: PROVIDER_FACTORIES[service]() for service in services}


async def _run_provider(
    service: RouteService,
    provider: RouteProvider,
    waypoints: list[Waypoint],
    restrictions: RouteRestriction,
    time_requirement: Optional[TimeRequirement],
    timeout: float,
) -> ProviderOutcome:
    try:
        routes = await asyncio.wait_for(
            provider.fetch_routes(waypoints, restrictions, time_requirement),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        error = TransportError(f"No answer from provider within {timeout:g} seconds.", provider=service)
        logger.warning("Provider %s timed out after %.1fs", service.value, timeout)
        return ProviderOutcome(provider=service, error=error)
    except RoutingError as exc:
        if exc.provider is None:
            exc.provider = service
        logger.warning("Provider %s failed (%s): %s", service.value, type(exc).__name__, exc.message)
        return ProviderOutcome(provider=service, error=exc)
    except Exception as exc:
        logger.exception("Provider %s raised an unexpected error", service.value)
        error = ProtocolError(f"Unexpected failure: {type(exc).__name__}: {exc}", provider=service)
        return ProviderOutcome(provider=service, error=error)

    # never compute bounds for a provider without routes
    bounds = compute_bounds(point for route in routes for point in route.path) if routes else None
    return ProviderOutcome(provider=service, routes=routes, bounds=bounds)


async def find_routes(
    waypoints: Sequence[Waypoint],
    restrictions: RouteRestriction = RouteRestriction.NONE,
    time_requirement: Optional[TimeRequirement] = None,
    services: Optional[Iterable[RouteService | str]] = None,
    providers: Optional[Mapping[RouteService, RouteProvider]] = None,
    timeout: Optional[float] = None,
) -> RoutingResult:
    """Query the selected providers concurrently and merge their results.

    Every provider's failure is kept in its own outcome, so one failing
    provider never discards the routes of the others. The viewport is the
    merge of each successful provider's bounds, or None when no provider
    produced a route.
    """
    ordered_waypoints = _validate_waypoints(waypoints)
    selected = RouteService.expand(services if services is not None else settings.default_services)
    if not selected:
        raise ValueError("At least one routing provider must be selected.")

    available = dict(providers or {})
    unconfigured: dict[RouteService, ProviderOutcome] = {}
    for service in selected:
        if service in available:
            continue
        try:
            available.update(build_providers([service]))
        except Exception as exc:
            logger.warning("Provider %s could not be set up: %s", service.value, exc)
            error = SemanticError(f"Provider is not configured: {exc}", provider=service)
            unconfigured[service] = ProviderOutcome(provider=service, error=error)

    timeout = timeout if timeout is not None else settings.provider_timeout_seconds
    restrictions = RouteRestriction(restrictions)
    logger.info(
        "Requesting routes for %d waypoints from %s (restrictions=%s)",
        len(ordered_waypoints),
        ", ".join(service.value for service in selected),
        restrictions.value,
    )

    runnable = [service for service in selected if service not in unconfigured]
    finished = await asyncio.gather(
        *(
            _run_provider(service, available[service], ordered_waypoints, restrictions, time_requirement, timeout)
            for service in runnable
        )
    )
    by_service = dict(zip(runnable, finished))
    by_service.update(unconfigured)
    outcomes = [by_service[service] for service in selected]

    routes = [route for outcome in outcomes for route in outcome.routes]
    boxes = [outcome.bounds for outcome in outcomes if outcome.bounds is not None]
    viewport = merge_bounds(boxes) if boxes else None

    result = RoutingResult(routes=routes, viewport=viewport, outcomes=list(outcomes))
    logger.info(
        "Found %d route(s); %d provider(s) succeeded, %d failed",
        len(routes),
        len(result.succeeded),
        len(result.failures),
    )
    return result


_RESTRICTION_NAMES = {
    "ferries": RouteRestriction.AVOID_FERRIES,
    "dirt": RouteRestriction.AVOID_DIRT,
    "tolls": RouteRestriction.AVOID_TOLLS,
    "highways": RouteRestriction.AVOID_HIGHWAYS,
}


def _build_restrictions(names: Iterable[str]) -> RouteRestriction:
    restrictions = RouteRestriction.NONE
    for name in names:
        restrictions |= _RESTRICTION_NAMES[name]
    return restrictions


async def find_routes_for_request(payload: RouteFindRequest) -> RouteFindResponse:
    waypoints = [
        Waypoint(
            order=entry.order,
            location=GeoPoint(entry.latitude, entry.longitude, entry.altitude),
            address=entry.address,
        )
        for entry in payload.waypoints
    ]
    time_requirement = None
    if payload.time_requirement is not None:
        time_requirement = TimeRequirement(
            epoch_time=payload.time_requirement.epoch_time,
            type=TimeType(payload.time_requirement.type),
        )

    result = await find_routes(
        waypoints,
        restrictions=_build_restrictions(payload.avoid),
        time_requirement=time_requirement,
        services=payload.services,
    )
    return routing_result_to_response(result)
