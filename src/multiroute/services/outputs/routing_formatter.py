"""Serializers for routing outputs."""

from __future__ import annotations

from typing import Optional

from ...models.domain import GeoBoundingBox, Route
from ...schemas.routing import (
    BoundingBoxModel,
    ProviderFailureModel,
    RouteFindResponse,
    RouteModel,
)
from ..routing.models import RoutingResult


def bounding_box_to_model(box: Optional[GeoBoundingBox]) -> Optional[BoundingBoxModel]:
    if box is None:
        return None
    return BoundingBoxModel(
        north=box.north,
        west=box.west,
        south=box.south,
        east=box.east,
        wraps_antimeridian=box.wraps_antimeridian,
    )


def route_to_model(route: Route) -> RouteModel:
    return RouteModel(
        provider=route.provider.value,
        headline=route.headline,
        details=route.details,
        duration_secs=sum(leg.duration_secs for leg in route.legs),
        distance_meters=sum(leg.distance_meters for leg in route.legs),
        path=[point.as_pair() for point in route.path],
        bounds=bounding_box_to_model(route.bounds),
    )


def routing_result_to_response(result: RoutingResult) -> RouteFindResponse:
    return RouteFindResponse(
        routes=[route_to_model(route) for route in result.routes],
        viewport=bounding_box_to_model(result.viewport),
        succeeded=[outcome.provider.value for outcome in result.succeeded],
        failures=[
            ProviderFailureModel(
                provider=outcome.provider.value,
                error_type=type(outcome.error).__name__,
                message=outcome.error.message,
            )
            for outcome in result.failures
        ],
        notification=result.notification,
    )
