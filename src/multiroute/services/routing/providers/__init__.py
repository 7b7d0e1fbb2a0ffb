"""Routing provider adapters, one per external service."""

from .base import BaseRouteProvider, HttpRouteProvider, RouteProvider
from .google import GoogleDirectionsProvider
from .platform import PlatformRouteProvider, RouteFinder
from .tomtom import TomTomRoutingProvider

__all__ = [
    "BaseRouteProvider",
    "GoogleDirectionsProvider",
    "HttpRouteProvider",
    "PlatformRouteProvider",
    "RouteFinder",
    "RouteProvider",
    "TomTomRoutingProvider",
]
