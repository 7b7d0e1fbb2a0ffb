"""Error taxonomy shared by the routing providers and the orchestrator."""

from __future__ import annotations

from typing import Optional

from ...models.domain import RouteService


class RoutingError(Exception):
    """Base class for failures while obtaining or parsing routes."""

    def __init__(
        self,
        message: str,
        provider: Optional[RouteService] = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.context = context

    def __str__(self) -> str:
        if self.provider is None:
            return self.message
        return f"[{self.provider.value}] {self.message}"


class TransportError(RoutingError):
    """Network failure, timeout or non-200 HTTP status."""


class HttpError(TransportError):
    def __init__(
        self,
        message: str,
        status_code: int,
        reason: str = "",
        provider: Optional[RouteService] = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, provider=provider, context=context)
        self.status_code = status_code
        self.reason = reason


class ProtocolError(RoutingError):
    """Response does not match the provider's documented format."""


class DecodeError(ProtocolError):
    """Malformed encoded polyline."""


class SemanticError(RoutingError):
    """The provider reported that it could not produce a route."""


class EmptyInputError(RoutingError, ValueError):
    """Bounds requested for an empty collection."""
