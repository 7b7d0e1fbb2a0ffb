"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import RouteFindRequest, RouteFindResponse
from ...services.routing.service import find_routes_for_request

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


@router.post("/find", response_model=RouteFindResponse, status_code=status.HTTP_200_OK)
async def find(payload: RouteFindRequest) -> RouteFindResponse:
    """Find routes from every selected provider.

    Provider failures are reported alongside the routes that did succeed;
    the request fails only when no provider could answer.
    """
    try:
        response = await find_routes_for_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error finding routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to find routes: {str(exc)}",
        ) from exc

    if response.failures and not response.succeeded:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=response.notification)
    return response

