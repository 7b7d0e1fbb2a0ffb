"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/providers", status_code=status.HTTP_200_OK)
def health_providers() -> dict:
    """Report which providers have the configuration they need."""
    return {
        "platform": {"configured": bool(settings.osrm_base_url), "base_url": settings.osrm_base_url},
        "google": {"configured": bool(settings.google_api_key)},
        "tomtom": {"configured": bool(settings.tomtom_api_key)},
    }


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as osrm_health_check
    return osrm_health_check


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
async def health_osrm() -> dict:
    """Check that the OSRM service behind the platform route finder answers."""
    osrm_health_check = _get_osrm_health_check()
    return {"service": "osrm", "healthy": await osrm_health_check()}
