"""Health endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from ...db.supabase import get_supabase_client
from ...services.geocoding import GeocodingClient
from ..deps import get_geocoder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/geocoder", status_code=status.HTTP_200_OK)
def health_geocoder(geocoder: GeocodingClient = Depends(get_geocoder)) -> dict:
    """Check the geocoding provider's status endpoint."""
    healthy = geocoder.check_health()
    if not healthy:
        logger.warning(f"Geocoder at {geocoder.base_url} is not healthy")
    return {"service": "geocoder", "healthy": healthy, "base_url": geocoder.base_url}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def health_database() -> dict:
    client = get_supabase_client()
    if client is None:
        return {"service": "database", "configured": False, "backend": "memory"}
    return {"service": "database", "configured": True, "backend": "supabase"}
