"""FastAPI dependency providers for stores, registries and the geocoder."""

from __future__ import annotations

import functools
import logging

from fastapi import Header, HTTPException, status

from ..db.supabase import get_supabase_client
from ..models.domain import EntityKind
from ..persistence.database import SupabaseFileRegistry, SupabaseRecordStore
from ..persistence.files import FileRegistry, InMemoryFileRegistry
from ..persistence.records import InMemoryRecordStore, RecordStore
from ..services.geocoding import GeocodingClient
from ..services.search.engine import Geocoder

logger = logging.getLogger(__name__)


def get_company_scope(x_company_id: str | None = Header(default=None)) -> str:
    """Company every store call is scoped to, taken from ``X-Company-Id``."""

    if not x_company_id or not x_company_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Company-Id header.",
        )
    return x_company_id.strip()


@functools.lru_cache(maxsize=None)
def _store_for(kind: EntityKind) -> RecordStore:
    client = get_supabase_client()
    if client is None:
        logger.warning(f"Database not configured, {kind.plural} are kept in memory")
        return InMemoryRecordStore(kind)
    return SupabaseRecordStore(client, kind)


def get_place_store() -> RecordStore:
    return _store_for(EntityKind.PLACE)


def get_vehicle_store() -> RecordStore:
    return _store_for(EntityKind.VEHICLE)


@functools.lru_cache(maxsize=1)
def get_file_registry() -> FileRegistry:
    client = get_supabase_client()
    if client is None:
        return InMemoryFileRegistry()
    return SupabaseFileRegistry(client)


def get_geocoder() -> Geocoder:
    return GeocodingClient()
