"""Place endpoints: search, geocode, import, export and bulk delete."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from ...config import settings
from ...errors import FleetOpsError
from ...models.domain import EntityKind, SearchQuery
from ...persistence.files import FileRegistry
from ...persistence.records import RecordStore
from ...schemas.records import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ImportRequest,
    ImportResponse,
    SearchResultModel,
)
from ...services.export import export_records
from ...services.imports import run_import
from ...services.records import bulk_delete
from ...services.search import SearchEngine, geocode_only
from ...services.search.engine import Geocoder
from ..deps import get_company_scope, get_file_registry, get_geocoder, get_place_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/places", tags=["places"])

NO_STORE = {"Cache-Control": "no-store"}


@router.get("/search", response_model=List[SearchResultModel], status_code=status.HTTP_200_OK)
def search_places(
    response: Response,
    query: str | None = Query(default=None, description="Free-text query"),
    limit: int | None = Query(default=None, ge=0, description="Local result cap, 0 for unlimited"),
    geo: bool = Query(default=False, description="Merge live geocoding results"),
    latitude: float | None = Query(default=None, ge=-90, le=90),
    longitude: float | None = Query(default=None, ge=-180, le=180),
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_place_store),
    geocoder: Geocoder = Depends(get_geocoder),
) -> List[SearchResultModel]:
    search_query = SearchQuery(
        text=query,
        latitude=latitude,
        longitude=longitude,
        limit=settings.search_default_limit if limit is None else limit,
        geo_enabled=geo,
    )
    results = SearchEngine(store, geocoder).search(search_query, scope)
    response.headers.update(NO_STORE)
    return [SearchResultModel.from_record(record) for record in results]


@router.get("/geocode", response_model=List[SearchResultModel], status_code=status.HTTP_200_OK)
def geocode_places(
    response: Response,
    query: str | None = Query(default=None, description="Free-text address"),
    latitude: float | None = Query(default=None, ge=-90, le=90),
    longitude: float | None = Query(default=None, ge=-180, le=180),
    geocoder: Geocoder = Depends(get_geocoder),
) -> List[SearchResultModel]:
    search_query = SearchQuery(text=query, latitude=latitude, longitude=longitude, geo_enabled=True)
    results = geocode_only(geocoder, search_query)
    response.headers.update(NO_STORE)
    return [SearchResultModel.from_record(record) for record in results]


@router.post("/import", response_model=ImportResponse, status_code=status.HTTP_200_OK)
def import_places(
    payload: ImportRequest,
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_place_store),
    registry: FileRegistry = Depends(get_file_registry),
):
    return handle_import(EntityKind.PLACE, payload, scope, store, registry)


@router.get("/export", status_code=status.HTTP_200_OK)
def export_places(
    format: str = Query(default="xlsx"),
    selections: List[str] = Query(default=[]),
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_place_store),
) -> Response:
    return export_response(store, scope, selections, format)


@router.delete("/bulk-delete", response_model=BulkDeleteResponse, status_code=status.HTTP_200_OK)
def bulk_delete_places(
    payload: BulkDeleteRequest,
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_place_store),
) -> BulkDeleteResponse:
    return bulk_delete_response(store, scope, payload.ids)


def handle_import(
    kind: EntityKind,
    payload: ImportRequest,
    scope: str,
    store: RecordStore,
    registry: FileRegistry,
):
    try:
        summary = run_import(
            payload.files,
            kind,
            scope=scope,
            registry=registry,
            store=store,
            disk=payload.disk,
        )
    except FleetOpsError as exc:
        logger.warning(f"{kind.value.title()} import failed: {exc.message}")
        body = ImportResponse(status="error", message=exc.message, count=0)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())
    return ImportResponse.from_summary(summary)


def export_response(store: RecordStore, scope: str, selections: List[str], fmt: str) -> Response:
    exported = export_records(store, scope, selections, fmt)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


def bulk_delete_response(store: RecordStore, scope: str, ids: List[str]) -> BulkDeleteResponse:
    count = bulk_delete(store, scope, ids)
    return BulkDeleteResponse(message=f"Deleted {count} {store.kind.plural}", count=count)
