"""Vehicle endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from ...models.domain import EntityKind
from ...persistence.files import FileRegistry
from ...persistence.records import RecordStore
from ...schemas.records import BulkDeleteRequest, BulkDeleteResponse, ImportRequest, ImportResponse
from ...services.records import list_statuses
from ..deps import get_company_scope, get_file_registry, get_vehicle_store
from .places import bulk_delete_response, export_response, handle_import

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("/statuses", response_model=List[str], status_code=status.HTTP_200_OK)
def vehicle_statuses(
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_vehicle_store),
) -> List[str]:
    return [str(value) for value in list_statuses(store, scope)]


@router.post("/import", response_model=ImportResponse, status_code=status.HTTP_200_OK)
def import_vehicles(
    payload: ImportRequest,
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_vehicle_store),
    registry: FileRegistry = Depends(get_file_registry),
):
    return handle_import(EntityKind.VEHICLE, payload, scope, store, registry)


@router.get("/export", status_code=status.HTTP_200_OK)
def export_vehicles(
    format: str = Query(default="xlsx"),
    selections: List[str] = Query(default=[]),
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_vehicle_store),
) -> Response:
    return export_response(store, scope, selections, format)


@router.delete("/bulk-delete", response_model=BulkDeleteResponse, status_code=status.HTTP_200_OK)
def bulk_delete_vehicles(
    payload: BulkDeleteRequest,
    scope: str = Depends(get_company_scope),
    store: RecordStore = Depends(get_vehicle_store),
) -> BulkDeleteResponse:
    return bulk_delete_response(store, scope, payload.ids)
