"""Request/response schemas shared by the place and vehicle endpoints."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import DisplayRecord, ImportSummary


class ImportRequest(BaseModel):
    files: List[str] = Field(..., min_length=1, description="Uploaded file identifiers, processed in order.")
    disk: Optional[str] = Field(default=None, description="Storage disk holding the files.")


class ImportResponse(BaseModel):
    status: Literal["ok", "error"]
    message: str
    count: int

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "ImportResponse":
        return cls(status=summary.status, message=summary.message, count=summary.count)


class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)


class BulkDeleteResponse(BaseModel):
    status: str = "OK"
    message: str
    count: int


class SearchResultModel(BaseModel):
    uuid: Optional[str] = None
    public_id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    street1: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    source: Literal["local", "geocoder"] = "local"

    @classmethod
    def from_record(cls, record: DisplayRecord) -> "SearchResultModel":
        return cls(**record.to_dict())


class ErrorResponse(BaseModel):
    errors: List[str]
