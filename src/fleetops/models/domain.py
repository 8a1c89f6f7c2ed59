"""Domain models for places, vehicles, imports and search results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Optional


class EntityKind(str, Enum):
    """Record kinds handled by the import and search pipelines."""

    PLACE = "place"
    VEHICLE = "vehicle"

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @property
    def table(self) -> str:
        return self.plural

    @property
    def persists_on_import(self) -> bool:
        return self is EntityKind.VEHICLE


@dataclass(slots=True)
class StoredFile:
    """Metadata for an uploaded file held by the file registry."""

    uuid: str
    path: str
    disk: Optional[str] = None
    original_filename: Optional[str] = None

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lower().lstrip(".")


@dataclass(slots=True)
class SearchQuery:
    """Parameters of a hybrid search. Coordinates count only as a pair."""

    text: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    limit: Optional[int] = 30
    geo_enabled: bool = False

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def has_point(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def point(self) -> Optional[tuple[float, float]]:
        if not self.has_point:
            return None
        return (float(self.latitude), float(self.longitude))


@dataclass(slots=True)
class DisplayRecord:
    """Common display shape shared by stored records and geocoded candidates."""

    name: Optional[str]
    address: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    uuid: Optional[str] = None
    public_id: Optional[str] = None
    street1: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    source: str = "local"
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "DisplayRecord":
        return cls(
            name=_as_text(record.get("name")),
            address=_as_text(record.get("address")) or _compose_address(record),
            latitude=_as_float(record.get("latitude")),
            longitude=_as_float(record.get("longitude")),
            uuid=_as_text(record.get("uuid")),
            public_id=_as_text(record.get("public_id")),
            street1=_as_text(record.get("street1")),
            city=_as_text(record.get("city")),
            postal_code=_as_text(record.get("postal_code")),
            country=_as_text(record.get("country")),
            phone=_as_text(record.get("phone")),
            source="local",
            raw=dict(record),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "public_id": self.public_id,
            "name": self.name,
            "address": self.address,
            "street1": self.street1,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
            "phone": self.phone,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "source": self.source,
        }


@dataclass(slots=True)
class ImportBatch:
    """Normalized rows collected during one import call."""

    records: list[dict[str, Any]] = field(default_factory=list)
    failed_rows: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)


@dataclass(slots=True)
class ImportSummary:
    status: str
    message: str
    count: int


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _compose_address(record: dict[str, Any]) -> Optional[str]:
    parts = [
        str(record[key]).strip()
        for key in ("street1", "street2", "city", "province", "postal_code", "country")
        if record.get(key) not in (None, "")
    ]
    return ", ".join(parts) or None
