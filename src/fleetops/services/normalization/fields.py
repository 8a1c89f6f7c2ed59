"""Row normalization for imported place and vehicle records.

Column names are lower-cased and whitespace-collapsed first. Rules then run
in a fixed order because later rules depend on earlier renames:

1. ``phone`` is canonicalized.
2. ``created at`` is renamed to ``created_at``.
3. Textual ``country`` values longer than two characters become ISO codes.
4. ``id`` is renamed to ``public_id`` so it never collides with the storage key.
5. Vehicle rows are seeded with ``status="active"`` and ``online=False``.
6. ``latitude``/``longitude`` are coerced to floats.
7. Remaining column names with internal whitespace become snake_case.

No required-field validation happens here; the store owns that.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from ...errors import CountryNotFound, FormatError
from ...models.domain import EntityKind
from .country import resolve_country_code
from .phone import normalize_phone

logger = logging.getLogger(__name__)

PUBLIC_ID_FIELD = "public_id"
VEHICLE_DEFAULTS: dict[str, Any] = {"status": "active", "online": False}

_COORDINATE_BOUNDS = {"latitude": 90.0, "longitude": 180.0}
_WHITESPACE = re.compile(r"\s+")


def normalize_heading(value: Any) -> str:
    """Lower-case, trim and collapse whitespace: ``'Created  At '`` -> ``'created at'``."""

    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip().lower()


def normalize_row(
    raw_row: Any,
    kind: EntityKind,
    *,
    phone_region: Optional[str] = None,
) -> tuple[dict[str, Any], list[str]]:
    """Map a raw import row onto the canonical record shape.

    Args:
        raw_row: Mapping of column name to cell value.
        kind: Entity the row describes.
        phone_region: Region assumed for phone numbers without a country prefix.

    Returns:
        Tuple of (canonical record, warnings). Warnings never reject the row.

    Raises:
        FormatError: If ``raw_row`` is not a mapping.
    """

    if not isinstance(raw_row, Mapping):
        raise FormatError(f"Import row must be a mapping, got {type(raw_row).__name__}")

    row: dict[str, Any] = {
        normalize_heading(key) if isinstance(key, str) else key: value
        for key, value in raw_row.items()
    }
    warnings: list[str] = []

    if row.get("phone") not in (None, ""):
        row["phone"] = normalize_phone(row["phone"], phone_region)

    if "created at" in row:
        row["created_at"] = row.pop("created at")

    country = row.get("country")
    if isinstance(country, str) and len(country) > 2:
        try:
            row["country"] = resolve_country_code(country)
        except CountryNotFound as exc:
            warnings.append(exc.message)
            logger.warning(f"{exc.message}, keeping the original value")

    if "id" in row:
        row[PUBLIC_ID_FIELD] = row.pop("id")

    if kind is EntityKind.VEHICLE:
        row.update(VEHICLE_DEFAULTS)

    for key, bound in _COORDINATE_BOUNDS.items():
        if row.get(key) in (None, ""):
            continue
        coerced = _coerce_coordinate(row[key], bound)
        if coerced is None:
            message = f"Invalid {key} '{row[key]}'"
            warnings.append(message)
            logger.warning(f"{message}, keeping the original value")
        else:
            row[key] = coerced

    return _snake_case_keys(row), warnings


def _coerce_coordinate(value: Any, bound: float) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().replace(",", ""))
        except ValueError:
            return None
    if not -bound <= number <= bound:
        return None
    return number


def _snake_case_keys(row: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in row.items():
        if isinstance(key, str) and _WHITESPACE.search(key.strip()):
            target = _WHITESPACE.sub("_", key.strip())
            if target not in row:
                result[target] = value
                continue
        result[key] = value
    return result
