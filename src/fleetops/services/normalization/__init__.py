"""Row, country and phone normalization helpers."""

from .country import resolve_country_code
from .fields import PUBLIC_ID_FIELD, normalize_heading, normalize_row
from .phone import normalize_phone

__all__ = [
    "PUBLIC_ID_FIELD",
    "normalize_heading",
    "normalize_phone",
    "normalize_row",
    "resolve_country_code",
]
