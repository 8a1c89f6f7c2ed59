"""Phone number canonicalization."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import phonenumbers

from ...config import settings

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: Any, default_region: Optional[str] = None) -> str:
    """Return ``raw`` in E.164 form, or a best-effort ``+<digits>`` string.

    Never raises: input that cannot be parsed is cleaned of formatting noise
    and returned as-is otherwise.
    """

    text = _phone_text(raw)
    if not text:
        return text

    region = (default_region or settings.default_phone_region or "").upper() or None
    try:
        parsed = phonenumbers.parse(text, region)
    except phonenumbers.NumberParseException:
        parsed = None

    if parsed is not None and phonenumbers.is_possible_number(parsed):
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

    digits = _NON_DIGITS.sub("", text)
    if not digits:
        logger.warning(f"Phone value '{text}' has no digits, keeping it unchanged")
        return text
    if text.startswith("00") and len(digits) > 2:
        digits = digits[2:]
    logger.debug(f"Phone value '{text}' is not a possible number, using '+{digits}'")
    return f"+{digits}"


def _phone_text(raw: Any) -> str:
    # Spreadsheet cells often hold phone numbers as numbers.
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    return str(raw).strip()
