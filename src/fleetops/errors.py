"""Error types raised by the import, search and record services."""

from __future__ import annotations

from fastapi import status


class FleetOpsError(Exception):
    """Base error carrying the HTTP status used when surfaced to callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FormatError(FleetOpsError):
    """An import row is structurally invalid (not a mapping)."""


class UnsupportedFormat(FleetOpsError):
    """A file extension or export format is not allowed."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class DecodeError(FleetOpsError):
    """The file reader could not decode a file."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFound(FleetOpsError):
    status_code = status.HTTP_404_NOT_FOUND


class FileNotFound(NotFound):
    """One or more file identifiers could not be resolved."""


class CountryNotFound(NotFound):
    """A country name has no ISO code in the lookup table."""


class EmptyInput(FleetOpsError):
    """A bulk operation was called without identifiers."""


class NotDeleted(FleetOpsError):
    """The store reported no effect for a delete that matched records."""

    status_code = status.HTTP_409_CONFLICT


class ProviderError(FleetOpsError):
    """The geocoding provider failed or returned an unusable response."""

    status_code = status.HTTP_502_BAD_GATEWAY
