"""Geocoding provider client."""

from .client import GeocodingClient, candidate_to_record

__all__ = ["GeocodingClient", "candidate_to_record"]
