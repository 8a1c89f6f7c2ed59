"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Any, Optional

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 110.574


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lon: float, radius_km: float) -> tuple[float, float, float, float]:
    """Return (min_lon, min_lat, max_lon, max_lat) of a box around a point."""

    d_lat = radius_km / KM_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    d_lon = radius_km / (111.320 * cos_lat)
    return (
        max(lon - d_lon, -180.0),
        max(lat - d_lat, -90.0),
        min(lon + d_lon, 180.0),
        min(lat + d_lat, 90.0),
    )


def record_distance_km(record: dict[str, Any], point: tuple[float, float]) -> Optional[float]:
    """Distance from a record's latitude/longitude to ``point``; None without coordinates."""

    try:
        lat = float(record["latitude"])
        lon = float(record["longitude"])
    except (KeyError, TypeError, ValueError):
        return None
    return haversine_km(point[0], point[1], lat, lon)
