"""HTTP client for a Nominatim-compatible geocoding service."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from ...config import settings
from ...errors import ProviderError
from ...models.domain import DisplayRecord
from ..geospatial import bounding_box

logger = logging.getLogger(__name__)


class GeocodingClient:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        result_limit: int | None = None,
        bias_radius_km: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout
        self.max_retries = max_retries if max_retries is not None else settings.geocoder_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.geocoder_backoff_seconds
        self.result_limit = result_limit or settings.geocoder_result_limit
        self.bias_radius_km = bias_radius_km if bias_radius_km is not None else settings.geocoder_bias_radius_km
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            transport=self.transport,
        )

    def _request(self, path: str, params: dict[str, Any]) -> Any:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(path, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as e:
                    status_code = e.response.status_code
                    # 4xx other than 429 is not retried
                    if status_code < 500 and status_code != 429:
                        raise ProviderError(
                            f"Geocoding request failed with status {status_code}: {e.response.text[:200]}"
                        ) from e
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ProviderError(
                            f"Geocoding service unavailable (status {status_code}) after {attempt} attempt(s)"
                        ) from e
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Geocoding request timed out after {attempt} attempt(s): {e}")
                        raise ProviderError(f"Geocoding request timed out: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except httpx.TransportError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ProviderError(
                            f"Failed to connect to geocoding service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding network error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                except ValueError as e:
                    raise ProviderError(f"Geocoding service returned invalid JSON: {e}") from e
        finally:
            client.close()

    def forward_geocode(
        self,
        text: str,
        near_lat: Optional[float] = None,
        near_lon: Optional[float] = None,
    ) -> list[DisplayRecord]:
        """Resolve free text into candidates, biased towards a point when given."""

        params: dict[str, Any] = {
            "q": text,
            "format": "jsonv2",
            "addressdetails": 1,
            "limit": self.result_limit,
        }
        if near_lat is not None and near_lon is not None and self.bias_radius_km:
            min_lon, min_lat, max_lon, max_lat = bounding_box(
                float(near_lat), float(near_lon), self.bias_radius_km
            )
            params["viewbox"] = f"{min_lon},{max_lat},{max_lon},{min_lat}"
            params["bounded"] = 0

        payload = self._request("/search", params)
        if not isinstance(payload, list):
            raise ProviderError("Geocoding search returned an unexpected payload")
        results = [candidate_to_record(item) for item in payload if isinstance(item, dict)]
        logger.info(f"Forward geocoding '{text}' returned {len(results)} candidate(s)")
        return results

    def reverse_geocode(self, lat: float, lon: float, text: Optional[str] = None) -> list[DisplayRecord]:
        """Resolve a coordinate pair into address candidates.

        The reverse endpoint has no free-text filter; ``text`` only names the
        candidate when the provider returns no name of its own.
        """

        params = {"lat": lat, "lon": lon, "format": "jsonv2", "addressdetails": 1}
        payload = self._request("/reverse", params)
        if not isinstance(payload, dict):
            raise ProviderError("Reverse geocoding returned an unexpected payload")
        if "error" in payload:
            # Nominatim answers 200 with an error body when nothing is near the point
            logger.info(f"Reverse geocoding ({lat}, {lon}) found nothing: {payload['error']}")
            return []
        record = candidate_to_record(payload)
        if not record.name and text:
            record.name = text
        return [record]

    def check_health(self) -> bool:
        try:
            self._request("/status", {"format": "json"})
            return True
        except ProviderError:
            return False


def candidate_to_record(item: dict[str, Any]) -> DisplayRecord:
    """Map a Nominatim result into the shared display shape."""

    address = item.get("address") or {}
    display_name = item.get("display_name")
    street = " ".join(
        part for part in (address.get("house_number"), address.get("road")) if part
    ) or None
    country_code = address.get("country_code")
    name = item.get("name") or (display_name.split(",")[0].strip() if display_name else None)
    return DisplayRecord(
        name=name,
        address=display_name,
        latitude=_to_float(item.get("lat")),
        longitude=_to_float(item.get("lon")),
        street1=street,
        city=address.get("city") or address.get("town") or address.get("village"),
        postal_code=address.get("postcode"),
        country=country_code.upper() if country_code else None,
        source="geocoder",
        raw=item,
    )


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
