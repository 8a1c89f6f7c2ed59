"""Hybrid place search merging stored records with live geocoding results.

The plan for a query is looked up from ``SEARCH_PLANS`` keyed by
``(has_text, has_point)``:

======  ======  ==============  ===============  ==========
text    point   local order     geocoding        merge
======  ======  ==============  ===============  ==========
yes     no      name desc       forward(text)    prepend
yes     yes     distance asc    forward(near)    prepend
no      yes     distance asc    reverse(point)   prepend
no      no      name desc       none             local only
======  ======  ==============  ===============  ==========

Geocoding only runs when the query enables it. The limit applies to the
local portion only, and a provider failure fails the whole search.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ...errors import ProviderError
from ...models.domain import DisplayRecord, SearchQuery
from ...persistence.records import Ordering, RecordStore

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def forward_geocode(
        self, text: str, near_lat: Optional[float] = None, near_lon: Optional[float] = None
    ) -> list[DisplayRecord]: ...

    def reverse_geocode(self, lat: float, lon: float, text: Optional[str] = None) -> list[DisplayRecord]: ...


class GeocodeCall(str, Enum):
    NONE = "none"
    FORWARD = "forward"
    FORWARD_NEAR = "forward_near"
    REVERSE = "reverse"


class MergePosition(str, Enum):
    PREPEND = "prepend"
    APPEND = "append"


@dataclass(frozen=True)
class SearchPlan:
    ordering: Ordering
    geocode: GeocodeCall
    position: MergePosition = MergePosition.PREPEND


SEARCH_PLANS: dict[tuple[bool, bool], SearchPlan] = {
    (True, False): SearchPlan(Ordering.NAME_DESC, GeocodeCall.FORWARD),
    (True, True): SearchPlan(Ordering.DISTANCE_ASC, GeocodeCall.FORWARD_NEAR),
    (False, True): SearchPlan(Ordering.DISTANCE_ASC, GeocodeCall.REVERSE),
    (False, False): SearchPlan(Ordering.NAME_DESC, GeocodeCall.NONE),
}


def plan_for(query: SearchQuery) -> SearchPlan:
    return SEARCH_PLANS[(query.has_text, query.has_point)]


def call_geocoder(geocoder: Geocoder, call: GeocodeCall, query: SearchQuery) -> list[DisplayRecord]:
    """Run one geocoding call, surfacing any failure as :class:`ProviderError`."""

    if call is GeocodeCall.NONE:
        return []
    text = query.text.strip() if query.text else None
    try:
        if call is GeocodeCall.FORWARD:
            return list(geocoder.forward_geocode(text))
        if call is GeocodeCall.FORWARD_NEAR:
            return list(geocoder.forward_geocode(text, query.latitude, query.longitude))
        return list(geocoder.reverse_geocode(query.latitude, query.longitude, text))
    except ProviderError:
        raise
    except Exception as exc:
        logger.warning(f"Geocoding {call.value} failed: {exc}")
        raise ProviderError(str(exc)) from exc


class SearchEngine:
    def __init__(self, store: RecordStore, geocoder: Optional[Geocoder] = None) -> None:
        self.store = store
        self.geocoder = geocoder

    def search(self, query: SearchQuery, scope: str) -> list[DisplayRecord]:
        plan = plan_for(query)
        local = self.store.search(
            scope,
            query.text if query.has_text else None,
            ordering=plan.ordering,
            near=query.point,
            limit=query.limit,
        )
        results = [DisplayRecord.from_record(record) for record in local]

        if not query.geo_enabled or plan.geocode is GeocodeCall.NONE:
            return results
        if self.geocoder is None:
            raise ProviderError("Geocoding is enabled but no geocoder is configured")

        geocoded = call_geocoder(self.geocoder, plan.geocode, query)
        logger.debug(
            f"Merging {len(geocoded)} geocoded candidate(s) with {len(results)} local record(s) "
            f"({plan.position.value})"
        )
        if plan.position is MergePosition.PREPEND:
            return geocoded + results
        return results + geocoded

    def geocode(self, query: SearchQuery) -> list[DisplayRecord]:
        return geocode_only(self.geocoder, query)


def geocode_only(geocoder: Optional[Geocoder], query: SearchQuery) -> list[DisplayRecord]:
    """Geocoding half only: forward when text is given, else reverse for a point."""

    if not query.has_text and not query.has_point:
        return []
    if geocoder is None:
        raise ProviderError("No geocoder is configured")
    call = GeocodeCall.FORWARD_NEAR if query.has_text else GeocodeCall.REVERSE
    return call_geocoder(geocoder, call, query)
