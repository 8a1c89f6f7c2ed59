"""Hybrid local + geocoding search."""

from .engine import SEARCH_PLANS, GeocodeCall, MergePosition, SearchEngine, SearchPlan, geocode_only, plan_for

__all__ = [
    "SEARCH_PLANS",
    "GeocodeCall",
    "MergePosition",
    "SearchEngine",
    "SearchPlan",
    "geocode_only",
    "plan_for",
]
