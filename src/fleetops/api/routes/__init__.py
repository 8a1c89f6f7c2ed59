"""Route group exports."""

from . import health, places, vehicles

__all__ = ["health", "places", "vehicles"]
