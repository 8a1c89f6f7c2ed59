"""Service layer for imports, search, geocoding and exports."""
