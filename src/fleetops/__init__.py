"""Place and vehicle import, export and hybrid search service."""

__version__ = "0.1.0"
