"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FLEETOPS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "FleetOps Places API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    data_root: Path = Field(default=Path("data"), description="Root directory for uploaded files.")
    disks: dict[str, Path] = Field(
        default_factory=dict,
        description="Storage disk name -> root directory. Defaults to {'local': <data_root>/uploads}.",
    )
    default_disk: str = Field(default="local", description="Disk used when an import does not name one.")
    allowed_import_extensions: tuple[str, ...] = Field(default=("csv", "tsv", "xls", "xlsx"))
    search_default_limit: int = Field(default=30, ge=0)
    default_phone_region: str = Field(
        default="US",
        description="Region assumed for phone numbers written without an international prefix.",
    )
    persist_place_imports: bool = Field(
        default=False,
        description="Bulk insert normalized place rows on import (vehicle imports always persist).",
    )

    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of a Nominatim-compatible geocoding service.",
    )
    geocoder_user_agent: str = Field(default="fleetops-places/0.1")
    geocoder_timeout: float = Field(default=10.0, gt=0.0)
    geocoder_max_retries: int = Field(default=2, ge=0)
    geocoder_backoff_seconds: float = Field(default=0.5, ge=0.0)
    geocoder_result_limit: int = Field(default=5, ge=1, le=50)
    geocoder_bias_radius_km: float = Field(
        default=25.0,
        ge=0.0,
        description="Half-size of the viewbox used to bias forward geocoding towards a point.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=("http://localhost:4200", "http://127.0.0.1:4200"),
        description="Browser origins allowed to call the API (CORS).",
    )

    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL; places, vehicles and files live in its tables.",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key.",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "allowed_import_extensions", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("allowed_import_extensions")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(item.strip().lower().lstrip(".") for item in value if item.strip())

    @model_validator(mode="after")
    def _default_disks(self) -> "Settings":
        if not self.disks:
            self.disks = {"local": self.data_root / "uploads"}
        self.disks = {name: Path(root).expanduser().resolve() for name, root in self.disks.items()}
        return self


settings = Settings()
