"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="MULTIROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Multi-Provider Route Finder API"
    api_prefix: str = "/api"

    google_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Google Maps Directions API.",
    )
    google_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/directions",
        description="Base URL of the Google Maps Directions API (the '/json' output path is appended).",
    )
    tomtom_api_key: Optional[str] = Field(
        default=None,
        description="API key for the TomTom Online Routing API.",
    )
    tomtom_base_url: str = Field(
        default="https://api.tomtom.com/routing/1/calculateRoute",
        description="Base URL of the TomTom calculateRoute endpoint.",
    )
    tomtom_max_alternatives: int = Field(default=2, ge=0, le=5)

    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service backing the platform route finder.",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile used by the platform route finder.",
    )

    http_timeout_seconds: float = Field(default=20.0, gt=0.0)
    provider_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Upper bound for a single provider call, including parsing.",
    )
    default_services: tuple[str, ...] = Field(
        default=("all",),
        description="Providers queried when a request does not name any.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", "default_services", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
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


settings = Settings()
