"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="WR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Waste Route Planner API"
    api_prefix: str = "/api"
    environment: Literal["development", "production"] = "development"
    backend_base_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the waste-collection backend (areas, bins, optimizer, schedules).",
    )
    backend_timeout_seconds: float = Field(default=30.0, gt=0.0)
    default_fill_threshold: int = Field(default=70, ge=0, le=100)
    critical_fill_level: int = Field(default=90, ge=0, le=100)
    eta_interval_minutes: int = Field(
        default=10,
        ge=1,
        description="Minutes added per stop when estimating arrival times.",
    )
    min_route_distance_km: float = Field(default=0.1, ge=0.0)
    min_route_duration_min: float = Field(default=1.0, ge=0.0)
    default_depot_lng: float = Field(default=79.861, ge=-180.0, le=180.0)
    default_depot_lat: float = Field(default=6.927, ge=-90.0, le=90.0)
    mock_distance_per_bin_km: float = Field(default=0.5, ge=0.0)
    mock_minutes_per_bin: float = Field(default=15.0, ge=0.0)
    max_open_drafts: int = Field(default=200, ge=1)
    allow_mock_routes: Optional[bool] = Field(
        default=None,
        description="Fall back to a locally synthesized route when the optimizer fails. "
        "Defaults to enabled outside production.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @model_validator(mode="after")
    def _default_mock_routes(self) -> "Settings":
        if self.allow_mock_routes is None:
            self.allow_mock_routes = self.environment != "production"
        return self

    @field_validator("frontend_allowed_origins", mode="before")
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

    @property
    def default_depot(self) -> tuple[float, float]:
        """Fallback depot as a (lng, lat) pair."""
        return (self.default_depot_lng, self.default_depot_lat)


settings = Settings()
