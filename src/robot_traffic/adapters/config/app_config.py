"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Fleet configuration
    vehicle_ids: list[int] = Field(
        default_factory=lambda: [5937, 6043],
        description="Robot identifiers to simulate (JSON list when set via VEHICLE_IDS)",
    )
    worker_queue_size: int = Field(
        default=10, description="Number of route points buffered per robot before the source waits"
    )

    # Input/output paths
    stations_file: str = Field(
        default="data/tube.csv", description="CSV file of stations: name, lat, lon"
    )
    routes_dir: str = Field(
        default="data", description="Directory containing one <robot id>.csv route file per robot"
    )
    report_file: str = Field(
        default="traffic-report.csv",
        description="CSV file the traffic reports are written to (truncated at startup)",
    )

    log_level: str = Field(default="INFO", description="Logging level name")

    # TOML config file path; its [simulation] section overrides the values above
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file with a [simulation] section",
    )

    @field_validator("worker_queue_size")
    @classmethod
    def validate_worker_queue_size(cls, v: int) -> int:
        """Validate the per-robot queue holds at least one point."""
        if v < 1:
            raise ValueError("worker_queue_size must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        if v.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return v.upper()

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse the TOML file."""
        if not self.config_file:
            raise ValueError("config_file must be set to load TOML configuration")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            return tomllib.load(f)

    def apply_config_file(self) -> "AppConfig":
        """Return a copy with the [simulation] section of config_file applied.

        Values are validated the same way environment values are.
        """
        if not self.config_file:
            return self

        toml_data = self._load_toml_data()
        simulation = toml_data.get("simulation", {})
        if not isinstance(simulation, dict):
            raise ValueError("TOML config 'simulation' must be a table")

        known = set(type(self).model_fields) - {"config_file"}
        unknown = set(simulation) - known
        if unknown:
            raise ValueError(f"Unknown [simulation] settings: {', '.join(sorted(unknown))}")

        merged = self.model_dump()
        merged.update(simulation)
        return type(self)(**merged)

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        """Return a validated copy with the non-None overrides applied."""
        merged = self.model_dump()
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**merged)
