"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (SEARCHSTORE_ prefix), then .env
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from searchstore.models.query import MatchPolicy

BACKENDS = ("elasticsearch", "opensearch")


class StoreSettings(BaseModel):
    """Search backend connection configuration."""

    backend: str = Field(default="elasticsearch", description="Backend name: elasticsearch, opensearch")
    host: str = Field(default="http://localhost", description="Scheme and host of the cluster node")
    port: str = Field(default="9200", description="Cluster HTTP port")
    request_timeout: float | None = Field(default=None, gt=0, description="Per-request timeout in seconds")
    match_policy: MatchPolicy = Field(
        default=MatchPolicy.CONTAINS,
        description="Field search matching: contains (substring regexp) or token (analyzed match)",
    )
    result_window: int = Field(
        default=10_000,
        ge=1,
        description="Maximum hits fetched by get_all and search_by_field",
    )

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in BACKENDS:
            raise ValueError(f"Unknown backend '{v}'. Expected one of: {', '.join(BACKENDS)}")
        return v

    @field_validator("port", mode="before")
    @classmethod
    def _parse_port(cls, v: Any) -> Any:
        """Accept integer ports from YAML or env."""
        return str(v) if isinstance(v, int) else v


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the SEARCHSTORE_
    prefix. Nested settings use double underscores.

    Example:
        SEARCHSTORE_STORE__BACKEND=opensearch
        SEARCHSTORE_STORE__PORT=9201
        SEARCHSTORE_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "SEARCHSTORE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    debug: bool = Field(default=False, description="Debug mode; forces debug-level logging")

    store: StoreSettings = Field(default_factory=StoreSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @model_validator(mode="after")
    def _apply_debug(self) -> Settings:
        if self.debug:
            self.observability.log_level = "debug"
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are passed as init arguments, so they
        override environment variables. Keys missing from the file still come
        from the environment or the defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
