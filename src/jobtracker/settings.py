"""Pydantic-based settings loaded from YAML with env-var overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from jobtracker.exceptions import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class AppSettings(BaseSettings):
    """Application configuration with YAML + env var support.

    Env vars are prefixed with ``JOBTRACKER_``.
    Example: ``JOBTRACKER_PORT=8080``
    """

    model_config = {"env_prefix": "JOBTRACKER_"}

    # --- storage ---
    db_path: str = ".state/jobtracker.db"

    # --- server ---
    host: str = "0.0.0.0"
    port: int = 5000
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )
    client_url: str = ""  # extra allowed origin, e.g. a deployed frontend

    # --- analytics ---
    follow_up_days: int = 7
    upcoming_days: int = 7

    # --- export ---
    export_dir: str = "exports"

    # --- logging ---
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("follow_up_days", "upcoming_days")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    def origins(self) -> list[str]:
        """All origins allowed by CORS, including ``client_url``."""
        result = list(self.allowed_origins)
        if self.client_url and self.client_url not in result:
            result.append(self.client_url)
        return result

    # ---- factory ----

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "AppSettings":
        """Load settings from a YAML file, then overlay env vars.

        Env vars (``JOBTRACKER_*``) take priority over YAML values.
        """
        if path is None:
            path = _PROJECT_ROOT / "settings.yaml"
        path = Path(path)
        raw: dict[str, Any] = {}
        if path.exists():
            with open(path) as fh:
                try:
                    raw = yaml.safe_load(fh) or {}
                except yaml.YAMLError as exc:
                    raise ConfigurationError(f"Cannot parse {path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise ConfigurationError(f"{path} must contain a mapping.")

        # Let env vars override YAML: remove YAML keys that have an env override
        prefix = "JOBTRACKER_"
        for key in list(raw.keys()):
            env_key = f"{prefix}{key.upper()}"
            if env_key in os.environ:
                del raw[key]

        try:
            return cls(**raw)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid settings in {path}: {exc}") from exc
