"""Configuration: tool settings and per-build environment overrides."""

from __future__ import annotations

import functools
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from pydantic_settings import BaseSettings, SettingsConfigDict

_TRUTHY = {"1", "true", "yes", "on"}


class AppSettings(BaseSettings):
    """Settings for the polybuild tool itself (``POLYBUILD_*`` variables)."""

    log_level: str = "INFO"
    build_env_file: str = "build.env"

    model_config = SettingsConfigDict(env_prefix="POLYBUILD_", extra="ignore", case_sensitive=False)


@functools.lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


class EnvironmentSettingsProvider:
    """Opaque key/value overrides consulted by platforms.

    Values come from the repository's ``build.env`` file, overlaid by the
    process environment (or *environ* when given, which tests use to stay
    hermetic).
    """

    def __init__(
        self,
        values: Mapping[str, str | None] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        merged: dict[str, str] = {k: v for k, v in (values or {}).items() if v is not None}
        merged.update(os.environ if environ is None else environ)
        self._values = merged

    @classmethod
    def from_repo(
        cls,
        root: Path,
        environ: Mapping[str, str] | None = None,
        env_file: str | None = None,
    ) -> EnvironmentSettingsProvider:
        """Load ``build.env`` (or *env_file*) from *root* when present."""
        path = Path(root) / (env_file or get_settings().build_env_file)
        values = dotenv_values(path) if path.is_file() else {}
        return cls(values, environ=environ)

    def get(self, key: str, default: str | None = None) -> str | None:
        value = self._values.get(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        return value is not None and value.lower() in _TRUTHY

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
