"""Unified settings — explicit kwargs, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — passed by the embedding application
  2. Env vars     — ``DOCWEAVE_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``docweave.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from docweave.config.discovery import find_config, load_config, read_toml
from docweave.config.models import LoaderConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``docweave.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = read_toml(toml_path)
            # [logging] keys are top-level flags on the settings object
            logging_section = self._data.pop("logging", {})
            if "verbose" in logging_section:
                self._data["verbose"] = logging_section["verbose"]
            if "json" in logging_section:
                self._data["log_json"] = logging_section["json"]

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class DocweaveSettings(BaseSettings):
    """Settings for one evaluation run, frozen after construction."""

    model_config = {
        "frozen": True,
        "env_prefix": "DOCWEAVE_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None
    verbose: bool = False
    log_json: bool = False
    loader: LoaderConfig = Field(default_factory=LoaderConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        start: Path | None = None,
        **overrides: Any,
    ) -> DocweaveSettings:
        """Discover ``docweave.toml`` (or use *config_path*) and build settings."""
        toml_path: Path | None
        if config_path is not None:
            p = Path(config_path)
            toml_path = p if p.is_file() else None
        else:
            toml_path = find_config(start)

        if toml_path is not None:
            # whole-file validation, so bad values name the file
            load_config(toml_path)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None
