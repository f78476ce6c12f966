"""Config file discovery and loading.

Walk-up finder locates docweave.toml, the way git finds .git/.
The DOCWEAVE_CONFIG env var overrides discovery.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from docweave.config.models import DocweaveConfig
from docweave.domain.errors import ConfigError

CONFIG_FILENAME = "docweave.toml"
CONFIG_ENV_VAR = "DOCWEAVE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for docweave.toml."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def read_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML file, raising :class:`ConfigError` on bad syntax."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg, detail={"path": str(path)}) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> DocweaveConfig:
    """Load and validate config; defaults when no file is found."""
    if path is None:
        path = find_config(cwd)
    if path is None:
        return DocweaveConfig()

    try:
        return DocweaveConfig.model_validate(read_toml(path))
    except ValidationError as exc:
        msg = f"Invalid configuration in {path}: {exc.error_count()} error(s)"
        raise ConfigError(msg, detail={"path": str(path), "errors": exc.errors()}) from exc
