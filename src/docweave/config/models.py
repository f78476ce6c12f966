"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``docweave.toml`` only carries
overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from docweave.domain.collaborators import ValuesPolicy


class LoaderConfig(BaseModel):
    """[loader] section — policy for schema, values, and template loading."""

    model_config = {"frozen": True}

    schema_enabled: bool = True
    ignore_unknown_comments: bool = False
    implicit_map_key_overrides: bool = False
    strict_yaml: bool = False

    def values_policy(self) -> ValuesPolicy:
        return ValuesPolicy(
            ignore_unknown_comments=self.ignore_unknown_comments,
            implicit_map_key_overrides=self.implicit_map_key_overrides,
        )


class LoggingConfig(BaseModel):
    """[logging] section."""

    model_config = {"frozen": True}

    verbose: bool = False
    json_output: bool = Field(default=False, alias="json")


class DocweaveConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
