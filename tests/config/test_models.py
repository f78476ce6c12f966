"""Tests for config models — defaults and sparse overrides."""

import pytest
from pydantic import ValidationError

from docweave.config.models import DocweaveConfig, LoaderConfig, LoggingConfig
from docweave.domain.collaborators import ValuesPolicy


class TestLoaderConfig:
    def test_defaults(self) -> None:
        cfg = LoaderConfig()
        assert cfg.schema_enabled is True
        assert cfg.ignore_unknown_comments is False
        assert cfg.implicit_map_key_overrides is False
        assert cfg.strict_yaml is False

    def test_frozen(self) -> None:
        cfg = LoaderConfig()
        with pytest.raises(ValidationError):
            cfg.schema_enabled = False  # type: ignore[misc]

    def test_values_policy(self) -> None:
        cfg = LoaderConfig(ignore_unknown_comments=True, implicit_map_key_overrides=True)
        assert cfg.values_policy() == ValuesPolicy(
            ignore_unknown_comments=True,
            implicit_map_key_overrides=True,
        )


class TestDocweaveConfig:
    def test_full_defaults(self) -> None:
        cfg = DocweaveConfig()
        assert cfg.loader == LoaderConfig()
        assert cfg.logging.verbose is False
        assert cfg.logging.json_output is False

    def test_sparse_override(self) -> None:
        """Only override fields you care about — rest keeps defaults."""
        cfg = DocweaveConfig.model_validate(
            {
                "loader": {"schema_enabled": False},
                "logging": {"json": True},
            }
        )
        assert cfg.loader.schema_enabled is False
        assert cfg.loader.strict_yaml is False  # default preserved
        assert cfg.logging.json_output is True

    def test_json_round_trip(self) -> None:
        cfg = DocweaveConfig(logging=LoggingConfig(verbose=True))
        restored = DocweaveConfig.model_validate_json(cfg.model_dump_json(by_alias=True))
        assert restored == cfg
