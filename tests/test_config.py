"""Tests for specmodel.config -- settings models and precedence resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specmodel.config import (
    ReaderSettings,
    ReferenceResolution,
    WriterSettings,
    load_project_config,
    resolve_reader_settings,
)
from specmodel.exceptions import ConfigError
from specmodel.parser.loader import HttpFileFetcher


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*."""
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    """Defaults of the reader and writer settings."""

    def test_reader_defaults(self) -> None:
        settings = ReaderSettings()
        assert settings.resolution is ReferenceResolution.LOCAL
        assert settings.base_uri is None
        assert settings.rules == []
        assert settings.readers.formats == ["json", "yaml", "yml"]

    def test_default_fetcher(self) -> None:
        assert isinstance(ReaderSettings().get_fetcher(), HttpFileFetcher)

    def test_custom_fetcher(self) -> None:
        def fetcher(uri: str) -> dict[str, Any]:
            return {}

        assert ReaderSettings(fetcher=fetcher).get_fetcher() is fetcher

    def test_writer_defaults(self) -> None:
        settings = WriterSettings()
        assert settings.inline_local_references is False
        assert settings.inline_external_references is False
        assert settings.indent == 2


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    """Loading ``./specmodel.json``."""

    def test_missing_file(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_valid_file(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specmodel.json", {"resolve": "external"})
        assert load_project_config() == {"resolve": "external"}

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "specmodel.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specmodel.json", ["external"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveReaderSettings:
    """CLI flags > environment > project config > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        settings = resolve_reader_settings()
        assert settings.resolution is ReferenceResolution.LOCAL
        assert settings.base_uri is None

    def test_project_config(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "specmodel.json",
            {"resolve": "external", "base_url": "https://specs.example.com/"},
        )
        settings = resolve_reader_settings()
        assert settings.resolution is ReferenceResolution.EXTERNAL
        assert settings.base_uri == "https://specs.example.com/"

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "specmodel.json", {"resolve": "external", "base_url": "https://a/"})
        monkeypatch.setenv("SPECMODEL_RESOLVE", "NONE")
        monkeypatch.setenv("SPECMODEL_BASE_URL", "https://b/")
        settings = resolve_reader_settings()
        assert settings.resolution is ReferenceResolution.NONE
        assert settings.base_uri == "https://b/"

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECMODEL_RESOLVE", "none")
        monkeypatch.setenv("SPECMODEL_BASE_URL", "https://b/")
        settings = resolve_reader_settings(cli_resolve="external", cli_base_url="https://c/")
        assert settings.resolution is ReferenceResolution.EXTERNAL
        assert settings.base_uri == "https://c/"

    def test_empty_env_is_ignored(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECMODEL_RESOLVE", "")
        assert resolve_reader_settings().resolution is ReferenceResolution.LOCAL

    @pytest.mark.parametrize(
        "origin,kwargs,env",
        [
            ("--resolve", {"cli_resolve": "deep"}, None),
            ("SPECMODEL_RESOLVE", {}, "deep"),
        ],
    )
    def test_invalid_mode(
        self,
        isolated_config: Path,
        monkeypatch: pytest.MonkeyPatch,
        origin: str,
        kwargs: dict[str, str],
        env: str | None,
    ) -> None:
        if env is not None:
            monkeypatch.setenv("SPECMODEL_RESOLVE", env)
        with pytest.raises(ConfigError) as exc_info:
            resolve_reader_settings(**kwargs)
        message = str(exc_info.value)
        assert f"Invalid resolution mode 'deep' from {origin}" in message
        assert "none, local, external" in message

    def test_invalid_mode_in_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specmodel.json", {"resolve": "all"})
        with pytest.raises(ConfigError, match="from specmodel.json"):
            resolve_reader_settings()
