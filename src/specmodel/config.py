"""Reader and writer settings with precedence resolution.

* :class:`ReaderSettings` -- How documents are read: reference resolution
  mode, base URI for relative locators, the reader registry, the fetcher
  for external documents, rule hooks and the capability table.
* :class:`WriterSettings` -- How documents are written: reference inlining
  and output layout.
* :func:`resolve_reader_settings` -- Merges CLI flags, environment
  variables and the project-local ``./specmodel.json`` into effective
  reader settings.
"""

from __future__ import annotations

import enum
import json
import os
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from specmodel.exceptions import ConfigError
from specmodel.parser.loader import HttpFileFetcher, ReaderRegistry
from specmodel.versions import CapabilityTable

_PROJECT_CONFIG_FILENAME = "specmodel.json"

Fetcher = Callable[[str], Any]
# (document, diagnostics) -> None, run after references are resolved.
Rule = Callable[[Any, Any], None]


class ReferenceResolution(str, enum.Enum):
    """How far reference resolution reaches."""

    NONE = "none"
    LOCAL = "local"
    EXTERNAL = "external"


class ReaderSettings(BaseModel):
    """Options for reading documents.

    Attributes:
        resolution: ``none`` leaves references pending, ``local`` resolves
            within documents already in the workspace, ``external`` also
            fetches referenced documents.
        base_uri: Base for relative locators when the document has no
            location of its own.
        readers: Format name to tokenizer.
        fetcher: Loads external documents; files and HTTP(S) by default.
        rules: Validation hooks run on the resolved document.
        capabilities: Field capability table override.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    resolution: ReferenceResolution = ReferenceResolution.LOCAL
    base_uri: Optional[str] = None
    readers: ReaderRegistry = Field(default_factory=ReaderRegistry.default)
    fetcher: Optional[Fetcher] = None
    rules: list[Rule] = Field(default_factory=list)
    capabilities: Optional[CapabilityTable] = None

    def get_fetcher(self) -> Fetcher:
        return self.fetcher if self.fetcher is not None else HttpFileFetcher(self.readers)


class WriterSettings(BaseModel):
    """Options for writing documents.

    Attributes:
        inline_local_references: Write resolved same-document targets in
            place of their ``$ref``.
        inline_external_references: Write resolved targets from other
            documents in place of their ``$ref``.
        indent: Indentation of JSON output.
        capabilities: Field capability table override.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    inline_local_references: bool = False
    inline_external_references: bool = False
    indent: int = 2
    capabilities: Optional[CapabilityTable] = None


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specmodel.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _parse_resolution(value: str, origin: str) -> ReferenceResolution:
    try:
        return ReferenceResolution(value.strip().lower())
    except ValueError:
        choices = ", ".join(mode.value for mode in ReferenceResolution)
        raise ConfigError(f"Invalid resolution mode '{value}' from {origin}. Expected one of: {choices}") from None


def resolve_reader_settings(
    cli_resolve: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> ReaderSettings:
    """Resolve reader settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_resolve``, ``cli_base_url``)
        2. Environment variables (``SPECMODEL_RESOLVE``, ``SPECMODEL_BASE_URL``)
        3. Project config (``./specmodel.json`` keys ``resolve``, ``base_url``)
        4. Defaults

    Raises:
        ConfigError: If a resolution mode is not recognized.
    """
    settings = ReaderSettings()

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        if project.get("resolve") is not None:
            settings.resolution = _parse_resolution(str(project["resolve"]), _PROJECT_CONFIG_FILENAME)
        if project.get("base_url") is not None:
            settings.base_uri = str(project["base_url"])

    # 2. Environment variables
    env_resolve = os.environ.get("SPECMODEL_RESOLVE")
    if env_resolve:
        settings.resolution = _parse_resolution(env_resolve, "SPECMODEL_RESOLVE")
    env_base_url = os.environ.get("SPECMODEL_BASE_URL")
    if env_base_url:
        settings.base_uri = env_base_url

    # 1. CLI flags (highest precedence)
    if cli_resolve is not None:
        settings.resolution = _parse_resolution(cli_resolve, "--resolve")
    if cli_base_url is not None:
        settings.base_uri = cli_base_url

    return settings
