"""Shared test fixtures for specmodel.

Provides reusable fixtures for loading document fixtures, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from specmodel.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """Load raw petstore 3.0 document dict."""
    with open(FIXTURES_DIR / "petstore_3.0.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_31_raw() -> dict[str, Any]:
    """Load raw petstore 3.1 document dict."""
    with open(FIXTURES_DIR / "petstore_3.1.yaml") as f:
        return yaml.safe_load(f)


@pytest.fixture
def petstore_20_raw() -> dict[str, Any]:
    """Load raw Swagger 2.0 petstore document dict."""
    with open(FIXTURES_DIR / "petstore_2.0.json") as f:
        return json.load(f)


@pytest.fixture
def cyclic_raw() -> dict[str, Any]:
    """Load raw 3.1 document whose ``Node`` schema refers to itself."""
    with open(FIXTURES_DIR / "cyclic_3.1.json") as f:
        return json.load(f)


@pytest.fixture
def minimal_30_raw() -> dict[str, Any]:
    """Smallest valid OpenAPI 3.0 document."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Minimal", "version": "1.0.0"},
        "paths": {},
    }


# ---------------------------------------------------------------------------
# Read document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30(petstore_30_raw: dict[str, Any]):
    """Petstore 3.0 read with local reference resolution."""
    from specmodel.api import read_document

    return read_document(petstore_30_raw)


@pytest.fixture
def petstore_31(petstore_31_raw: dict[str, Any]):
    """Petstore 3.1 read with local reference resolution."""
    from specmodel.api import read_document

    return read_document(petstore_31_raw)


@pytest.fixture
def petstore_20(petstore_20_raw: dict[str, Any]):
    """Swagger 2.0 petstore read with local reference resolution."""
    from specmodel.api import read_document

    return read_document(petstore_20_raw)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Clears all SPECMODEL_* environment variables and changes the working
    directory to tmp_path so that a ``specmodel.json`` in the real working
    directory never leaks into tests.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for var in [
        "SPECMODEL_RESOLVE",
        "SPECMODEL_BASE_URL",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output.

    Installs a PLAIN-format, quiet OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Set up JSON output for tests that check JSON-formatted output.

    Installs a JSON-format OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
