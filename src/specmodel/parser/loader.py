"""Load API description documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw documents and tokenizing them
into Python dictionaries. Tokenizers are looked up in an explicit
:class:`ReaderRegistry` keyed by format name, so callers can add formats
without touching global state. JSON and YAML are registered by default.

The public pieces are:

* :func:`load_source` -- Load and tokenize a document from any supported
  source.
* :class:`ReaderRegistry` -- Format name to tokenizer, with JSON-then-YAML
  detection when no format is known.
* :class:`HttpFileFetcher` -- The default fetcher used to load external
  documents while resolving references.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlparse

import httpx
import yaml

from specmodel.exceptions import ReferenceFetchError, SpecParseError

logger = logging.getLogger(__name__)

Tokenizer = Callable[[str], Any]


def _read_json(content: str) -> Any:
    return json.loads(content)


def _read_yaml(content: str) -> Any:
    return yaml.safe_load(content)


class ReaderRegistry:
    """Registry of tokenizers keyed by format name (``json``, ``yaml``, ...).

    Example::

        registry = ReaderRegistry.default()
        registry.register("yml", registry.get("yaml"))
        tree = registry.tokenize(text, hint="yaml")
    """

    def __init__(self, readers: Optional[dict[str, Tokenizer]] = None) -> None:
        self._readers: dict[str, Tokenizer] = dict(readers or {})

    @classmethod
    def default(cls) -> ReaderRegistry:
        return cls({"json": _read_json, "yaml": _read_yaml, "yml": _read_yaml})

    @property
    def formats(self) -> list[str]:
        return list(self._readers)

    def register(self, fmt: str, reader: Tokenizer) -> None:
        self._readers[fmt.lower()] = reader

    def get(self, fmt: str) -> Tokenizer:
        """Return the tokenizer for *fmt*.

        Raises:
            SpecParseError: If no tokenizer is registered for *fmt*.
        """
        try:
            return self._readers[fmt.lower()]
        except KeyError:
            raise SpecParseError(
                f"No reader registered for format '{fmt}'. "
                f"Registered formats: {', '.join(self._readers) or 'none'}"
            ) from None

    def tokenize(self, content: str, hint: str = "") -> dict[str, Any]:
        """Tokenize *content* with the reader for *hint*, or by detection.

        Without a hint, JSON is tried first and YAML second: valid JSON is
        also valid YAML, but JSON parsing is stricter and faster.

        Args:
            content: The raw string content.
            hint: Optional format name.

        Returns:
            The tokenized document.

        Raises:
            SpecParseError: If the content cannot be tokenized, or is not an
                object.
        """
        if hint:
            try:
                return _require_object(self.get(hint)(content))
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                raise SpecParseError(f"Invalid {hint.upper()}: {exc}") from exc

        errors: list[str] = []
        for fmt in ("json", "yaml"):
            if fmt not in self._readers:
                continue
            try:
                return _require_object(self._readers[fmt](content))
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                errors.append(f"\n  {fmt.upper()} error: {exc}")

        msg = "Failed to parse document as JSON or YAML"
        raise SpecParseError(msg + "".join(errors))


def _require_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise SpecParseError(
            "Document must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def load_source(source: str, readers: Optional[ReaderRegistry] = None) -> dict[str, Any]:
    """Load a document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), ``file://`` URI, file path, or '-' for
            stdin.
        readers: Tokenizers to use; JSON and YAML by default.

    Returns:
        The tokenized document.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    content, hint = read_source(source)
    return (readers or ReaderRegistry.default()).tokenize(content, hint=hint)


def read_source(source: str) -> tuple[str, str]:
    """Read the text of *source* and a format hint derived from it."""
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    elif source.startswith("file://"):
        return _load_from_file(unquote(urlparse(source).path))
    else:
        return _load_from_file(source)


def _load_from_stdin() -> tuple[str, str]:
    """Read a document from stdin.

    Raises:
        SpecParseError: If stdin cannot be read or is empty.
    """
    try:
        content = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return content, ""


def _load_from_url(url: str) -> tuple[str, str]:
    """Fetch a document from a URL. Supports JSON and YAML responses.

    Raises:
        SpecParseError: If the URL cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    # Use content-type as a hint for parsing
    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return response.text, hint


def _load_from_file(path: str) -> tuple[str, str]:
    """Load a document from a local file.

    Raises:
        SpecParseError: If the file is missing, unreadable, or empty.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read document file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document file is empty: {path}")

    # Determine hint from file extension
    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return content, hint


class HttpFileFetcher:
    """Fetch external documents from files and HTTP(S) URLs.

    Instances are callables mapping an absolute locator to a token tree,
    the shape :class:`~specmodel.parser.resolver.ReferenceResolver` expects
    from any fetcher.

    Args:
        readers: Tokenizers for fetched content.
    """

    def __init__(self, readers: Optional[ReaderRegistry] = None) -> None:
        self._readers = readers or ReaderRegistry.default()

    def __call__(self, locator: str) -> Any:
        logger.debug("Fetching external document %s", locator)
        try:
            return load_source(locator, self._readers)
        except SpecParseError as exc:
            raise ReferenceFetchError(str(exc)) from exc
