"""Public entry points: read, resolve and write documents.

Reading never raises for problems inside a document; they are collected
as diagnostics on the returned :class:`ReadResult`. Only unreadable text
(:class:`~specmodel.exceptions.SpecParseError`) and an unrecognized version
(:class:`~specmodel.exceptions.UnsupportedVersionError`) are raised.

Example::

    from specmodel import load, serialize

    document, diagnostics = load("petstore.yaml")
    for problem in diagnostics.errors:
        print(problem)
    print(serialize(document, "3.0", fmt="yaml"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NamedTuple, Optional

from specmodel.config import ReaderSettings, ReferenceResolution
from specmodel.diagnostics import DiagnosticSet
from specmodel.models import Document
from specmodel.parser.loader import read_source
from specmodel.parser.reader import read_tree
from specmodel.parser.resolver import ReferenceResolver
from specmodel.versions import SpecVersion
from specmodel.workspace import Workspace
from specmodel.writer.serializer import serialize, to_dict

__all__ = ["ReadResult", "load", "parse", "read_document", "resolve", "serialize", "to_dict"]

logger = logging.getLogger(__name__)


class ReadResult(NamedTuple):
    """A document together with the diagnostics found while reading it."""

    document: Document
    diagnostics: DiagnosticSet


def _source_uri(source: str) -> Optional[str]:
    if source == "-":
        return None
    if source.startswith(("http://", "https://", "file://")):
        return source
    return str(Path(source).resolve())


def parse(
    text: str,
    fmt: Optional[str] = None,
    settings: Optional[ReaderSettings] = None,
    base_uri: Optional[str] = None,
) -> ReadResult:
    """Read a document from *text*.

    Args:
        text: JSON or YAML document text.
        fmt: Format name registered in ``settings.readers``; detected when
            omitted.
        settings: Reader settings; defaults resolve local references.
        base_uri: Identity of the document, used to resolve relative
            external references.

    Raises:
        SpecParseError: If the text cannot be tokenized.
        UnsupportedVersionError: If the version cannot be detected.
    """
    settings = settings or ReaderSettings()
    raw = settings.readers.tokenize(text, hint=fmt or "")
    return read_document(raw, settings, base_uri=base_uri)


def load(source: str, settings: Optional[ReaderSettings] = None) -> ReadResult:
    """Read a document from a file path, URL or ``-`` (stdin).

    The absolute location of *source* becomes the document's ``base_uri``.

    Raises:
        SpecParseError: If the source cannot be read or tokenized.
        UnsupportedVersionError: If the version cannot be detected.
    """
    settings = settings or ReaderSettings()
    text, hint = read_source(source)
    raw = settings.readers.tokenize(text, hint=hint)
    return read_document(raw, settings, base_uri=_source_uri(source))


def read_document(
    raw: Any,
    settings: Optional[ReaderSettings] = None,
    base_uri: Optional[str] = None,
    workspace: Optional[Workspace] = None,
) -> ReadResult:
    """Read an already tokenized document.

    Deserializes *raw*, resolves references as ``settings.resolution``
    asks, runs ``settings.rules`` and freezes the diagnostics.

    Raises:
        UnsupportedVersionError: If the version cannot be detected.
    """
    settings = settings or ReaderSettings()
    if workspace is None:
        workspace = Workspace(base_uri=settings.base_uri)
    document, diagnostics = read_tree(
        raw,
        workspace=workspace,
        base_uri=base_uri or settings.base_uri,
        capabilities=settings.capabilities,
    )
    if settings.resolution is not ReferenceResolution.NONE:
        ReferenceResolver(workspace, settings, diagnostics).resolve_document(document)
    for rule in settings.rules:
        rule(document, diagnostics)
    logger.debug(
        "Read %s: %d errors, %d warnings",
        document.base_uri,
        len(diagnostics.errors),
        len(diagnostics.warnings),
    )
    return ReadResult(document, diagnostics.freeze())


def resolve(document: Document, settings: Optional[ReaderSettings] = None) -> ReadResult:
    """Resolve the references of *document* in place.

    A document built in code is registered in a new workspace first, its
    components stamped with references to themselves. References that
    already reached a final state are left alone, so resolving twice adds
    no diagnostics.

    Returns:
        The document and the diagnostics of this resolution pass.
    """
    settings = settings or ReaderSettings()
    workspace: Optional[Workspace] = document.workspace
    if workspace is None:
        workspace = Workspace(base_uri=settings.base_uri)
        workspace.add_document(document, SpecVersion.V3_2)
    diagnostics = DiagnosticSet(workspace.version_of(document.base_uri))
    for collision in workspace.register_components(document):
        diagnostics.add_error("#/components", str(collision))
    if settings.resolution is not ReferenceResolution.NONE:
        ReferenceResolver(workspace, settings, diagnostics).resolve_document(document)
    return ReadResult(document, diagnostics.freeze())
