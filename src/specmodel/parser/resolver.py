"""Resolve ``$ref`` references in a document model.

Deserialization leaves every reference pending. :class:`ReferenceResolver`
walks the model once and links each reference to its target in place:

* component references are looked up in the workspace registry by
  ``(document, kind, id)``;
* references to other documents are made absolute against the referencing
  document and, with external resolution enabled, fetched and read in their
  own dialect (files that are not API descriptions are kept as raw fragment
  sources);
* JSON Pointers into a document (``#/paths/~1pets/get``) are deserialized
  lazily from that document's token tree and registered under the pointer.

A reference is visited at most once: a reference already resolving is never
re-entered, which is how cyclic graphs terminate. Failures never raise;
they become warnings and leave the reference unresolved.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specmodel.config import ReaderSettings, ReferenceResolution
from specmodel.diagnostics import DiagnosticSet
from specmodel.exceptions import (
    ComponentCollisionError,
    ParseNodeError,
    SpecParseError,
)
from specmodel.models import Document, Referenceable
from specmodel.parser.nodes import ParseNode, ParsingContext
from specmodel.parser.reader import get_deserializer, read_tree
from specmodel.reference import Reference, ReferenceKind, ReferenceState, split_pointer
from specmodel.versions import SpecVersion
from specmodel.walker import collect_references
from specmodel.workspace import Workspace

logger = logging.getLogger(__name__)

_MISSING = object()


def _navigate(root: Any, pointer: str) -> Any:
    """Follow a JSON Pointer through a token tree; ``_MISSING`` on a miss."""
    current = root
    for segment in split_pointer(pointer):
        if isinstance(current, dict):
            # YAML reads keys such as 200 as integers.
            key = next((k for k in current if str(k) == segment), _MISSING)
            if key is _MISSING:
                return _MISSING
            current = current[key]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return _MISSING
        else:
            return _MISSING
    return current


class ReferenceResolver:
    """Resolve the references of documents registered in one workspace.

    Args:
        workspace: Registry holding the documents and their components.
        settings: Resolution mode, fetcher and capability table.
        diagnostics: Sink for warnings about unresolved references.
    """

    def __init__(
        self,
        workspace: Workspace,
        settings: ReaderSettings,
        diagnostics: DiagnosticSet,
    ) -> None:
        self.workspace = workspace
        self.settings = settings
        self.diagnostics = diagnostics
        self._root: Optional[Document] = None

    def resolve_document(self, document: Document) -> None:
        """Resolve every pending reference reachable from *document*."""
        self._root = document
        references = collect_references(document)
        logger.debug("Resolving %d references in %s", len(references), document.base_uri)
        for location, entity in references:
            self._resolve(entity.reference, document, location)

    def _version_of(self, document: Document) -> SpecVersion:
        return self.workspace.version_of(document.base_uri) or SpecVersion.V3_1

    def _resolve(self, reference: Reference, host: Document, location: str) -> None:
        if reference.state is not ReferenceState.PENDING:
            return
        reference.begin_resolution()
        found = self._find(reference, host, location)
        if found is None:
            reference.mark_unresolved()
            # Operation tags may name tags that are never declared.
            if reference.kind is not ReferenceKind.TAG:
                pointer = reference.to_string(self._version_of(host)) or reference.id
                self.diagnostics.add_warning(location, f"Reference '{pointer}' could not be resolved.")
            return

        target, target_document = found
        reference.attach(target, target_document)
        chained = getattr(target, "reference", None)
        if isinstance(target, Referenceable) and chained is not None and chained is not reference:
            self._resolve(chained, target_document, location)

    def _find(self, reference: Reference, host: Document, location: str) -> Optional[tuple[Any, Document]]:
        document: Optional[Document] = host
        if reference.is_external:
            uri = self.workspace.resolve_locator(host.base_uri, reference.external_resource or "")
            if reference.kind is ReferenceKind.SCHEMA and reference.id == "":
                schema = self.workspace.lookup_schema_id(uri)
                if schema is not None:
                    return schema, self.workspace.schema_id_owner(uri) or host
            document = self.workspace.get_document(uri)
            if document is None:
                document = self._load_external(uri, self._version_of(host), location)
            if document is None:
                return None

        target = self.workspace.lookup(document.base_uri, reference.kind, reference.id)
        if target is not None:
            return target, document

        pointer: Optional[str] = reference.id if reference.is_fragment else None
        if pointer is None and self.workspace.version_of(document.base_uri) is None:
            # Not an API description: read component pointers from the raw tree.
            fragment = reference.fragment(self._version_of(host))
            pointer = fragment[1:] if fragment else None
        if pointer is None:
            return None
        target = self._load_fragment(reference, document, pointer, self._version_of(host), location)
        if target is None:
            return None
        return target, document

    def _load_fragment(
        self,
        reference: Reference,
        document: Document,
        pointer: str,
        host_version: SpecVersion,
        location: str,
    ) -> Any:
        """Deserialize the value at *pointer* in *document* as the reference's kind."""
        raw = document.raw
        if raw is None:
            return None
        value = _navigate(raw, pointer)
        if value is _MISSING:
            return None

        version = self.workspace.version_of(document.base_uri) or host_version
        sub = DiagnosticSet(version)
        context = ParsingContext(sub, version, document, self.workspace, self.settings.capabilities)
        deserializer = get_deserializer(version)
        entity: Any = None
        try:
            if isinstance(raw, dict):
                deserializer.prime_context(ParseNode.create(raw, context), context)
            entity = deserializer.load_entity(reference.kind, ParseNode.create(value, context, f"#{pointer}"), context)
        except ParseNodeError as exc:
            sub.add_error(exc.location, str(exc))
        self._merge(sub, document)
        if entity is None:
            return None

        try:
            self.workspace.register_component(document.base_uri, reference.kind, reference.id, entity)
        except ComponentCollisionError:
            entity = self.workspace.lookup(document.base_uri, reference.kind, reference.id)
        logger.debug("Loaded fragment #%s of %s as %s", pointer, document.base_uri, reference.kind.value)

        for where, nested in collect_references(entity):
            self._resolve(nested.reference, document, where)
        return entity

    def _load_external(self, uri: str, host_version: SpecVersion, location: str) -> Optional[Document]:
        if self.settings.resolution is not ReferenceResolution.EXTERNAL:
            return None
        fetcher = self.settings.get_fetcher()
        try:
            raw = fetcher(uri)
        except Exception as exc:
            logger.warning("Could not fetch %s: %s", uri, exc)
            self.diagnostics.add_warning(location, f"Failed to load external document '{uri}': {exc}")
            return None

        if not (isinstance(raw, dict) and ("openapi" in raw or "swagger" in raw)):
            document = Document(base_uri=uri)
            self.workspace.add_document(document, None, raw)
            logger.debug("Loaded %s as a raw fragment source", uri)
            return document

        sub = DiagnosticSet()
        try:
            document, _ = read_tree(
                raw,
                workspace=self.workspace,
                base_uri=uri,
                capabilities=self.settings.capabilities,
                diagnostics=sub,
            )
        except SpecParseError as exc:
            self.diagnostics.add_warning(location, f"Failed to load external document '{uri}': {exc}")
            return None
        ReferenceResolver(self.workspace, self.settings, sub).resolve_document(document)
        self.diagnostics.extend(sub, source=uri)
        return document

    def _merge(self, sub: DiagnosticSet, document: Document) -> None:
        source = None if document is self._root else document.base_uri
        self.diagnostics.extend(sub, source=source)
