"""Multi-document workspace: the component registry shared by a load session.

Components are registered under ``(document uri, kind, id)``. Registration is
idempotent: registering the same entity, or a structurally equal one, again
is a no-op. Registering a different entity under a bound key raises
:class:`~specmodel.exceptions.ComponentCollisionError` and the first
registration wins.

External documents loaded while resolving references are tracked here by
their absolute locator, together with the version they were read as and the
token tree they came from (used to deserialize non-component fragments).
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Optional
from urllib.parse import urljoin, urlparse

from specmodel.exceptions import ComponentCollisionError
from specmodel.models import COMPONENT_SECTIONS, Document, Referenceable, Schema
from specmodel.reference import Reference, ReferenceKind
from specmodel.versions import SpecVersion

logger = logging.getLogger(__name__)


def _is_url(value: str) -> bool:
    return urlparse(value).scheme in ("http", "https", "file", "urn")


class Workspace:
    """Registry of documents and their components.

    All mutations are serialized behind a re-entrant lock so that one
    workspace can be shared by loads running on several threads.

    Args:
        base_uri: Base for relative locators of documents that have no
            locatable ``base_uri`` of their own (for example documents parsed
            from a string).
    """

    def __init__(self, base_uri: Optional[str] = None) -> None:
        self.base_uri = base_uri
        self._documents: dict[str, Document] = {}
        self._versions: dict[str, Optional[SpecVersion]] = {}
        self._components: dict[tuple[str, ReferenceKind, str], Any] = {}
        self._schema_ids: dict[str, Schema] = {}
        self._schema_owners: dict[str, str] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_document(
        self,
        document: Document,
        version: Optional[SpecVersion] = None,
        raw: Any = None,
    ) -> None:
        """Track *document* under its ``base_uri`` and bind it to this workspace."""
        with self._lock:
            self._documents[document.base_uri] = document
            self._versions[document.base_uri] = version
            document.bind(self, raw)
        logger.debug("Added document %s (version %s)", document.base_uri, version)

    def contains(self, uri: str) -> bool:
        return uri in self._documents

    def get_document(self, uri: str) -> Optional[Document]:
        return self._documents.get(uri)

    def version_of(self, uri: str) -> Optional[SpecVersion]:
        return self._versions.get(uri)

    @property
    def documents(self) -> list[Document]:
        return list(self._documents.values())

    def resolve_locator(self, base_uri: str, locator: str) -> str:
        """Make *locator* absolute against *base_uri*.

        URLs join as URLs; file paths join against the directory of the
        base path. A base without a location (``urn:uuid:...``) falls back to
        the workspace ``base_uri`` and then to the locator as given.
        """
        if urlparse(locator).scheme in ("http", "https", "file", "urn"):
            return locator
        base = base_uri
        if base.startswith("urn:"):
            if self.base_uri is None:
                return os.path.normpath(locator)
            base = self.base_uri
        if _is_url(base):
            return urljoin(base, locator)
        return os.path.normpath(os.path.join(os.path.dirname(base), locator))

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def register_component(
        self,
        document_uri: str,
        kind: ReferenceKind,
        component_id: str,
        entity: Any,
    ) -> bool:
        """Register *entity* as component *component_id* of *document_uri*.

        Returns:
            ``True`` if the key was newly bound, ``False`` if an equal
            entity was already registered.

        Raises:
            ComponentCollisionError: If a structurally different entity is
                already registered under the key.
        """
        key = (document_uri, kind, component_id)
        with self._lock:
            existing = self._components.get(key)
            if existing is None:
                self._components[key] = entity
                if isinstance(entity, Schema) and entity.id and entity.id not in self._schema_ids:
                    self._schema_ids[entity.id] = entity
                    self._schema_owners[entity.id] = document_uri
                return True
            if existing is entity or existing == entity:
                return False
        raise ComponentCollisionError(
            kind.value,
            component_id,
            f"Component '{component_id}' of kind '{kind.value}' is already registered "
            f"with different content in {document_uri}",
        )

    def register_components(self, document: Document) -> list[ComponentCollisionError]:
        """Stamp and register every component of a programmatically built *document*.

        Returns:
            The collisions found; registration continues past them.
        """
        collisions: list[ComponentCollisionError] = []
        entries: list[tuple[ReferenceKind, str, Referenceable]] = []
        if document.components is not None:
            for kind, attr in COMPONENT_SECTIONS.items():
                for key, entity in getattr(document.components, attr).items():
                    entries.append((kind, key, entity))
        for tag in document.tags:
            if tag.name:
                entries.append((ReferenceKind.TAG, tag.name, tag))

        for kind, key, entity in entries:
            stamp_component(entity, kind, key, document)
            try:
                self.register_component(document.base_uri, kind, key, entity)
            except ComponentCollisionError as exc:
                collisions.append(exc)
        return collisions

    def lookup(self, document_uri: str, kind: ReferenceKind, component_id: str) -> Any:
        return self._components.get((document_uri, kind, component_id))

    def lookup_schema_id(self, uri: str) -> Optional[Schema]:
        """Find a schema by its ``$id``."""
        return self._schema_ids.get(uri)

    def schema_id_owner(self, uri: str) -> Optional[Document]:
        """Return the document that registered the schema with ``$id`` *uri*."""
        owner = self._schema_owners.get(uri)
        return self._documents.get(owner) if owner is not None else None

    def components_of(self, document_uri: str) -> dict[tuple[ReferenceKind, str], Any]:
        return {
            (kind, cid): entity
            for (uri, kind, cid), entity in self._components.items()
            if uri == document_uri
        }


def stamp_component(entity: Any, kind: ReferenceKind, key: str, document: Optional[Document]) -> None:
    """Give a component a resolved reference to itself.

    Components that are themselves ``$ref`` proxies keep their reference.
    """
    if not isinstance(entity, Referenceable):
        return
    if entity.reference is None:
        entity.reference = Reference(kind=kind, id=key)
    if entity.reference.kind is kind and entity.reference.id == key and not entity.reference.is_external:
        entity.reference.attach(entity, document)
