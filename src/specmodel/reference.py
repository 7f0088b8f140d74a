"""Reference records: ``$ref`` pointers in the document model.

A :class:`Reference` names a component by ``(kind, id)``, optionally inside
another document (``external_resource``). References compare equal by that
identity, never by the content of their targets, which is what keeps
equality and hashing safe on cyclic graphs.

The resolver annotates a reference in place: it attaches a non-owning link
to the target entity and a weak link to the document that owns the registry
the target was found in (the *host document*).
"""

from __future__ import annotations

import enum
import weakref
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, PrivateAttr

from specmodel.versions import SpecVersion

if TYPE_CHECKING:
    from specmodel.models import Document


class ReferenceKind(str, enum.Enum):
    """Component kinds, valued by their ``components`` container name."""

    SCHEMA = "schemas"
    RESPONSE = "responses"
    PARAMETER = "parameters"
    EXAMPLE = "examples"
    REQUEST_BODY = "requestBodies"
    HEADER = "headers"
    SECURITY_SCHEME = "securitySchemes"
    LINK = "links"
    CALLBACK = "callbacks"
    PATH_ITEM = "pathItems"
    MEDIA_TYPE = "mediaTypes"
    TAG = "tags"


class ReferenceState(str, enum.Enum):
    """Resolution state of a reference."""

    PENDING = "pending"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


# Swagger 2.0 keeps reusable objects in top-level sections. Request bodies are
# body parameters there.
_V2_SECTIONS: dict[ReferenceKind, str] = {
    ReferenceKind.SCHEMA: "definitions",
    ReferenceKind.PARAMETER: "parameters",
    ReferenceKind.REQUEST_BODY: "parameters",
    ReferenceKind.RESPONSE: "responses",
    ReferenceKind.SECURITY_SCHEME: "securityDefinitions",
}

_V2_KINDS: dict[str, ReferenceKind] = {
    "definitions": ReferenceKind.SCHEMA,
    "parameters": ReferenceKind.PARAMETER,
    "responses": ReferenceKind.RESPONSE,
    "securityDefinitions": ReferenceKind.SECURITY_SCHEME,
}


def escape_pointer_segment(segment: str) -> str:
    """Escape one JSON Pointer segment (RFC 6901)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_pointer_segment(segment: str) -> str:
    """Unescape one JSON Pointer segment (RFC 6901)."""
    return segment.replace("~1", "/").replace("~0", "~")


def split_pointer(fragment: str) -> list[str]:
    """Split a fragment like ``/components/schemas/Pet`` into unescaped segments."""
    if not fragment or fragment == "/":
        return []
    return [unescape_pointer_segment(s) for s in fragment.lstrip("/").split("/")]


class Reference(BaseModel):
    """A ``$ref`` to a component or a fragment of a document.

    ``id`` is the component name for ``#/components/<kind>/<name>`` style
    pointers (``#/definitions/<name>`` in Swagger 2.0). For any other pointer
    it is the raw JSON Pointer fragment, starting with ``/``; an empty id
    addresses a whole external document.

    Example::

        ref = Reference.parse("#/components/schemas/Pet", ReferenceKind.SCHEMA, SpecVersion.V3_1)
        ref.id                               # 'Pet'
        ref.to_string(SpecVersion.V2_0)      # '#/definitions/Pet'
    """

    kind: ReferenceKind
    id: str
    external_resource: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None

    _target: Any = PrivateAttr(default=None)
    _host: Any = PrivateAttr(default=None)
    _state: ReferenceState = PrivateAttr(default=ReferenceState.PENDING)

    # --- identity ---

    @property
    def is_external(self) -> bool:
        return self.external_resource is not None

    @property
    def is_fragment(self) -> bool:
        """True when the reference addresses a raw pointer rather than a component."""
        return self.id == "" or self.id.startswith("/")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        if self.is_external or other.is_external:
            return self.external_resource == other.external_resource and self.id == other.id
        return self.kind == other.kind and self.id == other.id

    def __hash__(self) -> int:
        if self.is_external:
            return hash((self.external_resource, self.id))
        return hash((self.kind, self.id))

    def __repr__(self) -> str:
        return f"Reference({self.to_string(SpecVersion.V3_1)!r}, state={self._state.value})"

    # --- resolution state ---

    @property
    def state(self) -> ReferenceState:
        return self._state

    @property
    def is_resolved(self) -> bool:
        return self._state is ReferenceState.RESOLVED

    @property
    def target(self) -> Any:
        """The resolved entity, or ``None`` until resolution succeeds."""
        return self._target

    @property
    def host_document(self) -> Optional[Document]:
        """The document whose registry the target was found in."""
        if self._host is None:
            return None
        return self._host()

    def begin_resolution(self) -> None:
        self._state = ReferenceState.RESOLVING

    def attach(self, target: Any, host_document: Optional[Document] = None) -> None:
        """Link this reference to *target* and mark it resolved."""
        self._target = target
        self._host = weakref.ref(host_document) if host_document is not None else None
        self._state = ReferenceState.RESOLVED

    def mark_unresolved(self) -> None:
        self._target = None
        self._state = ReferenceState.UNRESOLVED

    def reset(self) -> None:
        """Return to the pending state so the reference can be resolved again."""
        self._target = None
        self._host = None
        self._state = ReferenceState.PENDING

    # --- pointers ---

    def fragment(self, version: SpecVersion) -> Optional[str]:
        """Return the ``#...`` fragment for *version*, or ``None`` if it has none.

        Component kinds without a Swagger 2.0 section (headers, links and
        the like) have no fragment in 2.0.
        """
        if self.is_fragment:
            return f"#{self.id}" if self.id else None
        name = escape_pointer_segment(self.id)
        if version is SpecVersion.V2_0:
            section = _V2_SECTIONS.get(self.kind)
            if section is None:
                return None
            return f"#/{section}/{name}"
        if self.kind is ReferenceKind.TAG:
            return None
        return f"#/components/{self.kind.value}/{name}"

    def to_string(self, version: SpecVersion) -> Optional[str]:
        """Render the full ``$ref`` value for *version*."""
        fragment = self.fragment(version)
        if self.is_external:
            if fragment is None:
                return self.external_resource if self.is_fragment else None
            return f"{self.external_resource}{fragment}"
        return fragment

    @classmethod
    def parse(
        cls,
        value: str,
        kind: ReferenceKind,
        version: SpecVersion,
    ) -> Reference:
        """Parse a ``$ref`` string read from a *version* document.

        Args:
            value: The raw ``$ref`` text.
            kind: The kind expected at the referencing position. A
                component pointer naming a different container overrides it.
            version: Dialect of the referencing document.
        """
        locator, _, fragment = value.partition("#")
        segments = split_pointer(fragment)
        external = locator or None

        if version is SpecVersion.V2_0:
            if len(segments) == 2 and segments[0] in _V2_KINDS:
                section_kind = _V2_KINDS[segments[0]]
                # A body parameter reference is read as a request body.
                if section_kind is ReferenceKind.PARAMETER and kind is ReferenceKind.REQUEST_BODY:
                    section_kind = kind
                return cls(kind=section_kind, id=segments[1], external_resource=external)
        elif len(segments) == 3 and segments[0] == "components":
            try:
                section_kind = ReferenceKind(segments[1])
            except ValueError:
                section_kind = None
            if section_kind is not None and section_kind is not ReferenceKind.TAG:
                return cls(kind=section_kind, id=segments[2], external_resource=external)

        return cls(kind=kind, id=fragment, external_resource=external)
