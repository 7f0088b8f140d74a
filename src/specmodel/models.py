"""Canonical Pydantic models for the API description document graph.

This is the single source of truth for data shapes in the project. Every
reader builds these models and every writer consumes them. The models
describe the OpenAPI 3.2 superset; readers for older versions translate into
it and writers translate out of it.

**Document** -- :class:`Document`, :class:`Info`, :class:`Contact`,
:class:`License`, :class:`Server`, :class:`ServerVariable`,
:class:`Components`, :class:`Tag`, :class:`ExternalDocs`.

**Operations** -- :class:`Paths`, :class:`PathItem`, :class:`Operation`,
:class:`Parameter`, :class:`RequestBody`, :class:`MediaType`,
:class:`Encoding`, :class:`Responses`, :class:`Response`, :class:`Header`,
:class:`Example`, :class:`Link`, :class:`Callback`.

**Security** -- :class:`SecurityScheme`, :class:`OAuthFlows`,
:class:`OAuthFlow`, :class:`SecurityRequirement`.

**Schemas** -- :class:`Schema`, :class:`Discriminator`, :class:`Xml`.

Every model carries an ``extensions`` bag holding unknown keys verbatim.
Referenceable models (subclasses of :class:`Referenceable`) carry an optional
:class:`~specmodel.reference.Reference`; a model whose reference points
elsewhere is a *proxy* whose content lives in the reference target.
Optional fields holding arbitrary JSON (``default``, ``example``, ``const``,
``value``) use ``model_fields_set`` to tell an explicit ``null`` from an
absent key.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import MutableMapping
from typing import Any, ClassVar, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from specmodel.exceptions import ComponentCollisionError
from specmodel.reference import Reference, ReferenceKind

Number = Union[int, float]

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
"""Operation keys of a path item, in writing order."""


class SpecModel(BaseModel):
    """Base class of every document model."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    extensions: dict[str, Any] = Field(default_factory=dict)

    def has_value(self, name: str) -> bool:
        """Return True when *name* was set, even to ``None``."""
        return name in self.model_fields_set


class Referenceable(SpecModel):
    """A model that may stand in for a component via ``$ref``.

    Equality compares content, like any model. Hashing goes by
    :attr:`reference`, so entities naming the same component hash alike and
    can key a mapping such as :class:`SecurityRequirement`; an entity without
    a reference is unhashable.
    """

    reference_kind: ClassVar[ReferenceKind]

    reference: Optional[Reference] = None

    @property
    def is_proxy(self) -> bool:
        """True when this model is a ``$ref`` to some other entity."""
        if self.reference is None:
            return False
        return self.reference.target is not self and not (
            self.model_fields_set - {"reference", "extensions"}
        )

    @property
    def resolved(self) -> Any:
        """Follow resolved references to the entity holding the content."""
        current: Any = self
        seen: set[int] = set()
        while (
            current.reference is not None
            and current.reference.target is not None
            and current.reference.target is not current
            and id(current) not in seen
        ):
            seen.add(id(current))
            current = current.reference.target
        return current

    def __hash__(self) -> int:
        if self.reference is None:
            raise TypeError(f"unhashable type: '{type(self).__name__}' without a reference")
        return hash(self.reference)


# --- Enums ---


class ParameterLocation(str, enum.Enum):
    QUERY = "query"
    QUERYSTRING = "querystring"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ParameterStyle(str, enum.Enum):
    MATRIX = "matrix"
    LABEL = "label"
    SIMPLE = "simple"
    FORM = "form"
    COOKIE = "cookie"
    SPACE_DELIMITED = "spaceDelimited"
    PIPE_DELIMITED = "pipeDelimited"
    DEEP_OBJECT = "deepObject"


class SecuritySchemeType(str, enum.Enum):
    API_KEY = "apiKey"
    HTTP = "http"
    OAUTH2 = "oauth2"
    OPENID_CONNECT = "openIdConnect"
    MUTUAL_TLS = "mutualTLS"


def default_style(location: Optional[ParameterLocation]) -> Optional[ParameterStyle]:
    """Return the style a parameter at *location* has when none is declared."""
    if location in (ParameterLocation.QUERY, ParameterLocation.COOKIE):
        return ParameterStyle.FORM
    if location in (ParameterLocation.PATH, ParameterLocation.HEADER):
        return ParameterStyle.SIMPLE
    return None


# --- Document metadata ---


class Contact(SpecModel):
    """Contact information for the described API."""

    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class License(SpecModel):
    """License of the API. ``identifier`` (an SPDX expression) is new in 3.1."""

    name: Optional[str] = None
    identifier: Optional[str] = None
    url: Optional[str] = None


class Info(SpecModel):
    """Metadata about the API.

    ``title`` and ``version`` are required by every OpenAPI version; a
    missing one is reported as an error diagnostic, not raised. ``summary``
    is native from 3.1 and is shimmed as ``x-oai-summary`` when written to
    older versions.

    Example::

        Info(title="Petstore", version="1.0.0", license=License(name="MIT"))
    """

    title: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact: Optional[Contact] = None
    license: Optional[License] = None
    version: Optional[str] = None


class ExternalDocs(SpecModel):
    """A link to documentation hosted elsewhere."""

    description: Optional[str] = None
    url: Optional[str] = None


class ServerVariable(SpecModel):
    """A substitution variable of a server URL template."""

    enum: Optional[list[str]] = None
    default: Optional[str] = None
    description: Optional[str] = None


class Server(SpecModel):
    """A server the API is served from.

    Swagger 2.0 ``host``/``basePath``/``schemes`` are read into a single
    server and split back out on write. ``name`` is new in 3.2.
    """

    url: Optional[str] = None
    description: Optional[str] = None
    name: Optional[str] = None
    variables: dict[str, ServerVariable] = Field(default_factory=dict)


class Tag(Referenceable):
    """A tag declaration. Operations refer to tags by name."""

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.TAG

    name: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = None
    parent: Optional[str] = None
    kind: Optional[str] = None


# --- Schemas ---


class Discriminator(SpecModel):
    """Hint for telling apart the alternatives of a composed schema."""

    property_name: Optional[str] = None
    mapping: dict[str, str] = Field(default_factory=dict)


class Xml(SpecModel):
    """XML representation details of a schema."""

    name: Optional[str] = None
    namespace: Optional[str] = None
    prefix: Optional[str] = None
    attribute: Optional[bool] = None
    wrapped: Optional[bool] = None


class Schema(Referenceable):
    """A JSON Schema object, in its OpenAPI 3.1 shape.

    ``type`` is always a list of type names; a nullable 3.0 schema reads as a
    list containing ``"null"``. ``exclusive_minimum``/``exclusive_maximum``
    are numeric bounds; the boolean 3.0 form is translated on read and write.
    Keywords are modeled and passed through, never evaluated.
    """

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.SCHEMA

    id: Optional[str] = None
    schema_uri: Optional[str] = None
    anchor: Optional[str] = None
    comment: Optional[str] = None
    defs: Optional[dict[str, Schema]] = None

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[list[str]] = None
    format: Optional[str] = None
    const: Any = None
    enum: Optional[list[Any]] = None
    default: Any = None

    multiple_of: Optional[Number] = None
    maximum: Optional[Number] = None
    exclusive_maximum: Optional[Number] = None
    minimum: Optional[Number] = None
    exclusive_minimum: Optional[Number] = None
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    pattern: Optional[str] = None
    max_items: Optional[int] = None
    min_items: Optional[int] = None
    unique_items: Optional[bool] = None
    max_properties: Optional[int] = None
    min_properties: Optional[int] = None
    required: Optional[list[str]] = None

    all_of: Optional[list[Schema]] = None
    any_of: Optional[list[Schema]] = None
    one_of: Optional[list[Schema]] = None
    not_: Optional[Schema] = Field(
        default=None, alias="not", description="Schema an instance must not match"
    )
    items: Optional[Schema] = None
    prefix_items: Optional[list[Schema]] = None
    properties: Optional[dict[str, Schema]] = None
    pattern_properties: Optional[dict[str, Schema]] = None
    additional_properties: Optional[Union[bool, Schema]] = None

    discriminator: Optional[Discriminator] = None
    read_only: Optional[bool] = None
    write_only: Optional[bool] = None
    xml: Optional[Xml] = None
    external_docs: Optional[ExternalDocs] = None
    example: Any = None
    examples: Optional[list[Any]] = None
    deprecated: Optional[bool] = None

    @property
    def is_nullable(self) -> bool:
        return bool(self.type) and "null" in self.type


# --- Examples, links, media types ---


class Example(Referenceable):
    """A named example value; ``value`` may be an explicit ``null``."""

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.EXAMPLE

    summary: Optional[str] = None
    description: Optional[str] = None
    value: Any = None
    external_value: Optional[str] = None


class Link(Referenceable):
    """A design-time link from a response to another operation."""

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.LINK

    operation_ref: Optional[str] = None
    operation_id: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    request_body: Any = None
    description: Optional[str] = None
    server: Optional[Server] = None


class Header(Referenceable):
    """A response or encoding header, shaped like a parameter without ``name`` and ``in``."""

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.HEADER

    description: Optional[str] = None
    required: Optional[bool] = None
    deprecated: Optional[bool] = None
    allow_empty_value: Optional[bool] = None
    style: Optional[ParameterStyle] = None
    explode: Optional[bool] = None
    allow_reserved: Optional[bool] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, Example] = Field(default_factory=dict)
    content: dict[str, MediaType] = Field(default_factory=dict)


class Encoding(SpecModel):
    """Serialization of one property of a multipart or form request body."""

    content_type: Optional[str] = None
    headers: dict[str, Header] = Field(default_factory=dict)
    style: Optional[ParameterStyle] = None
    explode: Optional[bool] = None
    allow_reserved: Optional[bool] = None


class MediaType(Referenceable):
    """Content of one media type in a request or response body.

    ``item_schema`` describes each item of a sequential media type and is
    new in 3.2. References to media type components are inlined when
    writing older versions, which have no ``components/mediaTypes``.
    """

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.MEDIA_TYPE

    schema_: Optional[Schema] = Field(default=None, alias="schema")
    item_schema: Optional[Schema] = None
    example: Any = None
    examples: dict[str, Example] = Field(default_factory=dict)
    encoding: dict[str, Encoding] = Field(default_factory=dict)


# --- Operations ---


class Parameter(Referenceable):
    """A single operation parameter.

    ``location`` is read from and written to the ``in`` key. Swagger 2.0
    ``body`` and ``formData`` parameters never appear here: they are folded
    into :class:`RequestBody` on read. The ``querystring`` location and the
    ``cookie`` style are only valid in 3.2 and cannot be written to older
    versions.

    Example::

        Parameter(name="limit", location=ParameterLocation.QUERY, schema=Schema(type=["integer"]))
    """

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.PARAMETER

    name: Optional[str] = None
    location: Optional[ParameterLocation] = Field(
        default=None, alias="in", description="Where the parameter is sent: query, querystring, header, path or cookie"
    )
    description: Optional[str] = None
    required: Optional[bool] = None
    deprecated: Optional[bool] = None
    allow_empty_value: Optional[bool] = None
    style: Optional[ParameterStyle] = None
    explode: Optional[bool] = None
    allow_reserved: Optional[bool] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, Example] = Field(default_factory=dict)
    content: dict[str, MediaType] = Field(default_factory=dict)

    @property
    def effective_style(self) -> Optional[ParameterStyle]:
        """The declared style, or the default for the parameter's location."""
        return self.style if self.style is not None else default_style(self.location)


class RequestBody(Referenceable):
    """The body of a request, keyed by media type."""

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.REQUEST_BODY

    description: Optional[str] = None
    content: dict[str, MediaType] = Field(default_factory=dict)
    required: Optional[bool] = None


class Response(Referenceable):
    """A single response of an operation.

    ``description`` is required. ``summary`` is new in 3.2.
    """

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.RESPONSE

    summary: Optional[str] = None
    description: Optional[str] = None
    headers: dict[str, Header] = Field(default_factory=dict)
    content: dict[str, MediaType] = Field(default_factory=dict)
    links: dict[str, Link] = Field(default_factory=dict)


class Responses(SpecModel):
    """Responses of an operation keyed by status code or ``default``."""

    codes: dict[str, Response] = Field(default_factory=dict)

    def __getitem__(self, code: str) -> Response:
        return self.codes[code]

    def __contains__(self, code: object) -> bool:
        return code in self.codes

    def __len__(self) -> int:
        return len(self.codes)

    def get(self, code: str) -> Optional[Response]:
        return self.codes.get(code)

    def items(self):
        return self.codes.items()


class Operation(SpecModel):
    """A single API operation on a path.

    ``tags`` holds :class:`Tag` proxies that resolve to the declared tags;
    an operation may name tags that are never declared. ``security`` is
    ``None`` when the operation inherits the document requirements and an
    empty list when it opts out of them.
    """

    tags: list[Tag] = Field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = None
    operation_id: Optional[str] = None
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: Optional[Responses] = None
    callbacks: dict[str, Callback] = Field(default_factory=dict)
    deprecated: Optional[bool] = None
    security: Optional[list[SecurityRequirement]] = None
    servers: list[Server] = Field(default_factory=list)


class PathItem(Referenceable):
    """Operations available on one path.

    ``operations`` holds the standard HTTP methods. ``query`` and
    ``additional_operations`` are the OpenAPI 3.2 additions; keys of
    ``additional_operations`` are method names in their original case.
    """

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.PATH_ITEM

    summary: Optional[str] = None
    description: Optional[str] = None
    operations: dict[str, Operation] = Field(default_factory=dict)
    query: Optional[Operation] = None
    additional_operations: dict[str, Operation] = Field(default_factory=dict)
    servers: list[Server] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)


class Callback(Referenceable):
    """Callback path items keyed by runtime expression."""

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.CALLBACK

    path_items: dict[str, PathItem] = Field(default_factory=dict)

    def __getitem__(self, expression: str) -> PathItem:
        return self.path_items[expression]


class Paths(SpecModel):
    """Path items keyed by path template."""

    path_items: dict[str, PathItem] = Field(default_factory=dict)

    def __getitem__(self, path: str) -> PathItem:
        return self.path_items[path]

    def __contains__(self, path: object) -> bool:
        return path in self.path_items

    def __len__(self) -> int:
        return len(self.path_items)

    def get(self, path: str) -> Optional[PathItem]:
        return self.path_items.get(path)

    def items(self):
        return self.path_items.items()


# --- Security ---


class OAuthFlow(SpecModel):
    """Endpoints and scopes of one OAuth 2.0 flow."""

    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    refresh_url: Optional[str] = None
    device_authorization_url: Optional[str] = None
    scopes: dict[str, str] = Field(default_factory=dict)


class OAuthFlows(SpecModel):
    """The OAuth 2.0 flows a scheme supports. ``device_authorization`` is new in 3.2."""

    implicit: Optional[OAuthFlow] = None
    password: Optional[OAuthFlow] = None
    client_credentials: Optional[OAuthFlow] = None
    authorization_code: Optional[OAuthFlow] = None
    device_authorization: Optional[OAuthFlow] = None


class SecurityScheme(Referenceable):
    """A security scheme usable by operations.

    Swagger 2.0 only knows ``basic``, ``apiKey`` and ``oauth2``; other schemes
    are dropped when writing 2.0. ``oauth2_metadata_url`` and ``deprecated``
    are new in 3.2.
    """

    reference_kind: ClassVar[ReferenceKind] = ReferenceKind.SECURITY_SCHEME

    type: Optional[SecuritySchemeType] = None
    description: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = Field(
        default=None, alias="in", description="Where an apiKey is sent: query, header or cookie"
    )
    scheme: Optional[str] = None
    bearer_format: Optional[str] = None
    flows: Optional[OAuthFlows] = None
    open_id_connect_url: Optional[str] = None
    oauth2_metadata_url: Optional[str] = None
    deprecated: Optional[bool] = None


class SecurityRequirement(MutableMapping):
    """Required scopes keyed by security scheme.

    Keys are :class:`SecurityScheme` objects, but entries are indexed by the
    scheme's reference id, so two scheme objects naming the same component
    address the same entry. Inserting a scheme whose content differs from
    the scheme already stored under that id raises
    :class:`~specmodel.exceptions.ComponentCollisionError`.

    Example::

        requirement = SecurityRequirement()
        requirement[scheme_ref("api_key")] = []
        requirement[scheme_ref("oauth")] = ["read:pets"]
    """

    def __init__(self, entries: Optional[dict[SecurityScheme, list[str]]] = None) -> None:
        self._entries: dict[str, tuple[SecurityScheme, list[str]]] = {}
        for scheme, scopes in (entries or {}).items():
            self[scheme] = scopes

    @staticmethod
    def _key(scheme: SecurityScheme) -> str:
        if scheme.reference is None:
            raise TypeError("Security requirement keys must reference a security scheme")
        return scheme.reference.id

    @staticmethod
    def _conflicts(existing: SecurityScheme, incoming: SecurityScheme) -> bool:
        if existing is incoming:
            return False
        left, right = existing.resolved, incoming.resolved
        if left.is_proxy or right.is_proxy:
            return False
        return left != right

    def _check(self, scheme: SecurityScheme) -> Optional[tuple[SecurityScheme, list[str]]]:
        key = self._key(scheme)
        entry = self._entries.get(key)
        if entry is not None and self._conflicts(entry[0], scheme):
            raise ComponentCollisionError(ReferenceKind.SECURITY_SCHEME.value, key)
        return entry

    def __getitem__(self, scheme: SecurityScheme) -> list[str]:
        return self._entries[self._key(scheme)][1]

    def __setitem__(self, scheme: SecurityScheme, scopes: list[str]) -> None:
        entry = self._check(scheme)
        key_scheme = entry[0] if entry is not None else scheme
        self._entries[self._key(scheme)] = (key_scheme, list(scopes))

    def __delitem__(self, scheme: SecurityScheme) -> None:
        del self._entries[self._key(scheme)]

    def __iter__(self) -> Iterator[SecurityScheme]:
        return (scheme for scheme, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, scheme: SecurityScheme, scopes: list[str]) -> None:
        """Insert *scheme* unless an equivalent scheme is already present."""
        if self._check(scheme) is None:
            self._entries[self._key(scheme)] = (scheme, list(scopes))

    def scopes_by_name(self) -> dict[str, list[str]]:
        """Return ``{scheme id: scopes}``, the shape written to documents."""
        return {key: scopes for key, (_, scopes) in self._entries.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecurityRequirement):
            return NotImplemented
        return self.scopes_by_name() == other.scopes_by_name()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SecurityRequirement({self.scopes_by_name()!r})"


# --- Components and document ---


class Components(SpecModel):
    schemas: dict[str, Schema] = Field(default_factory=dict)
    responses: dict[str, Response] = Field(default_factory=dict)
    parameters: dict[str, Parameter] = Field(default_factory=dict)
    examples: dict[str, Example] = Field(default_factory=dict)
    request_bodies: dict[str, RequestBody] = Field(default_factory=dict)
    headers: dict[str, Header] = Field(default_factory=dict)
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict)
    links: dict[str, Link] = Field(default_factory=dict)
    callbacks: dict[str, Callback] = Field(default_factory=dict)
    path_items: dict[str, PathItem] = Field(default_factory=dict)
    media_types: dict[str, MediaType] = Field(default_factory=dict)

    def section(self, kind: ReferenceKind) -> dict[str, Any]:
        """Return the component map holding *kind*."""
        return getattr(self, COMPONENT_SECTIONS[kind])

    def is_empty(self) -> bool:
        return not self.extensions and not any(
            getattr(self, name) for name in COMPONENT_SECTIONS.values()
        )


COMPONENT_SECTIONS: dict[ReferenceKind, str] = {
    ReferenceKind.SCHEMA: "schemas",
    ReferenceKind.RESPONSE: "responses",
    ReferenceKind.PARAMETER: "parameters",
    ReferenceKind.EXAMPLE: "examples",
    ReferenceKind.REQUEST_BODY: "request_bodies",
    ReferenceKind.HEADER: "headers",
    ReferenceKind.SECURITY_SCHEME: "security_schemes",
    ReferenceKind.LINK: "links",
    ReferenceKind.CALLBACK: "callbacks",
    ReferenceKind.PATH_ITEM: "path_items",
    ReferenceKind.MEDIA_TYPE: "media_types",
}
"""Attribute of :class:`Components` holding each component kind."""


ENTITY_TYPES: dict[ReferenceKind, type[Referenceable]] = {
    ReferenceKind.SCHEMA: Schema,
    ReferenceKind.RESPONSE: Response,
    ReferenceKind.PARAMETER: Parameter,
    ReferenceKind.EXAMPLE: Example,
    ReferenceKind.REQUEST_BODY: RequestBody,
    ReferenceKind.HEADER: Header,
    ReferenceKind.SECURITY_SCHEME: SecurityScheme,
    ReferenceKind.LINK: Link,
    ReferenceKind.CALLBACK: Callback,
    ReferenceKind.PATH_ITEM: PathItem,
    ReferenceKind.MEDIA_TYPE: MediaType,
    ReferenceKind.TAG: Tag,
}
"""Model class for each reference kind."""


class Document(SpecModel):
    """The root of a document graph.

    ``base_uri`` identifies the document inside a workspace and is the base
    that relative external references resolve against. It defaults to a
    unique ``urn:uuid:`` value when the document was not loaded from a
    locatable source.
    """

    self_uri: Optional[str] = Field(default=None, description="The 3.2 ``$self`` URI of the document")
    info: Optional[Info] = None
    json_schema_dialect: Optional[str] = None
    servers: list[Server] = Field(default_factory=list)
    paths: Optional[Paths] = None
    webhooks: dict[str, PathItem] = Field(default_factory=dict)
    components: Optional[Components] = None
    security: Optional[list[SecurityRequirement]] = None
    tags: list[Tag] = Field(default_factory=list)
    external_docs: Optional[ExternalDocs] = None

    base_uri: str = Field(
        default_factory=lambda: f"urn:uuid:{uuid.uuid4()}",
        description="Identity of the document in its workspace",
    )

    _workspace: Any = PrivateAttr(default=None)
    _raw: Any = PrivateAttr(default=None)

    @property
    def workspace(self) -> Any:
        """The :class:`~specmodel.workspace.Workspace` this document is registered in."""
        return self._workspace

    @property
    def raw(self) -> Any:
        """The token tree the document was read from, if any."""
        return self._raw

    def bind(self, workspace: Any, raw: Any = None) -> None:
        self._workspace = workspace
        if raw is not None:
            self._raw = raw


for _model in (
    Header,
    Encoding,
    MediaType,
    Schema,
    Operation,
    PathItem,
    Callback,
    Paths,
    Components,
    Document,
):
    _model.model_rebuild()
