"""Writer for OpenAPI 3.0 documents; the base of every version writer.

Each entity writer builds a plain ``dict`` in the canonical key order. Field
placement goes through the capability table: a field native in the target
version is written under its own key, any other field under
``x-oai-<field>`` so that reading the output back restores it. Enumerated
values the target version cannot express raise
:class:`~specmodel.exceptions.VersionGatedFeatureError`.

References are written as ``$ref`` pointers for the target version. A
resolved target is written in place of its pointer when inlining is
requested, or when the target version has no place to point at (for
example ``components/pathItems`` in 3.0). A target already being written is
always emitted as a pointer, which keeps cyclic graphs finite.
"""

from __future__ import annotations

import logging
import os
import posixpath
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import urlparse

from specmodel.config import WriterSettings
from specmodel.models import (
    HTTP_METHODS,
    Callback,
    Components,
    Contact,
    Discriminator,
    Document,
    Encoding,
    Example,
    ExternalDocs,
    Header,
    Info,
    License,
    Link,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    Operation,
    Parameter,
    Paths,
    PathItem,
    Referenceable,
    RequestBody,
    Response,
    Responses,
    Schema,
    SecurityRequirement,
    SecurityScheme,
    Server,
    ServerVariable,
    SpecModel,
    Tag,
    Xml,
)
from specmodel.reference import Reference, ReferenceKind
from specmodel.versions import SpecVersion, default_capabilities

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Referenceable)
Body = Callable[[Any], dict[str, Any]]


def enum_value(value: Any) -> Any:
    return value.value if value is not None and hasattr(value, "value") else value


def relative_locator(base_uri: str, target_uri: str) -> str:
    """Express *target_uri* relative to the document at *base_uri* where possible.

    Documents without a location of their own (``urn:uuid:...``) and targets
    on another host keep the absolute locator.
    """
    base, target = urlparse(base_uri), urlparse(target_uri)
    if base.scheme == "urn":
        return target_uri
    if base.scheme in ("http", "https", "file") or target.scheme in ("http", "https", "file"):
        if (base.scheme, base.netloc) != (target.scheme, target.netloc):
            return target_uri
        return posixpath.relpath(target.path, posixpath.dirname(base.path))
    return os.path.relpath(target_uri, os.path.dirname(base_uri)).replace(os.sep, "/")


class OpenApiV3Serializer:
    """Serialize the document model as an OpenAPI 3.0 dictionary.

    Args:
        settings: Reference inlining and capability table options.
    """

    version: SpecVersion = SpecVersion.V3_0
    version_key: str = "openapi"
    nullable_key: Optional[str] = "nullable"

    def __init__(self, settings: Optional[WriterSettings] = None) -> None:
        self.settings = settings or WriterSettings()
        self.capabilities = self.settings.capabilities or default_capabilities()
        self._stack: list[int] = []
        self._root: Optional[Document] = None
        self._hosts: list[Document] = []

    # ------------------------------------------------------------------
    # Field placement
    # ------------------------------------------------------------------

    def put(self, out: dict[str, Any], entity: str, key: str, value: Any) -> None:
        """Write *value* under *key*, or under its extension key when not native."""
        if value is None:
            return
        out[self.capabilities.field_key(entity, key, self.version)] = value

    def put_any(self, out: dict[str, Any], entity: str, key: str, model: SpecModel, attr: str) -> None:
        """Write a free-form field when it was set, even to ``null``."""
        if model.has_value(attr):
            out[self.capabilities.field_key(entity, key, self.version)] = getattr(model, attr)

    def put_map(self, out: dict[str, Any], entity: str, key: str, values: dict[str, Any], writer: Body) -> None:
        if values:
            self.put(out, entity, key, {name: writer(value) for name, value in values.items()})

    def put_list(self, out: dict[str, Any], entity: str, key: str, values: Optional[list[Any]], writer: Body) -> None:
        if values:
            self.put(out, entity, key, [writer(value) for value in values])

    @staticmethod
    def finish(out: dict[str, Any], model: SpecModel) -> dict[str, Any]:
        """Append the model's extensions; written fields win on a key clash."""
        for key, value in model.extensions.items():
            out.setdefault(key, value)
        return out

    def check_value(self, entity: str, field: str, value: Any) -> Any:
        """Return the raw value of an enumerated field, refusing gated values."""
        raw = enum_value(value)
        if raw is not None:
            self.capabilities.check_value(entity, field, raw, self.version)
        return raw

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def has_pointer(self, reference: Reference) -> bool:
        """True when *reference* can be written as a pointer in this version."""
        if reference.is_external or reference.is_fragment:
            return reference.to_string(self.version) is not None
        if reference.kind is ReferenceKind.TAG:
            return False
        return self.capabilities.is_native("components", reference.kind.value, self.version)

    def begin(self, document: Optional[Document]) -> None:
        """Reset per-document state before writing *document*."""
        self._stack = []
        self._root = document
        self._hosts = [document] if document is not None else []

    @property
    def _host(self) -> Optional[Document]:
        """The document the entity being written was read from."""
        return self._hosts[-1] if self._hosts else None

    def _in_foreign_host(self) -> bool:
        return self._host is not None and self._host is not self._root

    def _inline_requested(self, reference: Reference) -> bool:
        if reference.is_external or self._in_foreign_host():
            return self.settings.inline_external_references
        return self.settings.inline_local_references

    @staticmethod
    def _target_host(entity: Referenceable) -> Optional[Document]:
        """Return the document holding the end of *entity*'s reference chain."""
        host: Optional[Document] = None
        current: Any = entity
        seen: set[int] = set()
        while (
            current.reference is not None
            and current.reference.target is not None
            and current.reference.target is not current
            and id(current) not in seen
        ):
            seen.add(id(current))
            host = current.reference.host_document or host
            current = current.reference.target
        return host

    def referenceable(
        self,
        entity: R,
        body: Callable[[R], dict[str, Any]],
        component_key: Optional[str] = None,
        without_reference: bool = False,
    ) -> dict[str, Any]:
        """Write *entity* as a pointer or as its body.

        Args:
            entity: The entity, possibly a ``$ref`` proxy.
            body: Writes the entity's own fields.
            component_key: Key of the component being defined, when writing
                the ``components`` section. An entity whose reference names
                that key is written in full.
            without_reference: Write the body of the resolved target even
                when a pointer could be written.
        """
        reference = entity.reference
        if reference is None or (
            component_key is not None and not reference.is_external and reference.id == component_key
        ):
            return self._inline(entity, body)

        target = entity.resolved
        if without_reference:
            return self._inline(target, body, self._target_host(entity))
        pointer = self.has_pointer(reference)
        if target is not entity and id(target) not in self._stack:
            if not pointer or self._inline_requested(reference):
                return self._inline(target, body, self._target_host(entity))
        if not pointer:
            logger.debug("No %s pointer for %r; writing the proxy in place", self.version.display_name, reference)
            return self._inline(entity, body)
        return self.write_reference(entity, reference)

    def _inline(
        self,
        entity: Any,
        body: Callable[[Any], dict[str, Any]],
        host: Optional[Document] = None,
    ) -> dict[str, Any]:
        self._stack.append(id(entity))
        if host is not None:
            self._hosts.append(host)
        try:
            return body(entity)
        finally:
            self._stack.pop()
            if host is not None:
                self._hosts.pop()

    def pointer(self, reference: Reference) -> Optional[str]:
        """Render *reference* as seen from the root document.

        A reference written inside a body inlined from another document is
        rebased: its pointer names that document by a locator relative to
        the root document.
        """
        text = reference.to_string(self.version)
        host = self._host
        if text is None or host is None or not self._in_foreign_host() or self._root is None:
            return text
        target_uri = host.base_uri
        if reference.is_external:
            workspace = self._root.workspace
            locator = reference.external_resource or ""
            target_uri = workspace.resolve_locator(host.base_uri, locator) if workspace is not None else locator
        fragment = reference.fragment(self.version) or ""
        if target_uri == self._root.base_uri:
            return fragment or "#"
        return f"{relative_locator(self._root.base_uri, target_uri)}{fragment}"

    def write_reference(self, entity: Referenceable, reference: Reference) -> dict[str, Any]:
        # Siblings of $ref carry no meaning before 3.1; only extensions are kept.
        out: dict[str, Any] = {"$ref": self.pointer(reference)}
        return self.finish(out, entity)

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def write_document(self, document: Document) -> dict[str, Any]:
        self.begin(document)
        out: dict[str, Any] = {self.version_key: self.version.version_string}
        self.put(out, "document", "$self", document.self_uri)
        if document.info is not None:
            out["info"] = self.write_info(document.info)
        self.put(out, "document", "jsonSchemaDialect", document.json_schema_dialect)
        self.put_list(out, "document", "servers", document.servers, self.write_server)
        if document.paths is not None:
            out["paths"] = self.write_paths(document.paths)
        elif self.version < SpecVersion.V3_1:
            out["paths"] = {}
        self.put_map(out, "document", "webhooks", document.webhooks, self.write_path_item)
        if document.components is not None and not document.components.is_empty():
            out["components"] = self.write_components(document.components)
        if document.security is not None:
            out["security"] = [self.write_security_requirement(r) for r in document.security]
        self.put_list(out, "document", "tags", document.tags, self.write_tag)
        if document.external_docs is not None:
            out["externalDocs"] = self.write_external_docs(document.external_docs)
        return self.finish(out, document)

    def write_info(self, info: Info) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "info", "title", info.title)
        self.put(out, "info", "summary", info.summary)
        self.put(out, "info", "description", info.description)
        self.put(out, "info", "termsOfService", info.terms_of_service)
        if info.contact is not None:
            out["contact"] = self.write_contact(info.contact)
        if info.license is not None:
            out["license"] = self.write_license(info.license)
        self.put(out, "info", "version", info.version)
        return self.finish(out, info)

    def write_contact(self, contact: Contact) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "contact", "name", contact.name)
        self.put(out, "contact", "url", contact.url)
        self.put(out, "contact", "email", contact.email)
        return self.finish(out, contact)

    def write_license(self, license: License) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "license", "name", license.name)
        self.put(out, "license", "identifier", license.identifier)
        self.put(out, "license", "url", license.url)
        return self.finish(out, license)

    def write_server(self, server: Server) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "server", "url", server.url)
        self.put(out, "server", "description", server.description)
        self.put(out, "server", "name", server.name)
        self.put_map(out, "server", "variables", server.variables, self.write_server_variable)
        return self.finish(out, server)

    def write_server_variable(self, variable: ServerVariable) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "serverVariable", "enum", variable.enum)
        self.put(out, "serverVariable", "default", variable.default)
        self.put(out, "serverVariable", "description", variable.description)
        return self.finish(out, variable)

    def write_external_docs(self, docs: ExternalDocs) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "externalDocs", "description", docs.description)
        self.put(out, "externalDocs", "url", docs.url)
        return self.finish(out, docs)

    def write_tag(self, tag: Tag) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "tag", "name", tag.name)
        self.put(out, "tag", "summary", tag.summary)
        self.put(out, "tag", "description", tag.description)
        if tag.external_docs is not None:
            out["externalDocs"] = self.write_external_docs(tag.external_docs)
        self.put(out, "tag", "parent", tag.parent)
        self.put(out, "tag", "kind", tag.kind)
        return self.finish(out, tag)

    @staticmethod
    def write_security_requirement(requirement: SecurityRequirement) -> dict[str, Any]:
        return requirement.scopes_by_name()

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def components_writers(self) -> list[tuple[str, str, Body]]:
        """``(key, attribute, writer)`` for each section, in writing order."""
        return [
            ("schemas", "schemas", self._body(self._write_schema_body)),
            ("responses", "responses", self._body(self._write_response_body)),
            ("parameters", "parameters", self._body(self._write_parameter_body)),
            ("examples", "examples", self._body(self._write_example_body)),
            ("requestBodies", "request_bodies", self._body(self._write_request_body_body)),
            ("headers", "headers", self._body(self._write_header_body)),
            ("securitySchemes", "security_schemes", self._body(self._write_security_scheme_body)),
            ("links", "links", self._body(self._write_link_body)),
            ("callbacks", "callbacks", self._body(self._write_callback_body)),
            ("pathItems", "path_items", self._body(self._write_path_item_body)),
            ("mediaTypes", "media_types", self._body(self._write_media_type_body)),
        ]

    def _body(self, body: Callable[[Any], dict[str, Any]]) -> Callable[[str, Any], dict[str, Any]]:
        return lambda key, entity: self.referenceable(entity, body, component_key=key)

    def write_components(self, components: Components) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, attr, writer in self.components_writers():
            section = getattr(components, attr)
            if section:
                self.put(out, "components", key, {name: writer(name, entity) for name, entity in section.items()})
        return self.finish(out, components)

    # ------------------------------------------------------------------
    # Paths and operations
    # ------------------------------------------------------------------

    def write_paths(self, paths: Paths) -> dict[str, Any]:
        out = {path: self.write_path_item(item) for path, item in paths.path_items.items()}
        return self.finish(out, paths)

    def write_path_item(self, item: PathItem, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(item, self._write_path_item_body, without_reference=without_reference)

    def _write_path_item_body(self, item: PathItem) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "pathItem", "summary", item.summary)
        self.put(out, "pathItem", "description", item.description)
        for method in HTTP_METHODS:
            operation = item.operations.get(method)
            if operation is not None:
                out[method] = self.write_operation(operation)
        if item.query is not None:
            self.put(out, "pathItem", "query", self.write_operation(item.query))
        self.put_map(out, "pathItem", "additionalOperations", item.additional_operations, self.write_operation)
        self.put_list(out, "pathItem", "servers", item.servers, self.write_server)
        self.put_list(out, "pathItem", "parameters", item.parameters, self.write_parameter)
        return self.finish(out, item)

    @staticmethod
    def tag_names(operation: Operation) -> list[str]:
        names = []
        for tag in operation.tags:
            name = tag.reference.id if tag.reference is not None else tag.name
            if name:
                names.append(name)
        return names

    def write_operation(self, operation: Operation) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "operation", "tags", self.tag_names(operation) or None)
        self.put(out, "operation", "summary", operation.summary)
        self.put(out, "operation", "description", operation.description)
        if operation.external_docs is not None:
            out["externalDocs"] = self.write_external_docs(operation.external_docs)
        self.put(out, "operation", "operationId", operation.operation_id)
        self.put_list(out, "operation", "parameters", operation.parameters, self.write_parameter)
        if operation.request_body is not None:
            out["requestBody"] = self.write_request_body(operation.request_body)
        if operation.responses is not None:
            out["responses"] = self.write_responses(operation.responses)
        self.put_map(out, "operation", "callbacks", operation.callbacks, self.write_callback)
        self.put(out, "operation", "deprecated", operation.deprecated)
        if operation.security is not None:
            out["security"] = [self.write_security_requirement(r) for r in operation.security]
        self.put_list(out, "operation", "servers", operation.servers, self.write_server)
        return self.finish(out, operation)

    def write_parameter(self, parameter: Parameter, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(parameter, self._write_parameter_body, without_reference=without_reference)

    def _write_parameter_body(self, parameter: Parameter) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "parameter", "name", parameter.name)
        self.put(out, "parameter", "in", self.check_value("parameter", "in", parameter.location))
        self.put(out, "parameter", "description", parameter.description)
        self.put(out, "parameter", "required", parameter.required)
        self.put(out, "parameter", "deprecated", parameter.deprecated)
        self.put(out, "parameter", "allowEmptyValue", parameter.allow_empty_value)
        self.put(out, "parameter", "style", self.check_value("parameter", "style", parameter.style))
        self.put(out, "parameter", "explode", parameter.explode)
        self.put(out, "parameter", "allowReserved", parameter.allow_reserved)
        if parameter.schema_ is not None:
            out["schema"] = self.write_schema(parameter.schema_)
        self.put_any(out, "parameter", "example", parameter, "example")
        self.put_map(out, "parameter", "examples", parameter.examples, self.write_example)
        self.put_map(out, "parameter", "content", parameter.content, self.write_media_type)
        return self.finish(out, parameter)

    def write_request_body(self, body: RequestBody, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(body, self._write_request_body_body, without_reference=without_reference)

    def _write_request_body_body(self, body: RequestBody) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "requestBody", "description", body.description)
        out["content"] = {name: self.write_media_type(media) for name, media in body.content.items()}
        self.put(out, "requestBody", "required", body.required)
        return self.finish(out, body)

    def write_media_type(self, media: MediaType, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(media, self._write_media_type_body, without_reference=without_reference)

    def _write_media_type_body(self, media: MediaType) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if media.schema_ is not None:
            out["schema"] = self.write_schema(media.schema_)
        if media.item_schema is not None:
            self.put(out, "mediaType", "itemSchema", self.write_schema(media.item_schema))
        self.put_any(out, "mediaType", "example", media, "example")
        self.put_map(out, "mediaType", "examples", media.examples, self.write_example)
        self.put_map(out, "mediaType", "encoding", media.encoding, self.write_encoding)
        return self.finish(out, media)

    def write_encoding(self, encoding: Encoding) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "encoding", "contentType", encoding.content_type)
        self.put_map(out, "encoding", "headers", encoding.headers, self.write_header)
        self.put(out, "encoding", "style", enum_value(encoding.style))
        self.put(out, "encoding", "explode", encoding.explode)
        self.put(out, "encoding", "allowReserved", encoding.allow_reserved)
        return self.finish(out, encoding)

    def write_responses(self, responses: Responses) -> dict[str, Any]:
        out = {code: self.write_response(response) for code, response in responses.codes.items()}
        return self.finish(out, responses)

    def write_response(self, response: Response, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(response, self._write_response_body, without_reference=without_reference)

    def _write_response_body(self, response: Response) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "response", "summary", response.summary)
        self.put(out, "response", "description", response.description)
        self.put_map(out, "response", "headers", response.headers, self.write_header)
        self.put_map(out, "response", "content", response.content, self.write_media_type)
        self.put_map(out, "response", "links", response.links, self.write_link)
        return self.finish(out, response)

    def write_header(self, header: Header, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(header, self._write_header_body, without_reference=without_reference)

    def _write_header_body(self, header: Header) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "header", "description", header.description)
        self.put(out, "header", "required", header.required)
        self.put(out, "header", "deprecated", header.deprecated)
        self.put(out, "header", "allowEmptyValue", header.allow_empty_value)
        self.put(out, "header", "style", enum_value(header.style))
        self.put(out, "header", "explode", header.explode)
        self.put(out, "header", "allowReserved", header.allow_reserved)
        if header.schema_ is not None:
            out["schema"] = self.write_schema(header.schema_)
        self.put_any(out, "header", "example", header, "example")
        self.put_map(out, "header", "examples", header.examples, self.write_example)
        self.put_map(out, "header", "content", header.content, self.write_media_type)
        return self.finish(out, header)

    def write_example(self, example: Example, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(example, self._write_example_body, without_reference=without_reference)

    def _write_example_body(self, example: Example) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "example", "summary", example.summary)
        self.put(out, "example", "description", example.description)
        self.put_any(out, "example", "value", example, "value")
        self.put(out, "example", "externalValue", example.external_value)
        return self.finish(out, example)

    def write_link(self, link: Link, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(link, self._write_link_body, without_reference=without_reference)

    def _write_link_body(self, link: Link) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "link", "operationRef", link.operation_ref)
        self.put(out, "link", "operationId", link.operation_id)
        if link.parameters:
            out["parameters"] = link.parameters
        self.put_any(out, "link", "requestBody", link, "request_body")
        self.put(out, "link", "description", link.description)
        if link.server is not None:
            out["server"] = self.write_server(link.server)
        return self.finish(out, link)

    def write_callback(self, callback: Callback, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(callback, self._write_callback_body, without_reference=without_reference)

    def _write_callback_body(self, callback: Callback) -> dict[str, Any]:
        out = {expression: self.write_path_item(item) for expression, item in callback.path_items.items()}
        return self.finish(out, callback)

    # ------------------------------------------------------------------
    # Security
    # ------------------------------------------------------------------

    def write_security_scheme(self, scheme: SecurityScheme, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(scheme, self._write_security_scheme_body, without_reference=without_reference)

    def _write_security_scheme_body(self, scheme: SecurityScheme) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "securityScheme", "type", enum_value(scheme.type))
        self.put(out, "securityScheme", "description", scheme.description)
        self.put(out, "securityScheme", "name", scheme.name)
        self.put(out, "securityScheme", "in", scheme.location)
        self.put(out, "securityScheme", "scheme", scheme.scheme)
        self.put(out, "securityScheme", "bearerFormat", scheme.bearer_format)
        if scheme.flows is not None:
            out["flows"] = self.write_oauth_flows(scheme.flows)
        self.put(out, "securityScheme", "openIdConnectUrl", scheme.open_id_connect_url)
        self.put(out, "securityScheme", "oauth2MetadataUrl", scheme.oauth2_metadata_url)
        self.put(out, "securityScheme", "deprecated", scheme.deprecated)
        return self.finish(out, scheme)

    def write_oauth_flows(self, flows: OAuthFlows) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, flow in (
            ("implicit", flows.implicit),
            ("password", flows.password),
            ("clientCredentials", flows.client_credentials),
            ("authorizationCode", flows.authorization_code),
            ("deviceAuthorization", flows.device_authorization),
        ):
            if flow is not None:
                self.put(out, "oauthFlows", key, self.write_oauth_flow(flow))
        return self.finish(out, flows)

    def write_oauth_flow(self, flow: OAuthFlow) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "oauthFlow", "authorizationUrl", flow.authorization_url)
        self.put(out, "oauthFlow", "tokenUrl", flow.token_url)
        self.put(out, "oauthFlow", "refreshUrl", flow.refresh_url)
        self.put(out, "oauthFlow", "deviceAuthorizationUrl", flow.device_authorization_url)
        out["scopes"] = dict(flow.scopes)
        return self.finish(out, flow)

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def write_schema(self, schema: Schema, without_reference: bool = False) -> dict[str, Any]:
        return self.referenceable(schema, self._write_schema_body, without_reference=without_reference)

    def write_type(self, out: dict[str, Any], schema: Schema) -> None:
        """Write ``type`` as a single name, flagging ``null`` with the nullable key."""
        if not schema.type:
            return
        names = [name for name in schema.type if name != "null"]
        if names:
            if len(names) > 1:
                logger.debug("Type %s narrowed to %r for %s", schema.type, names[0], self.version.display_name)
            out["type"] = names[0]
        if schema.is_nullable and self.nullable_key is not None:
            out[self.nullable_key] = True

    def write_bounds(self, out: dict[str, Any], schema: Schema) -> None:
        """Write numeric bounds; exclusive bounds become boolean flags."""
        for bound, exclusive, key in (
            ("maximum", "exclusive_maximum", "exclusiveMaximum"),
            ("minimum", "exclusive_minimum", "exclusiveMinimum"),
        ):
            exclusive_value = getattr(schema, exclusive)
            if exclusive_value is not None:
                out[bound] = exclusive_value
                out[key] = True
            elif getattr(schema, bound) is not None:
                out[bound] = getattr(schema, bound)

    def write_discriminator(self, discriminator: Discriminator) -> Any:
        out: dict[str, Any] = {}
        self.put(out, "discriminator", "propertyName", discriminator.property_name)
        if discriminator.mapping:
            out["mapping"] = dict(discriminator.mapping)
        return self.finish(out, discriminator)

    def write_xml(self, xml: Xml) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "xml", "name", xml.name)
        self.put(out, "xml", "namespace", xml.namespace)
        self.put(out, "xml", "prefix", xml.prefix)
        self.put(out, "xml", "attribute", xml.attribute)
        self.put(out, "xml", "wrapped", xml.wrapped)
        return self.finish(out, xml)

    def _write_schema_body(self, schema: Schema) -> dict[str, Any]:
        out: dict[str, Any] = {}
        put = self.put
        put(out, "schema", "$id", schema.id)
        put(out, "schema", "$schema", schema.schema_uri)
        put(out, "schema", "$anchor", schema.anchor)
        put(out, "schema", "$comment", schema.comment)
        if schema.defs:
            put(out, "schema", "$defs", {k: self.write_schema(v) for k, v in schema.defs.items()})
        put(out, "schema", "title", schema.title)
        put(out, "schema", "description", schema.description)
        self.write_type(out, schema)
        put(out, "schema", "format", schema.format)
        self.put_any(out, "schema", "const", schema, "const")
        put(out, "schema", "enum", schema.enum)
        self.put_any(out, "schema", "default", schema, "default")
        put(out, "schema", "multipleOf", schema.multiple_of)
        self.write_bounds(out, schema)
        put(out, "schema", "maxLength", schema.max_length)
        put(out, "schema", "minLength", schema.min_length)
        put(out, "schema", "pattern", schema.pattern)
        put(out, "schema", "maxItems", schema.max_items)
        put(out, "schema", "minItems", schema.min_items)
        put(out, "schema", "uniqueItems", schema.unique_items)
        put(out, "schema", "maxProperties", schema.max_properties)
        put(out, "schema", "minProperties", schema.min_properties)
        put(out, "schema", "required", schema.required or None)
        self.put_list(out, "schema", "allOf", schema.all_of, self.write_schema)
        self.put_list(out, "schema", "anyOf", schema.any_of, self.write_schema)
        self.put_list(out, "schema", "oneOf", schema.one_of, self.write_schema)
        if schema.not_ is not None:
            put(out, "schema", "not", self.write_schema(schema.not_))
        if schema.items is not None:
            put(out, "schema", "items", self.write_schema(schema.items))
        self.put_list(out, "schema", "prefixItems", schema.prefix_items, self.write_schema)
        if schema.properties is not None:
            put(out, "schema", "properties", {k: self.write_schema(v) for k, v in schema.properties.items()})
        if schema.pattern_properties:
            put(
                out,
                "schema",
                "patternProperties",
                {k: self.write_schema(v) for k, v in schema.pattern_properties.items()},
            )
        if isinstance(schema.additional_properties, Schema):
            put(out, "schema", "additionalProperties", self.write_schema(schema.additional_properties))
        else:
            put(out, "schema", "additionalProperties", schema.additional_properties)
        if schema.discriminator is not None:
            put(out, "schema", "discriminator", self.write_discriminator(schema.discriminator))
        put(out, "schema", "readOnly", schema.read_only)
        put(out, "schema", "writeOnly", schema.write_only)
        if schema.xml is not None:
            out["xml"] = self.write_xml(schema.xml)
        if schema.external_docs is not None:
            out["externalDocs"] = self.write_external_docs(schema.external_docs)
        self.put_any(out, "schema", "example", schema, "example")
        put(out, "schema", "examples", schema.examples)
        put(out, "schema", "deprecated", schema.deprecated)
        return self.finish(out, schema)
