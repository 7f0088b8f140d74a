"""OpenAPI 3.0 deserializer.

:class:`OpenApiV3Deserializer` owns the field tables for every entity. The
tables also cover fields introduced by later versions: a 3.0 document can
carry them as ``x-oai-<field>`` extensions, and
:func:`~specmodel.parser.fields.parse_map` consults the capability table to
decide which key a field is read from. Later dialects subclass this one and
override the entities whose shape changed.

3.0-specific schema semantics handled here: ``nullable`` becomes a ``null``
member of ``type``, and the boolean ``exclusiveMinimum``/``exclusiveMaximum``
become numeric bounds.
"""

from __future__ import annotations

from typing import Any, Callable

from specmodel.exceptions import ComponentCollisionError, ParseNodeError
from specmodel.models import (
    HTTP_METHODS,
    Callback,
    Components,
    Contact,
    Discriminator,
    Document,
    Encoding,
    ENTITY_TYPES,
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
    ParameterLocation,
    ParameterStyle,
    PathItem,
    Paths,
    Referenceable,
    RequestBody,
    Response,
    Responses,
    Schema,
    SecurityRequirement,
    SecurityScheme,
    SecuritySchemeType,
    Server,
    ServerVariable,
    Tag,
    Xml,
)
from specmodel.parser.fields import (
    FieldMap,
    apply_loader,
    load_list,
    load_map,
    parse_map,
    set_bool,
    set_enum,
    set_int,
    set_list,
    set_map,
    set_number,
    set_object,
    set_raw,
    set_raw_list,
    set_str,
    set_str_list,
    set_str_map,
)
from specmodel.parser.nodes import MapNode, ParseNode, ParsingContext
from specmodel.reference import Reference, ReferenceKind, escape_pointer_segment
from specmodel.versions import SpecVersion
from specmodel.workspace import stamp_component


class OpenApiV3Deserializer:
    """Reads OpenAPI 3.0 documents into the document model."""

    version = SpecVersion.V3_0

    document_required: tuple[str, ...] = ("info", "paths")
    operation_required: tuple[str, ...] = ("responses",)
    response_required: tuple[str, ...] = ("description",)
    schema_special_keys: tuple[str, ...] = ("nullable", "exclusiveMaximum", "exclusiveMinimum")
    nullable_key = "nullable"

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def load_document(self, node: ParseNode, context: ParsingContext) -> Document:
        """Populate ``context.document`` from the document root."""
        root = node.as_map("document")
        document = context.document if context.document is not None else Document()
        context.document = document
        parse_map(
            root,
            document,
            self.document_fields(),
            context,
            "document",
            required=self.document_required,
            skip=("openapi",),
        )
        return document

    def load_entity(self, kind: ReferenceKind, node: ParseNode, context: ParsingContext) -> Any:
        """Load *node* as an entity of *kind*; used for fragment references."""
        loaders: dict[ReferenceKind, Callable[[ParseNode, ParsingContext], Any]] = {
            ReferenceKind.SCHEMA: self.load_schema,
            ReferenceKind.RESPONSE: self.load_response,
            ReferenceKind.PARAMETER: self.load_parameter,
            ReferenceKind.EXAMPLE: self.load_example,
            ReferenceKind.REQUEST_BODY: self.load_request_body,
            ReferenceKind.HEADER: self.load_header,
            ReferenceKind.SECURITY_SCHEME: self.load_security_scheme,
            ReferenceKind.LINK: self.load_link,
            ReferenceKind.CALLBACK: self.load_callback,
            ReferenceKind.PATH_ITEM: self.load_path_item,
            ReferenceKind.MEDIA_TYPE: self.load_media_type,
            ReferenceKind.TAG: self.load_tag,
        }
        return loaders[kind](node, context)

    def prime_context(self, root: ParseNode, context: ParsingContext) -> None:
        """Seed *context* with document-level defaults before loading a fragment."""

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def load_referenceable(
        self,
        node: ParseNode,
        context: ParsingContext,
        kind: ReferenceKind,
        body: Callable[[MapNode, ParsingContext], Referenceable],
    ) -> Any:
        """Load either a ``$ref`` proxy or the inline entity via *body*."""
        mapping = node.as_map(kind.value)
        pointer = mapping.get_reference()
        if pointer is None:
            return body(mapping, context)
        reference = Reference.parse(pointer, kind, context.version)
        entity = ENTITY_TYPES[kind](reference=reference)
        self.load_reference_siblings(mapping, reference, entity)
        return entity

    def load_reference_siblings(self, mapping: MapNode, reference: Reference, entity: Referenceable) -> None:
        """Keep the keys written beside ``$ref`` on the proxy *entity*.

        Args:
            mapping: The reference object as written.
            reference: The parsed reference.
            entity: The proxy the reference was loaded into.
        """
        # Siblings of $ref carry no meaning in 3.0; keep them for round-tripping.
        for key, child in mapping.items():
            if key != "$ref":
                entity.extensions[key] = child.raw

    def register(
        self,
        kind: ReferenceKind,
        key: str,
        entity: Any,
        location: str,
        context: ParsingContext,
    ) -> None:
        """Stamp *entity* as component *key* and register it in the workspace."""
        stamp_component(entity, kind, key, context.document)
        if context.workspace is None or context.document is None:
            return
        try:
            context.workspace.register_component(context.document.base_uri, kind, key, entity)
        except ComponentCollisionError as exc:
            context.error(location, str(exc))

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def document_fields(self) -> FieldMap:
        return {
            "$self": set_str("self_uri"),
            "info": set_object("info", self.load_info),
            "jsonSchemaDialect": set_str("json_schema_dialect"),
            "servers": set_list("servers", self.load_server),
            "paths": set_object("paths", self.load_paths),
            "webhooks": set_map("webhooks", self.load_path_item),
            "components": set_object("components", self.load_components),
            "security": set_list("security", self.load_security_requirement),
            "tags": self._load_tags,
            "externalDocs": set_object("external_docs", self.load_external_docs),
        }

    def _load_tags(self, document: Document, node: ParseNode, context: ParsingContext) -> None:
        tags = load_list(node, context, self.load_tag, "tags")
        document.tags = tags
        for index, tag in enumerate(tags):
            if tag.name:
                self.register(ReferenceKind.TAG, tag.name, tag, f"{node.location}/{index}", context)

    def load_info(self, node: ParseNode, context: ParsingContext) -> Info:
        """Load the ``info`` object; ``title`` and ``version`` are required."""
        fields: FieldMap = {
            "title": set_str("title"),
            "summary": set_str("summary"),
            "description": set_str("description"),
            "termsOfService": set_str("terms_of_service"),
            "contact": set_object("contact", self.load_contact),
            "license": set_object("license", self.load_license),
            "version": set_str("version"),
        }
        return parse_map(node.as_map("info"), Info(), fields, context, "info", required=("title", "version"))

    def load_contact(self, node: ParseNode, context: ParsingContext) -> Contact:
        fields: FieldMap = {
            "name": set_str("name"),
            "url": set_str("url"),
            "email": set_str("email"),
        }
        return parse_map(node.as_map("contact"), Contact(), fields, context, "contact")

    def load_license(self, node: ParseNode, context: ParsingContext) -> License:
        fields: FieldMap = {
            "name": set_str("name"),
            "identifier": set_str("identifier"),
            "url": set_str("url"),
        }
        return parse_map(node.as_map("license"), License(), fields, context, "license", required=("name",))

    def load_server(self, node: ParseNode, context: ParsingContext) -> Server:
        fields: FieldMap = {
            "url": set_str("url"),
            "description": set_str("description"),
            "name": set_str("name"),
            "variables": set_map("variables", self.load_server_variable),
        }
        return parse_map(node.as_map("server"), Server(), fields, context, "server", required=("url",))

    def load_server_variable(self, node: ParseNode, context: ParsingContext) -> ServerVariable:
        fields: FieldMap = {
            "enum": set_str_list("enum"),
            "default": set_str("default"),
            "description": set_str("description"),
        }
        return parse_map(
            node.as_map("serverVariable"), ServerVariable(), fields, context, "serverVariable", required=("default",)
        )

    def load_external_docs(self, node: ParseNode, context: ParsingContext) -> ExternalDocs:
        fields: FieldMap = {
            "description": set_str("description"),
            "url": set_str("url"),
        }
        return parse_map(
            node.as_map("externalDocs"), ExternalDocs(), fields, context, "externalDocs", required=("url",)
        )

    def load_tag(self, node: ParseNode, context: ParsingContext) -> Tag:
        fields: FieldMap = {
            "name": set_str("name"),
            "summary": set_str("summary"),
            "description": set_str("description"),
            "externalDocs": set_object("external_docs", self.load_external_docs),
            "parent": set_str("parent"),
            "kind": set_str("kind"),
        }
        return parse_map(node.as_map("tag"), Tag(), fields, context, "tag", required=("name",))

    def load_security_requirement(self, node: ParseNode, context: ParsingContext) -> SecurityRequirement:
        """Load a security requirement as scheme proxies paired with their scopes.

        Scheme names become ``securitySchemes`` references that the resolver
        binds later. Scope lists that are not string sequences are reported
        on *context* and skipped.
        """
        requirement = SecurityRequirement()
        for name, scopes in node.as_map("securityRequirement").items():
            scheme = SecurityScheme(reference=Reference(kind=ReferenceKind.SECURITY_SCHEME, id=name))
            try:
                requirement.add(scheme, scopes.as_str_list())
            except ParseNodeError as exc:
                context.error(exc.location, str(exc))
        return requirement

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def components_fields(self) -> FieldMap:
        sections = (
            ("schemas", "schemas", ReferenceKind.SCHEMA, self.load_schema),
            ("responses", "responses", ReferenceKind.RESPONSE, self.load_response),
            ("parameters", "parameters", ReferenceKind.PARAMETER, self.load_parameter),
            ("examples", "examples", ReferenceKind.EXAMPLE, self.load_example),
            ("requestBodies", "request_bodies", ReferenceKind.REQUEST_BODY, self.load_request_body),
            ("headers", "headers", ReferenceKind.HEADER, self.load_header),
            ("securitySchemes", "security_schemes", ReferenceKind.SECURITY_SCHEME, self.load_security_scheme),
            ("links", "links", ReferenceKind.LINK, self.load_link),
            ("callbacks", "callbacks", ReferenceKind.CALLBACK, self.load_callback),
            ("pathItems", "path_items", ReferenceKind.PATH_ITEM, self.load_path_item),
            ("mediaTypes", "media_types", ReferenceKind.MEDIA_TYPE, self.load_media_type),
        )
        return {key: self._component_section(attr, kind, loader) for key, attr, kind, loader in sections}

    def _component_section(self, attr: str, kind: ReferenceKind, loader: Callable[..., Any]) -> Callable[..., None]:
        def load(components: Components, node: ParseNode, context: ParsingContext) -> None:
            mapping = node.as_map(kind.value)
            section = load_map(mapping, context, loader, kind.value)
            setattr(components, attr, section)
            for key, entity in section.items():
                self.register(kind, key, entity, f"{mapping.location}/{escape_pointer_segment(key)}", context)

        return load

    def load_components(self, node: ParseNode, context: ParsingContext) -> Components:
        return parse_map(node.as_map("components"), Components(), self.components_fields(), context, "components")

    # ------------------------------------------------------------------
    # Paths and operations
    # ------------------------------------------------------------------

    def load_paths(self, node: ParseNode, context: ParsingContext) -> Paths:
        paths = Paths()
        paths.path_items = load_map(node, context, self.load_path_item, "paths", extensions=paths.extensions)
        return paths

    def load_path_item(self, node: ParseNode, context: ParsingContext) -> PathItem:
        return self.load_referenceable(node, context, ReferenceKind.PATH_ITEM, self._load_path_item_body)

    def path_item_fields(self) -> FieldMap:
        fields: FieldMap = {
            "summary": set_str("summary"),
            "description": set_str("description"),
            "servers": set_list("servers", self.load_server),
            "parameters": set_list("parameters", self.load_parameter),
            "query": set_object("query", self.load_operation),
            "additionalOperations": self._load_additional_operations,
        }
        for method in HTTP_METHODS:
            fields[method] = self._operation_loader(method)
        return fields

    def _operation_loader(self, method: str) -> Callable[..., None]:
        def load(item: PathItem, node: ParseNode, context: ParsingContext) -> None:
            item.operations[method] = self.load_operation(node, context)

        return load

    def _load_additional_operations(self, item: PathItem, node: ParseNode, context: ParsingContext) -> None:
        reserved = set(HTTP_METHODS) | {"query"}
        operations: dict[str, Operation] = {}
        for method, child in node.as_map("additionalOperations").items():
            if method.lower() in reserved:
                context.error(
                    child.location,
                    f"'{method}' is a fixed operation of a path item and cannot be an additional operation.",
                )
                continue
            apply_loader(lambda o, n, c: o.__setitem__(method, self.load_operation(n, c)), operations, child, context)
        item.additional_operations = operations

    def _load_path_item_body(self, node: MapNode, context: ParsingContext) -> PathItem:
        return parse_map(node, PathItem(), self.path_item_fields(), context, "pathItem")

    def operation_fields(self) -> FieldMap:
        return {
            "tags": self._load_operation_tags,
            "summary": set_str("summary"),
            "description": set_str("description"),
            "externalDocs": set_object("external_docs", self.load_external_docs),
            "operationId": set_str("operation_id"),
            "parameters": set_list("parameters", self.load_parameter),
            "requestBody": set_object("request_body", self.load_request_body),
            "responses": set_object("responses", self.load_responses),
            "callbacks": set_map("callbacks", self.load_callback),
            "deprecated": set_bool("deprecated"),
            "security": set_list("security", self.load_security_requirement),
            "servers": set_list("servers", self.load_server),
        }

    @staticmethod
    def _load_operation_tags(operation: Operation, node: ParseNode, context: ParsingContext) -> None:
        operation.tags = [
            Tag(reference=Reference(kind=ReferenceKind.TAG, id=name)) for name in node.as_str_list()
        ]

    def load_operation(self, node: ParseNode, context: ParsingContext) -> Operation:
        return parse_map(
            node.as_map("operation"),
            Operation(),
            self.operation_fields(),
            context,
            "operation",
            required=self.operation_required,
        )

    def load_parameter(self, node: ParseNode, context: ParsingContext) -> Parameter:
        return self.load_referenceable(node, context, ReferenceKind.PARAMETER, self._load_parameter_body)

    def parameter_fields(self) -> FieldMap:
        return {
            "name": set_str("name"),
            "in": set_enum("location", ParameterLocation, "parameter", "in"),
            "description": set_str("description"),
            "required": set_bool("required"),
            "deprecated": set_bool("deprecated"),
            "allowEmptyValue": set_bool("allow_empty_value"),
            "style": set_enum("style", ParameterStyle, "parameter", "style"),
            "explode": set_bool("explode"),
            "allowReserved": set_bool("allow_reserved"),
            "schema": set_object("schema_", self.load_schema),
            "example": set_raw("example"),
            "examples": set_map("examples", self.load_example),
            "content": set_map("content", self.load_media_type),
        }

    def _load_parameter_body(self, node: MapNode, context: ParsingContext) -> Parameter:
        return parse_map(node, Parameter(), self.parameter_fields(), context, "parameter", required=("name", "in"))

    def load_request_body(self, node: ParseNode, context: ParsingContext) -> RequestBody:
        return self.load_referenceable(node, context, ReferenceKind.REQUEST_BODY, self._load_request_body_body)

    def _load_request_body_body(self, node: MapNode, context: ParsingContext) -> RequestBody:
        fields: FieldMap = {
            "description": set_str("description"),
            "content": set_map("content", self.load_media_type),
            "required": set_bool("required"),
        }
        return parse_map(node, RequestBody(), fields, context, "requestBody", required=("content",))

    def load_media_type(self, node: ParseNode, context: ParsingContext) -> MediaType:
        return self.load_referenceable(node, context, ReferenceKind.MEDIA_TYPE, self._load_media_type_body)

    def _load_media_type_body(self, node: MapNode, context: ParsingContext) -> MediaType:
        fields: FieldMap = {
            "schema": set_object("schema_", self.load_schema),
            "itemSchema": set_object("item_schema", self.load_schema),
            "example": set_raw("example"),
            "examples": set_map("examples", self.load_example),
            "encoding": set_map("encoding", self.load_encoding),
        }
        return parse_map(node, MediaType(), fields, context, "mediaType")

    def load_encoding(self, node: ParseNode, context: ParsingContext) -> Encoding:
        fields: FieldMap = {
            "contentType": set_str("content_type"),
            "headers": set_map("headers", self.load_header),
            "style": set_enum("style", ParameterStyle, "encoding", "style"),
            "explode": set_bool("explode"),
            "allowReserved": set_bool("allow_reserved"),
        }
        return parse_map(node.as_map("encoding"), Encoding(), fields, context, "encoding")

    def load_responses(self, node: ParseNode, context: ParsingContext) -> Responses:
        """Load the status-code map of an operation."""
        responses = Responses()
        responses.codes = load_map(node, context, self.load_response, "responses", extensions=responses.extensions)
        return responses

    def load_response(self, node: ParseNode, context: ParsingContext) -> Response:
        return self.load_referenceable(node, context, ReferenceKind.RESPONSE, self._load_response_body)

    def _load_response_body(self, node: MapNode, context: ParsingContext) -> Response:
        fields: FieldMap = {
            "summary": set_str("summary"),
            "description": set_str("description"),
            "headers": set_map("headers", self.load_header),
            "content": set_map("content", self.load_media_type),
            "links": set_map("links", self.load_link),
        }
        return parse_map(node, Response(), fields, context, "response", required=self.response_required)

    def load_header(self, node: ParseNode, context: ParsingContext) -> Header:
        return self.load_referenceable(node, context, ReferenceKind.HEADER, self._load_header_body)

    def _load_header_body(self, node: MapNode, context: ParsingContext) -> Header:
        fields: FieldMap = {
            "description": set_str("description"),
            "required": set_bool("required"),
            "deprecated": set_bool("deprecated"),
            "allowEmptyValue": set_bool("allow_empty_value"),
            "style": set_enum("style", ParameterStyle, "header", "style"),
            "explode": set_bool("explode"),
            "allowReserved": set_bool("allow_reserved"),
            "schema": set_object("schema_", self.load_schema),
            "example": set_raw("example"),
            "examples": set_map("examples", self.load_example),
            "content": set_map("content", self.load_media_type),
        }
        return parse_map(node, Header(), fields, context, "header")

    def load_example(self, node: ParseNode, context: ParsingContext) -> Example:
        return self.load_referenceable(node, context, ReferenceKind.EXAMPLE, self._load_example_body)

    def _load_example_body(self, node: MapNode, context: ParsingContext) -> Example:
        fields: FieldMap = {
            "summary": set_str("summary"),
            "description": set_str("description"),
            "value": set_raw("value"),
            "externalValue": set_str("external_value"),
        }
        return parse_map(node, Example(), fields, context, "example")

    def load_link(self, node: ParseNode, context: ParsingContext) -> Link:
        return self.load_referenceable(node, context, ReferenceKind.LINK, self._load_link_body)

    def _load_link_body(self, node: MapNode, context: ParsingContext) -> Link:
        fields: FieldMap = {
            "operationRef": set_str("operation_ref"),
            "operationId": set_str("operation_id"),
            "parameters": lambda o, n, c: setattr(o, "parameters", n.as_map("parameters").raw),
            "requestBody": set_raw("request_body"),
            "description": set_str("description"),
            "server": set_object("server", self.load_server),
        }
        return parse_map(node, Link(), fields, context, "link")

    def load_callback(self, node: ParseNode, context: ParsingContext) -> Callback:
        return self.load_referenceable(node, context, ReferenceKind.CALLBACK, self._load_callback_body)

    def _load_callback_body(self, node: MapNode, context: ParsingContext) -> Callback:
        callback = Callback()
        callback.path_items = load_map(node, context, self.load_path_item, "callback", extensions=callback.extensions)
        return callback

    # ------------------------------------------------------------------
    # Security
    # ------------------------------------------------------------------

    def load_security_scheme(self, node: ParseNode, context: ParsingContext) -> SecurityScheme:
        return self.load_referenceable(node, context, ReferenceKind.SECURITY_SCHEME, self._load_security_scheme_body)

    def _load_security_scheme_body(self, node: MapNode, context: ParsingContext) -> SecurityScheme:
        fields: FieldMap = {
            "type": set_enum("type", SecuritySchemeType, "securityScheme", "type"),
            "description": set_str("description"),
            "name": set_str("name"),
            "in": set_str("location"),
            "scheme": set_str("scheme"),
            "bearerFormat": set_str("bearer_format"),
            "flows": set_object("flows", self.load_oauth_flows),
            "openIdConnectUrl": set_str("open_id_connect_url"),
            "oauth2MetadataUrl": set_str("oauth2_metadata_url"),
            "deprecated": set_bool("deprecated"),
        }
        return parse_map(node, SecurityScheme(), fields, context, "securityScheme", required=("type",))

    def load_oauth_flows(self, node: ParseNode, context: ParsingContext) -> OAuthFlows:
        fields: FieldMap = {
            "implicit": set_object("implicit", self.load_oauth_flow),
            "password": set_object("password", self.load_oauth_flow),
            "clientCredentials": set_object("client_credentials", self.load_oauth_flow),
            "authorizationCode": set_object("authorization_code", self.load_oauth_flow),
            "deviceAuthorization": set_object("device_authorization", self.load_oauth_flow),
        }
        return parse_map(node.as_map("flows"), OAuthFlows(), fields, context, "oauthFlows")

    def load_oauth_flow(self, node: ParseNode, context: ParsingContext) -> OAuthFlow:
        fields: FieldMap = {
            "authorizationUrl": set_str("authorization_url"),
            "tokenUrl": set_str("token_url"),
            "refreshUrl": set_str("refresh_url"),
            "deviceAuthorizationUrl": set_str("device_authorization_url"),
            "scopes": set_str_map("scopes"),
        }
        return parse_map(node.as_map("oauthFlow"), OAuthFlow(), fields, context, "oauthFlow", required=("scopes",))

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def load_schema(self, node: ParseNode, context: ParsingContext) -> Schema:
        return self.load_referenceable(node, context, ReferenceKind.SCHEMA, self._load_schema_body)

    def schema_fields(self) -> FieldMap:
        return {
            "$id": set_str("id"),
            "$schema": set_str("schema_uri"),
            "$anchor": set_str("anchor"),
            "$comment": set_str("comment"),
            "$defs": set_map("defs", self.load_schema),
            "title": set_str("title"),
            "description": set_str("description"),
            "type": lambda o, n, c: setattr(o, "type", [n.as_str()]),
            "format": set_str("format"),
            "const": set_raw("const"),
            "enum": set_raw_list("enum"),
            "default": set_raw("default"),
            "multipleOf": set_number("multiple_of"),
            "maximum": set_number("maximum"),
            "minimum": set_number("minimum"),
            "maxLength": set_int("max_length"),
            "minLength": set_int("min_length"),
            "pattern": set_str("pattern"),
            "maxItems": set_int("max_items"),
            "minItems": set_int("min_items"),
            "uniqueItems": set_bool("unique_items"),
            "maxProperties": set_int("max_properties"),
            "minProperties": set_int("min_properties"),
            "required": set_str_list("required"),
            "allOf": set_list("all_of", self.load_schema),
            "anyOf": set_list("any_of", self.load_schema),
            "oneOf": set_list("one_of", self.load_schema),
            "not": set_object("not_", self.load_schema),
            "items": set_object("items", self.load_schema),
            "prefixItems": set_list("prefix_items", self.load_schema),
            "properties": set_map("properties", self.load_schema),
            "patternProperties": set_map("pattern_properties", self.load_schema),
            "additionalProperties": self._load_additional_properties,
            "discriminator": set_object("discriminator", self.load_discriminator),
            "readOnly": set_bool("read_only"),
            "writeOnly": set_bool("write_only"),
            "xml": set_object("xml", self.load_xml),
            "externalDocs": set_object("external_docs", self.load_external_docs),
            "example": set_raw("example"),
            "examples": set_raw_list("examples"),
            "deprecated": set_bool("deprecated"),
        }

    def _load_additional_properties(self, schema: Schema, node: ParseNode, context: ParsingContext) -> None:
        if isinstance(node.raw, bool):
            schema.additional_properties = node.raw
        else:
            schema.additional_properties = self.load_schema(node, context)

    def _load_schema_body(self, node: MapNode, context: ParsingContext) -> Schema:
        """Load an inline schema, then apply the version specific keywords."""
        schema = parse_map(node, Schema(), self.schema_fields(), context, "schema", skip=self.schema_special_keys)
        self.apply_schema_specials(node, schema, context)
        return schema

    def apply_schema_specials(self, node: MapNode, schema: Schema, context: ParsingContext) -> None:
        """Translate 3.0 ``nullable`` and boolean exclusive bounds."""
        for key, bound, exclusive in (
            ("exclusiveMaximum", "maximum", "exclusive_maximum"),
            ("exclusiveMinimum", "minimum", "exclusive_minimum"),
        ):
            child = node.get(key)
            if child is None:
                continue
            try:
                if isinstance(child.raw, bool):
                    if child.raw and getattr(schema, bound) is not None:
                        setattr(schema, exclusive, getattr(schema, bound))
                        setattr(schema, bound, None)
                else:
                    setattr(schema, exclusive, child.as_number())
            except ParseNodeError as exc:
                context.error(exc.location, str(exc))

        nullable = node.get(self.nullable_key)
        if nullable is not None:
            try:
                is_nullable = nullable.as_bool()
            except ParseNodeError as exc:
                context.error(exc.location, str(exc))
                return
            if is_nullable and schema.type:
                if "null" not in schema.type:
                    schema.type = [*schema.type, "null"]
            elif is_nullable:
                schema.extensions[self.nullable_key] = True

    def load_discriminator(self, node: ParseNode, context: ParsingContext) -> Discriminator:
        fields: FieldMap = {
            "propertyName": set_str("property_name"),
            "mapping": set_str_map("mapping"),
        }
        return parse_map(
            node.as_map("discriminator"), Discriminator(), fields, context, "discriminator", required=("propertyName",)
        )

    def load_xml(self, node: ParseNode, context: ParsingContext) -> Xml:
        fields: FieldMap = {
            "name": set_str("name"),
            "namespace": set_str("namespace"),
            "prefix": set_str("prefix"),
            "attribute": set_bool("attribute"),
            "wrapped": set_bool("wrapped"),
        }
        return parse_map(node.as_map("xml"), Xml(), fields, context, "xml")
