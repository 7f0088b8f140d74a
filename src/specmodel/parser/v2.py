"""Swagger 2.0 deserializer.

Swagger 2.0 documents are translated into the 3.x-shaped document model:

* ``host``/``basePath``/``schemes`` become :class:`~specmodel.models.Server`
  entries (``//host/base`` when no scheme is declared);
* ``consumes``/``produces`` become the media-type keys of request bodies
  and responses (``application/json`` when neither the operation nor the
  document declares any);
* ``in: body`` parameters become request bodies and ``in: formData``
  parameters are folded into one form request body;
* simple parameters (``type``/``format``/``items``) get a schema, and
  ``collectionFormat`` becomes ``style``/``explode``;
* ``definitions``, ``parameters``, ``responses`` and
  ``securityDefinitions`` become components; global body parameters become
  request-body components under the same name;
* ``x-nullable`` becomes a ``null`` member of a schema's ``type``.
"""

from __future__ import annotations

from typing import Any, Optional

from specmodel.exceptions import ParseNodeError
from specmodel.models import (
    Components,
    Discriminator,
    Document,
    Header,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    Operation,
    Parameter,
    ParameterLocation,
    ParameterStyle,
    PathItem,
    RequestBody,
    Response,
    Schema,
    SecurityScheme,
    SecuritySchemeType,
    Server,
)
from specmodel.parser.fields import (
    FieldMap,
    load_map,
    parse_map,
    set_bool,
    set_enum,
    set_list,
    set_map,
    set_object,
    set_raw,
    set_str,
    set_str_map,
)
from specmodel.parser.nodes import MapNode, ParseNode, ParsingContext
from specmodel.parser.v3 import OpenApiV3Deserializer
from specmodel.reference import Reference, ReferenceKind, escape_pointer_segment, unescape_pointer_segment
from specmodel.versions import SpecVersion

DEFAULT_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

SIMPLE_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "default",
    "maximum",
    "exclusiveMaximum",
    "minimum",
    "exclusiveMinimum",
    "maxLength",
    "minLength",
    "pattern",
    "maxItems",
    "minItems",
    "uniqueItems",
    "enum",
    "multipleOf",
)

V2_PATH_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")

_FLOW_NAMES = {
    "implicit": "implicit",
    "password": "password",
    "application": "client_credentials",
    "accessCode": "authorization_code",
}


def collection_format_style(
    collection_format: str, location: Optional[ParameterLocation]
) -> tuple[Optional[ParameterStyle], Optional[bool]]:
    """Map a Swagger ``collectionFormat`` to a ``(style, explode)`` pair."""
    if collection_format == "csv":
        if location in (ParameterLocation.PATH, ParameterLocation.HEADER):
            return ParameterStyle.SIMPLE, False
        return ParameterStyle.FORM, False
    if collection_format == "multi":
        return ParameterStyle.FORM, True
    if collection_format == "ssv":
        return ParameterStyle.SPACE_DELIMITED, False
    if collection_format == "pipes":
        return ParameterStyle.PIPE_DELIMITED, False
    return None, None


class OpenApiV2Deserializer(OpenApiV3Deserializer):
    """Reads Swagger 2.0 documents into the document model."""

    version = SpecVersion.V2_0

    document_required = ("info", "paths")
    schema_special_keys = ("x-nullable", "exclusiveMaximum", "exclusiveMinimum")
    nullable_key = "x-nullable"

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def prime_context(self, root: ParseNode, context: ParsingContext) -> None:
        mapping = root.as_map("document")
        context.state["consumes"] = self._media_types(mapping, "consumes", context)
        context.state["produces"] = self._media_types(mapping, "produces", context)
        context.state["parameters"] = mapping.get("parameters")

    def load_entity(self, kind: ReferenceKind, node: ParseNode, context: ParsingContext) -> Any:
        if kind is ReferenceKind.REQUEST_BODY:
            return self._load_body_parameter(node.as_map("parameter"), context.state.get("consumes") or [], context)
        return super().load_entity(kind, node, context)

    def load_document(self, node: ParseNode, context: ParsingContext) -> Document:
        """Populate ``context.document`` from a Swagger 2.0 root.

        Top level ``consumes`` and ``produces`` are kept on ``context.state`` so
        operations without their own lists inherit them.
        """
        root = node.as_map("document")
        document = context.document if context.document is not None else Document()
        context.document = document
        self.prime_context(root, context)

        document.servers = self._load_servers(root, context)
        components = self._load_components(root, context)
        if not components.is_empty():
            document.components = components

        fields: FieldMap = {
            "$self": set_str("self_uri"),
            "info": set_object("info", self.load_info),
            "jsonSchemaDialect": set_str("json_schema_dialect"),
            "paths": set_object("paths", self.load_paths),
            "webhooks": set_map("webhooks", self.load_path_item),
            "security": set_list("security", self.load_security_requirement),
            "tags": self._load_tags,
            "externalDocs": set_object("external_docs", self.load_external_docs),
        }
        parse_map(
            root,
            document,
            fields,
            context,
            "document",
            required=self.document_required,
            skip=(
                "swagger",
                "host",
                "basePath",
                "schemes",
                "consumes",
                "produces",
                "definitions",
                "parameters",
                "responses",
                "securityDefinitions",
            ),
        )
        return document

    @staticmethod
    def _media_types(mapping: MapNode, key: str, context: ParsingContext) -> list[str]:
        child = mapping.get(key)
        if child is None:
            return []
        try:
            return child.as_str_list()
        except ParseNodeError as exc:
            context.error(child.location, str(exc))
            return []

    @staticmethod
    def _load_servers(root: MapNode, context: ParsingContext) -> list[Server]:
        """Build one server per scheme from ``host`` and ``basePath``.

        Example::

            host: api.example.com
            basePath: /v1
            schemes: [https]
            # -> [Server(url="https://api.example.com/v1")]
        """
        host = root.get("host")
        base_path = root.get("basePath")
        if host is None and base_path is None:
            return []
        host_text = host.as_str() if host is not None else ""
        base_text = base_path.as_str() if base_path is not None else ""
        schemes_node = root.get("schemes")
        schemes = schemes_node.as_str_list() if schemes_node is not None else []

        if not host_text:
            return [Server(url=base_text or "/")]
        if not schemes:
            return [Server(url=f"//{host_text}{base_text}")]
        return [Server(url=f"{scheme}://{host_text}{base_text}") for scheme in schemes]

    def _load_components(self, root: MapNode, context: ParsingContext) -> Components:
        components = Components()

        definitions = root.get("definitions")
        if definitions is not None:
            components.schemas = load_map(definitions, context, self.load_schema, "definitions")
            for key, schema in components.schemas.items():
                self.register(ReferenceKind.SCHEMA, key, schema, f"{definitions.location}/{escape_pointer_segment(key)}", context)

        parameters = root.get("parameters")
        if parameters is not None:
            for key, child in parameters.as_map("parameters").items():
                mapping = child.as_map("parameter")
                location = mapping.get("in")
                kind = location.as_str() if location is not None else None
                if kind == "body":
                    body = self._load_body_parameter(mapping, context.state["consumes"], context)
                    components.request_bodies[key] = body
                    self.register(ReferenceKind.REQUEST_BODY, key, body, child.location, context)
                elif kind == "formData":
                    # Folded into each referencing operation's form body.
                    continue
                else:
                    parameter = self.load_parameter(mapping, context)
                    components.parameters[key] = parameter
                    self.register(ReferenceKind.PARAMETER, key, parameter, child.location, context)

        responses = root.get("responses")
        if responses is not None:
            context.state["operation_produces"] = context.state["produces"]
            components.responses = load_map(responses, context, self.load_response, "responses")
            for key, response in components.responses.items():
                self.register(ReferenceKind.RESPONSE, key, response, f"{responses.location}/{escape_pointer_segment(key)}", context)

        schemes = root.get("securityDefinitions")
        if schemes is not None:
            components.security_schemes = load_map(schemes, context, self.load_security_scheme, "securityDefinitions")
            for key, scheme in components.security_schemes.items():
                self.register(ReferenceKind.SECURITY_SCHEME, key, scheme, f"{schemes.location}/{escape_pointer_segment(key)}", context)

        return components

    # ------------------------------------------------------------------
    # Paths and operations
    # ------------------------------------------------------------------

    def _load_path_item_body(self, node: MapNode, context: ParsingContext) -> PathItem:
        fields: FieldMap = {method: self._operation_loader(method) for method in V2_PATH_METHODS}
        inherited = super().path_item_fields()
        fields["query"] = inherited["query"]
        fields["additionalOperations"] = inherited["additionalOperations"]
        item = parse_map(node, PathItem(), fields, context, "pathItem", skip=("parameters",))

        params_node = node.get("parameters")
        if params_node is not None:
            consumes = context.state.get("consumes") or []
            parameters, body = self._split_parameters(params_node, consumes, context)
            item.parameters = parameters
            if body is not None:
                for operation in item.operations.values():
                    if operation.request_body is None:
                        operation.request_body = body
        return item

    def load_operation(self, node: ParseNode, context: ParsingContext) -> Operation:
        """Load an operation, folding body and form parameters into a request body."""
        mapping = node.as_map("operation")
        consumes = self._media_types(mapping, "consumes", context) or context.state.get("consumes") or []
        produces = self._media_types(mapping, "produces", context) or context.state.get("produces") or []

        saved = context.state.get("operation_produces")
        context.state["operation_produces"] = produces
        try:
            fields = self.operation_fields()
            for key in ("requestBody", "callbacks", "servers"):
                fields.pop(key)
            operation = parse_map(
                mapping,
                Operation(),
                fields,
                context,
                "operation",
                required=("responses",),
                skip=("consumes", "produces", "parameters"),
            )
        finally:
            context.state["operation_produces"] = saved

        params_node = mapping.get("parameters")
        if params_node is not None:
            operation.parameters, operation.request_body = self._split_parameters(params_node, consumes, context)
        return operation

    def _split_parameters(
        self,
        node: ParseNode,
        consumes: list[str],
        context: ParsingContext,
    ) -> tuple[list[Parameter], Optional[RequestBody]]:
        """Separate body and form parameters from the rest of a parameter list."""
        parameters: list[Parameter] = []
        body: Optional[RequestBody] = None
        form: list[MapNode] = []

        for child in node.as_list("parameters"):
            try:
                mapping = child.as_map("parameter")
            except ParseNodeError as exc:
                context.error(exc.location, str(exc))
                continue
            pointer = mapping.get_reference()
            if pointer is not None:
                target = self._global_parameter(pointer, context)
                location = self._location_of(target)
                if location == "body":
                    body = RequestBody(reference=Reference.parse(pointer, ReferenceKind.REQUEST_BODY, self.version))
                elif location == "formData" and target is not None:
                    form.append(target)
                else:
                    parameters.append(self.load_parameter(mapping, context))
                continue

            location = self._location_of(mapping)
            if location == "body":
                body = self._load_body_parameter(mapping, consumes, context)
            elif location == "formData":
                form.append(mapping)
            else:
                parameters.append(self.load_parameter(mapping, context))

        if form and body is None:
            body = self._form_request_body(form, consumes, context)
        return parameters, body

    @staticmethod
    def _location_of(mapping: Optional[MapNode]) -> Optional[str]:
        if mapping is None:
            return None
        location = mapping.get("in")
        return location.as_str() if location is not None else None

    @staticmethod
    def _global_parameter(pointer: str, context: ParsingContext) -> Optional[MapNode]:
        prefix = "#/parameters/"
        parameters = context.state.get("parameters")
        if parameters is None or not pointer.startswith(prefix):
            return None
        target = parameters.as_map("parameters").get(unescape_pointer_segment(pointer[len(prefix):]))
        return target.as_map("parameter") if target is not None else None

    def _load_body_parameter(self, mapping: MapNode, consumes: list[str], context: ParsingContext) -> RequestBody:
        body = RequestBody()
        schema: Optional[Schema] = None
        for key, child in mapping.items():
            if key == "description":
                body.description = child.as_str()
            elif key == "required":
                body.required = child.as_bool()
            elif key == "schema":
                schema = self.load_schema(child, context)
            elif key == "name":
                body.extensions["x-bodyName"] = child.as_str()
            elif key == "in":
                continue
            else:
                body.extensions[key] = child.raw
        if schema is None:
            context.error(mapping.location, "The field 'schema' in 'parameter' object is REQUIRED.")
        media_types = [m for m in consumes if m not in FORM_MEDIA_TYPES] or [DEFAULT_MEDIA_TYPE]
        body.content = {media_type: MediaType(schema_=schema) for media_type in media_types}
        return body

    def _form_request_body(self, form: list[MapNode], consumes: list[str], context: ParsingContext) -> RequestBody:
        """Merge ``formData`` parameters into one object schema shared by each form media type."""
        schema = Schema(type=["object"], properties={})
        required: list[str] = []
        has_file = False
        for mapping in form:
            name_node = mapping.get("name")
            name = name_node.as_str() if name_node is not None else None
            if not name:
                context.error(mapping.location, "The field 'name' in 'parameter' object is REQUIRED.")
                continue
            property_schema = self._simple_schema(mapping, context)
            if property_schema.type == ["file"]:
                has_file = True
                property_schema.type = ["string"]
                property_schema.format = "binary"
            description = mapping.get("description")
            if description is not None:
                property_schema.description = description.as_str()
            schema.properties[name] = property_schema
            is_required = mapping.get("required")
            if is_required is not None and is_required.as_bool():
                required.append(name)
        if required:
            schema.required = required

        media_types = [m for m in consumes if m in FORM_MEDIA_TYPES]
        if not media_types:
            media_types = ["multipart/form-data" if has_file else "application/x-www-form-urlencoded"]
        return RequestBody(content={media_type: MediaType(schema_=schema) for media_type in media_types})

    def _simple_schema(self, mapping: MapNode, context: ParsingContext) -> Schema:
        """Build a schema from the ``type``/``format``/``items`` keys of a simple parameter."""
        raw = {key: value for key, value in mapping.raw.items() if key in SIMPLE_SCHEMA_KEYS}
        return self.load_schema(MapNode(raw, mapping.location, context), context)

    def parameter_fields(self) -> FieldMap:
        return {
            "name": set_str("name"),
            "in": set_enum("location", ParameterLocation, "parameter", "in"),
            "description": set_str("description"),
            "required": set_bool("required"),
            "allowEmptyValue": set_bool("allow_empty_value"),
            "collectionFormat": lambda o, n, c: None,
            "x-example": set_raw("example"),
        }

    def _load_parameter_body(self, node: MapNode, context: ParsingContext) -> Parameter:
        parameter = parse_map(
            node,
            Parameter(),
            self.parameter_fields(),
            context,
            "parameter",
            required=("name", "in"),
            skip=SIMPLE_SCHEMA_KEYS,
        )
        if "type" in node:
            parameter.schema_ = self._simple_schema(node, context)

        collection_format = node.get("collectionFormat")
        if collection_format is not None:
            text = collection_format.as_str() or ""
            style, explode = collection_format_style(text, parameter.location)
            if style is None:
                parameter.extensions["collectionFormat"] = text
            else:
                parameter.style = style
                parameter.explode = explode
        return parameter

    # ------------------------------------------------------------------
    # Responses and headers
    # ------------------------------------------------------------------

    def _load_response_body(self, node: MapNode, context: ParsingContext) -> Response:
        response = Response()
        produces = context.state.get("operation_produces") or [DEFAULT_MEDIA_TYPE]
        schema: Optional[Schema] = None
        examples: dict[str, Any] = {}
        fields: FieldMap = {
            "description": set_str("description"),
            "headers": lambda o, n, c: setattr(o, "headers", load_map(n, c, self.load_header, "headers")),
        }
        parse_map(node, response, fields, context, "response", required=("description",), skip=("schema", "examples"))

        schema_node = node.get("schema")
        if schema_node is not None:
            schema = self.load_schema(schema_node, context)
        examples_node = node.get("examples")
        if examples_node is not None:
            examples = examples_node.as_map("examples").raw

        if schema is not None:
            for media_type in produces:
                response.content[media_type] = MediaType(schema_=schema)
        for media_type, example in examples.items():
            media = response.content.setdefault(media_type, MediaType())
            media.example = example
        return response

    def _load_header_body(self, node: MapNode, context: ParsingContext) -> Header:
        header = Header()
        fields: FieldMap = {
            "description": set_str("description"),
            "collectionFormat": lambda o, n, c: None,
        }
        parse_map(node, header, fields, context, "header", skip=SIMPLE_SCHEMA_KEYS)
        header.schema_ = self._simple_schema(node, context)
        collection_format = node.get("collectionFormat")
        if collection_format is not None and (collection_format.as_str() or "") != "csv":
            header.extensions["collectionFormat"] = collection_format.as_str()
        return header

    # ------------------------------------------------------------------
    # Security
    # ------------------------------------------------------------------

    def _load_security_scheme_body(self, node: MapNode, context: ParsingContext) -> SecurityScheme:
        scheme = SecurityScheme()
        flow = OAuthFlow()
        flow_name: Optional[str] = None

        def set_type(target: SecurityScheme, child: ParseNode, ctx: ParsingContext) -> None:
            value = child.as_str()
            if value == "basic":
                target.type = SecuritySchemeType.HTTP
                target.scheme = "basic"
            elif value == "apiKey":
                target.type = SecuritySchemeType.API_KEY
            elif value == "oauth2":
                target.type = SecuritySchemeType.OAUTH2
            else:
                ctx.error(child.location, f"'{value}' is not a valid value for 'type'.")

        def set_flow(target: SecurityScheme, child: ParseNode, ctx: ParsingContext) -> None:
            nonlocal flow_name
            flow_name = child.as_str()

        fields: FieldMap = {
            "type": set_type,
            "description": set_str("description"),
            "name": set_str("name"),
            "in": set_str("location"),
            "flow": set_flow,
            "authorizationUrl": lambda o, n, c: setattr(flow, "authorization_url", n.as_str()),
            "tokenUrl": lambda o, n, c: setattr(flow, "token_url", n.as_str()),
            "scopes": lambda o, n, c: set_str_map("scopes")(flow, n, c),
        }
        parse_map(node, scheme, fields, context, "securityScheme", required=("type",))

        if scheme.type is SecuritySchemeType.OAUTH2:
            attr = _FLOW_NAMES.get(flow_name or "")
            if attr is None:
                context.error(node.location, f"'{flow_name}' is not a valid value for 'flow'.")
            else:
                scheme.flows = OAuthFlows(**{attr: flow})
        return scheme

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def schema_fields(self) -> FieldMap:
        fields = super().schema_fields()
        fields["discriminator"] = lambda o, n, c: setattr(o, "discriminator", Discriminator(property_name=n.as_str()))
        return fields
