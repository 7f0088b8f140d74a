"""Writer for Swagger 2.0 documents.

The inverse of :mod:`specmodel.parser.v2`:

* the first server becomes ``host``/``basePath``/``schemes``; servers on
  other hosts are dropped;
* request bodies become a ``body`` parameter (named from ``x-bodyName``) or,
  for form media types, one ``formData`` parameter per schema property;
* response content collapses to a single ``schema`` plus ``examples`` keyed
  by media type, and the media types are listed in ``consumes``/``produces``;
* ``style``/``explode`` of array parameters become ``collectionFormat``;
* nullable schemas use ``x-nullable``, discriminators are property names.

Callbacks, links, operation and path item servers, and the component
sections 2.0 has no place for are not written; references to such
components are replaced by their resolved targets.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from specmodel.models import (
    Components,
    Discriminator,
    Document,
    Header,
    MediaType,
    OAuthFlow,
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
from specmodel.parser.v2 import FORM_MEDIA_TYPES, SIMPLE_SCHEMA_KEYS, V2_PATH_METHODS
from specmodel.reference import Reference
from specmodel.versions import SpecVersion
from specmodel.writer.v3 import OpenApiV3Serializer, enum_value

logger = logging.getLogger(__name__)

_COLLECTION_FORMATS = {
    ParameterStyle.SIMPLE: "csv",
    ParameterStyle.SPACE_DELIMITED: "ssv",
    ParameterStyle.PIPE_DELIMITED: "pipes",
}

_FLOW_NAMES = (
    ("implicit", "implicit"),
    ("password", "password"),
    ("client_credentials", "application"),
    ("authorization_code", "accessCode"),
)


def _server_url(server: Server) -> str:
    url = server.url or ""
    for name, variable in server.variables.items():
        if variable.default is not None:
            url = url.replace("{" + name + "}", variable.default)
    return url


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def collection_format(parameter: Parameter) -> Optional[str]:
    """Map a parameter's ``style``/``explode`` back to a ``collectionFormat``."""
    if parameter.style is ParameterStyle.FORM:
        return "csv" if parameter.explode is False else "multi"
    if parameter.style is None:
        return None
    return _COLLECTION_FORMATS.get(parameter.style)


class OpenApiV2Serializer(OpenApiV3Serializer):
    """Serialize the document model as a Swagger 2.0 dictionary."""

    version = SpecVersion.V2_0
    version_key = "swagger"
    nullable_key = "x-nullable"

    def has_pointer(self, reference: Reference) -> bool:
        return reference.to_string(self.version) is not None

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
        self._write_servers(out, document.servers)
        out["paths"] = self.write_paths(document.paths) if document.paths is not None else {}
        self.put_map(out, "document", "webhooks", document.webhooks, self.write_path_item)
        if document.components is not None:
            self._write_components(out, document.components)
        if document.security is not None:
            out["security"] = [self.write_security_requirement(r) for r in document.security]
        self.put_list(out, "document", "tags", document.tags, self.write_tag)
        if document.external_docs is not None:
            out["externalDocs"] = self.write_external_docs(document.external_docs)
        return self.finish(out, document)

    @staticmethod
    def _write_servers(out: dict[str, Any], servers: list[Server]) -> None:
        if not servers:
            return
        urls = [urlparse(_server_url(server)) for server in servers]
        first = urls[0]
        if first.netloc:
            out["host"] = first.netloc
        if first.path:
            out["basePath"] = first.path
        matching = [url for url in urls if url.netloc == first.netloc]
        schemes = _unique([url.scheme for url in matching if url.scheme])
        if schemes:
            out["schemes"] = schemes
        if len(matching) < len(urls):
            logger.debug("Dropped %d servers not on host %r", len(urls) - len(matching), first.netloc)

    def _write_components(self, out: dict[str, Any], components: Components) -> None:
        if components.schemas:
            out["definitions"] = {
                key: self.referenceable(schema, self._write_schema_body, component_key=key)
                for key, schema in components.schemas.items()
            }

        parameters: dict[str, Any] = {}
        for key, parameter in components.parameters.items():
            parameters[key] = self.referenceable(parameter, self._write_parameter_body, component_key=key)
        for key, body in components.request_bodies.items():
            parameters.setdefault(key, self.referenceable(body, self._write_body_parameter, component_key=key))
        if parameters:
            out["parameters"] = parameters

        if components.responses:
            out["responses"] = {
                key: self.referenceable(response, self._write_response_body, component_key=key)
                for key, response in components.responses.items()
            }

        definitions: dict[str, Any] = {}
        for key, scheme in components.security_schemes.items():
            if self._expressible_scheme(scheme.resolved):
                definitions[key] = self.referenceable(scheme, self._write_security_scheme_body, component_key=key)
            else:
                logger.debug("Security scheme %r has no Swagger 2.0 form; not written", key)
        if definitions:
            out["securityDefinitions"] = definitions

    # ------------------------------------------------------------------
    # Paths and operations
    # ------------------------------------------------------------------

    def _write_path_item_body(self, item: PathItem) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "pathItem", "summary", item.summary)
        self.put(out, "pathItem", "description", item.description)
        for method in V2_PATH_METHODS:
            operation = item.operations.get(method)
            if operation is not None:
                out[method] = self.write_operation(operation)
        if item.query is not None:
            self.put(out, "pathItem", "query", self.write_operation(item.query))
        self.put_map(out, "pathItem", "additionalOperations", item.additional_operations, self.write_operation)
        parameters = [self.write_parameter(p) for p in item.parameters if self._expressible_parameter(p)]
        if parameters:
            out["parameters"] = parameters
        return self.finish(out, item)

    def write_operation(self, operation: Operation) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "operation", "tags", self.tag_names(operation) or None)
        self.put(out, "operation", "summary", operation.summary)
        self.put(out, "operation", "description", operation.description)
        if operation.external_docs is not None:
            out["externalDocs"] = self.write_external_docs(operation.external_docs)
        self.put(out, "operation", "operationId", operation.operation_id)

        body = operation.request_body.resolved if operation.request_body is not None else None
        if body is not None and body.content:
            out["consumes"] = list(body.content)
        produces = self._produces(operation)
        if produces:
            out["produces"] = produces

        parameters = [self.write_parameter(p) for p in operation.parameters if self._expressible_parameter(p)]
        if operation.request_body is not None:
            parameters.extend(self._write_request_body_parameters(operation.request_body))
        if parameters:
            out["parameters"] = parameters
        if operation.responses is not None:
            out["responses"] = self.write_responses(operation.responses)
        self.put(out, "operation", "deprecated", operation.deprecated)
        if operation.security is not None:
            out["security"] = [self.write_security_requirement(r) for r in operation.security]
        return self.finish(out, operation)

    @staticmethod
    def _produces(operation: Operation) -> list[str]:
        if operation.responses is None:
            return []
        media_types: list[str] = []
        for response in operation.responses.codes.values():
            media_types.extend(response.resolved.content)
        return _unique(media_types)

    @staticmethod
    def _expressible_parameter(parameter: Parameter) -> bool:
        if parameter.resolved.location is ParameterLocation.COOKIE:
            logger.debug("Cookie parameter %r has no Swagger 2.0 form; not written", parameter.resolved.name)
            return False
        return True

    def _simple_schema(self, schema: Optional[Schema]) -> dict[str, Any]:
        """Flatten a schema into the ``type``/``format``/``items`` keys of a 2.0 parameter."""
        if schema is None:
            return {}
        body = self._inline(schema.resolved, self._write_schema_body)
        return {key: value for key, value in body.items() if key in SIMPLE_SCHEMA_KEYS}

    def _write_parameter_body(self, parameter: Parameter) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "parameter", "name", parameter.name)
        self.put(out, "parameter", "in", self.check_value("parameter", "in", parameter.location))
        self.put(out, "parameter", "description", parameter.description)
        self.put(out, "parameter", "required", parameter.required)
        self.put(out, "parameter", "allowEmptyValue", parameter.allow_empty_value)
        self.check_value("parameter", "style", parameter.style)

        schema = parameter.schema_
        if schema is None:
            schema = next((media.resolved.schema_ for media in parameter.content.values()), None)
        out.update(self._simple_schema(schema))
        if out.get("type") == "array":
            fmt = collection_format(parameter)
            if fmt is not None:
                out["collectionFormat"] = fmt
        if parameter.has_value("example"):
            out["x-example"] = parameter.example
        return self.finish(out, parameter)

    def _write_request_body_parameters(self, body: RequestBody) -> list[dict[str, Any]]:
        resolved = body.resolved
        form = [media for name, media in resolved.content.items() if name in FORM_MEDIA_TYPES]
        if form and len(form) == len(resolved.content):
            return self._write_form_parameters(form[0].resolved)
        return [self.referenceable(body, self._write_body_parameter)]

    def _write_body_parameter(self, body: RequestBody) -> dict[str, Any]:
        out: dict[str, Any] = {"name": body.extensions.get("x-bodyName") or "body", "in": "body"}
        self.put(out, "parameter", "description", body.description)
        self.put(out, "parameter", "required", body.required)
        media: Optional[MediaType] = next(
            (m.resolved for name, m in body.content.items() if name not in FORM_MEDIA_TYPES),
            None,
        )
        schema = media.schema_ if media is not None else None
        out["schema"] = self.write_schema(schema) if schema is not None else {}
        for key, value in body.extensions.items():
            if key != "x-bodyName":
                out.setdefault(key, value)
        return out

    def _write_form_parameters(self, media: MediaType) -> list[dict[str, Any]]:
        schema = media.schema_.resolved if media.schema_ is not None else None
        if schema is None or not schema.properties:
            return []
        required = set(schema.required or [])
        parameters: list[dict[str, Any]] = []
        for name, prop in schema.properties.items():
            out: dict[str, Any] = {"name": name, "in": "formData"}
            resolved = prop.resolved
            if resolved.description is not None:
                out["description"] = resolved.description
            if name in required:
                out["required"] = True
            simple = self._simple_schema(prop)
            if simple.get("type") == "string" and simple.get("format") == "binary":
                simple = {"type": "file"}
            out.update(simple)
            parameters.append(out)
        return parameters

    # ------------------------------------------------------------------
    # Responses and headers
    # ------------------------------------------------------------------

    def _write_response_body(self, response: Response) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "response", "summary", response.summary)
        out["description"] = response.description or ""
        media = next((m.resolved for m in response.content.values() if m.resolved.schema_ is not None), None)
        if media is not None:
            out["schema"] = self.write_schema(media.schema_)  # type: ignore[arg-type]
        examples = {
            name: m.resolved.example for name, m in response.content.items() if m.resolved.has_value("example")
        }
        if examples:
            out["examples"] = examples
        self.put_map(out, "response", "headers", response.headers, self.write_header)
        return self.finish(out, response)

    def _write_header_body(self, header: Header) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.put(out, "header", "description", header.description)
        out.update(self._simple_schema(header.schema_))
        return self.finish(out, header)

    # ------------------------------------------------------------------
    # Security
    # ------------------------------------------------------------------

    @staticmethod
    def _expressible_scheme(scheme: SecurityScheme) -> bool:
        if scheme.type is SecuritySchemeType.HTTP:
            return (scheme.scheme or "").lower() == "basic"
        return scheme.type in (SecuritySchemeType.API_KEY, SecuritySchemeType.OAUTH2)

    def _write_security_scheme_body(self, scheme: SecurityScheme) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if scheme.type is SecuritySchemeType.HTTP:
            out["type"] = "basic"
        else:
            out["type"] = enum_value(scheme.type)
        self.put(out, "securityScheme", "description", scheme.description)
        self.put(out, "securityScheme", "name", scheme.name)
        self.put(out, "securityScheme", "in", scheme.location)
        if scheme.flows is not None:
            for attr, name in _FLOW_NAMES:
                flow: Optional[OAuthFlow] = getattr(scheme.flows, attr)
                if flow is not None:
                    out["flow"] = name
                    self.put(out, "oauthFlow", "authorizationUrl", flow.authorization_url)
                    self.put(out, "oauthFlow", "tokenUrl", flow.token_url)
                    out["scopes"] = dict(flow.scopes)
                    break
        self.put(out, "securityScheme", "oauth2MetadataUrl", scheme.oauth2_metadata_url)
        self.put(out, "securityScheme", "deprecated", scheme.deprecated)
        return self.finish(out, scheme)

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def write_discriminator(self, discriminator: Discriminator) -> Any:
        return discriminator.property_name
