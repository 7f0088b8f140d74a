"""Tests for specmodel.writer.v2 -- writing Swagger 2.0 documents."""

from __future__ import annotations

import pytest

from specmodel.exceptions import VersionGatedFeatureError
from specmodel.models import (
    Callback,
    Components,
    Document,
    Info,
    MediaType,
    Operation,
    Parameter,
    ParameterLocation,
    ParameterStyle,
    PathItem,
    Paths,
    RequestBody,
    Response,
    Responses,
    Schema,
    SecurityScheme,
    SecuritySchemeType,
    Server,
)
from specmodel.writer import to_dict
from specmodel.writer.v2 import collection_format


def _document(operation: Operation, **extra) -> Document:
    return Document(
        info=Info(title="t", version="1"),
        paths=Paths(path_items={"/a": PathItem(operations={"post": operation})}),
        **extra,
    )


def _operation(out: dict) -> dict:
    return out["paths"]["/a"]["post"]


# ---------------------------------------------------------------------------
# Documents read from 2.0
# ---------------------------------------------------------------------------


class TestPetstore20:
    """Writing the Swagger petstore back as 2.0."""

    def test_document_header(self, petstore_20) -> None:
        out = to_dict(petstore_20.document, "2.0")
        assert out["swagger"] == "2.0"
        assert "openapi" not in out
        assert out["host"] == "petstore.example.com"
        assert out["basePath"] == "/v1"
        assert out["schemes"] == ["https", "http"]

    def test_definitions(self, petstore_20) -> None:
        pet = to_dict(petstore_20.document, "2.0")["definitions"]["Pet"]
        assert pet["discriminator"] == "petType"
        assert pet["properties"]["nickname"] == {"type": "string", "x-nullable": True}

    def test_simple_parameter(self, petstore_20) -> None:
        limit = to_dict(petstore_20.document, "2.0")["parameters"]["limit"]
        assert limit == {"name": "limit", "in": "query", "type": "integer", "format": "int32", "x-example": 25}

    def test_body_parameter_component(self, petstore_20) -> None:
        body = to_dict(petstore_20.document, "2.0")["parameters"]["petBody"]
        assert body == {
            "name": "pet",
            "in": "body",
            "description": "Pet to add",
            "required": True,
            "schema": {"$ref": "#/definitions/Pet"},
        }

    def test_body_reference_and_consumes(self, petstore_20) -> None:
        post = to_dict(petstore_20.document, "2.0")["paths"]["/pets"]["post"]
        assert post["consumes"] == ["application/json"]
        assert post["produces"] == ["application/json"]
        assert post["parameters"] == [{"$ref": "#/parameters/petBody"}]
        assert post["security"] == [{"petstore_auth": ["write:pets"]}]

    def test_collection_format_and_parameter_reference(self, petstore_20) -> None:
        get = to_dict(petstore_20.document, "2.0")["paths"]["/pets"]["get"]
        assert get["parameters"] == [
            {"name": "tags", "in": "query", "type": "array", "items": {"type": "string"}, "collectionFormat": "multi"},
            {"$ref": "#/parameters/limit"},
        ]
        assert get["responses"]["200"]["examples"] == {"application/json": [{"id": 1, "name": "Rex"}]}

    def test_form_data_parameters(self, petstore_20) -> None:
        post = to_dict(petstore_20.document, "2.0")["paths"]["/pets/{petId}/photo"]["post"]
        assert post["consumes"] == ["multipart/form-data"]
        assert post["parameters"] == [
            {"name": "petId", "in": "path", "required": True, "type": "integer", "format": "int64"},
            {"name": "caption", "in": "formData", "description": "Photo caption", "type": "string"},
            {"name": "file", "in": "formData", "required": True, "type": "file"},
        ]

    def test_security_definitions(self, petstore_20) -> None:
        definitions = to_dict(petstore_20.document, "2.0")["securityDefinitions"]
        assert definitions["basic"] == {"type": "basic"}
        assert definitions["petstore_auth"] == {
            "type": "oauth2",
            "flow": "implicit",
            "authorizationUrl": "https://petstore.example.com/oauth/dialog",
            "scopes": {"write:pets": "modify pets", "read:pets": "read pets"},
        }


# ---------------------------------------------------------------------------
# Downgrading 3.0 to 2.0
# ---------------------------------------------------------------------------


class TestDowngradeFrom30:
    """3.0 constructs rewritten in Swagger form."""

    def test_servers(self, petstore_30) -> None:
        out = to_dict(petstore_30.document, "2.0")
        assert out["host"] == "petstore.example.com"
        assert out["basePath"] == "/v1"
        assert out["schemes"] == ["https"]
        assert "servers" not in out

    def test_schemas(self, petstore_30) -> None:
        pet = to_dict(petstore_30.document, "2.0")["definitions"]["Pet"]
        assert pet["properties"]["id"] == {
            "type": "integer",
            "format": "int64",
            "minimum": 0,
            "exclusiveMinimum": True,
        }
        assert pet["properties"]["tag"] == {"type": "string", "x-nullable": True}

    def test_parameter_schema_is_flattened(self, petstore_30) -> None:
        limit = to_dict(petstore_30.document, "2.0")["parameters"]["limit"]
        assert limit == {
            "name": "limit",
            "in": "query",
            "description": "How many items to return at one time (max 100)",
            "required": False,
            "type": "integer",
            "format": "int32",
            "default": 20,
        }

    def test_request_body_becomes_body_parameter(self, petstore_30) -> None:
        post = to_dict(petstore_30.document, "2.0")["paths"]["/pets"]["post"]
        assert post["consumes"] == ["application/json"]
        assert post["parameters"] == [
            {"name": "body", "in": "body", "required": True, "schema": {"$ref": "#/definitions/Pet"}}
        ]

    def test_responses(self, petstore_30) -> None:
        out = to_dict(petstore_30.document, "2.0")
        get = out["paths"]["/pets"]["get"]
        assert get["responses"]["default"] == {"$ref": "#/responses/Error"}
        assert get["responses"]["200"]["schema"] == {"$ref": "#/definitions/Pets"}
        assert out["responses"]["Error"]["schema"] == {"$ref": "#/definitions/Error"}

    def test_api_key_scheme(self, petstore_30) -> None:
        definitions = to_dict(petstore_30.document, "2.0")["securityDefinitions"]
        assert definitions == {"api_key": {"type": "apiKey", "name": "X-API-Key", "in": "header"}}


# ---------------------------------------------------------------------------
# Constructs Swagger cannot express
# ---------------------------------------------------------------------------


class TestDroppedConstructs:
    """Constructs without a 2.0 form are left out."""

    def test_cookie_parameters(self) -> None:
        operation = Operation(
            parameters=[
                Parameter(name="c", location=ParameterLocation.COOKIE),
                Parameter(name="q", location=ParameterLocation.QUERY),
            ]
        )
        assert _operation(to_dict(_document(operation), "2.0"))["parameters"] == [{"name": "q", "in": "query"}]

    def test_unsupported_security_schemes(self) -> None:
        components = Components(
            security_schemes={
                "oidc": SecurityScheme(
                    type=SecuritySchemeType.OPENID_CONNECT, open_id_connect_url="https://id/.well-known"
                ),
                "bearer": SecurityScheme(type=SecuritySchemeType.HTTP, scheme="bearer"),
                "tls": SecurityScheme(type=SecuritySchemeType.MUTUAL_TLS),
                "basic": SecurityScheme(type=SecuritySchemeType.HTTP, scheme="basic"),
            }
        )
        out = to_dict(_document(Operation(), components=components), "2.0")
        assert out["securityDefinitions"] == {"basic": {"type": "basic"}}

    def test_servers_on_other_hosts(self) -> None:
        servers = [
            Server(url="https://a.example.com/v1"),
            Server(url="https://b.example.com/v2"),
            Server(url="http://a.example.com/v1"),
        ]
        out = to_dict(_document(Operation(), servers=servers), "2.0")
        assert out["host"] == "a.example.com"
        assert out["schemes"] == ["https", "http"]

    def test_callbacks_and_trace(self) -> None:
        operation = Operation(callbacks={"onEvent": Callback(path_items={"{$request.body#/url}": PathItem()})})
        item = PathItem(operations={"post": operation, "trace": Operation(operation_id="trace")})
        document = Document(info=Info(title="t", version="1"), paths=Paths(path_items={"/a": item}))
        path = to_dict(document, "2.0")["paths"]["/a"]
        assert list(path) == ["post"]
        assert "callbacks" not in path["post"]

    def test_querystring_is_refused(self) -> None:
        operation = Operation(parameters=[Parameter(name="q", location=ParameterLocation.QUERYSTRING)])
        with pytest.raises(VersionGatedFeatureError, match="OpenAPI 2.0"):
            to_dict(_document(operation), "2.0")


class TestRequestBodies:
    """Request bodies written as ``body`` or ``formData`` parameters."""

    def test_body_name_and_media_type(self) -> None:
        body = RequestBody(
            content={"application/xml": MediaType(schema_=Schema(type=["string"]))},
            extensions={"x-bodyName": "payload"},
        )
        operation = _operation(to_dict(_document(Operation(request_body=body)), "2.0"))
        assert operation["consumes"] == ["application/xml"]
        assert operation["parameters"] == [{"name": "payload", "in": "body", "schema": {"type": "string"}}]

    def test_urlencoded_form(self) -> None:
        schema = Schema(
            type=["object"],
            required=["name"],
            properties={"name": Schema(type=["string"]), "age": Schema(type=["integer"])},
        )
        body = RequestBody(content={"application/x-www-form-urlencoded": MediaType(schema_=schema)})
        operation = _operation(to_dict(_document(Operation(request_body=body)), "2.0"))
        assert operation["consumes"] == ["application/x-www-form-urlencoded"]
        assert operation["parameters"] == [
            {"name": "name", "in": "formData", "required": True, "type": "string"},
            {"name": "age", "in": "formData", "type": "integer"},
        ]

    def test_produces_from_responses(self) -> None:
        responses = Responses(
            codes={
                "200": Response(description="ok", content={"text/csv": MediaType(schema_=Schema(type=["string"]))}),
                "404": Response(description="missing", content={"application/json": MediaType()}),
            }
        )
        operation = _operation(to_dict(_document(Operation(responses=responses)), "2.0"))
        assert operation["produces"] == ["text/csv", "application/json"]
        assert operation["responses"]["200"] == {"description": "ok", "schema": {"type": "string"}}
        assert operation["responses"]["404"] == {"description": "missing"}


# ---------------------------------------------------------------------------
# collectionFormat
# ---------------------------------------------------------------------------


class TestCollectionFormat:
    """``style``/``explode`` mapped back to ``collectionFormat``."""

    @pytest.mark.parametrize(
        "style,explode,expected",
        [
            (ParameterStyle.FORM, None, "multi"),
            (ParameterStyle.FORM, True, "multi"),
            (ParameterStyle.FORM, False, "csv"),
            (ParameterStyle.SIMPLE, None, "csv"),
            (ParameterStyle.SPACE_DELIMITED, None, "ssv"),
            (ParameterStyle.PIPE_DELIMITED, None, "pipes"),
            (ParameterStyle.DEEP_OBJECT, None, None),
            (None, None, None),
        ],
    )
    def test_collection_format(self, style, explode, expected) -> None:
        assert collection_format(Parameter(style=style, explode=explode)) == expected

    def test_written_for_arrays_only(self) -> None:
        operation = Operation(
            parameters=[
                Parameter(
                    name="ids",
                    location=ParameterLocation.QUERY,
                    style=ParameterStyle.PIPE_DELIMITED,
                    schema_=Schema(type=["array"], items=Schema(type=["string"])),
                ),
                Parameter(
                    name="n",
                    location=ParameterLocation.QUERY,
                    style=ParameterStyle.FORM,
                    schema_=Schema(type=["integer"]),
                ),
            ]
        )
        parameters = _operation(to_dict(_document(operation), "2.0"))["parameters"]
        assert parameters == [
            {"name": "ids", "in": "query", "type": "array", "items": {"type": "string"}, "collectionFormat": "pipes"},
            {"name": "n", "in": "query", "type": "integer"},
        ]
