"""Tests for specmodel.writer.v31 -- writing OpenAPI 3.1 and 3.2 documents."""

from __future__ import annotations

from specmodel.api import read_document, resolve
from specmodel.models import (
    Components,
    Document,
    Info,
    MediaType,
    Operation,
    PathItem,
    Paths,
    Response,
    Responses,
    Schema,
    Tag,
)
from specmodel.reference import Reference, ReferenceKind
from specmodel.writer import to_dict
from specmodel.writer.v31 import OpenApiV31Serializer


def _info() -> Info:
    return Info(title="t", version="1")


def _media_type_document() -> Document:
    events = MediaType(item_schema=Schema(type=["object"]))
    proxy = MediaType(reference=Reference(kind=ReferenceKind.MEDIA_TYPE, id="Events"))
    operation = Operation(
        responses=Responses(codes={"200": Response(description="ok", content={"application/x-ndjson": proxy})})
    )
    document = Document(
        info=_info(),
        paths=Paths(path_items={"/events": PathItem(operations={"get": operation})}),
        components=Components(media_types={"Events": events}),
    )
    resolve(document)
    return document


# ---------------------------------------------------------------------------
# OpenAPI 3.1 output
# ---------------------------------------------------------------------------


class TestPetstore31:
    """Writing the 3.1 petstore back as 3.1."""

    def test_version_string(self, petstore_31) -> None:
        assert to_dict(petstore_31.document, "3.1")["openapi"] == "3.1.2"

    def test_reference_summary_and_description(self, petstore_31) -> None:
        out = to_dict(petstore_31.document, "3.1")
        schema = out["paths"]["/pets"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]
        assert schema["items"] == {
            "$ref": "#/components/schemas/Pet",
            "summary": "A pet",
            "description": "One pet of the store",
        }

    def test_type_forms(self, petstore_31) -> None:
        properties = to_dict(petstore_31.document, "3.1")["components"]["schemas"]["Pet"]["properties"]
        assert properties["name"] == {"type": "string"}
        assert properties["tag"] == {"type": ["string", "null"]}
        assert properties["id"] == {"type": "integer", "exclusiveMinimum": 0}
        assert properties["kind"] == {"const": "dog"}

    def test_webhook_reference(self, petstore_31) -> None:
        out = to_dict(petstore_31.document, "3.1")
        assert out["webhooks"] == {"newPet": {"$ref": "#/components/pathItems/NewPet"}}
        assert "post" in out["components"]["pathItems"]["NewPet"]

    def test_info_fields_native(self, petstore_31) -> None:
        info = to_dict(petstore_31.document, "3.1")["info"]
        assert info["summary"] == "A pet store with webhooks"
        assert info["license"]["identifier"] == "Apache-2.0"


class TestUpgradeFrom30:
    """3.0 semantics rewritten in 3.1 form."""

    def test_schemas(self, petstore_30) -> None:
        properties = to_dict(petstore_30.document, "3.1")["components"]["schemas"]["Pet"]["properties"]
        assert properties["id"] == {"type": "integer", "format": "int64", "exclusiveMinimum": 0}
        assert properties["tag"] == {"type": ["string", "null"]}

    def test_paths_optional(self) -> None:
        assert "paths" not in to_dict(Document(info=_info()), "3.1")

    def test_nullable_extension_of_untyped_schema(self) -> None:
        schema = Schema(extensions={"nullable": True})
        assert OpenApiV31Serializer().write_schema(schema) == {"nullable": True}


# ---------------------------------------------------------------------------
# 3.2 fields
# ---------------------------------------------------------------------------


class TestThreeTwoFields:
    """3.2 fields are native in 3.2 and shimmed in 3.1."""

    def test_self_uri(self) -> None:
        document = Document(self_uri="https://example.com/api.yaml", info=_info())
        assert to_dict(document, "3.2")["$self"] == "https://example.com/api.yaml"
        out = to_dict(document, "3.1")
        assert "$self" not in out
        assert out["x-oai-$self"] == "https://example.com/api.yaml"

    def test_self_uri_reads_back(self) -> None:
        document = Document(self_uri="https://example.com/api.yaml", info=_info())
        reread, diagnostics = read_document(to_dict(document, "3.1"))
        assert reread.self_uri == "https://example.com/api.yaml"
        assert reread.extensions == {}
        assert len(diagnostics) == 0

    def test_tag_fields(self) -> None:
        document = Document(info=_info(), tags=[Tag(name="cats", parent="animals", kind="nav")])
        assert to_dict(document, "3.2")["tags"] == [{"name": "cats", "parent": "animals", "kind": "nav"}]
        assert to_dict(document, "3.1")["tags"] == [
            {"name": "cats", "x-oai-parent": "animals", "x-oai-kind": "nav"}
        ]

    def test_additional_operations(self) -> None:
        item = PathItem(additional_operations={"COPY": Operation(operation_id="copy")})
        document = Document(info=_info(), paths=Paths(path_items={"/f": item}))
        assert to_dict(document, "3.2")["paths"]["/f"] == {"additionalOperations": {"COPY": {"operationId": "copy"}}}
        assert to_dict(document, "3.1")["paths"]["/f"] == {"x-oai-additionalOperations": {"COPY": {"operationId": "copy"}}}

    def test_response_summary(self) -> None:
        response = Response(summary="Short", description="Long")
        assert OpenApiV31Serializer().write_response(response) == {
            "x-oai-summary": "Short",
            "description": "Long",
        }

    def test_media_type_components(self) -> None:
        document = _media_type_document()
        out = to_dict(document, "3.2")
        content = out["paths"]["/events"]["get"]["responses"]["200"]["content"]
        assert content["application/x-ndjson"] == {"$ref": "#/components/mediaTypes/Events"}
        assert out["components"]["mediaTypes"] == {"Events": {"itemSchema": {"type": "object"}}}

    def test_media_type_components_inlined_before_32(self) -> None:
        document = _media_type_document()
        out = to_dict(document, "3.1")
        content = out["paths"]["/events"]["get"]["responses"]["200"]["content"]
        assert content["application/x-ndjson"] == {"x-oai-itemSchema": {"type": "object"}}
        assert out["components"] == {"x-oai-mediaTypes": {"Events": {"x-oai-itemSchema": {"type": "object"}}}}
