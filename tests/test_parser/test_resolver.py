"""Tests for specmodel.parser.resolver -- linking ``$ref`` references in place."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

from specmodel.api import load, parse, read_document, resolve
from specmodel.config import ReaderSettings, ReferenceResolution
from specmodel.exceptions import ReferenceFetchError
from specmodel.parser.reader import read_tree
from specmodel.parser.resolver import ReferenceResolver
from specmodel.reference import ReferenceKind, ReferenceState
from specmodel.walker import walk
from specmodel.workspace import Workspace

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _doc(**extra: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {"openapi": "3.1.0", "info": {"title": "T", "version": "1"}}
    raw.update(extra)
    return raw


def _ok(schema: dict[str, Any]) -> dict[str, Any]:
    return {"responses": {"200": {"description": "ok", "content": {"application/json": {"schema": schema}}}}}


class FakeFetcher:
    """Serves token trees from a dict and records what was requested."""

    def __init__(self, documents: dict[str, Any]) -> None:
        self.documents = documents
        self.requested: list[str] = []

    def __call__(self, uri: str) -> Any:
        self.requested.append(uri)
        if uri not in self.documents:
            raise ReferenceFetchError(f"Document file not found: {uri}")
        return self.documents[uri]


# ---------------------------------------------------------------------------
# Local references
# ---------------------------------------------------------------------------


class TestLocalResolution:
    """References within one document."""

    def test_cycles_terminate(self, cyclic_raw: dict[str, Any]) -> None:
        document, diagnostics = read_document(cyclic_raw)
        node = document.components.schemas["Node"]
        assert len(diagnostics) == 0
        assert node.properties["parent"].resolved is node
        assert node.properties["children"].items.resolved is node
        assert node.reference.state is ReferenceState.RESOLVED

    def test_cyclic_graph_can_be_walked(self, cyclic_raw: dict[str, Any]) -> None:
        document, _ = read_document(cyclic_raw)
        assert sum(1 for _ in walk(document)) > 0

    def test_unresolved_reference_warns(self) -> None:
        raw = _doc(paths={"/a": {"get": _ok({"$ref": "#/components/schemas/Missing"})}})
        document, diagnostics = read_document(raw)
        schema = document.paths["/a"].operations["get"].responses["200"].content["application/json"].schema_
        assert schema.reference.state is ReferenceState.UNRESOLVED
        assert schema.resolved is schema
        assert not diagnostics.has_errors
        assert len(diagnostics.warnings) == 1
        warning = diagnostics.warnings[0]
        assert warning.message == "Reference '#/components/schemas/Missing' could not be resolved."
        assert warning.location == "#/paths/~1a/get/responses/200/content/application~1json/schema"

    def test_undeclared_tag_is_silent(self) -> None:
        raw = _doc(paths={"/a": {"get": {"tags": ["undeclared"]}}})
        document, diagnostics = read_document(raw)
        tag = document.paths["/a"].operations["get"].tags[0]
        assert tag.reference.state is ReferenceState.UNRESOLVED
        assert len(diagnostics) == 0

    def test_chained_references(self) -> None:
        raw = _doc(
            components={
                "schemas": {
                    "Pet": {"type": "object"},
                    "Animal": {"$ref": "#/components/schemas/Pet"},
                    "Creature": {"$ref": "#/components/schemas/Animal"},
                }
            }
        )
        document, diagnostics = read_document(raw)
        schemas = document.components.schemas
        assert schemas["Creature"].resolved is schemas["Pet"]
        assert len(diagnostics) == 0

    def test_json_pointer_fragment(self) -> None:
        raw = _doc(
            paths={
                "/a": {"get": {"responses": {"200": {"description": "shared"}}}},
                "/b": {"get": {"responses": {"200": {"$ref": "#/paths/~1a/get/responses/200"}}}},
            }
        )
        document, diagnostics = read_document(raw)
        response = document.paths["/b"].operations["get"].responses["200"]
        assert response.reference.kind is ReferenceKind.RESPONSE
        assert response.reference.id == "/paths/~1a/get/responses/200"
        assert response.resolved.description == "shared"
        assert len(diagnostics) == 0

    def test_json_pointer_through_yaml_integer_keys(self) -> None:
        text = textwrap.dedent(
            """\
            openapi: 3.1.0
            info: {title: T, version: "1"}
            paths:
              /a:
                get:
                  responses:
                    200:
                      description: shared
              /b:
                get:
                  responses:
                    200:
                      $ref: "#/paths/~1a/get/responses/200"
            """
        )
        document, diagnostics = parse(text, fmt="yaml")
        response = document.paths["/b"].operations["get"].responses["200"]
        assert response.resolved.description == "shared"
        assert len(diagnostics) == 0

    def test_missing_fragment_warns(self) -> None:
        raw = _doc(paths={"/b": {"get": {"responses": {"200": {"$ref": "#/nowhere"}}}}})
        _, diagnostics = read_document(raw)
        assert diagnostics.warnings[0].message == "Reference '#/nowhere' could not be resolved."

    def test_resolution_none_leaves_pending(self, petstore_30_raw: dict[str, Any]) -> None:
        document, diagnostics = read_document(petstore_30_raw, ReaderSettings(resolution=ReferenceResolution.NONE))
        limit = document.paths["/pets"].operations["get"].parameters[0]
        assert limit.reference.state is ReferenceState.PENDING
        assert limit.resolved is limit
        assert len(diagnostics) == 0


class TestIdempotence:
    """Resolving a resolved document changes nothing."""

    def test_second_pass_adds_no_diagnostics(self) -> None:
        raw = _doc(paths={"/a": {"get": _ok({"$ref": "#/components/schemas/Missing"})}})
        document, first = read_document(raw)
        assert len(first.warnings) == 1
        _, second = resolve(document)
        assert len(second) == 0

    def test_targets_are_kept(self, petstore_30_raw: dict[str, Any]) -> None:
        document, _ = read_document(petstore_30_raw)
        limit = document.paths["/pets"].operations["get"].parameters[0]
        target = limit.resolved
        resolve(document)
        assert limit.resolved is target

    def test_resolve_after_none(self, petstore_30_raw: dict[str, Any]) -> None:
        document, _ = read_document(petstore_30_raw, ReaderSettings(resolution=ReferenceResolution.NONE))
        _, diagnostics = resolve(document)
        limit = document.paths["/pets"].operations["get"].parameters[0]
        assert limit.resolved is document.components.parameters["limit"]
        assert len(diagnostics) == 0


class TestCollisions:
    """Two different components under one name."""

    def test_duplicate_tag_names(self) -> None:
        raw = _doc(tags=[{"name": "pets", "description": "first"}, {"name": "pets", "description": "second"}])
        _, diagnostics = read_document(raw)
        assert len(diagnostics.errors) == 1
        assert diagnostics.errors[0].location == "#/tags/1"
        assert "'pets'" in diagnostics.errors[0].message

    def test_identical_tags_do_not_collide(self) -> None:
        raw = _doc(tags=[{"name": "pets"}, {"name": "pets"}])
        _, diagnostics = read_document(raw)
        assert len(diagnostics) == 0


# ---------------------------------------------------------------------------
# External references
# ---------------------------------------------------------------------------


class TestExternalResolution:
    """References into other documents."""

    def test_split_fixture(self) -> None:
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL)
        document, diagnostics = load(str(FIXTURES_DIR / "external" / "root.yaml"), settings)
        assert len(diagnostics) == 0

        operation = document.paths["/items"].operations["get"]
        page_size = operation.parameters[0].resolved
        assert page_size.name == "pageSize"

        item = operation.responses["200"].content["application/json"].schema_
        assert item.reference.external_resource == "common.yaml"
        common = item.reference.host_document
        assert common.base_uri == str((FIXTURES_DIR / "external" / "common.yaml").resolve())
        owner = item.resolved.properties["owner"]
        assert owner.resolved is common.components.schemas["Owner"]

    def test_raw_document_fragment(self) -> None:
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL)
        document, _ = load(str(FIXTURES_DIR / "external" / "root.yaml"), settings)
        not_found = document.paths["/items"].operations["get"].responses["404"]
        assert not_found.reference.id == "/NotFound"
        assert not_found.resolved.description == "Not found"
        workspace = document.workspace
        errors_uri = str((FIXTURES_DIR / "external" / "errors.yaml").resolve())
        assert workspace.contains(errors_uri)
        assert workspace.version_of(errors_uri) is None

    def test_local_mode_does_not_fetch(self) -> None:
        fetcher = FakeFetcher({})
        raw = _doc(paths={"/a": {"get": _ok({"$ref": "common.yaml#/components/schemas/Item"})}})
        _, diagnostics = read_document(raw, ReaderSettings(fetcher=fetcher), base_uri="/specs/root.yaml")
        assert fetcher.requested == []
        assert diagnostics.warnings[0].message == (
            "Reference 'common.yaml#/components/schemas/Item' could not be resolved."
        )

    def test_each_document_fetched_once(self) -> None:
        common = _doc(components={"schemas": {"A": {"type": "string"}, "B": {"type": "integer"}}})
        fetcher = FakeFetcher({"/specs/common.yaml": common})
        raw = _doc(
            paths={
                "/a": {"get": _ok({"$ref": "common.yaml#/components/schemas/A"})},
                "/b": {"get": _ok({"$ref": "common.yaml#/components/schemas/B"})},
            }
        )
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL, fetcher=fetcher)
        document, diagnostics = read_document(raw, settings, base_uri="/specs/root.yaml")
        assert fetcher.requested == ["/specs/common.yaml"]
        assert len(diagnostics) == 0
        schema_b = document.paths["/b"].operations["get"].responses["200"].content["application/json"].schema_
        assert schema_b.resolved.type == ["integer"]

    def test_fetch_failure_warns(self) -> None:
        fetcher = FakeFetcher({})
        raw = _doc(paths={"/a": {"get": _ok({"$ref": "missing.yaml#/components/schemas/A"})}})
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL, fetcher=fetcher)
        _, diagnostics = read_document(raw, settings, base_uri="/specs/root.yaml")
        messages = [w.message for w in diagnostics.warnings]
        assert messages[0].startswith("Failed to load external document '/specs/missing.yaml': ")
        assert messages[1] == "Reference 'missing.yaml#/components/schemas/A' could not be resolved."
        assert not diagnostics.has_errors

    def test_external_diagnostics_are_prefixed(self) -> None:
        broken = {"openapi": "3.0.3", "info": {"version": "1"}, "paths": {}, "components": {"schemas": {"A": {}}}}
        fetcher = FakeFetcher({"/specs/broken.yaml": broken})
        raw = _doc(paths={"/a": {"get": _ok({"$ref": "broken.yaml#/components/schemas/A"})}})
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL, fetcher=fetcher)
        _, diagnostics = read_document(raw, settings, base_uri="/specs/root.yaml")
        assert diagnostics.errors[0].message == (
            "[File: /specs/broken.yaml] The field 'title' in 'info' object is REQUIRED."
        )

    def test_external_document_keeps_its_own_version(self) -> None:
        common = {
            "swagger": "2.0",
            "info": {"title": "Old", "version": "1"},
            "paths": {},
            "definitions": {"Legacy": {"type": "string", "x-nullable": True}},
        }
        fetcher = FakeFetcher({"/specs/legacy.json": common})
        raw = _doc(paths={"/a": {"get": _ok({"$ref": "legacy.json#/definitions/Legacy"})}})
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL, fetcher=fetcher)
        document, diagnostics = read_document(raw, settings, base_uri="/specs/root.yaml")
        schema = document.paths["/a"].operations["get"].responses["200"].content["application/json"].schema_
        assert len(diagnostics) == 0
        assert schema.resolved.type == ["string", "null"]

    def test_fetcher_errors_become_warnings(self) -> None:
        def fetcher(uri: str) -> Any:
            raise RuntimeError("connection reset")

        raw = _doc(paths={"/a": {"get": _ok({"$ref": "common.yaml#/components/schemas/A"})}})
        settings = ReaderSettings(resolution=ReferenceResolution.EXTERNAL, fetcher=fetcher)
        _, diagnostics = read_document(raw, settings, base_uri="/specs/root.yaml")
        messages = [w.message for w in diagnostics.warnings]
        assert messages[0] == "Failed to load external document '/specs/common.yaml': connection reset"
        assert not diagnostics.has_errors

    def test_schema_id_target_keeps_its_owner(self) -> None:
        workspace = Workspace()
        common, _ = read_tree(
            _doc(components={"schemas": {"Pet": {"$id": "https://specs.example.com/schemas/pet", "type": "object"}}}),
            workspace=workspace,
            base_uri="https://specs.example.com/common.json",
        )
        root, diagnostics = read_tree(
            _doc(paths={"/pets": {"get": _ok({"$ref": "https://specs.example.com/schemas/pet"})}}),
            workspace=workspace,
            base_uri="https://specs.example.com/root.json",
        )
        ReferenceResolver(workspace, ReaderSettings(), diagnostics).resolve_document(root)

        schema = root.paths["/pets"].operations["get"].responses["200"].content["application/json"].schema_
        assert schema.resolved is common.components.schemas["Pet"]
        assert schema.reference.host_document is common
