"""Tests for specmodel.walker."""

from __future__ import annotations

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
    SecurityRequirement,
    SecurityScheme,
)
from specmodel.reference import Reference, ReferenceKind
from specmodel.walker import collect_references, walk


def _document() -> Document:
    pet_ref = Schema(reference=Reference(kind=ReferenceKind.SCHEMA, id="Pet"))
    operation = Operation(
        responses=Responses(codes={"200": Response(description="ok", content={"application/json": MediaType(schema=pet_ref)})}),
        security=[
            SecurityRequirement(
                {SecurityScheme(reference=Reference(kind=ReferenceKind.SECURITY_SCHEME, id="key")): []}
            )
        ],
    )
    return Document(
        info=Info(title="t", version="1"),
        paths=Paths(path_items={"/pets": PathItem(operations={"get": operation})}),
        components=Components(schemas={"Pet": Schema(type=["object"])}),
    )


class TestWalk:
    """Depth-first traversal with JSON Pointer locations."""

    def test_locations(self) -> None:
        locations = [where for where, _ in walk(_document())]
        assert locations[0] == "#/"
        assert "#/info" in locations
        assert "#/paths/~1pets/get" in locations
        assert "#/paths/~1pets/get/responses/200/content/application~1json/schema" in locations
        assert "#/components/schemas/Pet" in locations

    def test_security_requirements_are_walked(self) -> None:
        locations = [where for where, _ in walk(_document())]
        assert "#/paths/~1pets/get/security/0/key" in locations

    def test_visits_each_object_once(self) -> None:
        shared = Schema(type=["string"])
        document = Document(components=Components(schemas={"A": shared, "B": Schema(items=shared)}))
        visits = [model for _, model in walk(document) if model is shared]
        assert len(visits) == 1

    def test_cyclic_graph_terminates(self) -> None:
        node = Schema(type=["object"], properties={})
        node.properties["self"] = node
        document = Document(components=Components(schemas={"Node": node}))
        assert sum(1 for _ in walk(document)) == 3  # document, components, node


class TestCollectReferences:
    """Finding every model that carries a reference."""

    def test_collects_proxies(self) -> None:
        found = {model.reference.id for _, model in collect_references(_document())}
        assert found == {"Pet", "key"}

    def test_empty_document(self) -> None:
        assert collect_references(Document()) == []
