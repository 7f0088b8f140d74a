"""Tests for specmodel.reference -- parsing, identity and pointer rendering."""

from __future__ import annotations

import pytest

from specmodel.reference import (
    Reference,
    ReferenceKind,
    ReferenceState,
    escape_pointer_segment,
    split_pointer,
)
from specmodel.versions import SpecVersion


# ---------------------------------------------------------------------------
# Pointer helpers
# ---------------------------------------------------------------------------


class TestPointerSegments:
    """RFC 6901 escaping."""

    def test_escape(self) -> None:
        assert escape_pointer_segment("/pets/{id}") == "~1pets~1{id}"
        assert escape_pointer_segment("a~b") == "a~0b"

    def test_split(self) -> None:
        assert split_pointer("/paths/~1pets/get") == ["paths", "/pets", "get"]
        assert split_pointer("") == []
        assert split_pointer("/") == []


# ---------------------------------------------------------------------------
# Reference.parse
# ---------------------------------------------------------------------------


class TestReferenceParse:
    """Parsing ``$ref`` strings in each dialect."""

    def test_component_pointer(self) -> None:
        ref = Reference.parse("#/components/schemas/Pet", ReferenceKind.SCHEMA, SpecVersion.V3_0)
        assert ref.kind is ReferenceKind.SCHEMA
        assert ref.id == "Pet"
        assert not ref.is_external
        assert not ref.is_fragment

    def test_container_overrides_expected_kind(self) -> None:
        ref = Reference.parse("#/components/headers/Rate", ReferenceKind.SCHEMA, SpecVersion.V3_1)
        assert ref.kind is ReferenceKind.HEADER

    def test_escaped_name(self) -> None:
        ref = Reference.parse("#/components/schemas/a~1b", ReferenceKind.SCHEMA, SpecVersion.V3_1)
        assert ref.id == "a/b"

    def test_swagger_definitions(self) -> None:
        ref = Reference.parse("#/definitions/Pet", ReferenceKind.SCHEMA, SpecVersion.V2_0)
        assert ref.kind is ReferenceKind.SCHEMA
        assert ref.id == "Pet"

    def test_swagger_body_parameter_reads_as_request_body(self) -> None:
        ref = Reference.parse("#/parameters/petBody", ReferenceKind.REQUEST_BODY, SpecVersion.V2_0)
        assert ref.kind is ReferenceKind.REQUEST_BODY
        assert ref.id == "petBody"

    def test_external_component(self) -> None:
        ref = Reference.parse("common.yaml#/components/schemas/Item", ReferenceKind.SCHEMA, SpecVersion.V3_0)
        assert ref.external_resource == "common.yaml"
        assert ref.id == "Item"
        assert ref.is_external

    def test_whole_external_document(self) -> None:
        ref = Reference.parse("pet.yaml", ReferenceKind.SCHEMA, SpecVersion.V3_1)
        assert ref.external_resource == "pet.yaml"
        assert ref.id == ""
        assert ref.is_fragment

    def test_raw_pointer(self) -> None:
        ref = Reference.parse("#/paths/~1pets/get", ReferenceKind.PATH_ITEM, SpecVersion.V3_1)
        assert ref.id == "/paths/~1pets/get"
        assert ref.is_fragment

    def test_starts_pending(self) -> None:
        ref = Reference.parse("#/components/schemas/Pet", ReferenceKind.SCHEMA, SpecVersion.V3_0)
        assert ref.state is ReferenceState.PENDING
        assert ref.target is None


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestReferenceRendering:
    """Pointers rendered per target version."""

    def test_component_pointer_per_version(self) -> None:
        ref = Reference(kind=ReferenceKind.SCHEMA, id="Pet")
        assert ref.to_string(SpecVersion.V3_0) == "#/components/schemas/Pet"
        assert ref.to_string(SpecVersion.V2_0) == "#/definitions/Pet"

    def test_request_body_in_swagger(self) -> None:
        ref = Reference(kind=ReferenceKind.REQUEST_BODY, id="petBody")
        assert ref.to_string(SpecVersion.V2_0) == "#/parameters/petBody"
        assert ref.to_string(SpecVersion.V3_1) == "#/components/requestBodies/petBody"

    def test_security_scheme_in_swagger(self) -> None:
        ref = Reference(kind=ReferenceKind.SECURITY_SCHEME, id="key")
        assert ref.fragment(SpecVersion.V2_0) == "#/securityDefinitions/key"

    @pytest.mark.parametrize("kind", [ReferenceKind.HEADER, ReferenceKind.LINK, ReferenceKind.EXAMPLE])
    def test_no_swagger_section(self, kind: ReferenceKind) -> None:
        assert Reference(kind=kind, id="x").fragment(SpecVersion.V2_0) is None

    def test_tag_has_no_pointer(self) -> None:
        assert Reference(kind=ReferenceKind.TAG, id="pets").fragment(SpecVersion.V3_1) is None

    def test_escapes_name(self) -> None:
        ref = Reference(kind=ReferenceKind.SCHEMA, id="a/b")
        assert ref.to_string(SpecVersion.V3_1) == "#/components/schemas/a~1b"

    def test_external(self) -> None:
        ref = Reference(kind=ReferenceKind.SCHEMA, id="Item", external_resource="common.yaml")
        assert ref.to_string(SpecVersion.V3_0) == "common.yaml#/components/schemas/Item"
        whole = Reference(kind=ReferenceKind.SCHEMA, id="", external_resource="pet.yaml")
        assert whole.to_string(SpecVersion.V3_1) == "pet.yaml"


# ---------------------------------------------------------------------------
# Identity and state
# ---------------------------------------------------------------------------


class TestReferenceIdentity:
    """Equality by identity, never by target content."""

    def test_equal_by_kind_and_id(self) -> None:
        a = Reference(kind=ReferenceKind.SCHEMA, id="Pet", summary="one")
        b = Reference(kind=ReferenceKind.SCHEMA, id="Pet", summary="two")
        assert a == b
        assert hash(a) == hash(b)

    def test_kind_matters(self) -> None:
        assert Reference(kind=ReferenceKind.SCHEMA, id="Pet") != Reference(kind=ReferenceKind.RESPONSE, id="Pet")

    def test_external_resource_matters(self) -> None:
        local = Reference(kind=ReferenceKind.SCHEMA, id="Pet")
        remote = Reference(kind=ReferenceKind.SCHEMA, id="Pet", external_resource="other.yaml")
        assert local != remote

    def test_target_does_not_affect_equality(self) -> None:
        a = Reference(kind=ReferenceKind.SCHEMA, id="Pet")
        b = Reference(kind=ReferenceKind.SCHEMA, id="Pet")
        a.attach({"anything": True})
        assert a == b

    def test_state_transitions(self) -> None:
        ref = Reference(kind=ReferenceKind.SCHEMA, id="Pet")
        ref.begin_resolution()
        assert ref.state is ReferenceState.RESOLVING
        target = object()
        ref.attach(target)
        assert ref.is_resolved
        assert ref.target is target
        ref.reset()
        assert ref.state is ReferenceState.PENDING
        assert ref.target is None
        ref.mark_unresolved()
        assert ref.state is ReferenceState.UNRESOLVED

    def test_host_document_is_weak(self) -> None:
        from specmodel.models import Document

        document = Document()
        ref = Reference(kind=ReferenceKind.SCHEMA, id="Pet")
        ref.attach(object(), document)
        assert ref.host_document is document
