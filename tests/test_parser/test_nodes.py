"""Tests for specmodel.parser.nodes and the field-table driver."""

from __future__ import annotations

import datetime

import pytest

from specmodel.diagnostics import DiagnosticSet
from specmodel.exceptions import ParseNodeError
from specmodel.models import Info, Parameter, ParameterStyle
from specmodel.parser.fields import parse_map, required_message, set_enum, set_str
from specmodel.parser.nodes import ListNode, MapNode, ParseNode, ParsingContext, ScalarKind, ValueNode
from specmodel.versions import SpecVersion


def _context(version: SpecVersion = SpecVersion.V3_0) -> ParsingContext:
    return ParsingContext(DiagnosticSet(version), version)


# ---------------------------------------------------------------------------
# Node shapes and locations
# ---------------------------------------------------------------------------


class TestParseNode:
    """Node creation and JSON Pointer locations."""

    def test_create_picks_shape(self) -> None:
        context = _context()
        assert isinstance(ParseNode.create({}, context), MapNode)
        assert isinstance(ParseNode.create([], context), ListNode)
        assert isinstance(ParseNode.create("x", context), ValueNode)

    def test_child_locations(self) -> None:
        root = ParseNode.create({"paths": {"/pets/{id}": {"get": {}}}}, _context())
        get = root.as_map().get("paths").as_map().get("/pets/{id}").as_map().get("get")
        assert get.location == "#/paths/~1pets~1{id}/get"

    def test_list_child_locations(self) -> None:
        root = ParseNode.create({"servers": [{"url": "a"}, {"url": "b"}]}, _context())
        locations = [child.location for child in root.as_map().get("servers").as_list()]
        assert locations == ["#/servers/0", "#/servers/1"]

    def test_integer_keys_become_strings(self) -> None:
        node = ParseNode.create({200: {"description": "ok"}}, _context()).as_map()
        assert node.keys() == ["200"]
        assert "200" in node

    def test_wrong_shape_raises(self) -> None:
        node = ParseNode.create("text", _context(), "#/info")
        with pytest.raises(ParseNodeError) as exc_info:
            node.as_map("info")
        assert exc_info.value.location == "#/info"
        assert str(exc_info.value) == "info must be a map/object"

    def test_get_reference(self) -> None:
        node = ParseNode.create({"$ref": "#/components/schemas/Pet"}, _context()).as_map()
        assert node.get_reference() == "#/components/schemas/Pet"
        assert ParseNode.create({"$ref": 1}, _context()).as_map().get_reference() is None

    def test_raw_converts_dates(self) -> None:
        node = ParseNode.create({"released": datetime.date(2024, 5, 1)}, _context())
        assert node.raw == {"released": "2024-05-01"}


class TestValueNode:
    """Scalar conversions."""

    @pytest.mark.parametrize(
        "value,kind",
        [
            (None, ScalarKind.NULL),
            (True, ScalarKind.BOOLEAN),
            (3, ScalarKind.INTEGER),
            (1.5, ScalarKind.NUMBER),
            ("x", ScalarKind.STRING),
        ],
    )
    def test_kind(self, value: object, kind: ScalarKind) -> None:
        assert ParseNode.create(value, _context()).as_value().kind is kind

    def test_as_str(self) -> None:
        context = _context()
        assert ParseNode.create(1.0, context).as_str() == "1.0"
        assert ParseNode.create(True, context).as_str() == "true"
        assert ParseNode.create(None, context).as_str() is None

    def test_as_bool(self) -> None:
        context = _context()
        assert ParseNode.create("TRUE", context).as_bool() is True
        with pytest.raises(ParseNodeError, match="Expected a boolean"):
            ParseNode.create("yes", context).as_bool()

    def test_as_int(self) -> None:
        context = _context()
        assert ParseNode.create("42", context).as_int() == 42
        assert ParseNode.create(4.0, context).as_int() == 4
        with pytest.raises(ParseNodeError, match="Expected an integer"):
            ParseNode.create(True, context).as_int()
        with pytest.raises(ParseNodeError):
            ParseNode.create(4.5, context).as_int()

    def test_as_number(self) -> None:
        context = _context()
        assert ParseNode.create("2.5", context).as_number() == 2.5
        assert ParseNode.create("10", context).as_number() == 10
        with pytest.raises(ParseNodeError, match="Expected a number"):
            ParseNode.create("ten", context).as_number()

    def test_as_str_list(self) -> None:
        assert ParseNode.create(["a", 1], _context()).as_str_list() == ["a", "1"]


# ---------------------------------------------------------------------------
# parse_map
# ---------------------------------------------------------------------------


class TestParseMap:
    """Field tables applied to map nodes."""

    def _info(self, raw: dict, version: SpecVersion) -> tuple[Info, DiagnosticSet]:
        context = _context(version)
        fields = {"title": set_str("title"), "summary": set_str("summary"), "version": set_str("version")}
        node = ParseNode.create(raw, context, "#/info").as_map()
        info = parse_map(node, Info(), fields, context, "info", required=("title", "version"))
        return info, context.diagnostics

    def test_native_fields(self) -> None:
        info, diagnostics = self._info({"title": "T", "version": "1", "summary": "S"}, SpecVersion.V3_1)
        assert info.summary == "S"
        assert len(diagnostics) == 0

    def test_unknown_keys_go_to_extensions(self) -> None:
        info, diagnostics = self._info({"title": "T", "version": "1", "x-logo": {"url": "l"}, "odd": 1}, SpecVersion.V3_0)
        assert info.extensions == {"x-logo": {"url": "l"}, "odd": 1}
        assert len(diagnostics) == 0

    def test_non_native_key_stays_extension(self) -> None:
        info, _ = self._info({"title": "T", "version": "1", "summary": "S"}, SpecVersion.V3_0)
        assert info.summary is None
        assert info.extensions == {"summary": "S"}

    def test_shim_key_is_read_into_field(self) -> None:
        info, _ = self._info({"title": "T", "version": "1", "x-oai-summary": "S"}, SpecVersion.V3_0)
        assert info.summary == "S"
        assert info.extensions == {}

    def test_required_fields(self) -> None:
        _, diagnostics = self._info({"title": "T"}, SpecVersion.V3_0)
        assert [(d.location, d.message) for d in diagnostics.errors] == [
            ("#/info", required_message("version", "info"))
        ]
        assert diagnostics.errors[0].message == "The field 'version' in 'info' object is REQUIRED."

    def test_wrong_shape_becomes_error(self) -> None:
        context = _context()
        fields = {"title": lambda o, n, c: setattr(o, "title", n.as_map("title"))}
        node = ParseNode.create({"title": "T", "version": "1"}, context, "#/info").as_map()
        parse_map(node, Info(), fields, context, "info")
        assert context.diagnostics.errors[0].location == "#/info/title"

    def test_enum_gate_warns(self) -> None:
        context = _context(SpecVersion.V3_0)
        fields = {"style": set_enum("style", ParameterStyle, "parameter", "style")}
        node = ParseNode.create({"style": "cookie"}, context, "#/p").as_map()
        parameter = parse_map(node, Parameter(), fields, context, "parameter")
        assert parameter.style is ParameterStyle.COOKIE
        assert context.diagnostics.warnings[0].message == (
            "Parameter style 'cookie' is only supported in OpenAPI 3.2 and later versions. "
            "Current version: OpenAPI 3.0"
        )

    def test_enum_invalid_value(self) -> None:
        context = _context()
        fields = {"style": set_enum("style", ParameterStyle, "parameter", "style")}
        node = ParseNode.create({"style": "zigzag"}, context, "#/p").as_map()
        parameter = parse_map(node, Parameter(), fields, context, "parameter")
        assert parameter.style is None
        assert context.diagnostics.errors[0].message == "'zigzag' is not a valid value for 'style'."
        assert context.diagnostics.errors[0].location == "#/p/style"
