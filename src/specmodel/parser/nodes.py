"""Parse nodes: a uniform, located view over a tokenized JSON/YAML tree.

The token tree comes from ``json.loads`` or ``yaml.safe_load``. Each node
wraps one value of that tree together with its JSON Pointer location
(``#/paths/~1pets/get``); children compose their location automatically.
Accessors raise :class:`~specmodel.exceptions.ParseNodeError` when a value
has the wrong shape, and the field-table driver in
:mod:`specmodel.parser.fields` turns that into an error diagnostic.
"""

from __future__ import annotations

import datetime
import enum
from typing import TYPE_CHECKING, Any, Iterator, Optional

from specmodel.diagnostics import DiagnosticSet
from specmodel.exceptions import ParseNodeError
from specmodel.reference import escape_pointer_segment
from specmodel.versions import CapabilityTable, SpecVersion, default_capabilities

if TYPE_CHECKING:
    from specmodel.models import Document
    from specmodel.workspace import Workspace


class ScalarKind(str, enum.Enum):
    """Declared kind of a scalar value."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


class ParsingContext:
    """State shared by every deserializer call during one document read.

    Args:
        diagnostics: Sink for errors and warnings.
        version: The detected dialect.
        document: The document being populated.
        workspace: Registry components are registered into.
        capabilities: Field capability table; the bundled one by default.
    """

    def __init__(
        self,
        diagnostics: DiagnosticSet,
        version: SpecVersion,
        document: Optional[Document] = None,
        workspace: Optional[Workspace] = None,
        capabilities: Optional[CapabilityTable] = None,
    ) -> None:
        self.diagnostics = diagnostics
        self.version = version
        self.document = document
        self.workspace = workspace
        self.capabilities = capabilities or default_capabilities()
        # Dialect-specific scratch space (Swagger 2.0 consumes/produces).
        self.state: dict[str, Any] = {}

    def error(self, location: str, message: str) -> None:
        self.diagnostics.add_error(location, message)

    def warning(self, location: str, message: str) -> None:
        self.diagnostics.add_warning(location, message)


def _child_location(location: str, segment: str | int) -> str:
    escaped = escape_pointer_segment(str(segment))
    if location.endswith("/"):
        return f"{location}{escaped}"
    return f"{location}/{escaped}"


class ParseNode:
    """Base class for located nodes. Use :meth:`create` to build one."""

    def __init__(self, value: Any, location: str, context: ParsingContext) -> None:
        self._value = value
        self.location = location
        self.context = context

    @staticmethod
    def create(value: Any, context: ParsingContext, location: str = "#/") -> ParseNode:
        """Wrap *value* in the node type matching its shape."""
        if isinstance(value, dict):
            return MapNode(value, location, context)
        if isinstance(value, list):
            return ListNode(value, location, context)
        return ValueNode(value, location, context)

    @property
    def raw(self) -> Any:
        """The plain JSON-compatible value under this node."""
        return _plain(self._value)

    def child(self, segment: str | int, value: Any) -> ParseNode:
        return ParseNode.create(value, self.context, _child_location(self.location, segment))

    def as_map(self, name: str = "value") -> MapNode:
        raise ParseNodeError(self.location, f"{name} must be a map/object")

    def as_list(self, name: str = "value") -> ListNode:
        raise ParseNodeError(self.location, f"{name} must be a list/array")

    def as_value(self, name: str = "value") -> ValueNode:
        raise ParseNodeError(self.location, f"{name} must be a scalar value")

    # Scalar shortcuts used by field tables.

    def as_str(self) -> Optional[str]:
        return self.as_value().as_str()

    def as_bool(self) -> Optional[bool]:
        return self.as_value().as_bool()

    def as_int(self) -> Optional[int]:
        return self.as_value().as_int()

    def as_number(self) -> Optional[int | float]:
        return self.as_value().as_number()

    def as_str_list(self) -> list[str]:
        return [item.as_str() or "" for item in self.as_list()]


class MapNode(ParseNode):
    """An object node. Keys are always strings (YAML may load ``200:`` as int)."""

    def __init__(self, value: dict[Any, Any], location: str, context: ParsingContext) -> None:
        super().__init__({str(k): v for k, v in value.items()}, location, context)

    def as_map(self, name: str = "value") -> MapNode:
        return self

    def __contains__(self, key: object) -> bool:
        return key in self._value

    def __len__(self) -> int:
        return len(self._value)

    def keys(self) -> list[str]:
        return list(self._value)

    def get(self, key: str) -> Optional[ParseNode]:
        if key not in self._value:
            return None
        return self.child(key, self._value[key])

    def items(self) -> Iterator[tuple[str, ParseNode]]:
        for key, value in self._value.items():
            yield key, self.child(key, value)

    def get_reference(self) -> Optional[str]:
        """Return the ``$ref`` string if this map is a reference object."""
        ref = self._value.get("$ref")
        return ref if isinstance(ref, str) else None


class ListNode(ParseNode):
    """An array node."""

    def as_list(self, name: str = "value") -> ListNode:
        return self

    def __len__(self) -> int:
        return len(self._value)

    def __iter__(self) -> Iterator[ParseNode]:
        for index, value in enumerate(self._value):
            yield self.child(index, value)


class ValueNode(ParseNode):
    """A scalar node."""

    def as_value(self, name: str = "value") -> ValueNode:
        return self

    @property
    def kind(self) -> ScalarKind:
        value = self._value
        if value is None:
            return ScalarKind.NULL
        if isinstance(value, bool):
            return ScalarKind.BOOLEAN
        if isinstance(value, int):
            return ScalarKind.INTEGER
        if isinstance(value, float):
            return ScalarKind.NUMBER
        return ScalarKind.STRING

    def as_str(self) -> Optional[str]:
        value = self._value
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (datetime.date, datetime.datetime)):
            return value.isoformat()
        return str(value)

    def as_bool(self) -> Optional[bool]:
        value = self._value
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise ParseNodeError(self.location, f"Expected a boolean, got {value!r}")

    def as_int(self) -> Optional[int]:
        value = self._value
        if value is None:
            return None
        if isinstance(value, bool):
            raise ParseNodeError(self.location, f"Expected an integer, got {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise ParseNodeError(self.location, f"Expected an integer, got {value!r}")

    def as_number(self) -> Optional[int | float]:
        value = self._value
        if value is None:
            return None
        if isinstance(value, bool):
            raise ParseNodeError(self.location, f"Expected a number, got {value!r}")
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                number = float(value)
            except ValueError:
                pass
            else:
                return int(number) if number.is_integer() and "." not in value else number
        raise ParseNodeError(self.location, f"Expected a number, got {value!r}")


def _plain(value: Any) -> Any:
    """Convert YAML-specific scalars (dates) to JSON-compatible values."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value
