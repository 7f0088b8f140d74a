"""Field tables and the generic driver that applies them to map nodes.

Each deserializer describes an entity as a *field map*: canonical key to a
loader ``(target, node, context) -> None``. :func:`parse_map` walks a map
node once and, for every key:

* applies the loader when the key is native in the document's version;
* otherwise, if the key is ``<extension prefix><field>`` and *field* is a
  shimmed field of this entity, applies the loader of *field*;
* otherwise stores the raw value in ``target.extensions``.

Wrong-shape values raise :class:`~specmodel.exceptions.ParseNodeError` inside
a loader; the driver records an error diagnostic and carries on with the
next key.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, Optional, TypeVar

from specmodel.exceptions import ParseNodeError
from specmodel.parser.nodes import MapNode, ParseNode, ParsingContext

T = TypeVar("T")

FieldLoader = Callable[[Any, ParseNode, ParsingContext], None]
FieldMap = dict[str, FieldLoader]
EntityLoader = Callable[[ParseNode, ParsingContext], Any]


def required_message(field: str, object_name: str) -> str:
    return f"The field '{field}' in '{object_name}' object is REQUIRED."


def parse_map(
    node: MapNode,
    target: T,
    fields: FieldMap,
    context: ParsingContext,
    entity: str,
    required: Iterable[str] = (),
    skip: Iterable[str] = (),
) -> T:
    """Apply *fields* to every key of *node*, populating *target*.

    Args:
        node: The object being read.
        target: The model instance to populate.
        fields: Canonical key to loader.
        context: Parsing context carrying the version and diagnostics.
        entity: Capability table entity name, e.g. ``"info"``.
        required: Keys whose absence is an error at *node*'s location.
        skip: Keys handled by the caller.

    Returns:
        *target*, even when errors were recorded.
    """
    capabilities = context.capabilities
    skipped = set(skip)
    for key, child in node.items():
        if key in skipped:
            continue
        loader = fields.get(key)
        if loader is not None and not capabilities.is_native(entity, key, context.version):
            loader = None
        if loader is None:
            shimmed = capabilities.unshim(entity, key, context.version)
            if shimmed is not None:
                loader = fields.get(shimmed)
        if loader is None:
            target.extensions[key] = child.raw  # type: ignore[attr-defined]
            continue
        apply_loader(loader, target, child, context)

    for name in required:
        if name not in node:
            context.error(node.location, required_message(name, entity))
    return target


def apply_loader(loader: FieldLoader, target: Any, node: ParseNode, context: ParsingContext) -> None:
    try:
        loader(target, node, context)
    except ParseNodeError as exc:
        context.error(exc.location, str(exc))


def load_map(
    node: ParseNode,
    context: ParsingContext,
    loader: EntityLoader,
    name: str = "value",
    extensions: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Load a map of entities. ``x-`` keys go to *extensions* when given."""
    result: dict[str, Any] = {}
    for key, child in node.as_map(name).items():
        if extensions is not None and key.startswith("x-"):
            extensions[key] = child.raw
            continue
        try:
            result[key] = loader(child, context)
        except ParseNodeError as exc:
            context.error(exc.location, str(exc))
    return result


def load_list(node: ParseNode, context: ParsingContext, loader: EntityLoader, name: str = "value") -> list[Any]:
    result: list[Any] = []
    for child in node.as_list(name):
        try:
            result.append(loader(child, context))
        except ParseNodeError as exc:
            context.error(exc.location, str(exc))
    return result


# --- Loader factories ---


def set_str(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, n.as_str())


def set_bool(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, n.as_bool())


def set_int(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, n.as_int())


def set_number(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, n.as_number())


def set_raw(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, n.raw)


def set_str_list(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, n.as_str_list())


def set_raw_list(attr: str) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, [item.raw for item in n.as_list(attr)])


def set_str_map(attr: str) -> FieldLoader:
    def load(obj: Any, node: ParseNode, context: ParsingContext) -> None:
        setattr(obj, attr, {k: v.as_str() or "" for k, v in node.as_map(attr).items()})

    return load


def set_object(attr: str, loader: EntityLoader) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, loader(n, c))


def set_map(attr: str, loader: EntityLoader) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, load_map(n, c, loader, attr))


def set_list(attr: str, loader: EntityLoader) -> FieldLoader:
    return lambda o, n, c: setattr(o, attr, load_list(n, c, loader, attr))


def set_enum(attr: str, enum_type: type[enum.Enum], entity: str, field: str) -> FieldLoader:
    """Load an enumerated value, warning when the version does not accept it.

    Unknown values are an error and leave the attribute unset.
    """

    def load(obj: Any, node: ParseNode, context: ParsingContext) -> None:
        text = node.as_str()
        try:
            value = enum_type(text)
        except ValueError:
            context.error(node.location, f"'{text}' is not a valid value for '{field}'.")
            return
        message = context.capabilities.gate_message(entity, field, value.value, context.version)
        if message is not None:
            context.warning(node.location, message)
        setattr(obj, attr, value)

    return load
