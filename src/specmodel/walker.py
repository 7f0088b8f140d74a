"""Depth-first traversal of the document model.

The walker visits every model reachable through model fields, containers
and security requirements, exactly once per object identity. It never
follows a reference to its target, so cyclic graphs terminate.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from specmodel.models import Referenceable, SecurityRequirement, SpecModel

# Attributes whose values are raw JSON rather than models.
_RAW_FIELDS = frozenset({"extensions", "example", "default", "const", "value"})

# Container attributes that do not appear as a key in documents.
_TRANSPARENT = frozenset({"operations", "path_items", "codes"})

_SEGMENTS = {
    "schema_": "schema",
    "not_": "not",
    "self_uri": "$self",
    "defs": "$defs",
    "id": "$id",
}


def _segment(attr: str) -> Optional[str]:
    if attr in _TRANSPARENT:
        return None
    if attr in _SEGMENTS:
        return _SEGMENTS[attr]
    head, *rest = attr.split("_")
    return head + "".join(part.title() for part in rest)


def _join(location: str, segment: Any) -> str:
    text = str(segment).replace("~", "~0").replace("/", "~1")
    return f"{location}{text}" if location.endswith("/") else f"{location}/{text}"


def walk(root: SpecModel, location: str = "#/") -> Iterator[tuple[str, SpecModel]]:
    """Yield ``(location, model)`` for *root* and every model below it."""
    seen: set[int] = set()
    stack: list[tuple[str, Any]] = [(location, root)]
    while stack:
        where, value = stack.pop()
        if isinstance(value, SpecModel):
            if id(value) in seen:
                continue
            seen.add(id(value))
            yield where, value
            children: list[tuple[str, Any]] = []
            for attr in type(value).model_fields:
                if attr in _RAW_FIELDS:
                    continue
                child = getattr(value, attr)
                if child is None:
                    continue
                segment = _segment(attr)
                children.append((_join(where, segment) if segment else where, child))
            stack.extend(reversed(children))
        elif isinstance(value, dict):
            stack.extend(reversed([(_join(where, k), v) for k, v in value.items()]))
        elif isinstance(value, list):
            stack.extend(reversed([(_join(where, i), v) for i, v in enumerate(value)]))
        elif isinstance(value, SecurityRequirement):
            stack.extend(reversed([(_join(where, s.reference.id), s) for s in value]))


def collect_references(root: SpecModel) -> list[tuple[str, Referenceable]]:
    """Return every model under *root* that carries a reference."""
    return [
        (where, model)
        for where, model in walk(root)
        if isinstance(model, Referenceable) and model.reference is not None
    ]
