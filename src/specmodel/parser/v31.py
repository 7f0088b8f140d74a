"""OpenAPI 3.1 deserializer.

Differences from 3.0: ``paths`` and operation ``responses`` become optional,
schemas are full JSON Schema 2020-12 objects (``type`` may be a list and the
exclusive bounds are numbers), and reference objects may carry ``summary``
and ``description`` overrides.
"""

from __future__ import annotations

from specmodel.models import Referenceable, Schema
from specmodel.parser.fields import FieldMap, set_number
from specmodel.parser.nodes import MapNode, ParseNode, ParsingContext
from specmodel.parser.v3 import OpenApiV3Deserializer
from specmodel.reference import Reference
from specmodel.versions import SpecVersion


def _load_type(schema: Schema, node: ParseNode, context: ParsingContext) -> None:
    if isinstance(node.raw, list):
        schema.type = node.as_str_list()
    else:
        schema.type = [node.as_str() or ""]


class OpenApiV31Deserializer(OpenApiV3Deserializer):
    """Reads OpenAPI 3.1 documents into the document model."""

    version = SpecVersion.V3_1

    document_required = ("info",)
    operation_required = ()
    schema_special_keys = ()

    def load_reference_siblings(self, mapping: MapNode, reference: Reference, entity: Referenceable) -> None:
        """Apply ``summary`` and ``description`` overrides to the reference."""
        for key, child in mapping.items():
            if key == "$ref":
                continue
            if key == "summary":
                reference.summary = child.as_str()
            elif key == "description":
                reference.description = child.as_str()
            else:
                entity.extensions[key] = child.raw

    def schema_fields(self) -> FieldMap:
        fields = super().schema_fields()
        fields.update(
            {
                "type": _load_type,
                "exclusiveMaximum": set_number("exclusive_maximum"),
                "exclusiveMinimum": set_number("exclusive_minimum"),
            }
        )
        return fields

    def apply_schema_specials(self, node: MapNode, schema: Schema, context: ParsingContext) -> None:
        """Nothing to translate; 2020-12 drops ``nullable`` and its bounds are numeric."""
