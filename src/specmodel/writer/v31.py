"""Writers for OpenAPI 3.1 and 3.2 documents.

3.1 writes ``type`` as a name or a list of names, exclusive bounds as
numbers, and ``summary``/``description`` next to ``$ref``. 3.2 only adds
fields, which the capability table already places natively.
"""

from __future__ import annotations

from typing import Any

from specmodel.models import Referenceable, Schema
from specmodel.reference import Reference
from specmodel.versions import SpecVersion
from specmodel.writer.v3 import OpenApiV3Serializer


class OpenApiV31Serializer(OpenApiV3Serializer):
    """Serialize the document model as an OpenAPI 3.1 dictionary."""

    version = SpecVersion.V3_1
    nullable_key = None

    def write_reference(self, entity: Referenceable, reference: Reference) -> dict[str, Any]:
        out: dict[str, Any] = {"$ref": self.pointer(reference)}
        if reference.summary is not None:
            out["summary"] = reference.summary
        if reference.description is not None:
            out["description"] = reference.description
        return self.finish(out, entity)

    def write_type(self, out: dict[str, Any], schema: Schema) -> None:
        if not schema.type:
            return
        out["type"] = schema.type[0] if len(schema.type) == 1 else list(schema.type)

    def write_bounds(self, out: dict[str, Any], schema: Schema) -> None:
        for key, value in (
            ("maximum", schema.maximum),
            ("exclusiveMaximum", schema.exclusive_maximum),
            ("minimum", schema.minimum),
            ("exclusiveMinimum", schema.exclusive_minimum),
        ):
            if value is not None:
                out[key] = value


class OpenApiV32Serializer(OpenApiV31Serializer):
    """Serialize the document model as an OpenAPI 3.2 dictionary."""

    version = SpecVersion.V3_2
