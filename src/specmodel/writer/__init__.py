"""Document writers -- turn the document model into version-specific text.

Typical usage::

    from specmodel.writer import serialize

    text = serialize(document, "3.0", fmt="yaml")

Sub-modules:

* :mod:`~specmodel.writer.v3` -- OpenAPI 3.0 writer and the shared field,
  shim and reference machinery.
* :mod:`~specmodel.writer.v31` -- OpenAPI 3.1 and 3.2 writers.
* :mod:`~specmodel.writer.v2` -- Swagger 2.0 writer.
* :mod:`~specmodel.writer.emitter` -- JSON/YAML rendering.
"""

from specmodel.writer.serializer import get_serializer, serialize, to_dict

__all__ = ["get_serializer", "serialize", "to_dict"]
