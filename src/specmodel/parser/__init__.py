"""Document readers -- turn JSON/YAML text into the document model.

Typical usage::

    from specmodel.parser import load_source, read_tree

    raw = load_source("openapi.yaml")
    document, diagnostics = read_tree(raw)

Sub-modules:

* :mod:`~specmodel.parser.loader` -- I/O layer (URL, file, stdin) and the
  registry of format readers.
* :mod:`~specmodel.parser.nodes` -- Typed views over the raw tree that
  report problems as diagnostics.
* :mod:`~specmodel.parser.fields` -- Field tables shared by the
  per-version readers.
* :mod:`~specmodel.parser.v2`, :mod:`~specmodel.parser.v3`,
  :mod:`~specmodel.parser.v31`, :mod:`~specmodel.parser.v32` -- Readers for
  each supported version.
* :mod:`~specmodel.parser.reader` -- Version detection and dispatch.
* :mod:`~specmodel.parser.resolver` -- Reference resolution against a
  workspace.
"""

from specmodel.parser.loader import ReaderRegistry, load_source
from specmodel.parser.reader import get_deserializer, read_tree

__all__ = ["ReaderRegistry", "get_deserializer", "load_source", "read_tree"]
