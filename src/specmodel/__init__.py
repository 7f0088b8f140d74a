"""specmodel -- Read, resolve, and write OpenAPI and Swagger documents.

Documents in Swagger 2.0 and OpenAPI 3.0, 3.1 and 3.2 are read into one
version-independent document model, with problems reported as diagnostics
instead of exceptions. References are resolved in place, within the
document and across external files, and the model can be written back out
in any of the four versions. Fields a target version cannot express
natively travel as ``x-oai-`` extensions so that they survive a round trip.

Typical usage::

    from specmodel import load, serialize

    document, diagnostics = load("openapi.yaml")
    print(serialize(document, "2.0", fmt="yaml"))

Modules:
    api: ``load``, ``parse``, ``read_document``, ``resolve`` and ``serialize``.
    models: Pydantic models of the document.
    reference: References between entities and their resolution state.
    workspace: Registry of documents and components for reference lookup.
    versions: Version detection and the field capability table.
    diagnostics: Errors and warnings collected while reading.
    config: Reader and writer settings.
    app: Typer command-line interface.
"""

from specmodel.api import ReadResult, load, parse, read_document, resolve, serialize, to_dict
from specmodel.config import ReaderSettings, ReferenceResolution, WriterSettings
from specmodel.diagnostics import Diagnostic, DiagnosticSet, Severity
from specmodel.versions import SpecVersion

__version__ = "0.1.0"

__all__ = [
    "Diagnostic",
    "DiagnosticSet",
    "ReadResult",
    "ReaderSettings",
    "ReferenceResolution",
    "Severity",
    "SpecVersion",
    "WriterSettings",
    "load",
    "parse",
    "read_document",
    "resolve",
    "serialize",
    "to_dict",
]
