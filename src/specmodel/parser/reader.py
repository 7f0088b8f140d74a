"""Version detection and dispatch to the matching deserializer.

:func:`read_tree` is the single place a token tree becomes a
:class:`~specmodel.models.Document`: it detects the version (a hard failure
when unrecognized), picks the deserializer for that dialect once, registers
the new document in a workspace and runs the field tables over the tree.
References are left pending; see :mod:`specmodel.parser.resolver`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specmodel.diagnostics import DiagnosticSet
from specmodel.exceptions import ParseNodeError
from specmodel.models import Document
from specmodel.parser.nodes import ParseNode, ParsingContext
from specmodel.parser.v2 import OpenApiV2Deserializer
from specmodel.parser.v3 import OpenApiV3Deserializer
from specmodel.parser.v31 import OpenApiV31Deserializer
from specmodel.parser.v32 import OpenApiV32Deserializer
from specmodel.versions import CapabilityTable, SpecVersion, detect_version
from specmodel.workspace import Workspace

logger = logging.getLogger(__name__)

DESERIALIZERS: dict[SpecVersion, type[OpenApiV3Deserializer]] = {
    SpecVersion.V2_0: OpenApiV2Deserializer,
    SpecVersion.V3_0: OpenApiV3Deserializer,
    SpecVersion.V3_1: OpenApiV31Deserializer,
    SpecVersion.V3_2: OpenApiV32Deserializer,
}


def get_deserializer(version: SpecVersion) -> OpenApiV3Deserializer:
    """Return a deserializer for the *version* dialect."""
    return DESERIALIZERS[version]()


def read_tree(
    raw: Any,
    workspace: Optional[Workspace] = None,
    base_uri: Optional[str] = None,
    capabilities: Optional[CapabilityTable] = None,
    diagnostics: Optional[DiagnosticSet] = None,
) -> tuple[Document, DiagnosticSet]:
    """Deserialize a token tree into a document.

    Args:
        raw: The tokenized document (``dict`` from JSON/YAML).
        workspace: Workspace to register the document and its components
            in. A new one is created when omitted.
        base_uri: Identity of the document; a ``urn:uuid:`` is generated
            when omitted.
        capabilities: Field capability table override.
        diagnostics: Sink to append to; a new one is created when omitted.

    Returns:
        ``(document, diagnostics)``.

    Raises:
        UnsupportedVersionError: If the version cannot be detected.
    """
    version = detect_version(raw)
    if diagnostics is None:
        diagnostics = DiagnosticSet(version)
    elif diagnostics.spec_version is None:
        diagnostics.spec_version = version

    document = Document(base_uri=base_uri) if base_uri else Document()
    workspace = workspace if workspace is not None else Workspace()
    workspace.add_document(document, version, raw)

    context = ParsingContext(diagnostics, version, document, workspace, capabilities)
    deserializer = get_deserializer(version)
    logger.debug("Reading %s document %s", version.display_name, document.base_uri)
    try:
        deserializer.load_document(ParseNode.create(raw, context), context)
    except ParseNodeError as exc:
        diagnostics.add_error(exc.location, str(exc))
    return document, diagnostics
