"""Dispatch a document to the writer of the requested version."""

from __future__ import annotations

import logging
from typing import Any, Optional

from specmodel.config import WriterSettings
from specmodel.models import Document
from specmodel.versions import SpecVersion
from specmodel.writer.emitter import emit
from specmodel.writer.v2 import OpenApiV2Serializer
from specmodel.writer.v3 import OpenApiV3Serializer
from specmodel.writer.v31 import OpenApiV31Serializer, OpenApiV32Serializer

logger = logging.getLogger(__name__)

SERIALIZERS: dict[SpecVersion, type[OpenApiV3Serializer]] = {
    SpecVersion.V2_0: OpenApiV2Serializer,
    SpecVersion.V3_0: OpenApiV3Serializer,
    SpecVersion.V3_1: OpenApiV31Serializer,
    SpecVersion.V3_2: OpenApiV32Serializer,
}


def get_serializer(version: SpecVersion, settings: Optional[WriterSettings] = None) -> OpenApiV3Serializer:
    """Return a writer for the *version* dialect."""
    return SERIALIZERS[version](settings)


def to_dict(
    document: Document,
    version: SpecVersion | str,
    settings: Optional[WriterSettings] = None,
) -> dict[str, Any]:
    """Write *document* as a *version* dictionary.

    Raises:
        UnsupportedVersionError: If *version* names no supported version.
        VersionGatedFeatureError: If the document uses a value *version*
            cannot express.
    """
    if not isinstance(version, SpecVersion):
        version = SpecVersion.parse(version)
    logger.debug("Writing %s as %s", document.base_uri, version.display_name)
    return get_serializer(version, settings).write_document(document)


def serialize(
    document: Document,
    version: SpecVersion | str,
    fmt: str = "json",
    settings: Optional[WriterSettings] = None,
) -> str:
    """Write *document* as *version* text in *fmt* (``json`` or ``yaml``).

    Example::

        text = serialize(document, SpecVersion.V3_0, fmt="yaml")
    """
    settings = settings or WriterSettings()
    return emit(to_dict(document, version, settings), fmt, indent=settings.indent)
