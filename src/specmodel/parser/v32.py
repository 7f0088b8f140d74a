"""OpenAPI 3.2 deserializer.

3.2 adds fields that older dialects carry as ``x-oai-`` extensions (the
field tables already know them) and relaxes the response ``description``
requirement. Parameter style ``cookie`` and location ``querystring`` are
accepted without a version warning.
"""

from __future__ import annotations

from specmodel.parser.v31 import OpenApiV31Deserializer
from specmodel.versions import SpecVersion


class OpenApiV32Deserializer(OpenApiV31Deserializer):
    """Reads OpenAPI 3.2 documents into the document model."""

    version = SpecVersion.V3_2

    response_required = ()
