"""Document versions, version detection, and the field capability table.

A :class:`SpecVersion` is detected once per document from its ``swagger`` or
``openapi`` field by :func:`detect_version`, before any entity is read.

The :class:`CapabilityTable` says which fields and enumerated values each
version supports natively. Readers use it to decide whether a field arrives
under its own key or under the extension prefix; writers use it to decide
whether to emit a field natively, emit it as an extension, or refuse. The
default table ships as ``specmodel/data/capabilities.yaml`` and can be
replaced through :class:`~specmodel.config.ReaderSettings` or
:class:`~specmodel.config.WriterSettings`.
"""

from __future__ import annotations

import enum
import functools
from importlib import resources
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from specmodel.exceptions import UnsupportedVersionError, VersionGatedFeatureError


class SpecVersion(str, enum.Enum):
    """Supported document versions, ordered oldest first."""

    V2_0 = "2.0"
    V3_0 = "3.0"
    V3_1 = "3.1"
    V3_2 = "3.2"

    @property
    def _key(self) -> tuple[int, ...]:
        return tuple(int(part) for part in self.value.split("."))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SpecVersion):
            return NotImplemented
        return self._key < other._key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SpecVersion):
            return NotImplemented
        return self._key <= other._key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SpecVersion):
            return NotImplemented
        return self._key > other._key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SpecVersion):
            return NotImplemented
        return self._key >= other._key

    @property
    def display_name(self) -> str:
        """Name used in messages, e.g. ``"OpenAPI 3.1"``."""
        return f"OpenAPI {self.value}"

    @property
    def version_string(self) -> str:
        """The full version string written into serialized documents."""
        return _EMITTED_VERSIONS[self]

    @property
    def is_swagger(self) -> bool:
        return self is SpecVersion.V2_0

    @classmethod
    def parse(cls, value: str) -> SpecVersion:
        """Map a user-supplied version (``"3.1"``, ``"3.1.0"``, ``"2"``) to a member.

        Raises:
            UnsupportedVersionError: If the value names no supported version.
        """
        text = str(value).strip()
        for member in cls:
            if text == member.value or text.startswith(member.value + "."):
                return member
        if text == "2":
            return cls.V2_0
        raise UnsupportedVersionError(
            f"Unsupported document version: {value!r}. "
            f"Expected one of: {', '.join(m.value for m in cls)}"
        )


_EMITTED_VERSIONS = {
    SpecVersion.V2_0: "2.0",
    SpecVersion.V3_0: "3.0.4",
    SpecVersion.V3_1: "3.1.2",
    SpecVersion.V3_2: "3.2.0",
}


def detect_version(raw: Any) -> SpecVersion:
    """Detect the document version from the ``swagger``/``openapi`` field.

    YAML loads an unquoted ``openapi: 3.0`` as a float, so the value is
    stringified before matching.

    Args:
        raw: The tokenized document root.

    Returns:
        The detected :class:`SpecVersion`.

    Raises:
        UnsupportedVersionError: If the root is not an object, neither
            field is present, or the value names an unsupported version.
    """
    if not isinstance(raw, dict):
        raise UnsupportedVersionError(
            "Document root must be an object declaring 'openapi' or 'swagger'"
        )

    if "swagger" in raw:
        value = str(raw["swagger"]).strip()
        if value in ("2", "2.0") or value.startswith("2.0."):
            return SpecVersion.V2_0
        raise UnsupportedVersionError(f"Unsupported swagger version: {value}")

    if "openapi" in raw:
        value = str(raw["openapi"]).strip()
        for member in (SpecVersion.V3_0, SpecVersion.V3_1, SpecVersion.V3_2):
            if value == member.value or value.startswith(member.value + "."):
                return member
        raise UnsupportedVersionError(f"Unsupported OpenAPI version: {value}")

    raise UnsupportedVersionError(
        "Missing 'openapi' or 'swagger' field. Is this an API description document?"
    )


# --- Capability table ---


class GatedValues(BaseModel):
    """Enumerated values of one field that older versions cannot express."""

    label: str
    since: dict[str, SpecVersion] = Field(default_factory=dict)


class CapabilityTable(BaseModel):
    """Declarative per-field, per-version capability map.

    Example::

        table = default_capabilities()
        table.field_key("info", "summary", SpecVersion.V3_0)   # 'x-oai-summary'
        table.field_key("info", "summary", SpecVersion.V3_1)   # 'summary'
    """

    extension_prefix: str = "x-oai-"
    fields: dict[str, dict[str, SpecVersion]] = Field(default_factory=dict)
    values: dict[str, dict[str, GatedValues]] = Field(default_factory=dict)

    def native_since(self, entity: str, field: str) -> Optional[SpecVersion]:
        """Return the first version carrying *field* natively, or ``None`` if always native."""
        return self.fields.get(entity, {}).get(field)

    def is_native(self, entity: str, field: str, version: SpecVersion) -> bool:
        since = self.native_since(entity, field)
        return since is None or version >= since

    def shim_key(self, field: str) -> str:
        """Return the extension key used to carry *field* in older versions."""
        return f"{self.extension_prefix}{field}"

    def field_key(self, entity: str, field: str, version: SpecVersion) -> str:
        """Return the key *field* is stored under in a *version* document."""
        if self.is_native(entity, field, version):
            return field
        return self.shim_key(field)

    def unshim(self, entity: str, key: str, version: SpecVersion) -> Optional[str]:
        """Map an extension key back to the field it carries for *version*.

        Returns ``None`` when *key* is an ordinary extension: either it does
        not use the prefix, or the field it names is native in *version*.
        """
        if not key.startswith(self.extension_prefix):
            return None
        field = key[len(self.extension_prefix):]
        since = self.native_since(entity, field)
        if since is None or version >= since:
            return None
        return field

    def gated_since(self, entity: str, field: str, value: str) -> Optional[SpecVersion]:
        """Return the first version accepting *value* for *field*, or ``None``."""
        gated = self.values.get(entity, {}).get(field)
        if gated is None:
            return None
        return gated.since.get(value)

    def gate_message(self, entity: str, field: str, value: str, version: SpecVersion) -> Optional[str]:
        """Return a diagnostic message if *value* is gated above *version*."""
        since = self.gated_since(entity, field, value)
        if since is None or version >= since:
            return None
        label = self.values[entity][field].label
        return (
            f"{label} '{value}' is only supported in {since.display_name} "
            f"and later versions. Current version: {version.display_name}"
        )

    def check_value(self, entity: str, field: str, value: str, version: SpecVersion) -> None:
        """Raise when *value* cannot be written to a *version* document.

        Raises:
            VersionGatedFeatureError: If *value* needs a newer version.
        """
        since = self.gated_since(entity, field, value)
        if since is not None and version < since:
            label = self.values[entity][field].label
            raise VersionGatedFeatureError(f"{label} '{value}'", since, version)


@functools.lru_cache(maxsize=1)
def default_capabilities() -> CapabilityTable:
    """Load the capability table bundled with the package."""
    text = resources.files("specmodel").joinpath("data/capabilities.yaml").read_text(
        encoding="utf-8"
    )
    return CapabilityTable.model_validate(yaml.safe_load(text))
