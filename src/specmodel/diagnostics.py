"""Structured diagnostics collected while reading and resolving a document.

A :class:`DiagnosticSet` is created once per top-level load, passed through
the version deserializer and the reference resolver, and frozen when the
load returns. Diagnostics produced while reading external documents are
merged into the top-level set with a ``[File: <locator>]`` prefix.
"""

from __future__ import annotations

import enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict

from specmodel.exceptions import DiagnosticsFrozenError
from specmodel.versions import SpecVersion


class Severity(str, enum.Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A single error or warning.

    Attributes:
        severity: :attr:`Severity.ERROR` or :attr:`Severity.WARNING`.
        location: JSON Pointer of the offending node, e.g. ``#/info/title``.
            The document root is ``#/``.
        message: Human-readable description.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    location: str = "#/"
    message: str

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message} [{self.location}]"


class DiagnosticSet:
    """Append-only collection of diagnostics for one load.

    Args:
        spec_version: The detected document version, if already known.
    """

    def __init__(self, spec_version: Optional[SpecVersion] = None) -> None:
        self.spec_version = spec_version
        self._errors: list[Diagnostic] = []
        self._warnings: list[Diagnostic] = []
        self._frozen = False

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(self._errors)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(self._warnings)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, diagnostic: Diagnostic) -> None:
        """Append *diagnostic*.

        Raises:
            DiagnosticsFrozenError: If the set has been frozen.
        """
        if self._frozen:
            raise DiagnosticsFrozenError(
                f"Cannot add a diagnostic to a completed load: {diagnostic}"
            )
        if diagnostic.severity is Severity.ERROR:
            self._errors.append(diagnostic)
        else:
            self._warnings.append(diagnostic)

    def add_error(self, location: str, message: str) -> None:
        self.add(Diagnostic(severity=Severity.ERROR, location=location, message=message))

    def add_warning(self, location: str, message: str) -> None:
        self.add(Diagnostic(severity=Severity.WARNING, location=location, message=message))

    def extend(self, other: DiagnosticSet, source: Optional[str] = None) -> None:
        """Merge every diagnostic of *other* into this set.

        Args:
            other: Diagnostics of another document.
            source: Locator of that document. When given, each message is
                prefixed with ``[File: <source>] ``.
        """
        prefix = f"[File: {source}] " if source else ""
        for diagnostic in (*other.errors, *other.warnings):
            self.add(diagnostic.model_copy(update={"message": prefix + diagnostic.message}))

    def freeze(self) -> DiagnosticSet:
        """Make the set immutable and return it."""
        self._frozen = True
        return self

    def __iter__(self) -> Iterator[Diagnostic]:
        yield from self._errors
        yield from self._warnings

    def __len__(self) -> int:
        return len(self._errors) + len(self._warnings)

    def __repr__(self) -> str:
        version = self.spec_version.value if self.spec_version else None
        return (
            f"DiagnosticSet(spec_version={version!r}, "
            f"errors={len(self._errors)}, warnings={len(self._warnings)})"
        )
