"""Exception hierarchy for specmodel.

All exceptions inherit from :class:`SpecmodelError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specmodel.exit_codes`.
The command line entry point in :func:`specmodel.app.main` catches
``SpecmodelError`` and exits with the appropriate code.

Only two failures are hard during a normal load/serialize cycle: an
unrecognized document version and a version-gated feature on output.
Everything else found while reading a document is reported as a
:class:`~specmodel.diagnostics.Diagnostic` instead.

Subclass hierarchy::

    SpecmodelError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ReferenceFetchError        (exit 6)
    +-- SpecParseError             (exit 7)
    |   +-- UnsupportedVersionError (exit 8)
    +-- VersionGatedFeatureError   (exit 9)
    +-- ComponentCollisionError    (exit 10)
    +-- ParseNodeError             (exit 7)
    +-- DiagnosticsFrozenError     (exit 1)
    +-- ConfigError                (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from specmodel.exit_codes import (
    EXIT_COMPONENT_COLLISION,
    EXIT_FETCH_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNSUPPORTED_VERSION,
    EXIT_VERSION_GATED,
)

if TYPE_CHECKING:
    from specmodel.versions import SpecVersion


class SpecmodelError(Exception):
    """Base exception for all specmodel errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specmodel.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecmodelError):
    """Raised for invalid CLI arguments or unsupported option combinations."""

    exit_code = EXIT_INVALID_USAGE


class ReferenceFetchError(SpecmodelError):
    """Raised when an external document cannot be retrieved by a fetcher."""

    exit_code = EXIT_FETCH_ERROR


class SpecParseError(SpecmodelError):
    """Raised when a source cannot be read or tokenized as JSON/YAML."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedVersionError(SpecParseError):
    """Raised when the ``openapi``/``swagger`` field is missing or unrecognized."""

    exit_code = EXIT_UNSUPPORTED_VERSION


class VersionGatedFeatureError(SpecmodelError):
    """Raised when serializing a feature the target version cannot express.

    Args:
        feature: Human-readable feature description, e.g.
            ``"Parameter style 'cookie'"``.
        required_version: The first version that supports the feature.
        current_version: The version that was requested for output.
    """

    exit_code = EXIT_VERSION_GATED

    def __init__(
        self,
        feature: str,
        required_version: SpecVersion,
        current_version: SpecVersion,
    ):
        self.feature = feature
        self.required_version = required_version
        self.current_version = current_version
        super().__init__(
            f"{feature} is only supported in {required_version.display_name} "
            f"and later versions. Current version: {current_version.display_name}"
        )


class ComponentCollisionError(SpecmodelError):
    """Raised when a different entity is registered under an existing key."""

    exit_code = EXIT_COMPONENT_COLLISION

    def __init__(self, kind: str, component_id: str, message: str | None = None):
        self.kind = kind
        self.component_id = component_id
        super().__init__(
            message
            or f"A different {kind} component is already registered as '{component_id}'"
        )


class ParseNodeError(SpecmodelError):
    """Raised by parse nodes when a value has the wrong shape.

    Field-table drivers catch this and convert it into an error diagnostic
    at :attr:`location`; it never escapes a reader.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, location: str, message: str):
        self.location = location
        super().__init__(message)


class DiagnosticsFrozenError(SpecmodelError):
    """Raised when appending to a diagnostic set after its load has completed."""


class ConfigError(SpecmodelError):
    """Raised for configuration problems (invalid env values, bad project file)."""

    exit_code = EXIT_GENERIC_FAILURE
