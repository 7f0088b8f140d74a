"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specmodel.exceptions.SpecmodelError` subclass.
External tooling (CI scripts, shell wrappers) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ specmodel convert petstore.yaml --to 3.0
    $ echo $?
    9   # EXIT_VERSION_GATED -- the document uses a 3.2-only feature
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_FETCH_ERROR = 6
"""A document could not be retrieved (file missing, HTTP failure, network error)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API description could not be tokenized as JSON or YAML."""

EXIT_UNSUPPORTED_VERSION = 8
"""The document does not declare a supported ``openapi``/``swagger`` version."""

EXIT_VERSION_GATED = 9
"""The document uses a feature the requested output version cannot express."""

EXIT_COMPONENT_COLLISION = 10
"""Two structurally different components were registered under the same key."""

EXIT_DIAGNOSTIC_ERRORS = 11
"""The document loaded, but its diagnostics contain at least one error."""
