"""Typer application and CLI entry point for specmodel.

Commands:

* ``specmodel validate SOURCE`` -- read a document and report its
  diagnostics. Exits with :data:`~specmodel.exit_codes.EXIT_DIAGNOSTIC_ERRORS`
  when any error was found.
* ``specmodel convert SOURCE --to VERSION`` -- read a document and write it
  as another version, in JSON or YAML.
* ``specmodel show SOURCE`` -- print a short summary of a document.

SOURCE is a file path, an ``http(s)://`` URL, or ``-`` for stdin.

See Also:
    :mod:`specmodel.config`: Reader settings resolution (flags, environment,
    ``./specmodel.json``).
    :mod:`specmodel.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import sys
from typing import Any, Iterator, Optional

import typer

from specmodel import __version__
from specmodel.api import ReadResult, load, serialize
from specmodel.config import WriterSettings, resolve_reader_settings
from specmodel.exceptions import InvalidUsageError, SpecmodelError
from specmodel.exit_codes import EXIT_DIAGNOSTIC_ERRORS, EXIT_GENERIC_FAILURE
from specmodel.models import COMPONENT_SECTIONS, Document
from specmodel.output import (
    OutputFormat,
    OutputManager,
    debug,
    error,
    get_output,
    set_output,
    success,
    warning,
)
from specmodel.versions import SpecVersion
from specmodel.writer.emitter import FORMATS

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="specmodel",
    help="Validate and convert OpenAPI and Swagger documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_SOURCE_HELP = "File path, URL, or '-' for stdin."
_RESOLVE_HELP = "Reference resolution: none, local or external."


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specmodel {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specmodel.output.OutputManager` from
    CLI flags. ``--verbose`` also routes library log records to stderr.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


@contextlib.contextmanager
def _handle_errors() -> Iterator[None]:
    """Report a :class:`SpecmodelError` and exit with its exit code."""
    try:
        yield
    except SpecmodelError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _read(source: str, resolve: Optional[str], base_url: Optional[str]) -> ReadResult:
    settings = resolve_reader_settings(cli_resolve=resolve, cli_base_url=base_url)
    debug(f"Reading {source} (resolution: {settings.resolution.value})")
    return load(source, settings)


def _report(result: ReadResult) -> None:
    """Echo read diagnostics to stderr."""
    for diagnostic in result.diagnostics.errors:
        error(f"{diagnostic.message} [{diagnostic.location}]")
    for diagnostic in result.diagnostics.warnings:
        warning(f"{diagnostic.message} [{diagnostic.location}]")


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("validate")
def validate_command(
    source: str = typer.Argument(..., help=_SOURCE_HELP),
    resolve: Optional[str] = typer.Option(None, "--resolve", help=_RESOLVE_HELP),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base for relative references of documents read from stdin."
    ),
) -> None:
    """Read a document and report its errors and warnings.

    Example::

        specmodel validate openapi.yaml --resolve external
    """
    with _handle_errors():
        result = _read(source, resolve, base_url)

    diagnostics = result.diagnostics
    if len(diagnostics):
        get_output().print_diagnostics(diagnostics, title=source)

    version = diagnostics.spec_version
    label = version.display_name if version else "document"
    summary = f"{len(diagnostics.errors)} error(s), {len(diagnostics.warnings)} warning(s)"
    if diagnostics.has_errors:
        error(f"Invalid {label}: {summary}")
        raise typer.Exit(code=EXIT_DIAGNOSTIC_ERRORS)
    success(f"Valid {label}: {summary}")


@app.command("convert")
def convert_command(
    source: str = typer.Argument(..., help=_SOURCE_HELP),
    to: str = typer.Option(..., "--to", "-t", help="Target version: 2.0, 3.0, 3.1 or 3.2."),
    fmt: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml."),
    output_file: Optional[str] = typer.Option(None, "-o", "--output", help="Output file path."),
    inline_local: bool = typer.Option(
        False, "--inline-local", help="Write resolved local references inline."
    ),
    inline_external: bool = typer.Option(
        False, "--inline-external", help="Write resolved external references inline."
    ),
    indent: int = typer.Option(2, "--indent", help="Indentation width."),
    resolve: Optional[str] = typer.Option(None, "--resolve", help=_RESOLVE_HELP),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base for relative references of documents read from stdin."
    ),
) -> None:
    """Write a document as another version.

    Fields the target version has no native slot for are written as
    ``x-oai-`` extensions. Values the target version cannot express at all
    stop the conversion.

    Example::

        specmodel convert petstore.json --to 3.0 --format yaml -o petstore.yaml
    """
    with _handle_errors():
        fmt = fmt.lower()
        if fmt not in FORMATS and fmt != "yml":
            raise InvalidUsageError(f"Unsupported output format '{fmt}'. Expected one of: {', '.join(FORMATS)}")
        target = SpecVersion.parse(to)
        result = _read(source, resolve, base_url)
        _report(result)

        settings = WriterSettings(
            inline_local_references=inline_local,
            inline_external_references=inline_external,
            indent=indent,
        )
        text = serialize(result.document, target, fmt, settings)

    get_output().print_document(text, fmt, output_file)
    if output_file:
        success(f"Wrote {target.display_name} document to {output_file}")


@app.command("show")
def show_command(
    source: str = typer.Argument(..., help=_SOURCE_HELP),
    resolve: Optional[str] = typer.Option(None, "--resolve", help=_RESOLVE_HELP),
) -> None:
    """Print a summary of a document: version, info, paths and components."""
    with _handle_errors():
        result = _read(source, resolve, None)

    version = result.diagnostics.spec_version
    rows = [["version", version.value if version else ""]]
    rows.extend(_summary_rows(result.document))
    get_output().print_table(["field", "value"], rows, title=source)


def _summary_rows(document: Document) -> list[list[str]]:
    info = document.info
    rows = [
        ["title", (info.title or "") if info else ""],
        ["info.version", (info.version or "") if info else ""],
        ["servers", str(len(document.servers))],
    ]
    paths = document.paths.path_items if document.paths is not None else {}
    operations = sum(len(item.operations) for item in paths.values())
    rows.append(["paths", str(len(paths))])
    rows.append(["operations", str(operations)])
    if document.webhooks:
        rows.append(["webhooks", str(len(document.webhooks))])
    if document.components is not None:
        for section in COMPONENT_SECTIONS.values():
            entries = getattr(document.components, section)
            if entries:
                rows.append([f"components.{section}", str(len(entries))])
    if document.tags:
        rows.append(["tags", str(len(document.tags))])
    return rows


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``specmodel`` console script.

    :class:`~specmodel.exceptions.SpecmodelError` instances that escape a
    command cause a clean exit with the error's ``exit_code``. Any other
    exception is logged with its traceback and exits with
    :data:`~specmodel.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except SpecmodelError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        logger.debug("Unhandled error", exc_info=True)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
