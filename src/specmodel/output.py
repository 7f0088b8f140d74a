"""Output formatting for the command-line interface.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (serialized documents, diagnostics
  tables, summaries). This is what downstream tools pipe and parse.
* **stderr** -- status, warnings, and errors. Never contaminates the data
  stream.
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

:class:`OutputManager` is created once in :func:`~specmodel.app.main_callback`
and installed via :func:`set_output`; the module-level functions delegate to
that instance so commands do not need to pass it around.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from specmodel.diagnostics import DiagnosticSet, Severity


class OutputFormat(str, Enum):
    """Enumeration of supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise. Callers can force a specific
    format via the ``--json`` or ``--plain`` CLI flags.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
}


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_document(self, text: str, fmt: str = "json", output_file: Optional[str] = None) -> None:
        """Output a serialized document.

        The text is written verbatim to *output_file*, or to stdout. In Rich
        mode stdout output is syntax-highlighted as *fmt*.

        Args:
            text: Serialized document text.
            fmt: ``json`` or ``yaml``; selects the highlighter.
            output_file: Path to write to instead of stdout.
        """
        if output_file:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(text)
                if not text.endswith("\n"):
                    f.write("\n")
            return

        if self._format == OutputFormat.RICH:
            lexer = "yaml" if fmt in ("yaml", "yml") else "json"
            self._stdout.print(Syntax(text.rstrip("\n"), lexer, theme="monokai", word_wrap=True))
        else:
            sys.stdout.write(text)
            sys.stdout.flush()

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table` with column
          headers.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))

        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))

        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def print_diagnostics(self, diagnostics: DiagnosticSet, title: Optional[str] = None) -> None:
        """Print every diagnostic of *diagnostics*, errors first.

        Rich mode colours the severity column; JSON and plain modes follow
        :meth:`print_table`.
        """
        headers = ["severity", "location", "message"]
        if self._format != OutputFormat.RICH:
            self.print_table(
                headers,
                [[d.severity.value, d.location, d.message] for d in diagnostics],
                title,
            )
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for h in headers:
            table.add_column(h)
        for d in diagnostics:
            style = _SEVERITY_STYLES[d.severity]
            table.add_row(f"[{style}]{d.severity.value}[/{style}]", escape(d.location), escape(d.message))
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Status messages (stderr)
    # ------------------------------------------------------------------ #

    def _status(self, message: str, label: str = "", style: str = "") -> None:
        """Write one status line to stderr.

        Without colour the line is ``<label> <message>``; otherwise *label*
        is styled with *style* and *message* is escaped so that pointers
        like ``[#/info]`` are not read as Rich markup.
        """
        if self._no_color:
            print(f"{label} {message}" if label else message, file=sys.stderr, flush=True)
            return
        text = escape(message)
        if label:
            text = f"[{style}]{escape(label)}[/{style}] {text}"
        elif style:
            text = f"[{style}]{text}[/{style}]"
        self._stderr.print(text)

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._status(message, style="green")

    def warning(self, message: str) -> None:
        """Yellow warning. Shown even with ``--quiet``."""
        self._status(message, "Warning:", "yellow")

    def error(self, message: str) -> None:
        """Bold red error. Never suppressed."""
        self._status(message, "Error:", "bold red")

    def debug(self, message: str) -> None:
        """Dimmed debug line, only with ``--verbose``."""
        if self._verbose:
            self._status(message, "[debug]", "dim")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything, or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance, installed by the root CLI callback
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
