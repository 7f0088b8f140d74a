"""Render serialized documents as JSON or YAML text."""

from __future__ import annotations

import json
from typing import Any

import yaml

from specmodel.exceptions import InvalidUsageError

FORMATS = ("json", "yaml")


class _BlockDumper(yaml.SafeDumper):
    """Safe dumper that indents block sequences under their parent key.

    Values shared between several places of the model are written out in
    full at each place instead of as YAML anchors.
    """

    def ignore_aliases(self, data: Any) -> bool:
        return True

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> Any:
        return super().increase_indent(flow, False)


def emit(data: dict[str, Any], fmt: str = "json", indent: int = 2) -> str:
    """Render *data* in *fmt* (``json`` or ``yaml``).

    Raises:
        InvalidUsageError: If *fmt* is not a supported format.
    """
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(data, indent=indent, ensure_ascii=False) + "\n"
    if fmt in ("yaml", "yml"):
        return yaml.dump(
            data,
            Dumper=_BlockDumper,
            sort_keys=False,
            allow_unicode=True,
            indent=indent,
            default_flow_style=False,
        )
    raise InvalidUsageError(f"Unsupported output format '{fmt}'. Expected one of: {', '.join(FORMATS)}")
