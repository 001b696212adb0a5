"""
User-facing terminal output for cpkeeper, rendered with Rich.

Status lines and tables go to stdout through one shared console. Anything
diagnostic belongs in :mod:`cpkeeper.utils.logger` instead, so that
``cpkeeper with-cp`` can print a bare classpath that shells can capture.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

CPKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "dim": "dim",
        "coordinate": "bold cyan",
        "entry.ok": "green",
        "entry.missing": "bold red",
    }
)

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Color only an interactive stdout, and never under NO_COLOR or CI."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError, ValueError):
        return False


def _get_console() -> Console:
    global _console

    with _console_lock:
        if _console is None:
            color = _should_use_color()
            _console = Console(
                theme=CPKEEPER_THEME,
                no_color=not color,
                highlight=False,
                soft_wrap=False,
            )
        return _console


def reconfigure_console() -> None:
    """Forget the shared console; the next print re-reads the environment."""
    global _console
    with _console_lock:
        _console = None


def _emit(style: str, prefix: str, message: str) -> None:
    # Paths may contain brackets, so markup stays off
    _get_console().print(f"{prefix} {message}", style=style, markup=False)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _emit("success", prefix, message)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _emit("error", prefix, message)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _emit("warning", prefix, message)


def _cell(value: Any) -> Text:
    # Plain strings are never parsed as markup
    return value if isinstance(value, Text) else Text(str(value))


def _build_table(
    rows: Sequence[Mapping[str, Any]],
    headers: Sequence[str],
    title: Optional[str],
    column_styles: Mapping[str, Mapping[str, Any]],
) -> Table:
    table = Table(title=title, header_style="bold", show_lines=False)
    for header in headers:
        options = column_styles.get(header, {})
        table.add_column(
            header,
            style=options.get("style"),
            justify=options.get("justify", "left"),
            no_wrap=options.get("no_wrap", False),
            overflow="fold",
        )
    for row in rows:
        table.add_row(*(_cell(row.get(header, "")) for header in headers))
    return table


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Print row dictionaries as a table.

    Nothing is printed for an empty ``data`` list.

    Args:
        data: One mapping per row.
        headers: Columns to show, in order. Defaults to the first row's keys.
        title: Caption printed above the table.
        column_styles: Per-column ``style``, ``justify`` and ``no_wrap``.
    """
    if not data:
        return
    columns = list(headers) if headers is not None else list(data[0])
    _get_console().print(_build_table(data, columns, title, column_styles or {}))


def get_raw_console() -> Console:
    """Return the shared Rich console."""
    return _get_console()
