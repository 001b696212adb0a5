"""``show`` command: list the entries of a classpath file."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.text import Text

from cpkeeper.context import pass_context, CpKeeperContext
from cpkeeper.core import read_classpath_file
from cpkeeper.exceptions import CpKeeperError
from cpkeeper.utils import get_logger, print_error, print_table, print_warning

logger = get_logger("commands.show")


@click.command()
@click.argument(
    "file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def show(ctx: CpKeeperContext, file: Optional[Path]) -> None:
    """Show the entries of a classpath FILE and whether they exist.

    FILE defaults to the ``file`` set in the configuration. Relative
    entries are checked against the current directory, the same way a JVM
    started here would see them.
    """
    if file is None:
        configured = ctx.get_config().file
        if not configured:
            raise click.UsageError(
                "Expected a FILE argument or 'file' in the configuration."
            )
        file = Path(configured)
        logger.debug("Showing configured classpath file %s", file)

    try:
        paths = read_classpath_file(file)
    except CpKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if not paths:
        print_warning(f"{file} holds an empty classpath")
        return

    rows = []
    missing = 0
    for index, entry in enumerate(paths, start=1):
        exists = os.path.exists(entry)
        missing += not exists
        rows.append(
            {
                "#": index,
                "Path": entry,
                "Status": Text("ok", style="entry.ok")
                if exists
                else Text("missing", style="entry.missing"),
            }
        )

    print_table(
        rows,
        title=str(file),
        column_styles={
            "#": {"justify": "right", "style": "dim"},
            "Status": {"justify": "center", "no_wrap": True},
        },
    )

    if missing:
        print_warning(f"{missing} of {len(paths)} classpath entries are missing")
