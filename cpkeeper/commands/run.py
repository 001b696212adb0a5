"""``run`` command: start a JVM on the classpath stored in a file.

Typical usage::

    $ cpkeeper run -f classpath.txt clojure.main -m my.app
    $ cpkeeper run -f classpath.txt -J -Xmx2g my.app.Main
"""

from __future__ import annotations

import sys
from typing import Optional, Tuple

import click

from cpkeeper.constants import DEFAULT_JAVA_COMMAND
from cpkeeper.context import pass_context, CpKeeperContext
from cpkeeper.core import Classpath, launch, read_classpath_file
from cpkeeper.exceptions import CpKeeperError
from cpkeeper.utils import get_logger, print_error

logger = get_logger("commands.run")


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.option(
    "--file",
    "-f",
    "file",
    metavar="PATH",
    type=click.Path(dir_okay=False),
    help="Classpath file to launch with (default: from configuration).",
)
@click.option(
    "--java",
    default=DEFAULT_JAVA_COMMAND,
    show_default=True,
    envvar="CPKEEPER_JAVA",
    help="Java executable.",
)
@click.option(
    "--jvm-opt",
    "-J",
    "jvm_options",
    multiple=True,
    help="Option passed to the JVM before the main class (repeatable).",
)
@click.argument("main")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_context
def run(
    ctx: CpKeeperContext,
    file: Optional[str],
    java: str,
    jvm_options: Tuple[str, ...],
    main: str,
    args: Tuple[str, ...],
) -> None:
    """Run MAIN with ARGS on the classpath stored in a file."""
    path = file or ctx.get_config().file
    if not path:
        raise click.UsageError("Expected --file option or 'file' in the configuration.")

    try:
        classpath = Classpath(read_classpath_file(path))
        returncode = launch(
            classpath, main, args, java=java, jvm_options=jvm_options
        )
    except CpKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    logger.debug("%s exited with %d", java, returncode)
    sys.exit(returncode)
