"""
Command-line interface for cpkeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import click

from cpkeeper.config import load_config
from cpkeeper.__version__ import __version__
from cpkeeper.constants import CONFIG_ENV_VAR
from cpkeeper.context import CpKeeperContext
from cpkeeper.exceptions import ConfigError, CpKeeperError
from cpkeeper.utils.logger import get_logger, level_for_verbosity, setup_logging
from cpkeeper.utils.console import print_error, print_warning, reconfigure_console

from cpkeeper.commands.run import run
from cpkeeper.commands.show import show
from cpkeeper.commands.with_cp import with_cp

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=CONFIG_ENV_VAR,
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="CPKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="cpkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """cpkeeper: resolve a Java classpath once and keep it in a file.

    \b
    Available commands:
      cpkeeper with-cp     Write or read a classpath file
      cpkeeper show        List the entries of a classpath file
      cpkeeper run         Start a JVM on a stored classpath

    \b
    Examples:
      cpkeeper with-cp --write --safe -f classpath.txt
      cpkeeper with-cp -f classpath.txt
      cpkeeper -v run -f classpath.txt clojure.main

    Use ``cpkeeper COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    setup_logging(level=level_for_verbosity(verbose), verbose=verbose > 1)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    cpkeeper_ctx = CpKeeperContext()
    cpkeeper_ctx.config_path = config or loaded_config.source_path
    cpkeeper_ctx.color = color
    cpkeeper_ctx.verbose = verbose
    cpkeeper_ctx.config = loaded_config
    ctx.obj = cpkeeper_ctx

    logger.debug("cpkeeper v%s", __version__)
    logger.debug("Config path: %s", cpkeeper_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


cli.add_command(with_cp)
cli.add_command(show)
cli.add_command(run)


def main() -> int:
    """Main entry point for the cpkeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    except CpKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "CpKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
