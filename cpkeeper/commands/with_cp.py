"""``with-cp`` command: keep the classpath in a file instead of as coordinates.

Without ``--write`` the command reads the classpath file and prints its
entries as a single ``-cp`` argument. With ``--write`` the dependencies
(``--dependencies``, or the ones from the configuration file) are
resolved and the resulting artifact paths are written to the file.

Typical usage::

    # Resolve and store the classpath, refusing unresolved conflicts
    $ cpkeeper with-cp --write --safe -f classpath.txt

    # Stash artifacts in the project and keep paths relative to it
    $ cpkeeper with-cp -w -f classpath.txt -l .m2 \\
        -d '["org.clojure/clojure:1.11.1", ["ring/ring-core", "1.10.0"]]'

    # Use the stored classpath
    $ java -cp "$(cpkeeper with-cp -f classpath.txt)" clojure.main
"""

from __future__ import annotations

import sys
import json
from typing import Any, List, Optional, Tuple

import click

from cpkeeper.config import CpKeeperConfig
from cpkeeper.context import pass_context, CpKeeperContext
from cpkeeper.core import Classpath, ClasspathTask, ClasspathTaskOptions, TaskState
from cpkeeper.exceptions import CpKeeperError, UnresolvedConflictError
from cpkeeper.models import conflicts_from_map
from cpkeeper.resolvers import CoursierResolver
from cpkeeper.utils import (
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.with_cp")


def _parse_dependencies(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[List[Any]]:
    """Parse the ``--dependencies`` JSON document into a list."""
    if value is None:
        return None
    try:
        data = json.loads(value)
    except ValueError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise click.BadParameter("expected a JSON list of dependencies")
    return data


@click.command("with-cp")
@click.option(
    "--safe/--no-safe",
    "-s",
    default=None,
    help="Fail if there are unresolved dependency conflicts.",
)
@click.option(
    "--write",
    "-w",
    is_flag=True,
    help="Resolve dependencies and write the classpath file.",
)
@click.option(
    "--dependencies",
    "-d",
    metavar="JSON",
    callback=_parse_dependencies,
    help="Dependencies to resolve, as a JSON list (default: from configuration).",
)
@click.option(
    "--exclusions",
    "-e",
    metavar="GROUP/ARTIFACT",
    multiple=True,
    help="Group/artifact to exclude globally (repeatable).",
)
@click.option(
    "--file",
    "-f",
    "file",
    metavar="PATH",
    type=click.Path(dir_okay=False),
    help="File holding the classpath in java -cp format.",
)
@click.option(
    "--local-repo",
    "-l",
    metavar="PATH",
    type=click.Path(file_okay=False),
    help="Directory in which to stash resolved artifacts.",
)
@click.option(
    "--scopes",
    "-S",
    metavar="SCOPE",
    multiple=True,
    help="Dependency scope to include (repeatable; default compile, runtime, provided).",
)
@pass_context
def with_cp(
    ctx: CpKeeperContext,
    safe: Optional[bool],
    write: bool,
    dependencies: Optional[List[Any]],
    exclusions: Tuple[str, ...],
    file: Optional[str],
    local_repo: Optional[str],
    scopes: Tuple[str, ...],
) -> None:
    """Store the classpath in a file instead of as Maven coordinates.

    The --file option is required (or ``file`` in the configuration).

    Without --write the file is read and its entries are printed as one
    classpath argument. With --write the dependencies are resolved and
    the artifact paths are written to the file.
    """
    config = ctx.get_config()

    try:
        options = ClasspathTaskOptions(
            file=file or config.file,
            write=write,
            safe=config.safe if safe is None else safe,
            dependencies=dependencies,
            exclusions=exclusions or None,
            local_repo=local_repo,
            scopes=frozenset(scopes) if scopes else None,
        )
        # Reject malformed --dependencies before any work happens
        options.to_overrides()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--dependencies'") from exc

    try:
        result = _run_task(options, config)
    except UnresolvedConflictError as e:
        _display_conflicts(e)
        print_error(e.message)
        sys.exit(1)
    except CpKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if result.state is TaskState.FAILED:
        # The task already warned about the missing file
        return

    if write:
        print_success(f"Wrote {len(result.paths)} classpath entries to {result.file}")
    else:
        click.echo(Classpath(result.paths).as_argument())


def _run_task(options: ClasspathTaskOptions, config: CpKeeperConfig):
    resolver = None
    if options.write:
        resolver = CoursierResolver(config.coursier, repositories=config.repositories)

    task = ClasspathTask(
        options,
        ambient=config.to_environment(),
        resolver=resolver,
        self_coordinate=config.self_coordinate,
    )
    return task.run()


def _display_conflicts(error: UnresolvedConflictError) -> None:
    """Render the unresolved conflicts as a table."""
    rows = [
        {"Dependency": c.group_artifact, "Versions": ", ".join(c.versions)}
        for c in conflicts_from_map(error.conflicts)
    ]
    print_table(
        rows,
        title="Unresolved Dependency Conflicts",
        column_styles={"Dependency": {"style": "coordinate", "no_wrap": True}},
    )
    print_warning(
        "Add exclusions or declare the dependency directly to pick a version."
    )
