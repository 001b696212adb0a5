"""Dependency resolution through the Coursier command-line tool.

:class:`CoursierResolver` implements
:class:`~cpkeeper.core.resolver.DependencyResolver` by running
``coursier fetch --json-output-file`` and reading its JSON report, which
looks like this::

    {
      "conflict_resolution": {
        "org:name:requested": "org:name:reconciled"
      },
      "dependencies": [
        {
          "coord": "orgA:nameA:versionA",
          "file": "/home/me/.cache/coursier/v1/.../nameA-versionA.jar",
          "dependencies": ["orgX:nameX:versionX"]
        }
      ]
    }

Artifact paths come from the ``file`` entries in report order.

``conflict_resolution`` only lists root coordinates, so it cannot reveal
a transitive conflict. Graph conflicts are found by fetching each direct
dependency on its own instead. Every ``coord`` of those per-root reports
adds its version to the set for its ``group/artifact`` key, and a key that
two roots pull in at different versions ends up with more than one.
"""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from cpkeeper.constants import DEFAULT_COURSIER_COMMAND
from cpkeeper.exceptions import ResolutionError
from cpkeeper.models import ConflictMap, DependencyCoordinate, Environment
from cpkeeper.models.conflict import freeze_conflicts
from cpkeeper.utils.logger import get_logger

logger = get_logger("resolvers.coursier")

__all__ = ["CoursierResolver", "parse_coord"]

Runner = Callable[..., "subprocess.CompletedProcess[str]"]

_REPORT_FILE_NAME = "coursier_report.json"
_EXCLUDE_FILE_NAME = "local_excludes.txt"


def parse_coord(coord: str) -> Tuple[str, str]:
    """Split a Coursier coordinate into its ``group/artifact`` key and version.

    Handles both ``org:name:version`` and
    ``org:name:type:classifier:version``.

    Example:
        >>> parse_coord("org.clojure:clojure:1.11.1")
        ('org.clojure/clojure', '1.11.1')
    """
    parts = coord.split(":")
    if len(parts) < 3 or not all(parts):
        raise ResolutionError(f"Unexpected coordinate in Coursier report: {coord!r}")
    return f"{parts[0]}/{parts[1]}", parts[-1]


class CoursierResolver:
    """Resolves environments by shelling out to ``coursier fetch``.

    The report of the most recent environment is cached. Checking
    conflicts runs one fetch per direct dependency, and with a single
    dependency that fetch is the one :meth:`resolve` reuses.

    Args:
        command: Coursier executable.
        repositories: Extra repositories passed with ``-r``.
        extra_args: Additional arguments appended to every fetch.
        runner: Function with the signature of :func:`subprocess.run`.
    """

    def __init__(
        self,
        command: str = DEFAULT_COURSIER_COMMAND,
        *,
        repositories: Sequence[str] = (),
        extra_args: Sequence[str] = (),
        runner: Runner = subprocess.run,
    ) -> None:
        self.command = command
        self.repositories = tuple(repositories)
        self.extra_args = tuple(extra_args)
        self._runner = runner
        self._cached: Optional[Tuple[Environment, Dict[str, Any]]] = None

    # -----------------------------------------------------------------
    # DependencyResolver
    # -----------------------------------------------------------------

    def resolve(self, env: Environment) -> List[str]:
        report = self._report(env)
        paths = [entry["file"] for entry in report.get("dependencies", []) if entry.get("file")]
        logger.info("Coursier resolved %d artifact(s)", len(paths))
        return paths

    def graph_conflicts(self, env: Environment) -> ConflictMap:
        versions: Dict[str, Set[str]] = defaultdict(set)
        for dep in env.dependencies:
            report = self._root_report(env, dep)
            for entry in report.get("dependencies", []):
                if entry.get("coord"):
                    key, version = parse_coord(entry["coord"])
                    versions[key].add(version)
        conflicts = {k: v for k, v in versions.items() if len(v) > 1}
        logger.debug(
            "Compared %d root(s); %d key(s) required at several versions",
            len(env.dependencies),
            len(conflicts),
        )
        return freeze_conflicts(conflicts)

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def build_command(
        self,
        env: Environment,
        report_path: str,
        exclude_file: Optional[str] = None,
    ) -> List[str]:
        """Return the ``coursier fetch`` argv for ``env``."""
        args = [self.command, "fetch", "--json-output-file", report_path]
        if env.local_repo:
            args.extend(["--cache", env.local_repo])
        for repository in self.repositories:
            args.extend(["-r", repository])
        for key in sorted(env.exclusions):
            args.extend(["-E", key.replace("/", ":")])
        if exclude_file:
            args.extend(["--local-exclude-file", exclude_file])
        args.extend(self.extra_args)
        args.extend(dep.to_maven_coord() for dep in env.dependencies)
        return args

    @staticmethod
    def local_exclude_lines(env: Environment) -> List[str]:
        """Per-dependency exclusions in ``--local-exclude-file`` syntax."""
        lines = []
        for dep in env.dependencies:
            for key in sorted(dep.exclusions):
                lines.append(f"{dep.group}:{dep.artifact}--{key.replace('/', ':')}")
        return lines

    def _report(self, env: Environment) -> Dict[str, Any]:
        if self._cached is not None and self._cached[0] == env:
            return self._cached[1]

        if not env.dependencies:
            report: Dict[str, Any] = {"conflict_resolution": {}, "dependencies": []}
        else:
            report = self._fetch(env)

        self._cached = (env, report)
        return report

    def _root_report(
        self, env: Environment, dep: DependencyCoordinate
    ) -> Dict[str, Any]:
        """Report for ``dep`` alone, under ``env``'s repository and exclusions."""
        root_env = env.with_dependencies([dep])
        if root_env == env:
            return self._report(env)
        return self._fetch(root_env)

    def _fetch(self, env: Environment) -> Dict[str, Any]:
        with tempfile.TemporaryDirectory(prefix="cpkeeper-") as workdir:
            report_path = os.path.join(workdir, _REPORT_FILE_NAME)

            exclude_file: Optional[str] = None
            exclude_lines = self.local_exclude_lines(env)
            if exclude_lines:
                exclude_file = os.path.join(workdir, _EXCLUDE_FILE_NAME)
                with open(exclude_file, "w", encoding="utf-8") as fh:
                    fh.write("\n".join(exclude_lines))

            command = self.build_command(env, report_path, exclude_file)
            logger.debug("Running: %s", " ".join(command))

            try:
                completed = self._runner(
                    command, capture_output=True, text=True, check=False
                )
            except OSError as exc:
                raise ResolutionError(
                    f"Failed to run {self.command}: {exc}", command=command
                ) from exc

            if completed.returncode != 0:
                raise ResolutionError(
                    f"The coursier process exited non-zero: {completed.returncode}",
                    command=command,
                    returncode=completed.returncode,
                    stderr=completed.stderr,
                )

            try:
                with open(report_path, "r", encoding="utf-8") as fh:
                    return json.load(fh)
            except (OSError, ValueError) as exc:
                raise ResolutionError(
                    f"Could not read the Coursier report: {exc}", command=command
                ) from exc
