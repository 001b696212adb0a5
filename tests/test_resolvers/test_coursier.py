"""Unit tests for cpkeeper.resolvers.coursier.

Coursier itself is never run. A fake runner inspects the argv it is given
and writes a JSON report to the ``--json-output-file`` path, the same way
``coursier fetch`` does.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from cpkeeper.core.conflicts import detect_conflicts
from cpkeeper.core.task import ClasspathTask, ClasspathTaskOptions, TaskState
from cpkeeper.exceptions import ResolutionError, UnresolvedConflictError
from cpkeeper.models import DependencyCoordinate, Environment
from cpkeeper.resolvers.coursier import CoursierResolver, parse_coord


def _roots(command: List[str]) -> Tuple[str, ...]:
    """Maven coordinates at the end of a ``coursier fetch`` argv."""
    return tuple(
        arg for arg in command if not arg.startswith("-") and arg.count(":") >= 2
    )


class FakeCoursier:
    """Stands in for ``subprocess.run`` when the resolver calls Coursier.

    ``reports`` maps the tuple of root coordinates of a fetch to the report
    written for it. Fetches with other roots get ``report``.
    """

    def __init__(
        self,
        report: Optional[Dict[str, Any]] = None,
        returncode: int = 0,
        stderr: str = "",
        write_report: bool = True,
        reports: Optional[Dict[Tuple[str, ...], Dict[str, Any]]] = None,
    ) -> None:
        self.report = report if report is not None else {"dependencies": []}
        self.reports = reports or {}
        self.returncode = returncode
        self.stderr = stderr
        self.write_report = write_report
        self.calls: List[List[str]] = []
        self.exclude_files: List[str] = []

    @property
    def fetched_roots(self) -> List[Tuple[str, ...]]:
        return [_roots(command) for command in self.calls]

    def __call__(self, command, **kwargs) -> "subprocess.CompletedProcess[str]":
        self.calls.append(list(command))
        assert kwargs == {"capture_output": True, "text": True, "check": False}

        if "--local-exclude-file" in command:
            path = command[command.index("--local-exclude-file") + 1]
            with open(path, encoding="utf-8") as fh:
                self.exclude_files.append(fh.read())

        if self.write_report:
            report_path = command[command.index("--json-output-file") + 1]
            report = self.reports.get(_roots(command), self.report)
            with open(report_path, "w", encoding="utf-8") as fh:
                json.dump(report, fh)

        return subprocess.CompletedProcess(
            args=command, returncode=self.returncode, stdout="", stderr=self.stderr
        )


def _entry(coord: str, *deps: str) -> Dict[str, Any]:
    group, artifact, version = coord.split(":")
    return {
        "coord": coord,
        "file": f"/cache/{group}/{artifact}/{version}/{artifact}-{version}.jar",
        "dependencies": list(deps),
    }


SAMPLE_REPORT = {
    "conflict_resolution": {},
    "dependencies": [
        {
            "coord": "org.clojure:clojure:1.11.1",
            "file": "/cache/org/clojure/clojure/1.11.1/clojure-1.11.1.jar",
            "dependencies": ["org.clojure:spec.alpha:0.3.218"],
        },
        {
            "coord": "org.clojure:spec.alpha:0.3.218",
            "file": "/cache/org/clojure/spec.alpha/0.3.218/spec.alpha-0.3.218.jar",
            "dependencies": [],
        },
        {
            "coord": "org.example:pom-only:1.0",
            "file": None,
            "dependencies": [],
        },
    ],
}

# g:a:1 needs g:x:1.0 and g:b:1 needs g:x:2.0. Resolved together, Coursier
# silently keeps 2.0 and reports no conflict for the non-root g:x.
DIVERGENT_REPORTS = {
    ("g:a:1", "g:b:1"): {
        "conflict_resolution": {},
        "dependencies": [
            _entry("g:a:1", "g:x:2.0"),
            _entry("g:b:1", "g:x:2.0"),
            _entry("g:x:2.0"),
        ],
    },
    ("g:a:1",): {
        "conflict_resolution": {},
        "dependencies": [_entry("g:a:1", "g:x:1.0"), _entry("g:x:1.0")],
    },
    ("g:b:1",): {
        "conflict_resolution": {},
        "dependencies": [_entry("g:b:1", "g:x:2.0"), _entry("g:x:2.0")],
    },
}


@pytest.fixture
def env() -> Environment:
    return Environment(
        dependencies=(DependencyCoordinate("org.clojure/clojure", "1.11.1"),)
    )


@pytest.fixture
def divergent_env() -> Environment:
    return Environment(
        dependencies=(
            DependencyCoordinate("g/a", "1"),
            DependencyCoordinate("g/b", "1"),
        )
    )


@pytest.mark.unit
class TestParseCoord:
    """Tests for parse_coord()."""

    @pytest.mark.parametrize(
        "coord, expected",
        [
            ("org.clojure:clojure:1.11.1", ("org.clojure/clojure", "1.11.1")),
            ("g:a:jar:sources:2.0", ("g/a", "2.0")),
        ],
    )
    def test_valid(self, coord: str, expected: tuple) -> None:
        """Test valid coordinates are split into key and version."""
        assert parse_coord(coord) == expected

    @pytest.mark.parametrize("coord", ["g:a", "g::1.0", ""])
    def test_invalid(self, coord: str) -> None:
        """Test malformed coordinates raise ResolutionError."""
        with pytest.raises(ResolutionError):
            parse_coord(coord)


@pytest.mark.unit
class TestBuildCommand:
    """Tests for CoursierResolver.build_command()."""

    def test_minimal(self, env: Environment) -> None:
        """Test the argv for a plain environment."""
        command = CoursierResolver().build_command(env, "/tmp/report.json")

        assert command == [
            "coursier",
            "fetch",
            "--json-output-file",
            "/tmp/report.json",
            "org.clojure:clojure:1.11.1",
        ]

    def test_full(self) -> None:
        """Test the argv with every option set."""
        env = Environment(
            dependencies=(
                DependencyCoordinate("a/a", "1.0"),
                DependencyCoordinate("b/b", "2.0"),
            ),
            local_repo=".m2",
            exclusions=frozenset({"z/z", "x/x"}),
        )
        resolver = CoursierResolver(
            "cs",
            repositories=["https://repo.clojars.org"],
            extra_args=["--quiet"],
        )

        command = resolver.build_command(env, "r.json", "ex.txt")

        assert command == [
            "cs",
            "fetch",
            "--json-output-file",
            "r.json",
            "--cache",
            ".m2",
            "-r",
            "https://repo.clojars.org",
            "-E",
            "x:x",
            "-E",
            "z:z",
            "--local-exclude-file",
            "ex.txt",
            "--quiet",
            "a:a:1.0",
            "b:b:2.0",
        ]

    def test_local_exclude_lines(self) -> None:
        """Test per-dependency exclusions in exclude-file syntax."""
        env = Environment(
            dependencies=(
                DependencyCoordinate("a/a", "1.0", exclusions=["y/y", "x/x"]),
                DependencyCoordinate("b/b", "2.0"),
            )
        )

        assert CoursierResolver.local_exclude_lines(env) == [
            "a:a--x:x",
            "a:a--y:y",
        ]




@pytest.mark.unit
class TestCoursierResolver:
    """Tests for resolution and conflict reporting."""

    def test_resolve_returns_files_in_report_order(self, env: Environment) -> None:
        """Test resolve() keeps report order and skips entries without a file."""
        runner = FakeCoursier(SAMPLE_REPORT)
        resolver = CoursierResolver(runner=runner)

        paths = resolver.resolve(env)

        assert paths == [
            "/cache/org/clojure/clojure/1.11.1/clojure-1.11.1.jar",
            "/cache/org/clojure/spec.alpha/0.3.218/spec.alpha-0.3.218.jar",
        ]

    def test_single_root_has_no_conflicts(self, env: Environment) -> None:
        """Test one root resolving every key once reports nothing."""
        resolver = CoursierResolver(runner=FakeCoursier(SAMPLE_REPORT))

        assert resolver.graph_conflicts(env) == {}

    def test_transitive_conflict_between_roots(
        self, divergent_env: Environment
    ) -> None:
        """Test two roots requiring different versions of a transitive key."""
        runner = FakeCoursier(reports=DIVERGENT_REPORTS)
        resolver = CoursierResolver(runner=runner)

        conflicts = resolver.graph_conflicts(divergent_env)

        assert conflicts == {"g/x": frozenset({"1.0", "2.0"})}
        assert runner.fetched_roots == [("g:a:1",), ("g:b:1",)]

    def test_transitive_conflict_survives_detection(
        self, divergent_env: Environment
    ) -> None:
        """Test a key no root declares is kept by detect_conflicts()."""
        resolver = CoursierResolver(runner=FakeCoursier(reports=DIVERGENT_REPORTS))

        assert detect_conflicts(divergent_env, resolver) == {
            "g/x": frozenset({"1.0", "2.0"})
        }

    def test_bumped_direct_dependency_is_dropped_by_detection(self) -> None:
        """Test a declared key pulled in at another version is not reported."""
        env = Environment(
            dependencies=(
                DependencyCoordinate("g/x", "1.0"),
                DependencyCoordinate("g/a", "1"),
            )
        )
        reports = {
            ("g:x:1.0",): {"dependencies": [_entry("g:x:1.0")]},
            ("g:a:1",): {
                "dependencies": [_entry("g:a:1", "g:x:2.0"), _entry("g:x:2.0")]
            },
        }
        resolver = CoursierResolver(runner=FakeCoursier(reports=reports))

        assert resolver.graph_conflicts(env) == {"g/x": frozenset({"1.0", "2.0"})}
        assert detect_conflicts(env, resolver) == {}

    def test_same_version_from_every_root_is_not_a_conflict(self) -> None:
        """Test roots agreeing on a shared dependency report nothing."""
        env = Environment(
            dependencies=(
                DependencyCoordinate("g/a", "1"),
                DependencyCoordinate("g/b", "1"),
            )
        )
        reports = {
            ("g:a:1",): {"dependencies": [_entry("g:a:1"), _entry("g:x:1.0")]},
            ("g:b:1",): {"dependencies": [_entry("g:b:1"), _entry("g:x:1.0")]},
        }
        resolver = CoursierResolver(runner=FakeCoursier(reports=reports))

        assert resolver.graph_conflicts(env) == {}

    def test_per_root_fetch_keeps_exclusions_and_repository(self) -> None:
        """Test each root is fetched with the environment's settings."""
        env = Environment(
            dependencies=(
                DependencyCoordinate("g/a", "1", exclusions=["y/y"]),
                DependencyCoordinate("g/b", "1"),
            ),
            local_repo=".m2",
            exclusions=frozenset({"z/z"}),
        )
        runner = FakeCoursier()

        CoursierResolver(runner=runner).graph_conflicts(env)

        first, second = runner.calls
        assert first[-1] == "g:a:1"
        assert second[-1] == "g:b:1"
        for command in runner.calls:
            assert command[command.index("--cache") + 1] == ".m2"
            assert command[command.index("-E") + 1] == "z:z"
        assert "--local-exclude-file" not in second
        assert runner.exclude_files == ["g:a--y:y"]

    def test_report_is_cached_per_environment(self, env: Environment) -> None:
        """Test a conflict check followed by resolve runs Coursier once."""
        runner = FakeCoursier(SAMPLE_REPORT)
        resolver = CoursierResolver(runner=runner)

        resolver.graph_conflicts(env)
        resolver.resolve(env)

        assert len(runner.calls) == 1

        resolver.resolve(env.with_dependencies([DependencyCoordinate("b/b", "1")]))

        assert len(runner.calls) == 2

    def test_empty_environment_skips_coursier(self) -> None:
        """Test an environment without dependencies never runs Coursier."""
        runner = FakeCoursier()
        resolver = CoursierResolver(runner=runner)

        assert resolver.resolve(Environment()) == []
        assert resolver.graph_conflicts(Environment()) == {}
        assert runner.calls == []

    def test_local_exclude_file_is_written(self) -> None:
        """Test per-dependency exclusions reach --local-exclude-file."""
        env = Environment(
            dependencies=(DependencyCoordinate("a/a", "1.0", exclusions=["x/x"]),)
        )
        runner = FakeCoursier()

        CoursierResolver(runner=runner).resolve(env)

        assert runner.exclude_files == ["a:a--x:x"]

    def test_no_exclude_file_without_exclusions(self, env: Environment) -> None:
        """Test --local-exclude-file is omitted when nothing is excluded."""
        runner = FakeCoursier()

        CoursierResolver(runner=runner).resolve(env)

        assert "--local-exclude-file" not in runner.calls[0]

    def test_nonzero_exit_raises(self, env: Environment) -> None:
        """Test a failing coursier process raises ResolutionError."""
        runner = FakeCoursier(returncode=1, stderr="Resolution error: not found\n")
        resolver = CoursierResolver(runner=runner)

        with pytest.raises(ResolutionError) as exc_info:
            resolver.resolve(env)

        assert exc_info.value.returncode == 1
        assert exc_info.value.details["stderr"] == "Resolution error: not found"
        assert "exited non-zero: 1" in str(exc_info.value)

    def test_missing_executable_raises(self, env: Environment) -> None:
        """Test a missing coursier executable raises ResolutionError."""

        def runner(command, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", command[0])

        with pytest.raises(ResolutionError, match="Failed to run coursier"):
            CoursierResolver(runner=runner).resolve(env)

    def test_missing_report_raises(self, env: Environment) -> None:
        """Test a run that leaves no report raises ResolutionError."""
        runner = FakeCoursier(write_report=False)

        with pytest.raises(ResolutionError, match="Could not read the Coursier report"):
            CoursierResolver(runner=runner).resolve(env)

    def test_satisfies_resolver_protocol(self) -> None:
        """Test CoursierResolver is a DependencyResolver."""
        from cpkeeper.core.resolver import DependencyResolver

        assert isinstance(CoursierResolver(), DependencyResolver)


@pytest.mark.unit
class TestClasspathTaskWithCoursier:
    """Tests for the classpath task driven by the Coursier adapter."""

    def test_safe_write_fails_on_transitive_conflict(self, tmp_path: Path) -> None:
        """Test safe mode stops before writing when roots disagree."""
        cp_file = tmp_path / "classpath.txt"
        runner = FakeCoursier(reports=DIVERGENT_REPORTS)
        task = ClasspathTask(
            ClasspathTaskOptions(
                file=str(cp_file),
                write=True,
                safe=True,
                dependencies=["g/a:1", "g/b:1"],
            ),
            resolver=CoursierResolver(runner=runner),
        )

        with pytest.raises(UnresolvedConflictError) as exc_info:
            task.run()

        assert exc_info.value.conflicts == {"g/x": frozenset({"1.0", "2.0"})}
        assert task.state is TaskState.FAILED
        assert not cp_file.exists()
        assert ("g:a:1", "g:b:1") not in runner.fetched_roots

    def test_unsafe_write_keeps_reconciled_classpath(self, tmp_path: Path) -> None:
        """Test without safe mode the reconciled classpath is written."""
        cp_file = tmp_path / "classpath.txt"
        runner = FakeCoursier(reports=DIVERGENT_REPORTS)
        task = ClasspathTask(
            ClasspathTaskOptions(
                file=str(cp_file), write=True, dependencies=["g/a:1", "g/b:1"]
            ),
            resolver=CoursierResolver(runner=runner),
        )

        result = task.run()

        assert result.ok
        assert result.paths == [
            "/cache/g/a/1/a-1.jar",
            "/cache/g/b/1/b-1.jar",
            "/cache/g/x/2.0/x-2.0.jar",
        ]
        assert runner.fetched_roots == [("g:a:1", "g:b:1")]
