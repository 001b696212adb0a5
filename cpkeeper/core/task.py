"""The classpath task: write a classpath file from dependencies, or load one.

The task moves through a small state machine::

    IDLE -> READ_MODE  -> DONE | FAILED
    IDLE -> WRITE_MODE -> DONE | FAILED

**Write mode** builds an :class:`~cpkeeper.models.Environment` from the
caller's options layered over the ambient environment, filters the
dependencies, optionally refuses to continue while version conflicts
remain (safe mode), resolves, relativizes every artifact path against the
local repository and atomically replaces the classpath file.

**Read mode** decodes the classpath file and appends each entry, in file
order, to a :class:`~cpkeeper.core.resolver.ClasspathSink`.

A task without a file is a configuration mistake that is reported with a
warning and otherwise ignored, so it never breaks a larger pipeline.

Typical usage::

    task = ClasspathTask(
        ClasspathTaskOptions(file="classpath.txt", write=True, safe=True),
        ambient=Environment(dependencies=deps),
        resolver=CoursierResolver(),
    )
    result = task.run()
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import AbstractSet, Any, Iterable, List, Optional, Sequence

from cpkeeper.constants import SELF_COORDINATE
from cpkeeper.core.codec import read_classpath_file, write_classpath_file
from cpkeeper.core.conflicts import detect_conflicts
from cpkeeper.core.filter import filter_dependencies
from cpkeeper.core.relativizer import relativize
from cpkeeper.core.resolver import Classpath, ClasspathSink, DependencyResolver
from cpkeeper.exceptions import UnresolvedConflictError
from cpkeeper.models import (
    ConflictMap,
    DependencyCoordinate,
    Environment,
    EnvironmentOverrides,
    merge_environment,
)
from cpkeeper.models.dependency import normalize_exclusions
from cpkeeper.utils.logger import get_logger

logger = get_logger("core.task")

__all__ = [
    "ClasspathTask",
    "ClasspathTaskOptions",
    "TaskResult",
    "TaskState",
]


class TaskState(Enum):
    """Lifecycle of a :class:`ClasspathTask`."""

    IDLE = "idle"
    READ_MODE = "read"
    WRITE_MODE = "write"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ClasspathTaskOptions:
    """Options for one task invocation.

    ``None`` for ``dependencies``, ``exclusions``, ``local_repo`` or
    ``scopes`` means "use the ambient value".

    Attributes:
        file: Classpath file to read or write. Required.
        write: Resolve and write the file instead of reading it.
        safe: Fail the write if unresolved dependency conflicts remain.
        dependencies: Dependencies to resolve, in any shape accepted by
            :meth:`DependencyCoordinate.from_data`.
        exclusions: ``group/artifact`` keys to exclude globally.
        local_repo: Directory in which resolved artifacts are stashed.
        scopes: Dependency scopes to include.
    """

    file: Optional[str] = None
    write: bool = False
    safe: bool = False
    dependencies: Optional[Sequence[Any]] = None
    exclusions: Optional[Iterable[str]] = None
    local_repo: Optional[str] = None
    scopes: Optional[AbstractSet[str]] = None

    def to_overrides(self) -> EnvironmentOverrides:
        """Convert to environment overrides, keeping ``None`` as "unset"."""
        return EnvironmentOverrides(
            dependencies=(
                tuple(DependencyCoordinate.from_data(d) for d in self.dependencies)
                if self.dependencies is not None
                else None
            ),
            local_repo=self.local_repo,
            exclusions=(
                normalize_exclusions(self.exclusions)
                if self.exclusions is not None
                else None
            ),
            scopes=frozenset(self.scopes) if self.scopes is not None else None,
        )


@dataclass
class TaskResult:
    """Outcome of :meth:`ClasspathTask.run`.

    Attributes:
        state: Final state (``DONE`` or ``FAILED``).
        paths: Entries written to or read from the classpath file.
        conflicts: Conflicts found in safe mode (empty otherwise).
        file: The classpath file, if one was configured.
    """

    state: TaskState
    paths: List[str] = field(default_factory=list)
    conflicts: ConflictMap = field(default_factory=dict)
    file: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.state is TaskState.DONE


class ClasspathTask:
    """Reads or writes a classpath file.

    Args:
        options: Invocation options.
        ambient: Environment defaults the options are layered over.
        resolver: Dependency resolver; required in write mode.
        sink: Receives entries in read mode. Defaults to a fresh
            :class:`Classpath`.
        self_coordinate: Key never allowed onto the written classpath.
    """

    def __init__(
        self,
        options: ClasspathTaskOptions,
        *,
        ambient: Optional[Environment] = None,
        resolver: Optional[DependencyResolver] = None,
        sink: Optional[ClasspathSink] = None,
        self_coordinate: str = SELF_COORDINATE,
    ) -> None:
        self.options = options
        self.ambient = ambient or Environment()
        self.resolver = resolver
        self.sink: ClasspathSink = sink if sink is not None else Classpath()
        self.self_coordinate = self_coordinate
        self.state = TaskState.IDLE

    def run(self) -> TaskResult:
        """Execute the task.

        Returns:
            A :class:`TaskResult`. A missing ``file`` option yields a
            ``FAILED`` result instead of an exception.

        Raises:
            UnresolvedConflictError: Safe mode found unresolved conflicts.
            FileOperationError: The classpath file cannot be read or written.
            ClasspathFormatError: The classpath file is malformed.
            CpKeeperError: Any resolver failure, unchanged.
        """
        if not self.options.file:
            logger.warning("Expected a classpath file option. Skipping classpath task.")
            self.state = TaskState.FAILED
            return TaskResult(state=self.state)

        path = Path(self.options.file)
        self.state = TaskState.WRITE_MODE if self.options.write else TaskState.READ_MODE

        try:
            if self.state is TaskState.WRITE_MODE:
                result = self._write(path)
            else:
                result = self._read(path)
        except Exception:
            self.state = TaskState.FAILED
            raise

        self.state = TaskState.DONE
        result.state = self.state
        return result

    def build_environment(self) -> Environment:
        """Return the filtered environment that write mode resolves."""
        env = merge_environment(self.ambient, self.options.to_overrides())
        dependencies = filter_dependencies(
            env.dependencies,
            env.scopes,
            self.self_coordinate,
            env.exclusions,
        )
        return env.with_dependencies(dependencies)

    def _read(self, path: Path) -> TaskResult:
        logger.info("Loading classpath from %s", path)
        paths = read_classpath_file(path)
        for entry in paths:
            self.sink.append(entry)
        return TaskResult(state=self.state, paths=paths, file=path)

    def _write(self, path: Path) -> TaskResult:
        if self.resolver is None:
            raise ValueError("Writing a classpath file requires a dependency resolver")

        env = self.build_environment()
        logger.info(
            "Resolving %d dependencies for %s", len(env.dependencies), path
        )

        conflicts: ConflictMap = {}
        if self.options.safe:
            conflicts = detect_conflicts(env, self.resolver)
            if conflicts:
                raise UnresolvedConflictError(
                    "Unresolved dependency conflicts.", conflicts=conflicts
                )

        resolved = self.resolver.resolve(env)
        paths = [relativize(env.local_repo, artifact) for artifact in resolved]
        write_classpath_file(path, paths)
        return TaskResult(state=self.state, paths=paths, conflicts=conflicts, file=path)
