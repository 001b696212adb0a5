"""
Interfaces to the collaborators cpkeeper drives but does not implement.

A :class:`DependencyResolver` turns an :class:`~cpkeeper.models.Environment`
into artifact paths and reports version conflicts in the dependency
graph. A :class:`ClasspathSink` receives classpath entries read back from
a file. Both are injected, so the filtering and conflict logic can be
exercised with in-memory doubles.
"""

from __future__ import annotations

import os
from typing import Iterable, Iterator, List, Optional, Protocol, runtime_checkable

from cpkeeper.models import ConflictMap, Environment
from cpkeeper.utils.logger import get_logger

logger = get_logger("core.resolver")

__all__ = ["DependencyResolver", "ClasspathSink", "Classpath"]


@runtime_checkable
class DependencyResolver(Protocol):
    """Resolves an environment against a Maven-style repository.

    Implementations must return paths in a deterministic order for a
    fixed environment.
    """

    def resolve(self, env: Environment) -> List[str]:
        """Return the absolute artifact paths for ``env``, in resolution order."""
        ...

    def graph_conflicts(self, env: Environment) -> ConflictMap:
        """Return every key the transitive graph requests at more than one version."""
        ...


@runtime_checkable
class ClasspathSink(Protocol):
    """Receives classpath entries; adding an entry twice must be harmless."""

    def append(self, path: str) -> None:
        ...


class Classpath:
    """An in-process, ordered, append-only classpath.

    Appending an entry that is already present is a no-op, so the first
    occurrence keeps its position.

    Example:
        >>> cp = Classpath()
        >>> cp.append("/lib/a.jar"); cp.append("/lib/b.jar"); cp.append("/lib/a.jar")
        >>> cp.entries
        ['/lib/a.jar', '/lib/b.jar']
    """

    __slots__ = ("_entries", "_seen")

    def __init__(self, entries: Optional[Iterable[str]] = None) -> None:
        self._entries: List[str] = []
        self._seen: set = set()
        for entry in entries or ():
            self.append(entry)

    def append(self, path: str) -> None:
        if path in self._seen:
            logger.debug("Classpath already contains %s", path)
            return
        self._seen.add(path)
        self._entries.append(path)

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def as_argument(self, separator: str = os.pathsep) -> str:
        """Return the entries joined for a ``-cp`` argument."""
        return separator.join(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._seen

    def __repr__(self) -> str:
        return f"Classpath({self._entries!r})"
