"""
Dependency conflict data models for cpkeeper.

A *conflict map* records, for each ``group/artifact`` key, the distinct
versions the dependency graph asks for. Only keys with two or more
versions are conflicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from packaging.version import InvalidVersion, Version

#: ``group/artifact`` -> distinct versions requested for it.
ConflictMap = Dict[str, FrozenSet[str]]


def _version_sort_key(version: str) -> Tuple[int, Any]:
    """Order PEP 440-parseable versions numerically, everything else after them lexically."""
    try:
        return (0, Version(version))
    except InvalidVersion:
        return (1, version)


def sort_versions(versions: Iterable[str]) -> List[str]:
    """Return ``versions`` ordered oldest first."""
    return sorted(set(versions), key=_version_sort_key)


def freeze_conflicts(raw: Mapping[str, Iterable[str]]) -> ConflictMap:
    """Copy ``raw`` into a :data:`ConflictMap` with frozen version sets."""
    return {key: frozenset(versions) for key, versions in raw.items()}


@dataclass(frozen=True)
class DependencyConflict:
    """One ``group/artifact`` with more than one requested version.

    Args:
        group_artifact: The conflicting key.
        versions: Requested versions, oldest first.
    """

    group_artifact: str
    versions: Tuple[str, ...]

    def to_display_string(self) -> str:
        """Return a human-readable description of the conflict."""
        return f"{self.group_artifact} requested as {', '.join(self.versions)}"

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "group_artifact": self.group_artifact,
            "versions": list(self.versions),
        }

    def __str__(self) -> str:
        return self.to_display_string()


def conflicts_from_map(conflicts: Mapping[str, Iterable[str]]) -> List[DependencyConflict]:
    """Turn a conflict map into a list sorted by key."""
    return [
        DependencyConflict(key, tuple(sort_versions(conflicts[key])))
        for key in sorted(conflicts)
    ]
