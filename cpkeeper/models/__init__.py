"""
Unified data model exports for cpkeeper.

Example:
    >>> from cpkeeper.models import DependencyCoordinate, Environment
"""

from __future__ import annotations

from cpkeeper.models.dependency import (
    DependencyCoordinate,
    Environment,
    EnvironmentOverrides,
    merge_environment,
    normalize_group_artifact,
)
from cpkeeper.models.conflict import (
    ConflictMap,
    DependencyConflict,
    conflicts_from_map,
)

__all__ = [
    "DependencyCoordinate",
    "Environment",
    "EnvironmentOverrides",
    "merge_environment",
    "normalize_group_artifact",
    "ConflictMap",
    "DependencyConflict",
    "conflicts_from_map",
]
