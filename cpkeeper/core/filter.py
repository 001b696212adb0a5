"""Dependency filtering applied before resolution.

Three rules run in a fixed order:

1. **Scope**: coordinates whose scope is not requested are dropped.
2. **Self**: the coordinate that identifies cpkeeper itself is dropped,
   so the tool never lands on the classpath it writes.
3. **Global exclusions**: excluded keys are dropped, and every surviving
   coordinate inherits the exclusions so they are also cut from the
   transitive graph below it.

The functions are pure and order-preserving; running the filter on its
own output changes nothing.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional

from cpkeeper.constants import DEFAULT_SCOPES, SELF_COORDINATE
from cpkeeper.models.dependency import (
    DependencyCoordinate,
    normalize_exclusions,
    normalize_group_artifact,
)
from cpkeeper.utils.logger import get_logger

logger = get_logger("core.filter")

__all__ = ["filter_dependencies", "apply_global_exclusions"]


def apply_global_exclusions(
    exclusions: Optional[Iterable[str]],
    dependencies: Iterable[DependencyCoordinate],
) -> List[DependencyCoordinate]:
    """Remove excluded coordinates and push the exclusions onto the rest.

    Args:
        exclusions: ``group/artifact`` keys to exclude everywhere.
        dependencies: Coordinates to filter.

    Returns:
        The surviving coordinates, in input order.
    """
    excluded = normalize_exclusions(exclusions)
    deps = list(dependencies)
    if not excluded:
        return deps

    kept: List[DependencyCoordinate] = []
    for dep in deps:
        if dep.group_artifact in excluded:
            logger.debug("Globally excluded: %s", dep)
            continue
        kept.append(dep.with_exclusions(excluded))
    return kept


def filter_dependencies(
    dependencies: Iterable[DependencyCoordinate],
    scopes: Optional[AbstractSet[str]] = None,
    self_coordinate: str = SELF_COORDINATE,
    global_exclusions: Optional[Iterable[str]] = None,
) -> List[DependencyCoordinate]:
    """Return the dependencies that should be handed to the resolver.

    Args:
        dependencies: Declared coordinates, in declaration order.
        scopes: Scopes to keep. ``None`` or empty means
            ``{"compile", "runtime", "provided"}``.
        self_coordinate: Key identifying cpkeeper itself.
        global_exclusions: Keys to exclude regardless of scope.

    Returns:
        Filtered coordinates in their original relative order. May be empty.

    Example:
        >>> dep = DependencyCoordinate("foo/bar", "1.0", scope="test")
        >>> filter_dependencies([dep], {"compile"})
        []
    """
    allowed = frozenset(scopes) if scopes else DEFAULT_SCOPES
    me = normalize_group_artifact(self_coordinate)

    included: List[DependencyCoordinate] = []
    for dep in dependencies:
        if dep.scope not in allowed:
            logger.debug("Skipping %s: scope %r not in %s", dep, dep.scope, sorted(allowed))
            continue
        if dep.group_artifact == me:
            logger.debug("Skipping %s: refusing to resolve cpkeeper itself", dep)
            continue
        included.append(dep)

    return apply_global_exclusions(global_exclusions, included)
