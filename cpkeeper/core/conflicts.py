"""Detection of dependency version conflicts that the caller has not settled.

The resolver walks the transitive graph and reports every key requested
at more than one version. Any key the caller declared directly is then
removed: a direct declaration is the caller's chosen version and wins
silently, even over a different transitive requirement. What remains are
the conflicts nobody has taken a position on.
"""

from __future__ import annotations

from cpkeeper.core.resolver import DependencyResolver
from cpkeeper.models import ConflictMap, Environment
from cpkeeper.models.conflict import freeze_conflicts
from cpkeeper.utils.logger import get_logger

logger = get_logger("core.conflicts")

__all__ = ["detect_conflicts"]


def detect_conflicts(env: Environment, resolver: DependencyResolver) -> ConflictMap:
    """Return the unresolved version conflicts of ``env``.

    Args:
        env: The environment to inspect.
        resolver: Supplies the graph-level conflicts.

    Returns:
        Mapping of ``group/artifact`` to its competing versions. Never
        contains a directly declared key. Empty when nothing is left.
    """
    graph = freeze_conflicts(resolver.graph_conflicts(env))
    direct = env.direct_group_artifacts()

    unresolved: ConflictMap = {}
    for key, versions in graph.items():
        if len(versions) < 2:
            continue
        if key in direct:
            logger.debug(
                "Conflict on %s (%s) overridden by direct dependency",
                key,
                ", ".join(sorted(versions)),
            )
            continue
        unresolved[key] = versions

    if unresolved:
        logger.info("Found %d unresolved dependency conflict(s)", len(unresolved))
    return unresolved
