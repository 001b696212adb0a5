"""Rewriting resolved artifact paths against a local repository.

When artifacts are stashed in a project-local repository, writing their
absolute paths would tie the classpath file to one checkout. Instead each
path is re-expressed under the repository directory *as the caller
configured it* (often relative), after matching against the canonical
location of that directory.
"""

from __future__ import annotations

import os
from typing import Optional

from cpkeeper.utils.logger import get_logger

logger = get_logger("core.relativizer")

__all__ = ["relativize"]


def _is_within(directory: str, path: str) -> bool:
    try:
        return os.path.commonpath([directory, path]) == directory
    except ValueError:
        # Different drives on Windows
        return False


def relativize(local_repo: Optional[str], absolute_path: str) -> str:
    """Express ``absolute_path`` under ``local_repo``.

    Args:
        local_repo: Configured local repository directory, or ``None``.
        absolute_path: Artifact path produced by the resolver.

    Returns:
        ``absolute_path`` normalized when no repository is configured.
        Otherwise ``local_repo`` joined with the path's location relative
        to the canonical repository directory. A path that does not lie
        under the repository is returned normalized and unchanged.

    Examples:
        >>> relativize(None, "/home/me/.m2/repository/a/a/1.0/a-1.0.jar")
        '/home/me/.m2/repository/a/a/1.0/a-1.0.jar'
    """
    if not local_repo:
        return os.path.normpath(absolute_path)

    canonical_repo = os.path.realpath(local_repo)
    target = os.path.normpath(os.path.abspath(absolute_path))

    if not _is_within(canonical_repo, target):
        resolved_target = os.path.realpath(target)
        if _is_within(canonical_repo, resolved_target):
            target = resolved_target

    if not _is_within(canonical_repo, target):
        logger.warning(
            "Resolved artifact %s is outside local repository %s; keeping absolute path",
            target,
            canonical_repo,
        )
        return target

    relative = os.path.relpath(target, canonical_repo)
    return os.path.normpath(os.path.join(local_repo, relative))
