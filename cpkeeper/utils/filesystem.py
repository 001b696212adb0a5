"""
Whole-file reads and atomic replacement of classpath files.

A classpath file is small and always handled in one piece. Writes land in
a hidden sibling first and are renamed over the target, so a concurrent
``java -cp "$(cat classpath.txt)"`` sees either the old classpath or the
new one, never a mix. Every failure surfaces as
:class:`~cpkeeper.exceptions.FileOperationError`.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from cpkeeper.constants import MAX_FILE_SIZE
from cpkeeper.exceptions import FileOperationError
from cpkeeper.utils.logger import get_logger

logger = get_logger("utils.filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Return ``path`` resolved, or fail if it is not an existing regular file."""
    if not path.exists():
        reason = "File not found"
    elif not path.is_file():
        reason = "Not a file"
    else:
        return path.resolve()
    raise FileOperationError(
        f"{reason}: {path}", file_path=str(path), operation="read"
    )


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not remove leftover %s: %s", temp_path, exc)
    else:
        logger.debug("Removed leftover %s", temp_path)


def _target_mode(target: Path) -> int:
    """Permission bits the replacement should carry.

    An existing file keeps its own bits. A new file gets what ``open``
    would have given it under the current umask, not the 0600 of
    :func:`tempfile.mkstemp`.
    """
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _atomic_write(target: Path, content: bytes) -> None:
    """Replace ``target`` with ``content`` via a synced temporary sibling."""
    temp_path: Optional[Path] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        mode = _target_mode(target)
        fd, name = tempfile.mkstemp(
            dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
        )
        temp_path = Path(name)
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, target)
    except OSError as exc:
        if temp_path is not None:
            _discard(temp_path)
        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_bytes(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
) -> bytes:
    """Return the contents of ``file_path``.

    Args:
        file_path: File to read.
        max_size: Refuse files larger than this many bytes. ``None``
            removes the limit.

    Raises:
        FileOperationError: Missing, not a regular file, over the size
            limit, or unreadable.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size
    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_bytes(file_path: PathLike, content: bytes) -> Path:
    """Atomically replace ``file_path`` with ``content``, creating parents.

    Returns:
        The path written, as given.
    """
    path = Path(file_path)
    _atomic_write(path, content)
    logger.debug("Wrote %d bytes to %s", len(content), path)
    return path
