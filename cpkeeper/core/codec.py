"""Classpath file encoding and decoding.

A classpath file holds a single line of paths joined by the platform
path-list separator (``:`` on POSIX, ``;`` on Windows), with no trailing
separator and no line terminator, so its contents can be passed straight
to ``java -cp``. Entry order is resolution order and survives a
write/read round trip.

Decoding is strict: an empty entry means the file is malformed and is
reported rather than skipped. An empty file is the one exception and
stands for an empty classpath.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Union

from cpkeeper.constants import CLASSPATH_FILE_ENCODING
from cpkeeper.exceptions import ClasspathFormatError
from cpkeeper.utils.filesystem import safe_read_bytes, safe_write_bytes
from cpkeeper.utils.logger import get_logger

logger = get_logger("core.codec")

__all__ = ["encode", "decode", "read_classpath_file", "write_classpath_file"]


def encode(paths: Iterable[str], separator: str = os.pathsep) -> bytes:
    """Serialize ``paths`` into classpath file contents.

    Raises:
        ClasspathFormatError: An entry is empty or contains the separator,
            which would not survive decoding.

    Example:
        >>> encode(["/lib/a.jar", "/lib/b.jar"], separator=":")
        b'/lib/a.jar:/lib/b.jar'
    """
    entries = [str(p) for p in paths]
    for position, entry in enumerate(entries):
        if not entry:
            raise ClasspathFormatError(
                "Classpath entries must not be empty", position=position, entry=entry
            )
        if separator in entry:
            raise ClasspathFormatError(
                f"Classpath entry contains the separator {separator!r}",
                position=position,
                entry=entry,
            )
    return separator.join(entries).encode(CLASSPATH_FILE_ENCODING)


def decode(data: Union[bytes, str], separator: str = os.pathsep) -> List[str]:
    """Parse classpath file contents into an ordered list of paths.

    Raises:
        ClasspathFormatError: The data is not valid text or contains an
            empty entry (for example a trailing separator).

    Example:
        >>> decode(b"/lib/a.jar:/lib/b.jar", separator=":")
        ['/lib/a.jar', '/lib/b.jar']
    """
    if isinstance(data, bytes):
        try:
            text = data.decode(CLASSPATH_FILE_ENCODING)
        except UnicodeDecodeError as exc:
            raise ClasspathFormatError(f"Classpath file is not valid text: {exc}") from exc
    else:
        text = data

    if not text:
        return []

    entries = text.split(separator)
    for position, entry in enumerate(entries):
        if not entry:
            raise ClasspathFormatError(
                "Empty classpath entry", position=position, entry=entry
            )
    return entries


def read_classpath_file(
    file_path: Union[str, Path], separator: str = os.pathsep
) -> List[str]:
    """Read and decode a classpath file.

    Raises:
        FileOperationError: The file is missing or unreadable.
        ClasspathFormatError: The contents are malformed.
    """
    data = safe_read_bytes(file_path)
    try:
        paths = decode(data, separator)
    except ClasspathFormatError as exc:
        exc.file_path = str(file_path)
        exc.details["file"] = str(file_path)
        raise
    logger.debug("Read %d classpath entries from %s", len(paths), file_path)
    return paths


def write_classpath_file(
    file_path: Union[str, Path],
    paths: Iterable[str],
    separator: str = os.pathsep,
) -> Path:
    """Encode ``paths`` and atomically replace ``file_path`` with them.

    Nothing is written if encoding fails.
    """
    entries = list(paths)
    content = encode(entries, separator)
    written = safe_write_bytes(file_path, content)
    logger.info("Wrote %d classpath entries to %s", len(entries), written)
    return written
