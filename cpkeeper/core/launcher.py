"""Launching a JVM on a stored classpath."""

from __future__ import annotations

import os
import subprocess
from typing import Iterable, List, Optional, Sequence

from cpkeeper.constants import DEFAULT_JAVA_COMMAND
from cpkeeper.exceptions import CpKeeperError
from cpkeeper.utils.logger import get_logger

logger = get_logger("core.launcher")

__all__ = ["build_java_command", "launch"]


def build_java_command(
    classpath: Iterable[str],
    main: str,
    args: Sequence[str] = (),
    *,
    java: str = DEFAULT_JAVA_COMMAND,
    jvm_options: Sequence[str] = (),
    separator: str = os.pathsep,
) -> List[str]:
    """Return the argv for ``java -cp <classpath> <main> <args...>``.

    Example:
        >>> build_java_command(["a.jar", "b.jar"], "clojure.main", ["-e", "1"], separator=":")
        ['java', '-cp', 'a.jar:b.jar', 'clojure.main', '-e', '1']
    """
    if not main:
        raise ValueError("A main class is required to launch the JVM")
    return [java, *jvm_options, "-cp", separator.join(classpath), main, *args]


def launch(
    classpath: Iterable[str],
    main: str,
    args: Sequence[str] = (),
    *,
    java: str = DEFAULT_JAVA_COMMAND,
    jvm_options: Sequence[str] = (),
    cwd: Optional[str] = None,
) -> int:
    """Run a JVM in the foreground and return its exit status.

    Raises:
        CpKeeperError: The ``java`` executable could not be started.
    """
    command = build_java_command(
        classpath, main, args, java=java, jvm_options=jvm_options
    )
    logger.debug("Launching: %s", " ".join(command))
    try:
        completed = subprocess.run(command, cwd=cwd, check=False)
    except OSError as exc:
        raise CpKeeperError(
            f"Failed to start {java}: {exc}", {"command": command[0]}
        ) from exc
    return completed.returncode
