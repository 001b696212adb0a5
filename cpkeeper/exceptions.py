"""
Exceptions raised by cpkeeper.

Every error derives from :class:`CpKeeperError`. Besides a message, each
carries a ``details`` mapping (file path, entry position, resolver exit
status, conflicting versions) that the CLI prints next to the message and
that callers can inspect without parsing text.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class CpKeeperError(Exception):
    """Root of the cpkeeper exception hierarchy.

    Args:
        message: What went wrong, for humans.
        details: Extra context as key/value pairs, rendered after the
            message by ``str()``.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={dict(self.details)!r})"


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Shorten ``text`` to ``max_length`` characters plus an ellipsis."""
    return text if len(text) <= max_length else f"{text[:max_length]}..."


class ConfigError(CpKeeperError):
    """Raised when a configuration file is missing, unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class FileOperationError(CpKeeperError):
    """Raised when a classpath or configuration file cannot be read or replaced.

    Args:
        message: Error description.
        file_path: The file being accessed.
        operation: ``read`` or ``write``.
        original_error: The underlying :class:`OSError`, if any.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ClasspathFormatError(CpKeeperError):
    """Raised when a classpath cannot be encoded or a classpath file is malformed.

    Args:
        message: Error description.
        position: Zero-based index of the offending entry.
        entry: The offending entry, truncated for safety.
        file_path: Path to the classpath file, when known.
    """

    __slots__ = ("position", "entry", "file_path")

    def __init__(
        self,
        message: str,
        *,
        position: Optional[int] = None,
        entry: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "position", position)
        if entry is not None:
            details["entry"] = _truncate(repr(entry))
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.position = position
        self.entry = entry
        self.file_path = file_path


class UnresolvedConflictError(CpKeeperError):
    """Raised in safe mode when transitive version conflicts remain.

    Args:
        message: Error description.
        conflicts: Mapping of ``group/artifact`` to the competing versions.
    """

    __slots__ = ("conflicts",)

    def __init__(
        self,
        message: str,
        *,
        conflicts: Mapping[str, Any],
    ) -> None:
        normalized = {key: sorted(versions) for key, versions in conflicts.items()}
        super().__init__(message, {"conflicts": normalized})
        self.conflicts = dict(conflicts)


class ResolutionError(CpKeeperError):
    """Raised when the external dependency resolver fails.

    Args:
        message: Error description.
        command: Command line that was executed, if any.
        returncode: Process exit status, if available.
        stderr: Captured standard error, truncated for safety.
    """

    __slots__ = ("command", "returncode", "stderr")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "returncode", returncode)
        if stderr:
            details["stderr"] = _truncate(stderr.strip())

        super().__init__(message, details)

        self.command = list(command) if command is not None else None
        self.returncode = returncode
        self.stderr = stderr
