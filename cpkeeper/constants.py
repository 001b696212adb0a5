"""
Centralized constants for cpkeeper.

This module defines immutable configuration values used across cpkeeper,
including dependency scopes, classpath file settings, resolver defaults and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, FrozenSet

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: Coordinate under which cpkeeper itself may be published. It is never
#: allowed onto a classpath that cpkeeper writes.
SELF_COORDINATE: Final[str] = "cpkeeper/cpkeeper"

# ---------------------------------------------------------------------------
# Dependency scopes
# ---------------------------------------------------------------------------

#: Scope assigned to a dependency that does not declare one.
DEFAULT_SCOPE: Final[str] = "compile"

#: Scopes included in the classpath file when none are requested.
DEFAULT_SCOPES: Final[FrozenSet[str]] = frozenset({"compile", "runtime", "provided"})

# ---------------------------------------------------------------------------
# Classpath file
# ---------------------------------------------------------------------------

#: Encoding used for classpath files on disk.
CLASSPATH_FILE_ENCODING: Final[str] = "utf-8"

#: Maximum allowed size (in bytes) when reading a classpath file.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# External tools
# ---------------------------------------------------------------------------

#: Default executable used to resolve dependencies.
DEFAULT_COURSIER_COMMAND: Final[str] = "coursier"

#: Default executable used to launch a JVM.
DEFAULT_JAVA_COMMAND: Final[str] = "java"

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

#: Name of the dedicated configuration file.
CONFIG_FILE_NAME: Final[str] = "cpkeeper.toml"

#: Environment variable holding an explicit configuration path.
CONFIG_ENV_VAR: Final[str] = "CPKEEPER_CONFIG"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
