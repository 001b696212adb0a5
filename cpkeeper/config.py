"""Configuration file loader for cpkeeper.

The configuration file supplies the *ambient* environment that command
options are layered over. Two formats are supported:

- ``cpkeeper.toml``: settings under the ``[cpkeeper]`` table
- ``pyproject.toml``: settings under the ``[tool.cpkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``CPKEEPER_CONFIG``
2. ``cpkeeper.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.cpkeeper]`` section

Configuration precedence: defaults < config file < CLI options. A CLI
option only takes effect when it is actually given.

Example (``cpkeeper.toml``)::

    [cpkeeper]
    file = "classpath.txt"
    local_repo = ".m2"
    exclusions = ["org.clojure/clojure"]
    dependencies = [
        "ring/ring-core:1.10.0",
        ["cheshire", "5.12.0", { scope = "runtime" }],
        { coordinate = "org.slf4j/slf4j-api", version = "2.0.9", scope = "test" },
    ]
"""

from __future__ import annotations


import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from cpkeeper.exceptions import ConfigError
from cpkeeper.utils.logger import get_logger
from cpkeeper.models import DependencyCoordinate, Environment
from cpkeeper.models.dependency import normalize_exclusions, normalize_group_artifact
from cpkeeper.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_COURSIER_COMMAND,
    SELF_COORDINATE,
)

logger = get_logger("config")

_SECTION = "cpkeeper"


@dataclass
class CpKeeperConfig:
    """Parsed and validated cpkeeper configuration.

    All fields have defaults, so an empty config file is valid.

    Attributes:
        dependencies: Ambient dependencies written when ``--dependencies``
            is not given.
        exclusions: Ambient global exclusions.
        local_repo: Ambient local repository directory.
        scopes: Ambient scopes; ``None`` means compile, runtime and provided.
        file: Default classpath file.
        safe: Fail writes on unresolved conflicts unless overridden.
        coursier: Coursier executable used for resolution.
        repositories: Extra Maven repositories passed to Coursier.
        self_coordinate: Key never allowed onto a written classpath.
        source_path: Path to the loaded config file, or ``None``.
    """

    dependencies: List[DependencyCoordinate] = field(default_factory=list)
    exclusions: List[str] = field(default_factory=list)
    local_repo: Optional[str] = None
    scopes: Optional[List[str]] = None
    file: Optional[str] = None
    safe: bool = False
    coursier: str = DEFAULT_COURSIER_COMMAND
    repositories: List[str] = field(default_factory=list)
    self_coordinate: str = SELF_COORDINATE

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_environment(self) -> Environment:
        """Return the ambient :class:`Environment` described by this config."""
        return Environment(
            dependencies=tuple(self.dependencies),
            local_repo=self.local_repo,
            exclusions=frozenset(self.exclusions),
            scopes=frozenset(self.scopes) if self.scopes else frozenset(),
        )

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as a dictionary for debug logging."""
        return {
            "dependencies": [str(d) for d in self.dependencies],
            "exclusions": list(self.exclusions),
            "local_repo": self.local_repo,
            "scopes": self.scopes,
            "file": self.file,
            "safe": self.safe,
            "coursier": self.coursier,
            "repositories": list(self.repositories),
            "self_coordinate": self.self_coordinate,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    dedicated = cwd / CONFIG_FILE_NAME
    if dedicated.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, dedicated)
        return dedicated

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.cpkeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Return True if ``path`` parses and has a ``[tool.cpkeeper]`` table.

    An unparseable pyproject.toml simply does not count as configuration.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    return _SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> CpKeeperConfig:
    """Load and validate cpkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`CpKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return CpKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(_SECTION, {})
    else:
        section = raw.get(_SECTION, {})

    if not section:
        logger.debug("Config file found but no cpkeeper section, using defaults")
        return CpKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


_STRING_OPTIONS = ("local_repo", "file", "coursier", "self_coordinate")
_STRING_LIST_OPTIONS = ("exclusions", "scopes", "repositories")
_KNOWN_OPTIONS = frozenset(
    _STRING_OPTIONS + _STRING_LIST_OPTIONS + ("dependencies", "safe")
)


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> CpKeeperConfig:
    """Parse and validate the ``[cpkeeper]`` or ``[tool.cpkeeper]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or uninterpretable
            dependencies.
    """
    config = CpKeeperConfig()

    unknown = set(section.keys()) - _KNOWN_OPTIONS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for option in _STRING_OPTIONS:
        if option in section:
            val = section[option]
            if not isinstance(val, str) or not val:
                raise ConfigError(
                    f"{option} must be a non-empty string, got {type(val).__name__}",
                    config_path=config_path,
                    option=option,
                )
            setattr(config, option, val)

    for option in _STRING_LIST_OPTIONS:
        if option in section:
            val = section[option]
            if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
                raise ConfigError(
                    f"{option} must be a list of strings",
                    config_path=config_path,
                    option=option,
                )
            setattr(config, option, list(val))

    if "safe" in section:
        val = section["safe"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"safe must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="safe",
            )
        config.safe = val

    try:
        config.exclusions = sorted(normalize_exclusions(config.exclusions))
        config.self_coordinate = normalize_group_artifact(config.self_coordinate)
    except ValueError as exc:
        raise ConfigError(str(exc), config_path=config_path) from exc

    if "dependencies" in section:
        val = section["dependencies"]
        if not isinstance(val, list):
            raise ConfigError(
                f"dependencies must be a list, got {type(val).__name__}",
                config_path=config_path,
                option="dependencies",
            )
        try:
            config.dependencies = [DependencyCoordinate.from_data(d) for d in val]
        except ValueError as exc:
            raise ConfigError(
                f"Invalid dependency: {exc}",
                config_path=config_path,
                option="dependencies",
            ) from exc

    return config
