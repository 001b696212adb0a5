"""
Dependency and environment data models for cpkeeper.

A :class:`DependencyCoordinate` identifies one declared dependency. Its
identity for conflict and exclusion matching is the ``group/artifact``
key; the version is deliberately not part of that key, so several
coordinates may share a key with different versions.

An :class:`Environment` is the complete, immutable input to one classpath
write: the ordered dependency list plus the local repository, global
exclusions and scopes that apply to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from cpkeeper.constants import DEFAULT_SCOPE, DEFAULT_SCOPES


def normalize_group_artifact(value: str) -> str:
    """Return the canonical ``group/artifact`` form of a coordinate key.

    ``group/artifact`` and ``group:artifact`` are accepted. A bare name
    stands for an artifact whose group equals its name.

    Raises:
        ValueError: The key is empty or has an empty group or artifact.

    Examples:
        >>> normalize_group_artifact("org.clojure:clojure")
        'org.clojure/clojure'
        >>> normalize_group_artifact("ring")
        'ring/ring'
    """
    text = str(value).strip()
    if not text:
        raise ValueError("Dependency coordinate must not be empty")

    if "/" in text:
        group, _, artifact = text.partition("/")
    elif ":" in text:
        group, _, artifact = text.partition(":")
    else:
        group = artifact = text

    if not group or not artifact or "/" in artifact or ":" in artifact:
        raise ValueError(f"Invalid dependency coordinate: {value!r}")

    return f"{group}/{artifact}"


def normalize_exclusions(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Normalize an iterable of coordinate keys into a frozen set."""
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    return frozenset(normalize_group_artifact(v) for v in values)


def _option_key(key: Any) -> str:
    # Accept keyword-style keys such as ":scope"
    return str(key).lstrip(":").replace("-", "_")


@dataclass(frozen=True)
class DependencyCoordinate:
    """A single declared dependency.

    Attributes:
        group_artifact: ``group/artifact`` key, normalized on construction.
        version: Requested version string.
        scope: Scope label such as ``compile`` or ``test``.
        exclusions: Keys of transitive dependencies to leave out below
            this one.
    """

    group_artifact: str
    version: str
    scope: str = DEFAULT_SCOPE
    exclusions: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "group_artifact", normalize_group_artifact(self.group_artifact)
        )
        version = str(self.version).strip() if self.version is not None else ""
        if not version:
            raise ValueError(f"Dependency {self.group_artifact} has no version")
        object.__setattr__(self, "version", version)
        object.__setattr__(self, "scope", str(self.scope or DEFAULT_SCOPE))
        object.__setattr__(self, "exclusions", normalize_exclusions(self.exclusions))

    @property
    def group(self) -> str:
        return self.group_artifact.partition("/")[0]

    @property
    def artifact(self) -> str:
        return self.group_artifact.partition("/")[2]

    def to_maven_coord(self) -> str:
        """Return the ``group:artifact:version`` form used by Maven tooling."""
        return f"{self.group}:{self.artifact}:{self.version}"

    def with_exclusions(self, extra: Iterable[str]) -> "DependencyCoordinate":
        """Return a copy whose exclusions also contain ``extra``."""
        merged = self.exclusions | normalize_exclusions(extra)
        if merged == self.exclusions:
            return self
        return replace(self, exclusions=merged)

    @classmethod
    def from_data(cls, data: Any) -> "DependencyCoordinate":
        """Build a coordinate from loosely structured data.

        Accepted shapes:

        - ``"group/artifact:1.0"`` or ``"group:artifact:1.0"``
        - ``["group/artifact", "1.0", "scope", "test", "exclusions", [...]]``
        - ``["group/artifact", "1.0", {"scope": "test"}]``
        - ``{"coordinate": "group/artifact", "version": "1.0", "scope": ...}``

        Raises:
            ValueError: The data cannot be interpreted as a dependency.
        """
        if isinstance(data, cls):
            return data

        if isinstance(data, str):
            return cls._from_string(data)

        if isinstance(data, Mapping):
            options = {_option_key(k): v for k, v in data.items()}
            key = options.pop("coordinate", None) or options.pop("group_artifact", None)
            if key is None:
                raise ValueError(f"Dependency mapping has no coordinate: {data!r}")
            return cls._with_options(key, options.pop("version", None), options)

        if isinstance(data, Sequence) and len(data) >= 2:
            key, version, *rest = data
            if len(rest) == 1 and isinstance(rest[0], Mapping):
                options = {_option_key(k): v for k, v in rest[0].items()}
            elif len(rest) % 2 == 0:
                options = {
                    _option_key(rest[i]): rest[i + 1] for i in range(0, len(rest), 2)
                }
            else:
                raise ValueError(f"Dangling dependency option in {data!r}")
            return cls._with_options(key, version, options)

        raise ValueError(f"Cannot interpret dependency: {data!r}")

    @classmethod
    def _from_string(cls, text: str) -> "DependencyCoordinate":
        text = text.strip()
        if "/" in text:
            key, sep, version = text.partition(":")
            if not sep:
                raise ValueError(f"Dependency {text!r} has no version")
            return cls(key, version)

        parts = text.split(":")
        if len(parts) == 3:
            return cls(f"{parts[0]}/{parts[1]}", parts[2])
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        raise ValueError(f"Cannot interpret dependency: {text!r}")

    @classmethod
    def _with_options(
        cls, key: Any, version: Any, options: Mapping[str, Any]
    ) -> "DependencyCoordinate":
        unknown = set(options) - {"scope", "exclusions"}
        if unknown:
            raise ValueError(
                f"Unknown dependency options for {key}: {', '.join(sorted(unknown))}"
            )
        return cls(
            str(key),
            "" if version is None else str(version),
            scope=options.get("scope") or DEFAULT_SCOPE,
            exclusions=normalize_exclusions(options.get("exclusions")),
        )

    def __str__(self) -> str:
        return f"{self.group_artifact} {self.version}"


@dataclass(frozen=True)
class Environment:
    """Everything a classpath write needs to know about its dependencies.

    Attributes:
        dependencies: Declared dependencies in declaration order. Keys may
            repeat.
        local_repo: Directory in which resolved artifacts are stashed.
        exclusions: Keys excluded from the whole graph.
        scopes: Scopes that are allowed onto the classpath.
    """

    dependencies: Tuple[DependencyCoordinate, ...] = ()
    local_repo: Optional[str] = None
    exclusions: FrozenSet[str] = field(default_factory=frozenset)
    scopes: FrozenSet[str] = DEFAULT_SCOPES

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "dependencies",
            tuple(DependencyCoordinate.from_data(d) for d in self.dependencies),
        )
        object.__setattr__(self, "exclusions", normalize_exclusions(self.exclusions))
        object.__setattr__(
            self, "scopes", frozenset(self.scopes) if self.scopes else DEFAULT_SCOPES
        )
        if self.local_repo is not None:
            object.__setattr__(self, "local_repo", str(self.local_repo))

    def direct_group_artifacts(self) -> FrozenSet[str]:
        """Return the keys the caller declared directly."""
        return frozenset(dep.group_artifact for dep in self.dependencies)

    def with_dependencies(
        self, dependencies: Iterable[DependencyCoordinate]
    ) -> "Environment":
        return replace(self, dependencies=tuple(dependencies))


@dataclass(frozen=True)
class EnvironmentOverrides:
    """Caller-supplied environment values; ``None`` means "not given"."""

    dependencies: Optional[Tuple[DependencyCoordinate, ...]] = None
    local_repo: Optional[str] = None
    exclusions: Optional[FrozenSet[str]] = None
    scopes: Optional[FrozenSet[str]] = None


def merge_environment(
    ambient: Environment,
    overrides: Optional[EnvironmentOverrides] = None,
) -> Environment:
    """Layer ``overrides`` over ``ambient``.

    A field replaces the ambient value only when it is not ``None``; an
    empty collection is a real value and does replace it.

    Example:
        >>> base = Environment(local_repo="/stash")
        >>> merge_environment(base, EnvironmentOverrides(local_repo=None)).local_repo
        '/stash'
    """
    if overrides is None:
        return ambient

    changes = {
        f.name: getattr(overrides, f.name)
        for f in fields(overrides)
        if getattr(overrides, f.name) is not None
    }
    return replace(ambient, **changes) if changes else ambient
