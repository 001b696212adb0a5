"""Concrete :class:`~cpkeeper.core.resolver.DependencyResolver` implementations."""

from __future__ import annotations

from cpkeeper.resolvers.coursier import CoursierResolver

__all__ = ["CoursierResolver"]
