"""
cpkeeper version information.

This module is the single source of truth for the package version. It is
read by packaging metadata and by ``cpkeeper --version``.
"""

from __future__ import annotations

__version__ = "0.1.0.dev0"
