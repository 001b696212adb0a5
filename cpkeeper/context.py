"""
Shared context object for cpkeeper CLI commands.

This module defines the Click context object used to share the loaded
configuration and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import click

if TYPE_CHECKING:
    from cpkeeper.config import CpKeeperConfig


class CpKeeperContext:
    """Per-invocation state shared by cpkeeper commands.

    Attributes:
        config_path: Path to the configuration file in use, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration, or ``None`` before the group runs.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional["CpKeeperConfig"] = None

    def get_config(self) -> "CpKeeperConfig":
        """Return the loaded configuration, falling back to defaults."""
        if self.config is None:
            from cpkeeper.config import CpKeeperConfig

            self.config = CpKeeperConfig()
        return self.config


#: Click decorator for injecting :class:`CpKeeperContext` into commands.
pass_context = click.make_pass_decorator(CpKeeperContext, ensure=True)
