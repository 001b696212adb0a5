from __future__ import annotations

import logging
from typing import Dict, Generator, Iterable, List, Optional

import pytest

from cpkeeper.models import ConflictMap, Environment
from cpkeeper.utils.console import reconfigure_console


class FakeResolver:
    """In-memory resolver returning canned paths and graph conflicts."""

    def __init__(
        self,
        paths: Optional[Iterable[str]] = None,
        conflicts: Optional[Dict[str, Iterable[str]]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.paths = list(paths or [])
        self.conflicts = {k: frozenset(v) for k, v in (conflicts or {}).items()}
        self.error = error
        self.resolved: List[Environment] = []
        self.inspected: List[Environment] = []

    def resolve(self, env: Environment) -> List[str]:
        self.resolved.append(env)
        if self.error is not None:
            raise self.error
        return list(self.paths)

    def graph_conflicts(self, env: Environment) -> ConflictMap:
        self.inspected.append(env)
        return dict(self.conflicts)


@pytest.fixture
def fake_resolver():
    """Return the :class:`FakeResolver` class for building test doubles."""
    return FakeResolver


@pytest.fixture(autouse=True)
def reset_cpkeeper_logging() -> Generator[None, None, None]:
    """Undo handler changes made by ``setup_logging`` so caplog keeps working."""
    yield
    root_logger = logging.getLogger("cpkeeper")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    reconfigure_console()
