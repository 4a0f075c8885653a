"""Shared pytest fixtures for routemap tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from routemap.infrastructure.graph.engine import RouteStore
from routemap.infrastructure.persistence import MemoryBackend


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def backend() -> MemoryBackend:
    """Empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> RouteStore:
    """Fresh store writing through to the ``backend`` fixture."""
    return RouteStore(backend)


@pytest.fixture
def seeded_store(store: RouteStore) -> RouteStore:
    """Store holding A -> B (1), A -> C (4), B -> C (1), plus isolated D."""
    store.add_location("A", {"B": 1, "C": 4})
    store.add_location("B", {"C": 1})
    store.add_location("C")
    store.add_location("D")
    return store


@pytest.fixture
def _isolated_cli(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    backend: MemoryBackend,
) -> None:
    """Run CLI commands in a temp CWD against the shared ``backend`` fixture.

    Every invocation restores its store from the same MemoryBackend, so state
    carries across commands the way it would with Redis.
    """
    monkeypatch.chdir(tmp_path)
    for var in ("ROUTEMAP_CONFIG", "ROUTEMAP_STORE__BACKEND", "ROUTEMAP_STORE__NAMESPACE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "routemap.infrastructure.graph.engine.open_backend",
        lambda settings: backend,
    )
