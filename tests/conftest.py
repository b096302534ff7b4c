"""
Shared pytest fixtures and configuration for arbor tests.

This module provides:
- A scripted httpx transport and a virtual clock
- An executor wired to both
- ``write_tree`` for laying out data roots under ``tmp_path``

Usage:
    Fixtures are auto-discovered by pytest:

    def test_something(executor, transport):
        ...
"""

import sys
from pathlib import Path
from typing import Any

import pytest
import yaml

# Ensure arbor package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from arbor.engine.context import Context
from arbor.engine.executor import RoundTripExecutor
from arbor.roundtrip.client import RoundTripClient
from arbor.testing import FakeClock, ScriptedTransport

HOST = "http://api.test"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(transport: ScriptedTransport):
    with RoundTripClient(HOST, transport=transport) as c:
        yield c


@pytest.fixture
def executor(client: RoundTripClient, clock: FakeClock) -> RoundTripExecutor:
    return RoundTripExecutor(client, clock=clock)


@pytest.fixture
def context() -> Context:
    return Context()


@pytest.fixture
def write_tree(tmp_path: Path):
    """Create a data root from a nested dict.

    Keys ending in ``/`` are directories; other keys are files whose values
    are dumped as YAML (or written verbatim when they are strings).

        root = write_tree({"_context.yaml": {...}, "a.yaml": {...}, "sub/": {...}})
    """

    def _write(layout: dict[str, Any], root: Path | None = None) -> Path:
        root = root or tmp_path / "data"
        root.mkdir(parents=True, exist_ok=True)
        for name, value in layout.items():
            if name.endswith("/"):
                _write(value, root / name.rstrip("/"))
            elif isinstance(value, str):
                (root / name).write_text(value, encoding="utf-8")
            else:
                (root / name).write_text(yaml.safe_dump(value), encoding="utf-8")
        return root

    return _write
