"""Pytest fixtures for gymticks tests."""

import pytest
from fastapi.testclient import TestClient

from gymticks.dispatcher import Dispatcher
from gymticks.ledger import CreateRoute, RecordTick, reduce
from gymticks.main import app, get_dispatcher
from gymticks.models import Snapshot, TickKind
from gymticks.store import SnapshotStore

NOW = 1_700_000_000


class FakeClock:
    """Settable clock standing in for time.time."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "gymticks.json")


@pytest.fixture
def dispatcher(store, clock):
    return Dispatcher(store, clock=clock)


@pytest.fixture
def populated():
    """Snapshot with three routes across two sections and some ticks."""
    snapshot = Snapshot()
    for route_id, title, color, section, grade in [
        ("r-slab", "slab", "red", "AB3", "9"),
        ("r-roof", "roof", "blue", "ROF", "V3"),
        ("r-arete", "arete", "green", "AB3", "10-"),
    ]:
        snapshot = reduce(
            snapshot, CreateRoute(route_id=route_id, title=title, color=color, section=section, grade=grade)
        )
    for kind, ts in [(TickKind.ATTEMPT, NOW - 7200), (TickKind.ATTEMPT, NOW - 3600), (TickKind.ASCENT, NOW - 600)]:
        snapshot = reduce(snapshot, RecordTick(route_id="r-slab", kind=kind, timestamp=ts))
    snapshot = reduce(snapshot, RecordTick(route_id="r-roof", kind=TickKind.ASCENT, timestamp=NOW - 2 * 86400))
    return snapshot


@pytest.fixture
def api(dispatcher):
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
