from datetime import datetime, timedelta

import pytest

from yks_tracker.store import EntityStore


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 10, 9, 30))


@pytest.fixture
def store(clock):
    return EntityStore(clock=clock)
