from datetime import datetime, timedelta, timezone

import pytest

from budget_core.services import BudgetTracker
from budget_core.storage import MemoryStore, PersistenceManager

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def persistence():
    return PersistenceManager(MemoryStore(), MemoryStore())


@pytest.fixture
def tracker(persistence, clock):
    return BudgetTracker(persistence, clock=clock)
