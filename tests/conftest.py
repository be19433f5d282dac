"""Shared fixtures."""

from datetime import datetime, timedelta
from typing import Callable

import pytest

from app.store.memory_store import MemoryReportStore

from tests.factories import BASE_TIME


@pytest.fixture
def store() -> MemoryReportStore:
    return MemoryReportStore()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    ticks = iter(BASE_TIME + timedelta(seconds=i) for i in range(10_000))
    return lambda: next(ticks)
