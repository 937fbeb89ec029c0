from datetime import datetime

import pytest

from tests.fakes import FakeClock, FakeLock


@pytest.fixture
def base_time():
    return datetime(2024, 5, 17, 10, 0, 0)


@pytest.fixture
def clock(base_time):
    return FakeClock(base_time)


@pytest.fixture
def fake_lock():
    return FakeLock()
