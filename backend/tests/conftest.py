"""
Pytest Configuration and Fixtures.

모든 테스트에서 사용하는 공통 fixture를 정의한다.
"""
import os
import random

import pytest

# 테스트 환경 — Redis 없이 인메모리 버스, 앱 시작 시 루프 자동 시작 안 함
os.environ["REDIS_ENABLED"] = "false"
os.environ["AUTO_START"] = "false"

from evfleet.simulator.event_bus import EventBus
from evfleet.simulator.fleet_manager import FleetManager
from evfleet.simulator.publisher import TelemetryPublisher


class MinimumRandom(random.Random):
    """모든 난수를 구간의 최솟값으로 고정하는 난수원"""

    def uniform(self, a, b):
        return a

    def randrange(self, start, stop=None, step=1):
        return start


class CountingRandom(random.Random):
    """uniform() 호출 횟수를 세는 난수원"""

    def __init__(self, seed=None):
        super().__init__(seed)
        self.uniform_calls = 0

    def uniform(self, a, b):
        self.uniform_calls += 1
        return super().uniform(a, b)


@pytest.fixture
def min_rng():
    return MinimumRandom()


@pytest.fixture
def counting_rng():
    return CountingRandom(7)


@pytest.fixture
def event_bus():
    return EventBus(enabled=False)


@pytest.fixture
def publisher(event_bus):
    return TelemetryPublisher(event_bus)


@pytest.fixture
def manager(publisher):
    return FleetManager(publisher, fleet_size=3, tick_interval=0.01, seed=42)
