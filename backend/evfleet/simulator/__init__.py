"""
시뮬레이터 패키지
- 차량 상태 모델, 고장 모드, 텔레메트리 발행을 담당한다.
- 플릿 루프(싱글턴)는 evfleet.simulator.fleet_manager 에서 직접 import 한다.
"""

from evfleet.simulator.event_bus import EventBus, InMemoryEventBus
from evfleet.simulator.failure_modes import FailureModeState, FailureRates
from evfleet.simulator.snapshot import Snapshot
from evfleet.simulator.vehicle_simulator import VehicleSimulator

__all__ = [
    "EventBus",
    "InMemoryEventBus",
    "FailureModeState",
    "FailureRates",
    "Snapshot",
    "VehicleSimulator",
]
