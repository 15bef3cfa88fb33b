"""
플릿 매니저 — 차량별 시뮬레이터를 만들고 백그라운드 태스크로 주기적으로 advance 한다.
- 스냅샷은 TelemetryPublisher로 이벤트 버스에 발행
- 속도 조절 (1x, 5x, 10x) 지원
- FastAPI lifespan 또는 CLI에서 시작
"""

import asyncio
import logging
import random
import threading

from evfleet.config import Settings, settings
from evfleet.schemas.telemetry import TelemetryMessage
from evfleet.simulator.event_bus import EventBus
from evfleet.simulator.failure_modes import FailureRates
from evfleet.simulator.publisher import TelemetryPublisher
from evfleet.simulator.snapshot import Snapshot
from evfleet.simulator.vehicle_simulator import VehicleSimulator

logger = logging.getLogger(__name__)

SPEEDS = (1, 5, 10)


def rates_from_settings(cfg: Settings) -> FailureRates:
    """설정값으로 FailureRates를 만든다."""
    return FailureRates(
        tire_pressure_loss=cfg.TIRE_PRESSURE_LOSS_PROBABILITY,
        shock_failure=cfg.SHOCK_FAILURE_PROBABILITY,
        drive_shaft_degradation=cfg.DRIVE_SHAFT_DEGRADATION_PROBABILITY,
        coolant_overheating=cfg.COOLANT_OVERHEATING_PROBABILITY,
        outdated_firmware=cfg.OUTDATED_FIRMWARE_PROBABILITY,
        bump=cfg.BUMP_PROBABILITY,
    )


class FleetManager:
    """플릿 시뮬레이션 전체 라이프사이클 관리"""

    def __init__(self, publisher: TelemetryPublisher, fleet_size: int = 1,
                 tick_interval: float = 1.0, max_iterations: int = 0,
                 rates: FailureRates | None = None, seed: int | None = None,
                 default_speed: int = 1):
        if fleet_size < 1:
            raise ValueError("차량 수는 1 이상이어야 합니다")

        self.publisher = publisher
        self.tick_interval = tick_interval
        self.max_iterations = max_iterations
        self.rates = rates or FailureRates()
        self.seed = seed

        self._simulators: dict[int, VehicleSimulator] = {}
        self._latest: dict[int, Snapshot] = {}
        self._iterations = 0
        # 같은 시뮬레이터에 대한 advance()가 겹치지 않도록 틱 단위로 직렬화
        self._lock = threading.Lock()

        self._speed: int = 1
        self.speed = default_speed
        self._running: bool = False
        self._tasks: list[asyncio.Task] = []

        self._build_simulators(fleet_size)

    @classmethod
    def from_settings(cls, cfg: Settings) -> "FleetManager":
        event_bus = EventBus(cfg.REDIS_URL, enabled=cfg.REDIS_ENABLED, maxlen=cfg.STREAM_MAXLEN)
        publisher = TelemetryPublisher(
            event_bus,
            channel_mode=cfg.CHANNEL_MODE,
            vehicle_prefix=cfg.VEHICLE_CHANNEL_PREFIX,
            fleet_channel=cfg.FLEET_CHANNEL,
        )
        return cls(
            publisher,
            fleet_size=cfg.FLEET_SIZE,
            tick_interval=cfg.TICK_INTERVAL_SECONDS,
            max_iterations=cfg.MAX_ITERATIONS,
            rates=rates_from_settings(cfg),
            seed=cfg.RANDOM_SEED,
            default_speed=cfg.SIMULATION_DEFAULT_SPEED,
        )

    def _build_simulators(self, fleet_size: int):
        """차량 ID 0..fleet_size-1 로 시뮬레이터 생성"""
        self._simulators = {}
        for vehicle_id in range(fleet_size):
            rng = random.Random(self.seed + vehicle_id) if self.seed is not None else random.Random()
            self._simulators[vehicle_id] = VehicleSimulator(vehicle_id, rng=rng, rates=self.rates)
        self._latest = {}
        self._iterations = 0
        logger.info(f"차량 {fleet_size}대 시뮬레이터 생성")

    @property
    def event_bus(self) -> EventBus:
        return self.publisher.event_bus

    @property
    def speed(self) -> int:
        return self._speed

    @speed.setter
    def speed(self, value: int):
        if value not in SPEEDS:
            raise ValueError("속도는 1, 5, 10 중 하나여야 합니다")
        self._speed = value
        logger.info(f"시뮬레이션 속도 변경: {value}x")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def fleet_size(self) -> int:
        return len(self._simulators)

    @property
    def vehicle_ids(self) -> list[int]:
        return list(self._simulators)

    def simulator(self, vehicle_id: int) -> VehicleSimulator | None:
        return self._simulators.get(vehicle_id)

    def latest(self, vehicle_id: int) -> Snapshot | None:
        """차량의 가장 최근 스냅샷 (아직 없으면 None)"""
        return self._latest.get(vehicle_id)

    def latest_all(self) -> list[Snapshot]:
        return [self._latest[vid] for vid in sorted(self._latest)]

    def failure_summary(self) -> int:
        """최근 스냅샷 기준 고장이 발생한 차량 수"""
        return sum(1 for snap in self._latest.values() if snap.failure_occurred)

    def iterations_exhausted(self) -> bool:
        return self.max_iterations > 0 and self._iterations >= self.max_iterations

    def status(self) -> dict:
        return {
            "running": self._running,
            "speed": self._speed,
            "fleet_size": self.fleet_size,
            "iterations": self._iterations,
            "max_iterations": self.max_iterations,
            "channel_mode": self.publisher.channel_mode,
            "transport": "redis" if self.event_bus.is_redis else "memory",
            "vehicles_with_failures": self.failure_summary(),
        }

    def tick(self) -> list[Snapshot]:
        """전체 차량을 한 번씩 advance 하고 발행한다 (블로킹)."""
        with self._lock:
            snapshots = []
            for simulator in self._simulators.values():
                snapshot = simulator.advance()
                self.publisher.publish(snapshot)
                self._latest[snapshot.vehicle_id] = snapshot
                snapshots.append(snapshot)
            self._iterations += 1

        logger.debug(f"틱 {self._iterations}: 차량 {len(snapshots)}대 발행")
        return snapshots

    def _effective_interval(self) -> float:
        """속도 배율을 적용한 실제 대기 시간 (초)"""
        return self.tick_interval / self._speed

    async def _fleet_loop(self):
        """텔레메트리 생성 루프"""
        logger.info("텔레메트리 생성 루프 시작")
        while self._running:
            try:
                await asyncio.sleep(self._effective_interval())
                if not self._running:
                    break
                loop = asyncio.get_running_loop()
                snapshots = await loop.run_in_executor(None, self.tick)

                # WebSocket 브로드캐스트
                from evfleet.api.websocket import broadcast_event
                await broadcast_event("telemetry", [
                    TelemetryMessage.from_snapshot(s).to_wire() for s in snapshots
                ])

                if self.iterations_exhausted():
                    logger.info(f"최대 반복 횟수 도달 ({self.max_iterations}회) — 루프 종료")
                    self._running = False
                    break
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"텔레메트리 루프 에러: {e}")
                await asyncio.sleep(5)

    async def start(self):
        """시뮬레이션 시작"""
        if self._running:
            logger.warning("시뮬레이션이 이미 실행 중입니다")
            return

        self._running = True
        self._tasks = [asyncio.create_task(self._fleet_loop(), name="fleet-loop")]
        logger.info(f"시뮬레이션 시작 (차량 {self.fleet_size}대, 속도: {self._speed}x)")

    async def stop(self):
        """시뮬레이션 중지"""
        self._running = False
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("시뮬레이션 중지")

    async def reset(self, fleet_size: int | None = None):
        """모든 차량 상태를 초기화한다 (고장 래치 포함)."""
        if fleet_size is not None and fleet_size < 1:
            raise ValueError("차량 수는 1 이상이어야 합니다")

        was_running = self._running
        await self.stop()
        with self._lock:
            self._build_simulators(fleet_size or self.fleet_size)
        if was_running:
            await self.start()
        logger.info("[Reset] 플릿 초기화 완료")


# 싱글턴 인스턴스 (lazy — 첫 사용 시 Redis 연결)
_fleet_manager: FleetManager | None = None


def get_fleet_manager() -> FleetManager:
    """FastAPI Depends용 싱글턴 FleetManager 제공."""
    global _fleet_manager
    if _fleet_manager is None:
        _fleet_manager = FleetManager.from_settings(settings)
    return _fleet_manager
