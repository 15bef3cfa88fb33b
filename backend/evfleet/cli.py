"""
플릿 텔레메트리 CLI 실행기
- 차량 N대를 만들고 주기적으로 advance → 발행을 반복한다.
- 실행: evfleet-run --vehicles 10 --iterations 3600 --redis-url redis://localhost:6379
"""

import argparse
import logging
import time

from evfleet.config import settings
from evfleet.simulator.event_bus import EventBus
from evfleet.simulator.fleet_manager import FleetManager, rates_from_settings
from evfleet.simulator.publisher import CHANNEL_MODES, TelemetryPublisher

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("양의 정수여야 합니다")
    return number


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("0 이상의 정수여야 합니다")
    return number


def non_negative_float(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError("0 이상이어야 합니다")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="EV 플릿 텔레메트리를 생성해 Redis Stream(또는 인메모리 버스)으로 발행한다."
    )
    parser.add_argument(
        "--iterations", "-n",
        type=non_negative_int,
        default=settings.MAX_ITERATIONS,
        help="틱 반복 횟수 (0이면 Ctrl+C까지 무제한)",
    )
    parser.add_argument(
        "--vehicles", "-v",
        type=positive_int,
        default=settings.FLEET_SIZE,
        help="시뮬레이션할 차량 수",
    )
    parser.add_argument(
        "--redis-url",
        default=settings.REDIS_URL,
        help="Redis 접속 URL",
    )
    parser.add_argument(
        "--no-redis",
        action="store_true",
        help="Redis 없이 인메모리 버스만 사용",
    )
    parser.add_argument(
        "--interval",
        type=non_negative_float,
        default=settings.TICK_INTERVAL_SECONDS,
        help="틱 간격 (초)",
    )
    parser.add_argument(
        "--channel-mode",
        choices=CHANNEL_MODES,
        default=settings.CHANNEL_MODE,
        help="vehicle: 차량별 채널, fleet: 공용 채널",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.RANDOM_SEED,
        help="재현용 난수 시드",
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def build_manager(args: argparse.Namespace) -> FleetManager:
    """CLI 인자로 FleetManager 구성 — 전송 엔드포인트는 명시적으로 전달"""
    event_bus = EventBus(args.redis_url, enabled=not args.no_redis, maxlen=settings.STREAM_MAXLEN)
    publisher = TelemetryPublisher(
        event_bus,
        channel_mode=args.channel_mode,
        vehicle_prefix=settings.VEHICLE_CHANNEL_PREFIX,
        fleet_channel=settings.FLEET_CHANNEL,
    )
    return FleetManager(
        publisher,
        fleet_size=args.vehicles,
        tick_interval=args.interval,
        max_iterations=args.iterations,
        rates=rates_from_settings(settings),
        seed=args.seed,
    )


def run(manager: FleetManager, interval: float):
    """최대 반복 횟수까지 (또는 무제한) 틱을 반복한다."""
    started = time.monotonic()
    try:
        while not manager.iterations_exhausted():
            manager.tick()
            if interval:
                time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 중지됨")

    elapsed = time.monotonic() - started
    logger.info(
        f"완료: {manager.iterations}회, 차량 {manager.fleet_size}대, "
        f"고장 차량 {manager.failure_summary()}대, {elapsed:.1f}초"
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    manager = build_manager(args)
    try:
        run(manager, args.interval)
    finally:
        manager.event_bus.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
