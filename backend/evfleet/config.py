"""
애플리케이션 설정
- Redis 전송, 채널 이름, 차량 수/틱 주기, 고장 모드 발생 확률을 관리한다.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Redis (비활성화 또는 연결 실패 시 인메모리 버스로 fallback)
    REDIS_URL: str = "redis://localhost:6379"
    REDIS_ENABLED: bool = True
    STREAM_MAXLEN: int = 1000

    # 채널 — "vehicle": 차량별 채널 (car0, car1, ...), "fleet": 전체 공용 채널
    CHANNEL_MODE: Literal["vehicle", "fleet"] = "vehicle"
    VEHICLE_CHANNEL_PREFIX: str = "car"
    FLEET_CHANNEL: str = "fleet.telemetry"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # 차량 대수, 틱 간격 (초) — 1x 기준
    FLEET_SIZE: int = 1
    TICK_INTERVAL_SECONDS: float = 1.0

    # 0이면 무제한
    MAX_ITERATIONS: int = 0

    # 시뮬레이션 기본 속도 (1x, 5x, 10x)
    SIMULATION_DEFAULT_SPEED: int = 1

    # 재현용 시드 — 차량별 시드는 RANDOM_SEED + vehicle_id
    RANDOM_SEED: int | None = None

    # 앱 시작 시 플릿 루프 자동 시작
    AUTO_START: bool = True

    LOG_LEVEL: str = "INFO"

    # 고장 모드 발생 확률 (%, 0~100 균등 난수와 비교)
    TIRE_PRESSURE_LOSS_PROBABILITY: float = 50.0
    SHOCK_FAILURE_PROBABILITY: float = 100.0
    DRIVE_SHAFT_DEGRADATION_PROBABILITY: float = 100.0
    COOLANT_OVERHEATING_PROBABILITY: float = 20.0
    OUTDATED_FIRMWARE_PROBABILITY: float = 400.0
    BUMP_PROBABILITY: float = 5.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
