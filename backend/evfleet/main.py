"""
FastAPI 앱 엔트리포인트
- CORS 설정
- 라우터 등록 (플릿 API, WebSocket)
- 플릿 시뮬레이션 백그라운드 시작/종료
- 헬스체크 엔드포인트
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from evfleet.config import settings
from evfleet.api import fleet
from evfleet.api.websocket import router as ws_router
from evfleet.schemas.common import HealthResponse
from evfleet.simulator.fleet_manager import FleetManager, get_fleet_manager

# 로깅 설정
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 시작/종료 시 플릿 시뮬레이션 관리"""
    fleet_manager = get_fleet_manager()

    if settings.AUTO_START:
        await fleet_manager.start()
        logger.info("플릿 시뮬레이션 백그라운드 태스크 시작")

    yield

    await fleet_manager.stop()
    fleet_manager.event_bus.close()
    logger.info("플릿 시뮬레이션 중지 완료")


app = FastAPI(
    title="EV 플릿 텔레메트리 생성기",
    description="차량별 물리/전기 상태와 고장 모드를 시뮬레이션해 텔레메트리를 발행",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(fleet.router)
app.include_router(ws_router)


@app.get("/api/health", response_model=HealthResponse)
def health_check(fleet_manager: FleetManager = Depends(get_fleet_manager)):
    """시스템 상태 확인"""
    redis_ok = fleet_manager.event_bus.is_redis

    return HealthResponse(
        status="ok" if redis_ok or not fleet_manager.event_bus.enabled else "degraded",
        redis_connected=redis_ok,
        simulation_running=fleet_manager.is_running,
        timestamp=datetime.now(timezone.utc),
    )
