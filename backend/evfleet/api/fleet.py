"""
플릿 API — 상태 조회, 최신 텔레메트리, 수동 틱, 시작/중지, 속도 변경, 리셋
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from evfleet.schemas.common import MessageResponse
from evfleet.schemas.fleet import (
    ChannelEvent, FleetStatusResponse, ResetRequest, SpeedRequest, SpeedResponse,
)
from evfleet.schemas.telemetry import TelemetryMessage
from evfleet.simulator.fleet_manager import FleetManager, get_fleet_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/fleet", tags=["fleet"])


@router.get("/status", response_model=FleetStatusResponse)
def get_status(manager: FleetManager = Depends(get_fleet_manager)):
    """플릿 시뮬레이션 상태"""
    return FleetStatusResponse(**manager.status())


@router.get("/vehicles", response_model=list[TelemetryMessage])
def list_vehicles(manager: FleetManager = Depends(get_fleet_manager)):
    """전체 차량의 최신 텔레메트리"""
    return [TelemetryMessage.from_snapshot(s) for s in manager.latest_all()]


@router.get("/vehicles/{vehicle_id}", response_model=TelemetryMessage)
def get_vehicle(vehicle_id: int, manager: FleetManager = Depends(get_fleet_manager)):
    """차량 한 대의 최신 텔레메트리"""
    if manager.simulator(vehicle_id) is None:
        raise HTTPException(status_code=404, detail=f"차량 {vehicle_id}을(를) 찾을 수 없습니다")

    snapshot = manager.latest(vehicle_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"차량 {vehicle_id}의 텔레메트리가 아직 없습니다")
    return TelemetryMessage.from_snapshot(snapshot)


@router.post("/tick", response_model=list[TelemetryMessage])
async def tick(manager: FleetManager = Depends(get_fleet_manager)):
    """전체 차량을 한 번 advance 하고 결과를 반환한다."""
    loop = asyncio.get_running_loop()
    snapshots = await loop.run_in_executor(None, manager.tick)
    return [TelemetryMessage.from_snapshot(s) for s in snapshots]


@router.post("/start", response_model=MessageResponse)
async def start(manager: FleetManager = Depends(get_fleet_manager)):
    """백그라운드 루프 시작"""
    if manager.is_running:
        return MessageResponse(message="이미 실행 중입니다")
    await manager.start()
    return MessageResponse(message="시뮬레이션을 시작했습니다")


@router.post("/stop", response_model=MessageResponse)
async def stop(manager: FleetManager = Depends(get_fleet_manager)):
    """백그라운드 루프 중지"""
    await manager.stop()
    return MessageResponse(message="시뮬레이션을 중지했습니다")


@router.put("/speed", response_model=SpeedResponse)
def set_speed(req: SpeedRequest, manager: FleetManager = Depends(get_fleet_manager)):
    """시뮬레이션 속도 변경 (1x, 5x, 10x)"""
    try:
        manager.speed = req.speed
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SpeedResponse(
        message=f"시뮬레이션 속도가 {req.speed}x로 변경되었습니다",
        speed=req.speed,
    )


@router.post("/reset", response_model=MessageResponse)
async def reset(req: ResetRequest | None = None,
                manager: FleetManager = Depends(get_fleet_manager)):
    """전체 차량 상태와 고장 래치를 초기화한다."""
    fleet_size = req.fleet_size if req else None
    await manager.reset(fleet_size)
    logger.info(f"[Reset] 차량 {manager.fleet_size}대로 리셋")
    return MessageResponse(
        message="플릿이 초기 상태로 리셋되었습니다",
        detail=f"차량 {manager.fleet_size}대",
    )


@router.get("/channels/{channel}/recent", response_model=list[ChannelEvent])
def recent_events(channel: str, count: int = Query(10, ge=1, le=1000),
                  manager: FleetManager = Depends(get_fleet_manager)):
    """채널에 발행된 최근 이벤트"""
    return manager.event_bus.get_recent(channel, count)
