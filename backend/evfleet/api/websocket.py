"""
WebSocket 엔드포인트 — 실시간 텔레메트리 Push
클라이언트가 /ws/telemetry에 연결하면 다음 이벤트를 실시간으로 push:
  - telemetry: 백그라운드 틱마다 전체 차량의 최신 스냅샷
  - fleet_status: 연결 직후 1회, 플릿 상태 요약
"""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from evfleet.simulator.fleet_manager import FleetManager, get_fleet_manager

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """WebSocket 연결 관리자"""

    def __init__(self):
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"WebSocket 연결: {len(self.active_connections)}개 활성")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(f"WebSocket 해제: {len(self.active_connections)}개 활성")

    async def broadcast(self, message: dict):
        """모든 연결된 클라이언트에게 메시지 전송"""
        if not self.active_connections:
            return

        text = json.dumps(message, ensure_ascii=False, default=str)
        disconnected = []
        for ws in self.active_connections:
            try:
                await ws.send_text(text)
            except (WebSocketDisconnect, RuntimeError):
                disconnected.append(ws)

        for ws in disconnected:
            self.disconnect(ws)


# 싱글턴 매니저
ws_manager = ConnectionManager()


async def broadcast_event(event_type: str, data):
    """외부에서 호출 가능한 브로드캐스트 헬퍼"""
    await ws_manager.broadcast({
        "type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data,
    })


@router.websocket("/ws/telemetry")
async def websocket_endpoint(websocket: WebSocket,
                             fleet_manager: FleetManager = Depends(get_fleet_manager)):
    """실시간 텔레메트리 WebSocket 엔드포인트"""
    await ws_manager.connect(websocket)

    try:
        await websocket.send_text(json.dumps({
            "type": "fleet_status",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": fleet_manager.status(),
        }, ensure_ascii=False, default=str))

        # 클라이언트 메시지 수신 루프 (핑/퐁 유지)
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        pass
    finally:
        ws_manager.disconnect(websocket)
