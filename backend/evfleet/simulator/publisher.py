"""
텔레메트리 퍼블리셔 — 스냅샷을 전송 포맷으로 직렬화해 이벤트 버스로 보낸다.
"""

import logging

from evfleet.schemas.telemetry import TelemetryMessage
from evfleet.simulator.event_bus import EventBus
from evfleet.simulator.snapshot import Snapshot

logger = logging.getLogger(__name__)

CHANNEL_MODES = ("vehicle", "fleet")


class TelemetryPublisher:
    """차량 ID를 key로, 차량별 또는 플릿 공용 채널에 발행"""

    def __init__(self, event_bus: EventBus, channel_mode: str = "vehicle",
                 vehicle_prefix: str = "car", fleet_channel: str = "fleet.telemetry"):
        if channel_mode not in CHANNEL_MODES:
            raise ValueError(f"지원하지 않는 채널 모드: {channel_mode}")
        self.event_bus = event_bus
        self.channel_mode = channel_mode
        self.vehicle_prefix = vehicle_prefix
        self.fleet_channel = fleet_channel

    def channel_for(self, vehicle_id: int) -> str:
        """차량이 발행할 채널 이름"""
        if self.channel_mode == "fleet":
            return self.fleet_channel
        return f"{self.vehicle_prefix}{vehicle_id}"

    def publish(self, snapshot: Snapshot) -> str:
        """스냅샷 발행 후 사용한 채널 이름을 반환"""
        channel = self.channel_for(snapshot.vehicle_id)
        message = TelemetryMessage.from_snapshot(snapshot)
        self.event_bus.publish(channel, message.to_wire(), key=str(snapshot.vehicle_id))
        return channel
