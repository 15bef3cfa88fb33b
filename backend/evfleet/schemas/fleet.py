"""
플릿 시뮬레이션 관련 Pydantic 스키마
"""

from typing import Literal
from pydantic import BaseModel, Field


class FleetStatusResponse(BaseModel):
    running: bool
    speed: int
    fleet_size: int
    iterations: int
    max_iterations: int  # 0이면 무제한
    channel_mode: str
    transport: Literal["redis", "memory"]
    vehicles_with_failures: int


class SpeedRequest(BaseModel):
    speed: Literal[1, 5, 10]


class SpeedResponse(BaseModel):
    message: str
    speed: int


class ResetRequest(BaseModel):
    fleet_size: int | None = Field(default=None, ge=1)


class ChannelEvent(BaseModel):
    id: str
    key: str | None = None
    data: dict
    timestamp: str | None = None
