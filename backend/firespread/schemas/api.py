"""
API 请求/响应 Schema 定义。
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from firespread.schemas.base import SimulationLocation
from firespread.schemas.data import (
    DisplayFrame,
    PlaybackStateSchema,
    PlaybackStatus,
    SimulationResult,
)


class FireSimulationRequest(SimulationLocation):
    """创建林火蔓延模拟请求体。"""

    date: Optional[str] = Field(
        default=None, description="模拟日期（YYYY-MM-DD）", examples=["2026-07-01"]
    )
    session_id: Optional[str] = Field(
        default=None,
        description="前端焦点会话 ID，同一会话只保留最新一次请求的结果",
    )


class FireSimulationResponse(BaseModel):
    """林火蔓延模拟响应。"""

    simulation_id: str = Field(..., description="模拟 ID")
    session_id: str = Field(..., description="会话 ID")
    result: SimulationResult = Field(..., description="模拟结果")


class PlaybackResponse(BaseModel):
    """播放控制响应。"""

    simulation_id: str = Field(..., description="模拟 ID")
    state: PlaybackStateSchema = Field(..., description="播放器状态")


class FrameResponse(BaseModel):
    """当前显示帧响应。无数据时 frame 为空。"""

    simulation_id: str = Field(..., description="模拟 ID")
    status: PlaybackStatus = Field(..., description="播放器状态")
    frame: Optional[DisplayFrame] = Field(default=None, description="显示帧")


class FireRiskRequest(SimulationLocation):
    """火险评估请求体。"""

    date: Optional[str] = Field(default=None, description="评估日期（YYYY-MM-DD）")


class ErrorResponse(BaseModel):
    """通用错误响应。"""

    code: str = Field(..., description="错误码")
    message: str = Field(..., description="错误描述")
    details: Optional[Dict] = Field(
        default=None, description="可选的详细错误信息"
    )
