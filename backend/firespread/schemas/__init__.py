"""
Pydantic Schema 模块。

包含请求/响应模型、基础模型、数据模型等。
"""

from firespread.schemas.api import (
    ErrorResponse,
    FireRiskRequest,
    FireSimulationRequest,
    FireSimulationResponse,
    FrameResponse,
    PlaybackResponse,
)
from firespread.schemas.base import Coordinate, SimulationLocation
from firespread.schemas.data import (
    DisplayFrame,
    FireRiskAssessment,
    PlaybackStateSchema,
    PlaybackStatus,
    SimulationResult,
    Timeframe,
)

__all__ = [
    # 基础模型
    "Coordinate",
    "SimulationLocation",
    # 数据模型
    "Timeframe",
    "SimulationResult",
    "PlaybackStatus",
    "PlaybackStateSchema",
    "DisplayFrame",
    "FireRiskAssessment",
    # API 请求/响应
    "FireSimulationRequest",
    "FireSimulationResponse",
    "PlaybackResponse",
    "FrameResponse",
    "FireRiskRequest",
    "ErrorResponse",
]
