"""
数据 Schema 定义。

包含时间帧、模拟结果、播放状态、显示帧等数据模型。
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from firespread.schemas.base import Coordinate


class PlaybackStatus(str, Enum):
    """播放器状态枚举。"""

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"
    NO_DATA = "no_data"


class Timeframe(BaseModel):
    """模拟时间线上的一个时刻。"""

    hours: float = Field(..., ge=0, description="相对模拟开始的小时数")
    perimeter: List[Coordinate] = Field(
        ..., description="火场边界（闭合环，首尾坐标相同）"
    )
    narrative: str = Field(..., description="该时刻火势描述")


class SimulationResult(BaseModel):
    """一次模拟的完整结果，新请求到来时整体替换。"""

    timeframes: List[Timeframe] = Field(..., description="按时间排序的时间帧")
    explanation: str = Field(..., description="整体说明")
    is_fallback: bool = Field(
        default=False, description="是否为预言机失败后的兜底结果"
    )


class PlaybackStateSchema(BaseModel):
    """播放器状态快照。"""

    current_index: int = Field(..., ge=0, description="当前时间帧索引")
    progress: float = Field(
        ..., ge=0, le=1, description="当前帧到下一帧的插值进度"
    )
    is_playing: bool = Field(..., description="是否正在播放")
    status: PlaybackStatus = Field(..., description="播放器状态")


class DisplayFrame(BaseModel):
    """某一时刻需要渲染的火场边界。"""

    current_index: int = Field(..., description="当前（出发）时间帧索引")
    progress: float = Field(..., description="插值进度")
    hours: float = Field(..., description="当前时间帧的小时数（用于时间标签）")
    narrative: str = Field(..., description="当前时间帧的描述")
    perimeter: List[Coordinate] = Field(..., description="插值后的火场边界")
    area_km2: float = Field(..., description="火场面积（平方公里）")
    is_playing: bool = Field(..., description="是否正在播放")


class FireRiskAssessment(BaseModel):
    """火险评估结果。"""

    risk_score: float = Field(..., ge=10, le=100, description="火险分数（10-100）")
    label: str = Field(..., description="火险等级")
    color: str = Field(..., description="火险等级对应颜色")
    explanation: str = Field(..., description="评估说明")
    date: Optional[str] = Field(default=None, description="评估日期")
