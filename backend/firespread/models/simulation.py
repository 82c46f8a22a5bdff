"""
模拟任务模型定义。
"""

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from firespread.schemas.base import SimulationLocation
from firespread.schemas.data import SimulationResult

if TYPE_CHECKING:
    from firespread.services.playback import PlaybackController


@dataclass
class FireSimulation:
    """一次已接受的林火蔓延模拟。"""

    simulation_id: str  # 模拟 ID
    session_id: str  # 所属会话 ID
    location: SimulationLocation  # 火点位置
    result: SimulationResult  # 模拟结果
    controller: "PlaybackController"  # 播放控制器（每个模拟独立持有）
    driver: Optional[asyncio.Task] = None  # 播放时钟驱动任务
