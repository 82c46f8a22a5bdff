"""
内部数据模型模块。

包含播放状态、预言机返回、模拟任务等内部数据结构。
"""

from firespread.models.oracle import OracleResponse, OracleRiskScore, OracleTimeframe
from firespread.models.playback import PlaybackState
from firespread.models.simulation import FireSimulation

__all__ = [
    "PlaybackState",
    "OracleTimeframe",
    "OracleResponse",
    "OracleRiskScore",
    "FireSimulation",
]
