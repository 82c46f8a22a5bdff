"""
播放状态模型定义。
"""

from dataclasses import dataclass


@dataclass
class PlaybackState:
    """播放器状态，仅由 PlaybackController 修改。"""

    current_index: int = 0  # 当前时间帧索引
    progress: float = 0.0  # 当前帧到下一帧的插值进度 [0, 1]
    is_playing: bool = False  # 是否正在播放
