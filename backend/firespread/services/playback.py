"""
火场蔓延动画播放控制器。

按固定的每段时长在相邻时间帧之间推进插值进度，只向前播放、到达最后一帧自动停止。
支持播放、暂停、重新开始、跳到结尾。
"""

import logging
from typing import List, Optional, Sequence

from firespread.models.playback import PlaybackState
from firespread.schemas.data import (
    DisplayFrame,
    PlaybackStateSchema,
    PlaybackStatus,
    Timeframe,
)
from firespread.services.interpolation import interpolate_perimeter
from firespread.utils.coordinate import polygon_area_km2
from firespread.utils.numerical import clamp

logger = logging.getLogger(__name__)

# 相邻两帧之间的过渡时长（毫秒），与两帧的小时间隔无关
DEFAULT_SEGMENT_DURATION_MS = 3000.0


class PlaybackController:
    """
    播放控制器类。

    内部维护播放状态和段起始时钟参考，外部时钟（逐帧回调）定期调用 tick()。
    每个模拟持有独立的控制器实例，多个模拟之间互不影响。
    """

    def __init__(
        self,
        timeframes: Optional[Sequence[Timeframe]] = None,
        segment_duration_ms: float = DEFAULT_SEGMENT_DURATION_MS,
    ):
        """
        初始化播放控制器。

        Args:
            timeframes: 按时间排序的时间帧
            segment_duration_ms: 每段过渡时长（毫秒）
        """
        if segment_duration_ms <= 0:
            raise ValueError("segment_duration_ms must be greater than 0")

        self.segment_duration_ms = segment_duration_ms
        self.timeframes: List[Timeframe] = list(timeframes or [])
        self.state = PlaybackState()
        # 当前段的起始时间戳（毫秒），None 表示下一次 tick 时重新锚定
        self._segment_start_ms: Optional[float] = None

    @property
    def last_index(self) -> int:
        """最后一帧索引，空时间线返回 -1。"""
        return len(self.timeframes) - 1

    @property
    def is_empty(self) -> bool:
        return not self.timeframes

    def load(self, timeframes: Sequence[Timeframe]) -> None:
        """整体替换时间线，并将状态重置为 {0, 0, 未播放}。"""
        self.timeframes = list(timeframes)
        self.state = PlaybackState()
        self._segment_start_ms = None

    def play(self) -> bool:
        """
        开始播放。

        空时间线不进入播放状态。已保留的进度会在下一次 tick 时继续。

        Returns:
            是否进入播放状态
        """
        if self.is_empty:
            logger.debug("Ignoring play request on empty timeline")
            return False

        if not self.state.is_playing:
            self.state.is_playing = True
            self._segment_start_ms = None
        return True

    def pause(self) -> None:
        """暂停播放，保留当前进度。"""
        self.state.is_playing = False
        self._segment_start_ms = None

    def restart(self) -> None:
        """回到第一帧，播放状态不变。"""
        self.state.current_index = 0
        self.state.progress = 0.0
        self._segment_start_ms = None

    def skip_to_end(self) -> None:
        """跳到最后一帧，播放状态不变。"""
        if self.is_empty:
            return
        self.state.current_index = self.last_index
        self.state.progress = 1.0
        self._segment_start_ms = None

    def tick(self, timestamp_ms: float) -> None:
        """
        推进动画时钟。

        progress = (elapsed mod D) / D；elapsed ≥ D 时进入下一段并以当前时间戳作为新段起点。
        到达最后一帧后停止推进并自动停止播放。

        Args:
            timestamp_ms: 当前时间戳（毫秒），由宿主的逐帧回调提供
        """
        if not self.state.is_playing or self.is_empty:
            return

        # 已在最后一帧：没有插值目标，直接停止
        if self.state.current_index >= self.last_index:
            self._finish()
            return

        duration = self.segment_duration_ms
        if self._segment_start_ms is None:
            # 恢复播放时按已保留的进度回推段起点
            self._segment_start_ms = timestamp_ms - self.state.progress * duration

        elapsed = max(0.0, timestamp_ms - self._segment_start_ms)
        self.state.progress = (elapsed % duration) / duration

        if elapsed >= duration:
            self._segment_start_ms = timestamp_ms
            self.state.current_index += 1
            self.state.progress = 0.0

            if self.state.current_index >= self.last_index:
                self._finish()

    def _finish(self) -> None:
        """停在最后一帧。"""
        self.state.current_index = self.last_index
        self.state.progress = 1.0
        self.state.is_playing = False
        self._segment_start_ms = None

    @property
    def status(self) -> PlaybackStatus:
        """当前播放器状态。"""
        if self.is_empty:
            return PlaybackStatus.NO_DATA
        if self.state.is_playing:
            return PlaybackStatus.PLAYING
        if self.state.current_index >= self.last_index and self.state.progress >= 1.0:
            return PlaybackStatus.FINISHED
        if self.state.current_index == 0 and self.state.progress == 0.0:
            return PlaybackStatus.IDLE
        return PlaybackStatus.PAUSED

    def snapshot(self) -> PlaybackStateSchema:
        """导出状态快照。"""
        return PlaybackStateSchema(
            current_index=self.state.current_index,
            progress=clamp(self.state.progress, 0.0, 1.0),
            is_playing=self.state.is_playing,
            status=self.status,
        )

    def display(self) -> Optional[DisplayFrame]:
        """
        计算当前需要显示的火场边界。

        最后一帧直接显示其边界；否则在当前帧与下一帧之间按进度插值。
        描述文字取当前（出发）帧，只在段边界处切换。

        Returns:
            显示帧，空时间线返回 None
        """
        if self.is_empty:
            return None

        index = self.state.current_index
        current = self.timeframes[index]

        if index >= self.last_index:
            progress = 1.0
            perimeter = list(current.perimeter)
        else:
            progress = clamp(self.state.progress, 0.0, 1.0)
            perimeter = interpolate_perimeter(
                current.perimeter, self.timeframes[index + 1].perimeter, progress
            )

        return DisplayFrame(
            current_index=index,
            progress=progress,
            hours=current.hours,
            narrative=current.narrative,
            perimeter=perimeter,
            area_km2=polygon_area_km2(perimeter),
            is_playing=self.state.is_playing,
        )
