"""
播放控制相关 API 路由。

支持播放、暂停、重新开始、跳到结尾，以及查询当前显示帧。
"""

from fastapi import APIRouter

from firespread.api.simulation import ensure_simulation
from firespread.core.config import settings
from firespread.core.task_manager import start_playback_driver, stop_playback_driver
from firespread.models.simulation import FireSimulation
from firespread.schemas.api import FrameResponse, PlaybackResponse

router = APIRouter(prefix="/simulation/{simulation_id}", tags=["playback"])


def _playback_response(simulation: FireSimulation) -> PlaybackResponse:
    return PlaybackResponse(
        simulation_id=simulation.simulation_id,
        state=simulation.controller.snapshot(),
    )


@router.get("/playback", response_model=PlaybackResponse, summary="获取播放状态")
async def read_playback(simulation_id: str) -> PlaybackResponse:
    simulation = ensure_simulation(simulation_id)
    return _playback_response(simulation)


@router.get("/frame", response_model=FrameResponse, summary="获取当前显示帧")
async def read_frame(simulation_id: str) -> FrameResponse:
    """
    获取当前需要渲染的火场边界、描述和时间标签。

    时间线为空时 status 为 no_data，frame 为空。
    """
    simulation = ensure_simulation(simulation_id)
    controller = simulation.controller
    return FrameResponse(
        simulation_id=simulation_id,
        status=controller.status,
        frame=controller.display(),
    )


@router.post("/playback/play", response_model=PlaybackResponse, summary="开始播放")
async def play(simulation_id: str) -> PlaybackResponse:
    """开始播放；空时间线保持不播放。"""
    simulation = ensure_simulation(simulation_id)
    if simulation.controller.play():
        start_playback_driver(simulation, settings)
    return _playback_response(simulation)


@router.post("/playback/pause", response_model=PlaybackResponse, summary="暂停播放")
async def pause(simulation_id: str) -> PlaybackResponse:
    """暂停播放，保留进度。"""
    simulation = ensure_simulation(simulation_id)
    simulation.controller.pause()
    stop_playback_driver(simulation)
    return _playback_response(simulation)


@router.post("/playback/restart", response_model=PlaybackResponse, summary="回到开头")
async def restart(simulation_id: str) -> PlaybackResponse:
    """回到第一帧，播放状态不变。"""
    simulation = ensure_simulation(simulation_id)
    simulation.controller.restart()
    return _playback_response(simulation)


@router.post(
    "/playback/skip-to-end", response_model=PlaybackResponse, summary="跳到结尾"
)
async def skip_to_end(simulation_id: str) -> PlaybackResponse:
    """跳到最后一帧，播放状态不变。"""
    simulation = ensure_simulation(simulation_id)
    simulation.controller.skip_to_end()
    return _playback_response(simulation)
