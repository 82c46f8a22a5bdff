"""
模拟任务管理器。

提供模拟的登记、接受、释放，以及播放时钟驱动任务的启动与停止。
"""

import asyncio
import logging
import uuid
from typing import Optional

from firespread.core.config import Settings, settings as default_settings
from firespread.core.storage import session_registry, simulation_storage
from firespread.models.simulation import FireSimulation
from firespread.schemas.base import SimulationLocation
from firespread.schemas.data import SimulationResult
from firespread.services.playback import PlaybackController

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """生成新的会话 ID。"""
    return str(uuid.uuid4())


def begin_request(session_id: str) -> int:
    """登记一次模拟请求，返回请求序号。"""
    return session_registry.begin_request(session_id)


def is_latest_request(session_id: str, request_no: int) -> bool:
    """请求是否仍为会话最新请求（后到的旧结果应丢弃）。"""
    return session_registry.is_latest(session_id, request_no)


def finish_request(session_id: str) -> None:
    """请求结束，会话空闲时释放其登记项。"""
    session_registry.finish_request(session_id)


def accept_simulation(
    session_id: str,
    location: SimulationLocation,
    result: SimulationResult,
    settings: Settings = default_settings,
) -> FireSimulation:
    """
    接受一次模拟结果，整体替换会话中的旧模拟。

    Args:
        session_id: 会话 ID
        location: 火点位置
        result: 模拟结果
        settings: 配置

    Returns:
        新的模拟对象（播放状态为 {0, 0, 未播放}）
    """
    previous_id = session_registry.current_simulation(session_id)
    if previous_id is not None:
        release_simulation(previous_id)

    simulation = FireSimulation(
        simulation_id=str(uuid.uuid4()),
        session_id=session_id,
        location=location,
        result=result,
        controller=PlaybackController(
            result.timeframes, segment_duration_ms=settings.segment_duration_ms
        ),
    )
    simulation_storage.add(simulation)
    session_registry.set_simulation(session_id, simulation.simulation_id)
    logger.info(
        f"Accepted simulation {simulation.simulation_id[:8]} for session {session_id[:8]} "
        f"({len(result.timeframes)} timeframes, fallback={result.is_fallback})"
    )
    return simulation


def get_simulation(simulation_id: str) -> Optional[FireSimulation]:
    """获取模拟，不存在则返回 None。"""
    return simulation_storage.get(simulation_id)


def release_simulation(simulation_id: str) -> bool:
    """
    停止播放并释放模拟。

    Returns:
        是否存在并已释放
    """
    simulation = simulation_storage.remove(simulation_id)
    if simulation is None:
        return False

    simulation.controller.pause()
    stop_playback_driver(simulation)
    if session_registry.current_simulation(simulation.session_id) == simulation_id:
        session_registry.set_simulation(simulation.session_id, None)
        session_registry.discard_if_idle(simulation.session_id)
    logger.info(f"Released simulation {simulation_id[:8]}")
    return True


async def _run_playback_driver(
    simulation: FireSimulation, tick_interval_s: float
) -> None:
    """
    后台任务：按固定间隔用事件循环时钟（毫秒）驱动播放控制器，直到播放停止。
    """
    loop = asyncio.get_running_loop()
    controller = simulation.controller
    logger.debug(f"Playback driver started for {simulation.simulation_id[:8]}")
    try:
        while controller.state.is_playing:
            controller.tick(loop.time() * 1000.0)
            if not controller.state.is_playing:
                break
            await asyncio.sleep(tick_interval_s)
    except asyncio.CancelledError:
        logger.debug(f"Playback driver cancelled for {simulation.simulation_id[:8]}")
        raise
    except Exception as e:
        controller.pause()
        logger.error(f"Playback driver error for {simulation.simulation_id}: {e}")
    finally:
        if simulation.driver is asyncio.current_task():
            simulation.driver = None
    logger.debug(f"Playback driver finished for {simulation.simulation_id[:8]}")


def start_playback_driver(
    simulation: FireSimulation, settings: Settings = default_settings
) -> None:
    """播放中且没有驱动任务时启动驱动任务。"""
    if not simulation.controller.state.is_playing:
        return
    if simulation.driver is not None and not simulation.driver.done():
        return
    simulation.driver = asyncio.create_task(
        _run_playback_driver(simulation, settings.playback_tick_interval_s)
    )


def stop_playback_driver(simulation: FireSimulation) -> Optional[asyncio.Task]:
    """
    取消驱动任务（播放状态由调用方负责）。

    Returns:
        被取消的任务，没有运行中的任务时返回 None
    """
    driver = simulation.driver
    simulation.driver = None
    if driver is None or driver.done():
        return None
    driver.cancel()
    return driver


async def release_all() -> int:
    """释放所有模拟并等待被取消的驱动任务结束，返回释放数量。"""
    released = 0
    drivers = []
    for simulation in simulation_storage.list_simulations():
        driver = stop_playback_driver(simulation)
        if driver is not None:
            drivers.append(driver)
        if release_simulation(simulation.simulation_id):
            released += 1
    session_registry.clear()

    if drivers:
        await asyncio.gather(*drivers, return_exceptions=True)
        logger.info(f"Stopped {len(drivers)} playback driver(s)")
    return released
