"""
林火蔓延模拟服务。

调用风险预言机获取每个时间点的蔓延半径，再为每个时间点生成火场边界。
预言机失败时在边界处转为确定性的兜底时间线，不向播放器传播异常。
"""

import asyncio
import logging
import math
from typing import List, Optional

import numpy as np

from firespread.core.config import Settings, settings as default_settings
from firespread.models.oracle import OracleResponse, OracleTimeframe
from firespread.schemas.base import SimulationLocation
from firespread.schemas.data import SimulationResult, Timeframe
from firespread.services.oracle import OracleError, RiskOracle
from firespread.services.polygon import random_wind_bearing, synthesize_perimeter

logger = logging.getLogger(__name__)

FALLBACK_EXPLANATION = "Basic fire spread simulation"
DEFAULT_FALLBACK_HOURS = [12.0, 24.0, 48.0, 96.0]


def fallback_radius_km(hours: float, model: str = "linear") -> float:
    """
    兜底半径模型。

    linear: hours / 6；sqrt: sqrt(hours) * 0.5
    """
    if model == "sqrt":
        return math.sqrt(max(hours, 0.0)) * 0.5
    return hours / 6.0


def fallback_narrative(hours: float) -> str:
    """兜底时间帧描述。"""
    return f"Fire spreading based on local conditions ({hours:g}h)"


def build_simulation(
    location: SimulationLocation,
    response: OracleResponse,
    rng: Optional[np.random.Generator] = None,
    settings: Settings = default_settings,
    is_fallback: bool = False,
) -> SimulationResult:
    """
    将预言机时间线转换为模拟结果。

    每个时间帧独立抽取一个随机风向（shared_wind_bearing 开启时整条时间线共用一个）。

    Args:
        location: 火点位置
        response: 预言机时间线
        rng: 随机数生成器
        settings: 配置
        is_fallback: 是否为兜底结果

    Returns:
        模拟结果
    """
    rng = rng if rng is not None else np.random.default_rng()
    center = location.as_coordinate()
    shared_bearing = random_wind_bearing(rng) if settings.shared_wind_bearing else None

    timeframes: List[Timeframe] = []
    for frame in response.timeframes:
        bearing = shared_bearing if shared_bearing is not None else random_wind_bearing(rng)
        perimeter = synthesize_perimeter(
            center,
            frame.radius_km,
            bearing,
            vertex_count=settings.vertex_count,
            rng=rng,
            pole_latitude_limit_deg=settings.pole_latitude_limit_deg,
        )
        timeframes.append(
            Timeframe(hours=frame.hours, perimeter=perimeter, narrative=frame.impact)
        )

    return SimulationResult(
        timeframes=timeframes,
        explanation=response.explanation,
        is_fallback=is_fallback,
    )


def build_fallback_simulation(
    location: SimulationLocation,
    rng: Optional[np.random.Generator] = None,
    settings: Settings = default_settings,
) -> SimulationResult:
    """
    构造兜底模拟结果。

    时间点取自配置（默认 12/24/48/96 小时，去重后严格递增），半径由小时数按固定函数计算。
    """
    hours_list = sorted({float(h) for h in settings.fallback_hours if h >= 0})
    if not hours_list:
        hours_list = DEFAULT_FALLBACK_HOURS
    response = OracleResponse(
        timeframes=[
            OracleTimeframe(
                hours=hours,
                radius_km=fallback_radius_km(hours, settings.fallback_radius_model),
                impact=fallback_narrative(hours),
            )
            for hours in hours_list
        ],
        explanation=FALLBACK_EXPLANATION,
    )
    return build_simulation(location, response, rng=rng, settings=settings, is_fallback=True)


async def run_simulation(
    location: SimulationLocation,
    date: Optional[str],
    oracle: RiskOracle,
    rng: Optional[np.random.Generator] = None,
    settings: Settings = default_settings,
) -> SimulationResult:
    """
    执行一次完整模拟。

    预言机失败、超时或返回格式错误时返回兜底结果。

    Args:
        location: 火点位置
        date: 模拟日期
        oracle: 风险预言机
        rng: 随机数生成器
        settings: 配置

    Returns:
        模拟结果（时间帧非空）
    """
    try:
        response = await asyncio.wait_for(
            oracle.fetch_timeframes(location, date),
            timeout=settings.oracle_timeout_s,
        )
    except (OracleError, asyncio.TimeoutError) as e:
        logger.warning(
            f"Oracle failed for ({location.lat}, {location.lng}), using fallback: {e!r}"
        )
        return build_fallback_simulation(location, rng=rng, settings=settings)
    except Exception as e:
        logger.error(
            f"Unexpected oracle error for ({location.lat}, {location.lng}), using fallback: {e!r}"
        )
        return build_fallback_simulation(location, rng=rng, settings=settings)

    if not response.timeframes:
        logger.warning("Oracle returned empty timeline, using fallback")
        return build_fallback_simulation(location, rng=rng, settings=settings)

    return build_simulation(location, response, rng=rng, settings=settings)
