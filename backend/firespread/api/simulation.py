"""
林火蔓延模拟相关 API 路由。
"""

import logging

import numpy as np
from fastapi import APIRouter, Body, Depends, HTTPException

from firespread.api.deps import get_oracle, get_rng
from firespread.core.config import settings
from firespread.core.task_manager import (
    accept_simulation,
    begin_request,
    finish_request,
    get_simulation,
    is_latest_request,
    new_session_id,
    release_simulation,
)
from firespread.models.simulation import FireSimulation
from firespread.schemas.api import (
    ErrorResponse,
    FireSimulationRequest,
    FireSimulationResponse,
)
from firespread.services.oracle import RiskOracle
from firespread.services.simulation import run_simulation
from firespread.utils.coordinate import perimeter_to_geojson

logger = logging.getLogger(__name__)

router = APIRouter(tags=["simulation"])


def ensure_simulation(simulation_id: str) -> FireSimulation:
    simulation = get_simulation(simulation_id)
    if simulation is None:
        raise HTTPException(
            status_code=404, detail=f"Simulation {simulation_id} not found"
        )
    return simulation


@router.post(
    "/fire-simulation",
    response_model=FireSimulationResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
    summary="创建林火蔓延模拟",
)
async def create_fire_simulation(
    request: FireSimulationRequest = Body(
        ...,
        examples=[
            {
                "lat": 34.05,
                "lng": -118.24,
                "address": "Los Angeles, CA",
                "date": "2026-07-01",
            }
        ],
    ),
    oracle: RiskOracle = Depends(get_oracle),
    rng: np.random.Generator = Depends(get_rng),
) -> FireSimulationResponse:
    """
    创建林火蔓延模拟。

    调用风险预言机获取各时间点的蔓延半径并生成火场边界；预言机失败时返回兜底结果。
    同一会话中，若在等待预言机期间有更新的请求，本次结果被丢弃并返回 409。
    """
    session_id = request.session_id or new_session_id()
    request_no = begin_request(session_id)

    try:
        result = await run_simulation(
            request, request.date, oracle, rng=rng, settings=settings
        )

        if not is_latest_request(session_id, request_no):
            logger.info(f"Discarding superseded simulation request for session {session_id[:8]}")
            raise HTTPException(
                status_code=409,
                detail="Simulation request superseded by a newer request",
            )

        simulation = accept_simulation(session_id, request, result, settings=settings)
    finally:
        finish_request(session_id)

    return FireSimulationResponse(
        simulation_id=simulation.simulation_id,
        session_id=session_id,
        result=simulation.result,
    )


@router.get(
    "/simulation/{simulation_id}",
    response_model=FireSimulationResponse,
    summary="获取模拟结果",
)
async def read_fire_simulation(simulation_id: str) -> FireSimulationResponse:
    """获取已接受的模拟结果。"""
    simulation = ensure_simulation(simulation_id)
    return FireSimulationResponse(
        simulation_id=simulation.simulation_id,
        session_id=simulation.session_id,
        result=simulation.result,
    )


@router.get(
    "/simulation/{simulation_id}/geojson",
    summary="以 GeoJSON 导出模拟时间线",
)
async def export_geojson(simulation_id: str) -> dict:
    """每个时间帧导出为一个 Polygon Feature。"""
    simulation = ensure_simulation(simulation_id)
    features = [
        perimeter_to_geojson(
            frame.perimeter,
            {"index": index, "hours": frame.hours, "impact": frame.narrative},
        )
        for index, frame in enumerate(simulation.result.timeframes)
    ]
    return {"type": "FeatureCollection", "features": features}


@router.delete(
    "/simulation/{simulation_id}",
    summary="停止并释放模拟",
)
async def delete_fire_simulation(simulation_id: str) -> dict:
    """停止播放并释放模拟资源。"""
    ensure_simulation(simulation_id)
    release_simulation(simulation_id)
    return {"simulation_id": simulation_id, "released": True}
