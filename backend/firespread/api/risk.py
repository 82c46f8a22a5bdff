"""
火险评估 API 路由。
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from firespread.api.deps import get_oracle
from firespread.schemas.api import ErrorResponse, FireRiskRequest
from firespread.schemas.data import FireRiskAssessment
from firespread.services.oracle import OracleError, RiskOracle
from firespread.services.risk import assess_fire_risk

logger = logging.getLogger(__name__)

router = APIRouter(tags=["risk"])


@router.post(
    "/fire-risk",
    response_model=FireRiskAssessment,
    responses={502: {"model": ErrorResponse}},
    summary="评估火险",
)
async def fire_risk(
    request: FireRiskRequest,
    oracle: RiskOracle = Depends(get_oracle),
) -> FireRiskAssessment:
    """返回 10-100 的火险分数及等级。"""
    try:
        return await assess_fire_risk(request, request.date, oracle)
    except OracleError as e:
        logger.error(f"Fire risk assessment failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to assess fire risk")
