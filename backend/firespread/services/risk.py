"""
火险评估服务。

将预言机给出的火险分数限制在 [10, 100]，并映射为等级和颜色。
"""

from typing import List, Optional, Tuple

from firespread.schemas.base import SimulationLocation
from firespread.schemas.data import FireRiskAssessment
from firespread.services.oracle import RiskOracle
from firespread.utils.numerical import clamp

MIN_RISK_SCORE = 10.0
MAX_RISK_SCORE = 100.0

# (分数上界（不含）, 等级, 颜色)
# assess_fire_risk 先把分数限制到 MIN_RISK_SCORE 以上，Very Low 只会出现在直接调用 risk_level 时
RISK_LEVELS: List[Tuple[float, str, str]] = [
    (10.0, "Very Low", "#22c55e"),
    (40.0, "Low", "#84cc16"),
    (60.0, "Moderate", "#eab308"),
    (80.0, "High", "#f97316"),
]
EXTREME_LEVEL = ("Extreme", "#ef4444")


def risk_level(score: float) -> Tuple[str, str]:
    """根据分数返回 (等级, 颜色)。"""
    for upper, label, color in RISK_LEVELS:
        if score < upper:
            return label, color
    return EXTREME_LEVEL


async def assess_fire_risk(
    location: SimulationLocation, date: Optional[str], oracle: RiskOracle
) -> FireRiskAssessment:
    """
    评估指定地点和日期的火险。

    Raises:
        OracleError: 预言机调用失败
    """
    raw = await oracle.assess_risk(location, date)
    score = clamp(raw.risk_score, MIN_RISK_SCORE, MAX_RISK_SCORE)
    label, color = risk_level(score)
    return FireRiskAssessment(
        risk_score=score,
        label=label,
        color=color,
        explanation=raw.explanation,
        date=date,
    )
