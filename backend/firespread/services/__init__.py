"""
业务服务模块。

包含火场多边形生成、时间线插值、播放控制、风险预言机、模拟构建、火险评估等服务。
"""

from firespread.services.interpolation import interpolate_perimeter
from firespread.services.oracle import (
    GeminiRiskOracle,
    OracleError,
    RiskOracle,
    parse_oracle_payload,
)
from firespread.services.playback import PlaybackController
from firespread.services.polygon import (
    elongation_factors,
    random_wind_bearing,
    synthesize_perimeter,
)
from firespread.services.risk import assess_fire_risk, risk_level
from firespread.services.simulation import (
    build_fallback_simulation,
    build_simulation,
    run_simulation,
)

__all__ = [
    "synthesize_perimeter",
    "elongation_factors",
    "random_wind_bearing",
    "interpolate_perimeter",
    "PlaybackController",
    "RiskOracle",
    "GeminiRiskOracle",
    "OracleError",
    "parse_oracle_payload",
    "build_simulation",
    "build_fallback_simulation",
    "run_simulation",
    "assess_fire_risk",
    "risk_level",
]
