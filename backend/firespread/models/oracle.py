"""
风险预言机返回数据模型。
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class OracleTimeframe:
    """预言机给出的单个时刻估计。"""

    hours: float  # 相对开始的小时数
    radius_km: float  # 蔓延半径（公里）
    impact: str  # 火势描述


@dataclass
class OracleResponse:
    """预言机返回的完整时间线。"""

    timeframes: List[OracleTimeframe] = field(default_factory=list)
    explanation: str = ""


@dataclass
class OracleRiskScore:
    """预言机给出的火险分数。"""

    risk_score: float  # 原始分数
    explanation: str  # 评估说明
