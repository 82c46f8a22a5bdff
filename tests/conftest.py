"""
Pytest 配置文件。

提供全局的测试配置和 fixture。
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import numpy as np
import pytest

# 获取项目根目录
project_root = Path(__file__).parent.parent

# 添加 backend 目录到 Python 路径（让测试可以导入 firespread 模块）
backend_path = project_root / "backend"
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from firespread.core.storage import session_registry, simulation_storage  # noqa: E402
from firespread.models.oracle import OracleResponse, OracleRiskScore  # noqa: E402
from firespread.schemas.base import Coordinate, SimulationLocation  # noqa: E402
from firespread.schemas.data import Timeframe  # noqa: E402
from firespread.services.oracle import OracleError, parse_oracle_payload  # noqa: E402
from firespread.services.polygon import synthesize_perimeter  # noqa: E402

LOS_ANGELES = Coordinate(lat=34.05, lng=-118.24)

DEFAULT_PAYLOAD = {
    "timeframes": [
        {"hours": 12, "radius": 1.5, "impact": "Fire established in dry brush"},
        {"hours": 24, "radius": 3.0, "impact": "Spreading along the ridge line"},
        {"hours": 48, "radius": 6.0, "impact": "Approaching residential areas"},
        {"hours": 96, "radius": 9.5, "impact": "Large-scale containment efforts"},
    ],
    "explanation": "Dry vegetation and steady offshore wind",
}


class FakeOracle:
    """按固定 JSON 返回结果的预言机。"""

    def __init__(self, payload: Optional[dict] = None, risk_score: float = 72.0):
        self.payload = DEFAULT_PAYLOAD if payload is None else payload
        self.risk_score = risk_score
        self.calls = 0

    async def fetch_timeframes(self, location: SimulationLocation, date=None) -> OracleResponse:
        self.calls += 1
        return parse_oracle_payload(self.payload)

    async def assess_risk(self, location: SimulationLocation, date=None) -> OracleRiskScore:
        return OracleRiskScore(risk_score=self.risk_score, explanation="Hot and dry season")


class FailingOracle:
    """总是失败的预言机。"""

    async def fetch_timeframes(self, location, date=None) -> OracleResponse:
        raise OracleError("service unavailable")

    async def assess_risk(self, location, date=None) -> OracleRiskScore:
        raise OracleError("service unavailable")


class SlowOracle(FakeOracle):
    """响应很慢的预言机。"""

    def __init__(self, delay_s: float):
        super().__init__()
        self.delay_s = delay_s

    async def fetch_timeframes(self, location, date=None) -> OracleResponse:
        await asyncio.sleep(self.delay_s)
        return await super().fetch_timeframes(location, date)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def rng():
    """固定种子的随机数生成器。"""
    return np.random.default_rng(42)


@pytest.fixture
def timeframes(rng):
    """四个时间帧（12/24/48/96 小时）。"""
    return [
        Timeframe(
            hours=hours,
            perimeter=synthesize_perimeter(LOS_ANGELES, hours / 6.0, bearing, 12, rng=rng),
            narrative=f"frame {index}",
        )
        for index, (hours, bearing) in enumerate(
            [(12.0, 0.0), (24.0, 90.0), (48.0, 180.0), (96.0, 270.0)]
        )
    ]


@pytest.fixture(autouse=True)
def clean_storage():
    """每个测试前后清空内存存储。"""
    simulation_storage.clear()
    session_registry.clear()
    yield
    simulation_storage.clear()
    session_registry.clear()
