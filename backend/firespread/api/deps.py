"""
路由依赖。

预言机和随机数生成器通过依赖注入提供，测试中可通过 dependency_overrides 替换。
"""

from functools import lru_cache

import numpy as np

from firespread.core.config import settings
from firespread.services.oracle import GeminiRiskOracle, RiskOracle


@lru_cache(maxsize=1)
def get_oracle() -> RiskOracle:
    """全局风险预言机。"""
    return GeminiRiskOracle(
        settings.gemini_api_key,
        settings.gemini_model,
        default_radius_km=settings.default_radius_km,
    )


def get_rng() -> np.random.Generator:
    """每次请求使用系统熵新建的随机数生成器。"""
    return np.random.default_rng()
