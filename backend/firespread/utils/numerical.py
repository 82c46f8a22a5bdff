"""
数值计算工具。

提供线性插值、区间限制等功能。
"""

import numpy as np


def clamp(value: float, lower: float, upper: float) -> float:
    """将数值限制在 [lower, upper] 区间内。"""
    return max(lower, min(upper, value))


def lerp(start: np.ndarray, end: np.ndarray, t: float) -> np.ndarray:
    """
    线性插值：start + (end - start) * t。

    t 不做限制；t ∈ [0, 1] 时结果逐元素限制在 [min(start, end), max(start, end)]，
    浮点舍入不会越过端点。

    Args:
        start: 起始值数组
        end: 结束值数组（与 start 形状相同）
        t: 插值系数

    Returns:
        插值结果
    """
    result = start + (end - start) * t
    if 0.0 <= t <= 1.0:
        result = np.clip(result, np.minimum(start, end), np.maximum(start, end))
    return result
