"""
火场多边形生成服务。

根据中心点、蔓延半径和风向，生成沿风向拉长、边缘不规则的闭合火场边界。
"""

import math
from typing import List, Optional

import numpy as np

from firespread.schemas.base import Coordinate
from firespread.utils.coordinate import (
    POLE_LATITUDE_LIMIT_DEG,
    array_to_perimeter,
    km_to_degree_offsets,
)

# 顺风方向最大拉长比例
MAX_WIND_ELONGATION = 0.5

# 每个顶点半径的随机扰动范围
IRREGULARITY_MIN = 0.85
IRREGULARITY_MAX = 1.15


def base_angles(vertex_count: int) -> np.ndarray:
    """顶点基准角（弧度），从 0 开始按 2π/K 等分。"""
    if vertex_count <= 0:
        return np.zeros(0)
    return 2.0 * math.pi * np.arange(vertex_count) / vertex_count


def elongation_factors(vertex_count: int, wind_bearing_deg: float) -> np.ndarray:
    """
    计算每个顶点的风向拉长系数。

    e_i = 1 + max(0, cos(θ_i - 风向)) * 0.5，取值范围 [1.0, 1.5]。
    与风向一致的顶点最多拉长 50%，侧风和逆风方向不拉长。

    Args:
        vertex_count: 顶点数
        wind_bearing_deg: 风向（度）

    Returns:
        拉长系数数组，shape: (vertex_count,)
    """
    wind_rad = math.radians(wind_bearing_deg)
    influence = np.cos(base_angles(vertex_count) - wind_rad)
    return 1.0 + np.maximum(0.0, influence) * MAX_WIND_ELONGATION


def random_wind_bearing(rng: Optional[np.random.Generator] = None) -> float:
    """在 [0, 360) 上均匀抽取风向（度）。"""
    rng = rng if rng is not None else np.random.default_rng()
    return float(rng.uniform(0.0, 360.0))


def synthesize_perimeter(
    center: Coordinate,
    radius_km: float,
    wind_bearing_deg: float,
    vertex_count: int = 12,
    rng: Optional[np.random.Generator] = None,
    pole_latitude_limit_deg: float = POLE_LATITUDE_LIMIT_DEG,
) -> List[Coordinate]:
    """
    生成闭合的火场边界。

    算法：
    1. 基准角 θ_i = 2π·i / K
    2. 风向拉长系数 e_i（见 elongation_factors）
    3. 随机扰动 r_i ~ U[0.85, 1.15]
    4. 有效半径 R_i = radius_km · r_i · e_i，按球面近似换算为经纬度增量
    5. 顶点 (lat + Δlat·sin θ_i, lng + Δlng·cos θ_i)
    6. 末尾追加第 0 个顶点，使环闭合

    不抛出异常：半径非正或顶点数小于 3 时返回退化但闭合的结果。

    Args:
        center: 中心坐标
        radius_km: 蔓延半径（公里）
        wind_bearing_deg: 风向（度）
        vertex_count: 顶点数 K
        rng: 随机数生成器，为空时使用系统熵新建
        pole_latitude_limit_deg: 极区保护纬度（度）

    Returns:
        K+1 个坐标组成的闭合环
    """
    if vertex_count <= 0:
        return [Coordinate(lat=center.lat, lng=center.lng) for _ in range(2)]

    rng = rng if rng is not None else np.random.default_rng()

    angles = base_angles(vertex_count)
    elongation = elongation_factors(vertex_count, wind_bearing_deg)
    irregularity = rng.uniform(IRREGULARITY_MIN, IRREGULARITY_MAX, size=vertex_count)

    radii = radius_km * irregularity * elongation
    dlat, dlng = km_to_degree_offsets(radii, center.lat, pole_latitude_limit_deg)

    points = np.column_stack(
        (
            center.lat + dlat * np.sin(angles),
            center.lng + dlng * np.cos(angles),
        )
    )
    # 闭合环
    points = np.vstack((points, points[:1]))

    return array_to_perimeter(points)
