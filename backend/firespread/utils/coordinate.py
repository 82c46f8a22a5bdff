"""
坐标转换工具。

提供公里与经纬度增量的换算、多边形面积计算以及 GeoJSON 转换。
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from firespread.schemas.base import Coordinate

# 地球半径（公里），球面近似
EARTH_RADIUS_KM = 6371.0

# 默认极区保护纬度（度）
POLE_LATITUDE_LIMIT_DEG = 89.9


def km_to_degree_offsets(
    distance_km,
    center_lat: float,
    pole_latitude_limit_deg: float = POLE_LATITUDE_LIMIT_DEG,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    将距离（公里）换算为纬度/经度增量（度）。

    经度增量除以 cos(纬度)；计算时纬度被限制在 ±pole_latitude_limit_deg 内，
    避免极点处除零。

    Args:
        distance_km: 距离（公里），标量或数组
        center_lat: 中心纬度（度）
        pole_latitude_limit_deg: 极区保护纬度（度）

    Returns:
        (dlat, dlng) 纬度增量与经度增量（度）
    """
    distance_km = np.asarray(distance_km, dtype=float)
    dlat = (distance_km / EARTH_RADIUS_KM) * (180.0 / math.pi)

    guarded_lat = max(-pole_latitude_limit_deg, min(pole_latitude_limit_deg, center_lat))
    dlng = dlat / math.cos(math.radians(guarded_lat))

    return dlat, dlng


def perimeter_to_array(perimeter: Sequence[Coordinate]) -> np.ndarray:
    """将坐标序列转换为 shape (n, 2) 的 [lat, lng] 数组。"""
    if not perimeter:
        return np.zeros((0, 2))
    return np.array([[c.lat, c.lng] for c in perimeter], dtype=float)


def array_to_perimeter(values: np.ndarray) -> List[Coordinate]:
    """将 [lat, lng] 数组转换回坐标列表。"""
    return [Coordinate(lat=float(lat), lng=float(lng)) for lat, lng in values]


def polygon_area_km2(perimeter: Sequence[Coordinate]) -> float:
    """
    计算多边形面积（平方公里）。

    以顶点平均纬度做局部等距投影后使用鞋带公式，适用于小范围火场。

    Args:
        perimeter: 多边形顶点（可闭合也可不闭合）

    Returns:
        面积（平方公里），顶点少于 3 个时返回 0
    """
    points = perimeter_to_array(perimeter)
    if len(points) > 1 and np.allclose(points[0], points[-1]):
        points = points[:-1]
    if len(points) < 3:
        return 0.0

    mean_lat = float(np.mean(points[:, 0]))
    km_per_deg_lat = EARTH_RADIUS_KM * math.pi / 180.0
    km_per_deg_lng = km_per_deg_lat * math.cos(math.radians(mean_lat))

    y = points[:, 0] * km_per_deg_lat
    x = points[:, 1] * km_per_deg_lng

    # 鞋带公式
    area = np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))
    return float(abs(area) / 2.0)


def perimeter_to_geojson(
    perimeter: Sequence[Coordinate], properties: Optional[Dict] = None
) -> Dict:
    """
    将火场边界转换为 GeoJSON Feature。

    GeoJSON 坐标顺序为 [经度, 纬度]，环保持闭合。
    """
    coords = [[c.lng, c.lat] for c in perimeter]
    if coords and coords[0] != coords[-1]:
        coords.append(coords[0])

    return {
        "type": "Feature",
        "geometry": {
            "type": "Polygon",
            "coordinates": [coords] if coords else [],
        },
        "properties": properties or {},
    }
