"""
通用工具函数模块。
"""

from firespread.utils.coordinate import (
    EARTH_RADIUS_KM,
    array_to_perimeter,
    km_to_degree_offsets,
    perimeter_to_array,
    perimeter_to_geojson,
    polygon_area_km2,
)
from firespread.utils.numerical import clamp, lerp

__all__ = [
    "EARTH_RADIUS_KM",
    "km_to_degree_offsets",
    "perimeter_to_array",
    "array_to_perimeter",
    "polygon_area_km2",
    "perimeter_to_geojson",
    "clamp",
    "lerp",
]
