"""
时间线插值服务。

在两个时间帧的火场边界之间做逐顶点线性插值，用于动画过渡。
"""

from typing import List, Sequence

import numpy as np

from firespread.schemas.base import Coordinate
from firespread.utils.coordinate import array_to_perimeter, perimeter_to_array
from firespread.utils.numerical import lerp


def interpolate_perimeter(
    start: Sequence[Coordinate],
    end: Sequence[Coordinate],
    t: float,
) -> List[Coordinate]:
    """
    逐顶点线性插值两个火场边界。

    第 i 个起始顶点与第 i 个结束顶点配对；若结束边界顶点较少，
    多出的起始顶点都向结束边界的最后一个顶点插值。
    t 不做限制，由调用方负责。

    Args:
        start: 起始边界
        end: 结束边界
        t: 插值系数，通常在 [0, 1]

    Returns:
        与 start 顶点数相同的插值边界
    """
    if not start:
        return []
    if not end:
        # 没有可插值的目标，保持起始边界
        return [Coordinate(lat=c.lat, lng=c.lng) for c in start]

    start_arr = perimeter_to_array(start)
    end_arr = perimeter_to_array(end)

    # 顶点数不一致时，用最后一个顶点补齐
    if len(end_arr) < len(start_arr):
        padding = np.repeat(end_arr[-1:], len(start_arr) - len(end_arr), axis=0)
        end_arr = np.vstack((end_arr, padding))
    else:
        end_arr = end_arr[: len(start_arr)]

    return array_to_perimeter(lerp(start_arr, end_arr, t))
