"""
基础 Schema 定义。

包含坐标、模拟地点等基础模型。
"""

from typing import Optional

from pydantic import BaseModel, Field


class Coordinate(BaseModel):
    """地理坐标（十进制度）。内部不做范围校验。"""

    lat: float = Field(..., description="纬度（度）")
    lng: float = Field(..., description="经度（度）")


class SimulationLocation(BaseModel):
    """火点位置（模拟中心）。"""

    lat: float = Field(..., ge=-90, le=90, description="纬度（度）")
    lng: float = Field(..., ge=-180, le=180, description="经度（度）")
    address: Optional[str] = Field(
        default=None, max_length=200, description="地址描述，仅用于提示词"
    )

    def as_coordinate(self) -> Coordinate:
        """转换为多边形中心坐标。"""
        return Coordinate(lat=self.lat, lng=self.lng)
