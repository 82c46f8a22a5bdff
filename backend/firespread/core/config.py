"""
全局配置模块。

集中管理：
- 大模型（Gemini）接入参数
- 火场多边形生成参数（顶点数、极区保护）
- 播放参数（每段动画时长、时钟步进间隔）
- 兜底模拟参数（时间点、半径模型）
"""

from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置，可通过 FIRESPREAD_ 前缀的环境变量覆盖。"""

    model_config = SettingsConfigDict(
        env_prefix="FIRESPREAD_", env_file=".env", extra="ignore"
    )

    app_name: str = "FireSpread Backend"
    log_level: str = "INFO"

    # 风险预言机（Gemini）
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    oracle_timeout_s: float = 30.0

    # 多边形生成
    vertex_count: int = 12
    pole_latitude_limit_deg: float = 89.9
    default_radius_km: float = 2.0
    shared_wind_bearing: bool = False

    # 播放
    segment_duration_ms: float = 3000.0
    playback_tick_interval_s: float = 1.0 / 30.0

    # 兜底模拟
    fallback_hours: List[float] = [12.0, 24.0, 48.0, 96.0]
    fallback_radius_model: Literal["linear", "sqrt"] = "linear"


settings = Settings()
