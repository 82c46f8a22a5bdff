"""
API 路由主文件。

统一管理所有 API 路由。
"""

from fastapi import APIRouter

from firespread.api import playback, risk, simulation

api_router = APIRouter()

# 挂载子路由
api_router.include_router(simulation.router)
api_router.include_router(playback.router)
api_router.include_router(risk.router)
