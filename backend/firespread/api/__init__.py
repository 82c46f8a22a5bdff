"""
API 路由模块。
"""

from firespread.api.router import api_router

__all__ = ["api_router"]
