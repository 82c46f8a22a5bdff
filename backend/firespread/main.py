"""
FastAPI 应用入口。
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from firespread import __version__
from firespread.api import api_router
from firespread.core.config import settings
from firespread.core.task_manager import release_all

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理器。

    关闭时停止所有播放驱动任务并释放模拟。
    """
    logger.info("Starting backend server...")

    yield

    logger.info("Shutting down backend server...")
    released = await release_all()
    if released:
        logger.info(f"Released {released} simulation(s)")
    logger.info("Backend server shutdown complete.")


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="林火蔓延模拟与动画播放后端服务",
        lifespan=lifespan,
    )

    # 配置 CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 开发环境允许所有来源，生产环境应限制
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 挂载 API 路由
    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["root"])
    async def root():
        """根路径。"""
        return {
            "message": "FireSpread Backend API",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health", tags=["health"])
    async def health():
        """健康检查。"""
        return {"status": "healthy"}

    return app


app = create_app()
