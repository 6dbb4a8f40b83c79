"""
公告后端应用主入口
FastAPI 应用配置和启动
"""

import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy import text

from app.api import api_router
from app.core.config import Settings, settings as default_settings
from app.core.errors import ok, register_exception_handlers
from app.core.middleware import BodySizeLimitMiddleware, RequestIdMiddleware, SecurityHeadersMiddleware
from app.db.database import Database
from app.services.upload import UploadGuard


def setup_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理
    - 启动时：创建数据库连接池，按需建表，准备上传目录
    - 关闭时：释放连接池
    """
    settings: Settings = app.state.settings
    logger.info("应用启动中...")

    database = Database(settings)
    app.state.db = database

    if settings.AUTO_CREATE_TABLES:
        logger.info("创建数据库表（仅开发环境/首次部署可选，生产请使用 Alembic 迁移）...")
        await database.create_all()

    app.state.upload_guard.ensure_upload_dir()

    logger.info("应用启动完成")
    yield
    logger.info("应用关闭中...")

    await database.dispose()
    logger.info("应用已关闭")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="公告管理与图片上传 API 服务",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upload_guard = UploadGuard(
        upload_dir=settings.UPLOAD_FOLDER,
        max_bytes=settings.MAX_UPLOAD_SIZE,
        allowed_exts=settings.upload_allowed_exts,
    )

    register_exception_handlers(app)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        BodySizeLimitMiddleware,
        max_json_bytes=settings.MAX_JSON_BODY_SIZE,
        max_upload_bytes=settings.MAX_UPLOAD_SIZE,
    )
    app.add_middleware(RequestIdMiddleware)

    # 配置 CORS，须最后添加（最外层）
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册 API 路由
    app.include_router(api_router, prefix="/api")

    # 静态访问： http://host:3000/uploads/xxx.png
    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_FOLDER, check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health_check(request: Request) -> Dict[str, Any]:
        db_status = "healthy"
        try:
            async with request.app.state.db.session_factory() as db:
                r = await db.execute(text("SELECT 1"))
                db_status = "healthy" if r.scalar() == 1 else "unhealthy"
        except Exception as e:
            logger.warning(f"数据库健康检查失败: {e}")
            db_status = "unhealthy"

        return ok({
            "status": db_status,
            "database": db_status,
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "timestamp": datetime.now().isoformat(),
        })

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=default_settings.BACKEND_HOST,
        port=default_settings.BACKEND_PORT,
        reload=default_settings.BACKEND_RELOAD,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
