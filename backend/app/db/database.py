"""
数据库配置和连接管理
SQLAlchemy 异步引擎和会话管理

引擎不再是模块级单例：由应用生命周期创建 Database 实例并挂到 app.state 上，
测试时可以换成 SQLite 或直接替换仓储依赖
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import Settings


class Base(DeclarativeBase):
    """SQLAlchemy 基类"""
    pass


def engine_options(settings: Settings) -> Dict[str, Any]:
    """根据驱动生成引擎参数，SQLite 不支持连接池大小设置"""
    options: Dict[str, Any] = {"echo": settings.SQLALCHEMY_ECHO}
    url = make_url(str(settings.DATABASE_URL))
    if url.get_backend_name() == "sqlite":
        return options
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    return options


class Database:
    """持有引擎和会话工厂，随应用启动创建、关闭时释放"""

    def __init__(self, settings: Settings) -> None:
        # 确保 DATABASE_URL 不为 None
        if not settings.DATABASE_URL:
            raise ValueError("DATABASE_URL 未配置。请检查 .env 文件中的数据库配置。")

        self.engine: AsyncEngine = create_async_engine(
            str(settings.DATABASE_URL),
            **engine_options(settings),
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """按模型建表，仅用于开发环境；生产环境使用 Alembic 迁移"""
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话的依赖函数
    在 FastAPI 依赖注入中使用
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
