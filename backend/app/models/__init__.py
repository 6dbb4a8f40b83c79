"""
数据库模型定义
"""

from app.db.database import Base

from .notice import Notice

__all__ = [
    "Base",
    "Notice",
]
