"""
FastAPI 依赖注入工具 - 仓储、上传组件和路径参数校验
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.errors import ApiError
from app.db.database import get_db
from app.services.notice import NoticeRepository
from app.services.upload import UploadGuard
from app.utils.validators import coerce_positive_int, validate_id


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_notice_repository(db: AsyncSession = Depends(get_db)) -> NoticeRepository:
    return NoticeRepository(db)


def get_upload_guard(request: Request) -> UploadGuard:
    return request.app.state.upload_guard


def notice_id_param(id: str) -> int:
    """路径中的公告 id，非正整数直接拒绝，不会触达数据库"""
    error = validate_id(id)
    if error:
        raise ApiError(error)
    return coerce_positive_int(id)
