"""
公告管理 API 端点
写接口先清洗再校验，读接口先校验分页参数；校验失败不会触达数据库
存储层异常不在这里捕获，由全局异常处理统一记录日志并返回 server error
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_notice_repository, notice_id_param
from app.core.errors import ApiError, ok
from app.core.config import settings
from app.schemas.notice import BatchDeleteRequest, NoticeDetail, NoticeList, NoticeWrite
from app.services.notice import NoticeRepository
from app.utils.validators import validate_pagination, validate_title

router = APIRouter()


def _require_body(payload: Optional[NoticeWrite]) -> NoticeWrite:
    # 没有请求体时按缺少标题处理
    if payload is None:
        raise ApiError(validate_title(None))
    return payload


@router.get("")
async def list_notices(
    page: Optional[str] = Query(None, description="页码"),
    size: Optional[str] = Query(None, description="每页数量"),
    status: Optional[str] = Query(None, description="draft/published"),
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    """获取公告列表，按创建时间倒序"""
    error, pagination = validate_pagination(
        page,
        size,
        status,
        default_size=settings.NOTICE_PAGE_SIZE_DEFAULT,
        max_size=settings.NOTICE_PAGE_SIZE_MAX,
    )
    if error:
        raise ApiError(error)

    result = await repo.list_notices(pagination)
    return ok(NoticeList.model_validate(result))


@router.get("/{id}")
async def get_notice(
    notice_id: int = Depends(notice_id_param),
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    """公告详情，包含 content_delta"""
    row = await repo.get_notice(notice_id)
    if not row:
        raise ApiError("not found")
    return ok(NoticeDetail.model_validate(row))


@router.post("")
async def create_notice(
    payload: Optional[NoticeWrite] = None,
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    """新增公告，状态固定为 draft"""
    payload = _require_body(payload)
    notice_id = await repo.create_notice(payload.title, payload.content, payload.content_delta)
    return ok({"id": notice_id})


@router.put("/{id}")
async def update_notice(
    notice_id: int = Depends(notice_id_param),
    payload: Optional[NoticeWrite] = None,
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    """修改 title/content/content_delta，不改 status；id 不存在时静默成功"""
    payload = _require_body(payload)
    await repo.update_notice(notice_id, payload.title, payload.content, payload.content_delta)
    return ok(True)


@router.post("/batch_delete")
async def batch_delete_notices(
    payload: Optional[BatchDeleteRequest] = None,
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    """批量删除，最多 100 个 id"""
    if payload is None:
        raise ApiError("ids required")
    await repo.delete_notices(payload.ids)
    return ok(True)


@router.post("/{id}/publish")
async def publish_notice(
    notice_id: int = Depends(notice_id_param),
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    """发布：只改状态与发布时间"""
    await repo.publish_notice(notice_id)
    return ok(True)


@router.delete("/{id}")
async def delete_notice(
    notice_id: int = Depends(notice_id_param),
    repo: NoticeRepository = Depends(get_notice_repository),
) -> Any:
    await repo.delete_notice(notice_id)
    return ok(True)
