"""
图片上传 API 端点
前端使用 uni.uploadFile(name='file') 上传单个文件
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.core.config import Settings
from app.core.deps import get_settings, get_upload_guard
from app.core.errors import ApiError, ok
from app.schemas.notice import UploadResult
from app.services.upload import (
    NO_FILE_MSG,
    TOO_MANY_FILES_MSG,
    UNEXPECTED_FIELD_MSG,
    UploadGuard,
    UploadRejected,
)

router = APIRouter()

FILE_FIELD = "file"


def pick_single_file(form) -> UploadFile:
    """只接受字段名为 file 的单个文件"""
    files = [(key, value) for key, value in form.multi_items() if isinstance(value, UploadFile)]
    if any(key != FILE_FIELD for key, _ in files):
        raise ApiError(UNEXPECTED_FIELD_MSG)
    if len(files) > 1:
        raise ApiError(TOO_MANY_FILES_MSG)
    if not files:
        raise ApiError(NO_FILE_MSG)
    return files[0][1]


@router.post("/upload")
async def upload_image(
    request: Request,
    guard: UploadGuard = Depends(get_upload_guard),
    settings: Settings = Depends(get_settings),
) -> Any:
    """上传图片，返回可公开访问的 url"""
    async with request.form() as form:
        upload = pick_single_file(form)
        try:
            filename = await run_in_threadpool(guard.save, upload)
        except UploadRejected as e:
            raise ApiError(str(e))

    host = request.headers.get("host") or f"{settings.BACKEND_HOST}:{settings.BACKEND_PORT}"
    url = guard.public_url(host, filename, settings.UPLOAD_URL_PREFIX)
    return ok(UploadResult(url=url))
