"""
公告相关的 Pydantic 模型
用于请求/响应的数据验证
"""

import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.utils.sanitizer import sanitize_input
from app.utils.validators import validate_batch_ids, validate_content, validate_title


def _normalize_delta(v: Any) -> Optional[str]:
    """delta 原样保存，不做清洗；JSON 对象转成字符串"""
    if not v:
        return None
    if isinstance(v, (dict, list)):
        return json.dumps(v, ensure_ascii=False)
    return str(v)


class NoticeWrite(BaseModel):
    """公告新增/修改模型，title/content 先清洗再校验"""
    title: Optional[str] = Field(None, validate_default=True, description="公告标题")
    content: Optional[str] = Field(None, validate_default=True, description="公告正文 (HTML)")
    content_delta: Any = Field(None, description="编辑器 delta (可选)")

    @field_validator("title")
    @classmethod
    def clean_title(cls, v):
        v = sanitize_input(v)
        error = validate_title(v, settings.NOTICE_TITLE_MAX_LENGTH)
        if error:
            raise ValueError(error)
        return v

    @field_validator("content")
    @classmethod
    def clean_content(cls, v):
        v = sanitize_input(v)
        error = validate_content(v, settings.NOTICE_CONTENT_MAX_LENGTH)
        if error:
            raise ValueError(error)
        return v

    @field_validator("content_delta")
    @classmethod
    def normalize_delta(cls, v):
        return _normalize_delta(v)


class BatchDeleteRequest(BaseModel):
    """批量删除请求体 {ids: [...]}"""
    ids: Any = Field(None, validate_default=True)

    @field_validator("ids")
    @classmethod
    def clean_ids(cls, v) -> List[int]:
        error, safe_ids = validate_batch_ids(v, settings.NOTICE_BATCH_DELETE_MAX)
        if error:
            raise ValueError(error)
        return safe_ids


class NoticeListItem(BaseModel):
    """列表项，不含 content_delta"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    status: str
    publish_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class NoticeDetail(NoticeListItem):
    content_delta: Optional[str] = None


class NoticeList(BaseModel):
    list: List[NoticeListItem]
    total: int
    page: int
    size: int


class UploadResult(BaseModel):
    url: str
