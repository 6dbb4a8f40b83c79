"""
项目所有Pydantic Schema定义

导入结构示例：
    from app.schemas import NoticeWrite, NoticeDetail
"""

from .notice import (
    BatchDeleteRequest,
    NoticeDetail,
    NoticeList,
    NoticeListItem,
    NoticeWrite,
    UploadResult,
)

__all__ = [
    "BatchDeleteRequest",
    "NoticeDetail",
    "NoticeList",
    "NoticeListItem",
    "NoticeWrite",
    "UploadResult",
]
