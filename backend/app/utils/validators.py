"""
公告请求参数校验
所有函数均为纯函数：校验通过返回 None，否则返回可直接展示给客户端的错误信息
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

TITLE_MAX_LENGTH = 255
CONTENT_MAX_LENGTH = 50000
PAGE_SIZE_DEFAULT = 10
PAGE_SIZE_MAX = 100
BATCH_DELETE_MAX = 100
NOTICE_STATUSES = ("draft", "published")


@dataclass(frozen=True)
class Pagination:
    page: int
    size: int
    status: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


def coerce_positive_int(value: Any) -> Optional[int]:
    """
    把请求中的 id 转成正整数
    空值、0、负数、小数和非数字都返回 None
    """
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        return None
    return value


def validate_title(title: Any, max_length: int = TITLE_MAX_LENGTH) -> Optional[str]:
    if not title:
        return "Title is required"
    if len(title) > max_length:
        return f"Title is too long (max {max_length} characters)"
    return None


def validate_content(content: Any, max_length: int = CONTENT_MAX_LENGTH) -> Optional[str]:
    if not content:
        return "Content is required"
    if len(content) > max_length:
        return f"Content is too long (max {max_length} characters)"
    return None


def validate_id(value: Any) -> Optional[str]:
    # 0 也视为非法，自增 id 从 1 开始
    if coerce_positive_int(value) is None:
        return "Invalid ID"
    return None


def validate_pagination(
    page: Any = None,
    size: Any = None,
    status: Any = None,
    default_size: int = PAGE_SIZE_DEFAULT,
    max_size: int = PAGE_SIZE_MAX,
) -> Tuple[Optional[str], Optional[Pagination]]:
    """
    校验列表查询参数
    page/size 为空时使用默认值；status 可选，只能是 draft 或 published
    """
    page_num = 1 if page in (None, "") else coerce_positive_int(page)
    size_num = default_size if size in (None, "") else coerce_positive_int(size)
    if page_num is None or size_num is None or size_num > max_size:
        return "page/size invalid", None

    status_value = str(status or "").strip()
    if status_value and status_value not in NOTICE_STATUSES:
        return "invalid status", None

    return None, Pagination(page=page_num, size=size_num, status=status_value or None)


def validate_batch_ids(ids: Any, max_count: int = BATCH_DELETE_MAX) -> Tuple[Optional[str], List[int]]:
    """校验批量删除的 id 列表，非法条目直接丢弃"""
    if not isinstance(ids, list) or len(ids) == 0:
        return "ids required", []

    safe_ids = [n for n in (coerce_positive_int(v) for v in ids) if n is not None]
    if not safe_ids:
        return "ids invalid", []
    if len(safe_ids) > max_count:
        return f"Too many IDs in batch operation (max {max_count})", []
    return None, safe_ids
