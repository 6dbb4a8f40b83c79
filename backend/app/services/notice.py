"""
公告仓储 - 参数化的增删改查
所有语句都通过 SQLAlchemy Core 构造，请求中的值只会作为绑定参数进入 SQL
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notice import Notice
from app.utils.validators import Pagination

LIST_COLUMNS = (
    Notice.id,
    Notice.title,
    Notice.content,
    Notice.status,
    Notice.publish_time,
    Notice.created_at,
    Notice.updated_at,
)
DETAIL_COLUMNS = LIST_COLUMNS[:3] + (Notice.content_delta,) + LIST_COLUMNS[3:]


class NoticeRepository:
    """公告表的读写操作，会话由调用方注入"""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_notices(self, pagination: Pagination) -> Dict[str, Any]:
        """
        分页列表，按创建时间倒序
        total 与列表是两次独立查询，并发写入时可能短暂不一致
        """
        query = select(*LIST_COLUMNS)
        count_query = select(func.count()).select_from(Notice)
        if pagination.status:
            query = query.where(Notice.status == pagination.status)
            count_query = count_query.where(Notice.status == pagination.status)

        query = (
            query.order_by(desc(Notice.created_at), desc(Notice.id))
            .limit(pagination.size)
            .offset(pagination.offset)
        )
        rows = (await self.db.execute(query)).mappings().all()
        total = (await self.db.execute(count_query)).scalar() or 0

        return {
            "list": [dict(row) for row in rows],
            "total": total,
            "page": pagination.page,
            "size": pagination.size,
        }

    async def get_notice(self, notice_id: int) -> Optional[Dict[str, Any]]:
        result = await self.db.execute(select(*DETAIL_COLUMNS).where(Notice.id == notice_id))
        row = result.mappings().first()
        return dict(row) if row else None

    async def create_notice(self, title: str, content: str, content_delta: Optional[str]) -> int:
        """新增公告，状态固定为 draft"""
        notice = Notice(
            title=title,
            content=content,
            content_delta=content_delta,
            status="draft",
        )
        self.db.add(notice)
        await self.db.commit()
        await self.db.refresh(notice)
        return int(notice.id)

    async def update_notice(self, notice_id: int, title: str, content: str, content_delta: Optional[str]) -> int:
        """只改 title/content/content_delta，不改 status；id 不存在时影响行数为 0"""
        result = await self.db.execute(
            update(Notice)
            .where(Notice.id == notice_id)
            .values(title=title, content=content, content_delta=content_delta, updated_at=datetime.now())
        )
        await self.db.commit()
        return result.rowcount

    async def publish_notice(self, notice_id: int) -> int:
        """发布：只改状态与发布时间，重复发布会刷新 publish_time"""
        now = datetime.now()
        result = await self.db.execute(
            update(Notice)
            .where(Notice.id == notice_id)
            .values(status="published", publish_time=now, updated_at=now)
        )
        await self.db.commit()
        return result.rowcount

    async def delete_notice(self, notice_id: int) -> int:
        result = await self.db.execute(delete(Notice).where(Notice.id == notice_id))
        await self.db.commit()
        return result.rowcount

    async def delete_notices(self, notice_ids: Sequence[int]) -> int:
        """批量删除，调用方负责 id 的清洗和数量上限"""
        ids: List[int] = list(notice_ids)
        if not ids:
            raise ValueError("ids invalid")
        result = await self.db.execute(delete(Notice).where(Notice.id.in_(ids)))
        await self.db.commit()
        return result.rowcount
