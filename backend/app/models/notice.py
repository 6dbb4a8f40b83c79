"""
公告模型定义
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text, func

from app.db.database import Base


class Notice(Base):
    """公告表模型 - notice"""
    __tablename__ = "notice"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_notice_status"),
    )

    # 主键
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # 公告内容
    title = Column(String(255), nullable=False, comment="公告标题（已清洗）")
    content = Column(Text, nullable=False, comment="公告正文 HTML（已清洗）")
    content_delta = Column(Text, nullable=True, comment="编辑器 delta，原样保存")

    # 状态字段：只允许 draft -> published
    status = Column(String(20), nullable=False, default="draft", server_default="draft", index=True, comment="draft/published")
    publish_time = Column(DateTime, nullable=True, comment="发布时间")

    # 时间戳
    created_at = Column(DateTime, default=datetime.now, server_default=func.now(), nullable=False, index=True, comment="创建时间")
    updated_at = Column(DateTime, default=datetime.now, server_default=func.now(), onupdate=datetime.now, nullable=False, comment="更新时间")

    def __repr__(self):
        return f"<Notice(id={self.id}, title='{self.title}', status='{self.status}')>"
