"""
编号计数器数据库模型
"""

from sqlalchemy import Column, String, BigInteger, DateTime
from sqlalchemy.sql import func
from course_pricing.core.database import Base


class SequenceCounterDB(Base):
    """按 (范围, 类型) 单调递增的计数器，只增不减"""

    __tablename__ = "sequence_counters"

    scope_id = Column(String(36), primary_key=True, comment="计数范围ID（通常为组织者ID）")
    kind = Column(String(30), primary_key=True, comment="编号类型")
    value = Column(BigInteger, nullable=False, default=0, comment="当前值")

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        {'comment': '编号计数器表'}
    )
