"""
折扣规则数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from course_pricing.core.database import Base


class DiscountRuleDB(Base):
    """折扣规则表"""

    __tablename__ = "discount_rules"

    # 主键和关联信息
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="规则ID")
    period_id = Column(
        String(36),
        ForeignKey("course_periods.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="所属课程周期ID"
    )

    # 规则信息
    code = Column(String(20), nullable=False, comment="规则代码")
    name = Column(String(200), nullable=False, comment="规则名称")
    priority = Column(Integer, nullable=False, default=0, comment="优先级，数值小的先执行")
    enabled = Column(Boolean, nullable=False, default=True, index=True, comment="是否启用")
    rule_type = Column(String(50), nullable=False, comment="规则类型")
    config = Column(JSON, nullable=False, default=dict, comment="规则配置")

    # 时间戳
    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    period = relationship("CoursePeriodDB", back_populates="discount_rules")

    __table_args__ = (
        UniqueConstraint("period_id", "code", name="uq_discount_rules_period_code"),
        {'comment': '折扣规则表'}
    )
