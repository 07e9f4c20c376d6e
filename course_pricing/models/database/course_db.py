"""
组织者、课程周期、课程数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from course_pricing.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class OrganizerDB(Base):
    """组织者（舞蹈学校/协会）数据库表"""

    __tablename__ = "organizers"

    id = Column(String(36), primary_key=True, default=_uuid, comment="组织者ID")
    name = Column(String(200), nullable=False, comment="组织者名称")
    slug = Column(String(100), nullable=False, unique=True, comment="URL标识")
    order_prefix = Column(String(5), nullable=False, default="ORD", comment="订单编号前缀")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    periods = relationship("CoursePeriodDB", back_populates="organizer", cascade="all, delete-orphan")

    __table_args__ = (
        {'comment': '组织者表'}
    )


class CoursePeriodDB(Base):
    """课程周期数据库表"""

    __tablename__ = "course_periods"

    id = Column(String(36), primary_key=True, default=_uuid, comment="周期ID")
    organizer_id = Column(String(36), ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False, index=True, comment="组织者ID")
    code = Column(String(50), nullable=False, comment="周期代码")
    name = Column(String(200), nullable=False, comment="周期名称")
    starts_at = Column(DateTime(timezone=True), comment="开始时间")
    ends_at = Column(DateTime(timezone=True), comment="结束时间")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    organizer = relationship("OrganizerDB", back_populates="periods")
    tracks = relationship("CourseTrackDB", back_populates="period", cascade="all, delete-orphan")
    discount_rules = relationship(
        "DiscountRuleDB",
        back_populates="period",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        {'comment': '课程周期表'}
    )


class CourseTrackDB(Base):
    """课程数据库表，价格以分为单位"""

    __tablename__ = "course_tracks"

    id = Column(String(36), primary_key=True, default=_uuid, comment="课程ID")
    period_id = Column(String(36), ForeignKey("course_periods.id", ondelete="CASCADE"), nullable=False, index=True, comment="周期ID")
    title = Column(String(200), nullable=False, comment="课程名称")
    description = Column(Text, comment="课程描述")

    # 价格信息
    price_single_cents = Column(Integer, nullable=False, comment="单人价格")
    price_pair_cents = Column(Integer, comment="双人价格")
    member_price_single_cents = Column(Integer, comment="会员单人价格")
    member_price_pair_cents = Column(Integer, comment="会员双人价格")

    capacity = Column(Integer, comment="名额")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    period = relationship("CoursePeriodDB", back_populates="tracks")

    __table_args__ = (
        {'comment': '课程信息表'}
    )
