"""
会员相关数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from course_pricing.core.database import Base


class MembershipTierDB(Base):
    """会员等级表"""

    __tablename__ = "membership_tiers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="等级ID")
    organizer_id = Column(String(36), ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False, index=True, comment="组织者ID")
    name = Column(String(100), nullable=False, comment="等级名称")
    slug = Column(String(100), nullable=False, comment="等级标识")
    price_cents = Column(Integer, nullable=False, default=0, comment="会费")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    __table_args__ = (
        UniqueConstraint("organizer_id", "slug", name="uq_membership_tiers_organizer_slug"),
        {'comment': '会员等级表'}
    )


class MembershipDB(Base):
    """会员资格表"""

    __tablename__ = "memberships"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="会员资格ID")
    organizer_id = Column(String(36), ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False, index=True, comment="组织者ID")
    person_id = Column(String(36), nullable=False, index=True, comment="会员个人ID")
    tier_id = Column(String(36), ForeignKey("membership_tiers.id", ondelete="SET NULL"), comment="会员等级ID")

    member_number = Column(String(50), nullable=False, comment="会员编号")
    source = Column(String(20), nullable=False, default="PURCHASE", comment="来源: IMPORT, PURCHASE, MANUAL")
    status = Column(String(20), nullable=False, default="ACTIVE", index=True, comment="状态")

    # 有效期
    valid_from = Column(DateTime(timezone=True), nullable=False, comment="有效开始时间")
    valid_to = Column(DateTime(timezone=True), nullable=False, index=True, comment="有效结束时间")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    tier = relationship("MembershipTierDB")

    __table_args__ = (
        UniqueConstraint("organizer_id", "member_number", name="uq_memberships_organizer_number"),
        {'comment': '会员资格表'}
    )
