"""
订单相关数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from course_pricing.core.database import Base


class OrderDB(Base):
    """订单数据库表"""

    __tablename__ = "orders"

    # 主键和用户信息
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="订单ID")
    order_number = Column(String(50), nullable=False, unique=True, comment="订单编号")
    organizer_id = Column(String(36), ForeignKey("organizers.id"), nullable=False, index=True, comment="组织者ID")
    person_id = Column(String(36), index=True, comment="购买人ID")

    # 金额信息（分）
    subtotal_cents = Column(Integer, nullable=False, comment="原始总金额")
    discount_cents = Column(Integer, nullable=False, default=0, comment="折扣金额")
    total_cents = Column(Integer, nullable=False, comment="最终金额")

    # 应用的优惠信息
    promo_code = Column(String(50), comment="使用的优惠码")
    is_member_price = Column(Boolean, nullable=False, default=False, comment="是否按会员价计算")

    # 订单状态
    status = Column(String(20), default="PENDING", index=True, comment="订单状态")
    notes = Column(Text, comment="订单备注")

    # 时间戳
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    # 关系映射
    order_items = relationship("OrderItemDB", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        {'comment': '订单主表'}
    )


class OrderItemDB(Base):
    """订单项目数据库表"""

    __tablename__ = "order_items"

    # 主键和关联信息
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="项目ID")
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True, comment="订单ID")

    # 课程信息
    track_id = Column(String(36), nullable=False, comment="课程ID")
    period_id = Column(String(36), nullable=False, comment="周期ID")
    role = Column(String(10), nullable=False, default="ANY", comment="角色")
    has_partner = Column(Boolean, nullable=False, default=False, comment="是否双人报名")

    # 价格信息（分）
    base_cents = Column(Integer, nullable=False, comment="基础价格")
    discount_cents = Column(Integer, nullable=False, default=0, comment="折扣金额")
    final_cents = Column(Integer, nullable=False, comment="折后价格")
    applied_rule_codes = Column(JSON, nullable=False, default=list, comment="应用的规则代码")

    # 关系映射
    order = relationship("OrderDB", back_populates="order_items")

    __table_args__ = (
        {'comment': '订单项目表'}
    )
