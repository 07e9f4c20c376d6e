"""
订单相关数据模型
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator
from enum import Enum

from course_pricing.models.pricing import CartItem, RegistrationRole


class OrderStatus(str, Enum):
    """订单状态枚举"""
    PENDING = "PENDING"  # 待支付
    PAID = "PAID"  # 已支付
    CANCELLED = "CANCELLED"  # 已取消
    REFUNDED = "REFUNDED"  # 已退款


class OrderItem(BaseModel):
    """订单项目模型"""

    item_id: Optional[str] = Field(None, description="项目ID")
    track_id: str = Field(..., description="课程ID")
    period_id: str = Field(..., description="周期ID")
    role: RegistrationRole = Field(default=RegistrationRole.ANY, description="报名角色")
    has_partner: bool = Field(default=False, description="是否双人报名")
    base_cents: int = Field(..., ge=0, description="基础价格")
    discount_cents: int = Field(default=0, ge=0, description="折扣金额")
    final_cents: int = Field(..., ge=0, description="折后价格")
    applied_rule_codes: List[str] = Field(default_factory=list, description="应用的规则代码")


class Order(BaseModel):
    """订单模型"""

    order_id: str = Field(..., description="订单ID")
    order_number: str = Field(..., description="订单编号")
    organizer_id: str = Field(..., description="组织者ID")
    person_id: Optional[str] = Field(None, description="购买人ID")
    items: List[OrderItem] = Field(..., min_length=1, description="订单项目列表")
    subtotal_cents: int = Field(..., ge=0, description="原始总金额")
    discount_cents: int = Field(default=0, ge=0, description="折扣金额")
    total_cents: int = Field(..., ge=0, description="最终金额")
    promo_code: Optional[str] = Field(None, description="使用的优惠码")
    is_member_price: bool = Field(default=False, description="是否按会员价计算")
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="订单状态")
    notes: Optional[str] = Field(None, max_length=1000, description="订单备注")
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_total(self) -> "Order":
        """验证最终金额计算"""
        if self.total_cents != self.subtotal_cents - self.discount_cents:
            raise ValueError("最终金额计算错误")
        return self


class OrderCreate(BaseModel):
    """创建订单请求模型"""

    person_id: Optional[str] = Field(None, description="购买人ID")
    items: List[CartItem] = Field(..., min_length=1, description="报名项")
    promo_code: Optional[str] = Field(None, max_length=50, description="优惠码")
    notes: Optional[str] = Field(None, max_length=1000, description="订单备注")
