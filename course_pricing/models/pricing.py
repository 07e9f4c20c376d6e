"""
计价相关数据模型
所有金额以分（整数）为单位
"""

from typing import List, Optional
from pydantic import BaseModel, Field, model_validator
from enum import Enum


class RegistrationRole(str, Enum):
    """报名角色枚举"""
    LEADER = "LEADER"
    FOLLOWER = "FOLLOWER"
    ANY = "ANY"


class RegistrationLineItem(BaseModel):
    """待计价的报名项，不持久化"""

    track_id: str = Field(..., description="课程ID")
    period_id: str = Field(..., description="课程所属周期ID")
    base_single_cents: int = Field(..., ge=0, description="单人标准价")
    base_pair_cents: Optional[int] = Field(None, ge=0, description="双人标准价")
    member_single_cents: Optional[int] = Field(None, ge=0, description="会员单人价")
    member_pair_cents: Optional[int] = Field(None, ge=0, description="会员双人价")
    role: RegistrationRole = Field(default=RegistrationRole.ANY, description="报名角色")
    has_partner: bool = Field(default=False, description="是否与舞伴一起报名（适用双人价）")


class MembershipContext(BaseModel):
    """购买人的会员状态"""

    is_member: bool = Field(default=False, description="是否持有有效会员资格")
    tier_id: Optional[str] = Field(None, description="会员等级ID")
    member_number: Optional[str] = Field(None, description="会员编号")

    @classmethod
    def anonymous(cls) -> "MembershipContext":
        return cls(is_member=False)


class LineItemPrice(BaseModel):
    """单个报名项的计价结果"""

    track_id: str
    base_cents: int = Field(..., ge=0, description="基础价格")
    discount_cents: int = Field(default=0, ge=0, description="折扣金额")
    final_cents: int = Field(..., ge=0, description="最终价格")
    applied_rule_codes: List[str] = Field(default_factory=list, description="按应用顺序记录的规则代码")


class AppliedRule(BaseModel):
    """订单层面的规则应用记录"""

    rule_id: str
    code: str
    name: str
    amount_cents: int = Field(..., ge=0)
    explanation: str


class PricingResult(BaseModel):
    """计价结果"""

    subtotal_cents: int = Field(..., ge=0, description="原始总金额")
    discount_total_cents: int = Field(..., ge=0, description="折扣总金额")
    total_cents: int = Field(..., ge=0, description="最终金额")
    line_items: List[LineItemPrice] = Field(default_factory=list)
    applied_rules: List[AppliedRule] = Field(default_factory=list)
    is_member: bool = False

    @model_validator(mode="after")
    def validate_totals(self) -> "PricingResult":
        """验证金额汇总"""
        if self.total_cents != self.subtotal_cents - self.discount_total_cents:
            raise ValueError("最终金额计算错误")
        if self.total_cents != sum(item.final_cents for item in self.line_items):
            raise ValueError("最终金额与订单项合计不一致")
        return self


class CartItem(BaseModel):
    """购物车中的报名项"""

    track_id: str = Field(..., description="课程ID")
    role: RegistrationRole = Field(default=RegistrationRole.ANY, description="报名角色")
    has_partner: bool = Field(default=False, description="是否双人报名")
    partner_email: Optional[str] = Field(None, description="舞伴邮箱")


class PricingQuoteRequest(BaseModel):
    """计价请求"""

    person_id: Optional[str] = Field(None, description="购买人ID，匿名时为空")
    items: List[CartItem] = Field(..., min_length=1, description="报名项")
    promo_code: Optional[str] = Field(None, max_length=50, description="优惠码")
