"""
会员相关数据模型
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator
from enum import Enum

from course_pricing.models.counter import CounterKind


class MembershipSource(str, Enum):
    """会员来源枚举"""
    IMPORT = "IMPORT"
    PURCHASE = "PURCHASE"
    MANUAL = "MANUAL"

    @property
    def counter_kind(self) -> CounterKind:
        return {
            MembershipSource.IMPORT: CounterKind.MEMBER_IMPORT,
            MembershipSource.PURCHASE: CounterKind.MEMBER_PURCHASE,
            MembershipSource.MANUAL: CounterKind.MEMBER_MANUAL,
        }[self]


class MembershipStatus(str, Enum):
    """会员状态枚举"""
    ACTIVE = "ACTIVE"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class Membership(BaseModel):
    """会员资格模型"""

    membership_id: str
    organizer_id: str
    person_id: str
    tier_id: Optional[str] = None
    member_number: str
    source: MembershipSource = MembershipSource.PURCHASE
    status: MembershipStatus = MembershipStatus.ACTIVE
    valid_from: datetime
    valid_to: datetime


class MembershipCreate(BaseModel):
    """创建会员资格请求"""

    organizer_id: str = Field(..., description="组织者ID")
    person_id: str = Field(..., description="会员个人ID")
    tier_id: Optional[str] = Field(None, description="会员等级ID")
    source: MembershipSource = Field(default=MembershipSource.PURCHASE, description="来源")
    valid_from: datetime = Field(..., description="有效开始时间")
    valid_to: datetime = Field(..., description="有效结束时间")

    @model_validator(mode="after")
    def validate_validity_period(self) -> "MembershipCreate":
        """验证有效期"""
        if self.valid_to <= self.valid_from:
            raise ValueError("结束时间必须晚于开始时间")
        return self
