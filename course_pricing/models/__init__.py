"""
数据模型包初始化文件
"""

from .discount import (
    RuleType,
    RuleConfig,
    MembershipTierPercentConfig,
    MultiCourseTier,
    MultiCourseTieredConfig,
    PromoCodeFixedConfig,
    DiscountRule,
    DiscountRuleCreate,
    DiscountRuleUpdate,
    UnknownRuleTypeError,
    parse_rule_config
)
from .pricing import (
    RegistrationRole,
    RegistrationLineItem,
    MembershipContext,
    LineItemPrice,
    AppliedRule,
    PricingResult,
    CartItem,
    PricingQuoteRequest
)
from .counter import CounterKind
from .order import Order, OrderItem, OrderCreate, OrderStatus
from .membership import Membership, MembershipCreate, MembershipSource, MembershipStatus

__all__ = [
    "RuleType",
    "RuleConfig",
    "MembershipTierPercentConfig",
    "MultiCourseTier",
    "MultiCourseTieredConfig",
    "PromoCodeFixedConfig",
    "DiscountRule",
    "DiscountRuleCreate",
    "DiscountRuleUpdate",
    "UnknownRuleTypeError",
    "parse_rule_config",
    "RegistrationRole",
    "RegistrationLineItem",
    "MembershipContext",
    "LineItemPrice",
    "AppliedRule",
    "PricingResult",
    "CartItem",
    "PricingQuoteRequest",
    "CounterKind",
    "Order",
    "OrderItem",
    "OrderCreate",
    "OrderStatus",
    "Membership",
    "MembershipCreate",
    "MembershipSource",
    "MembershipStatus"
]
