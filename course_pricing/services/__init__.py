"""
服务包初始化文件
"""

from .discount_engine import PricingEngine, pricing_engine
from .counter_service import CounterService
from .price_calculator_service import PriceCalculatorService
from .discount_rule_service import DiscountRuleService
from .order_service import OrderService
from .membership_service import MembershipService

__all__ = [
    "PricingEngine",
    "pricing_engine",
    "CounterService",
    "PriceCalculatorService",
    "DiscountRuleService",
    "OrderService",
    "MembershipService"
]
