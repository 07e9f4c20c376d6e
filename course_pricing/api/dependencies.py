"""
API 依赖注入
每个请求使用独立的数据库会话，服务按请求组装
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from course_pricing.core.database import get_db_session
from course_pricing.repositories import (
    CounterRepository,
    CourseRepository,
    DiscountRepository,
    MembershipRepository,
    OrderRepository,
)
from course_pricing.services import (
    CounterService,
    DiscountRuleService,
    MembershipService,
    OrderService,
    PriceCalculatorService,
)


def get_price_calculator(db: AsyncSession = Depends(get_db_session)) -> PriceCalculatorService:
    return PriceCalculatorService(
        course_repo=CourseRepository(db),
        discount_repo=DiscountRepository(db),
        membership_repo=MembershipRepository(db)
    )


def get_discount_rule_service(db: AsyncSession = Depends(get_db_session)) -> DiscountRuleService:
    return DiscountRuleService(DiscountRepository(db))


def get_order_service(db: AsyncSession = Depends(get_db_session)) -> OrderService:
    return OrderService(
        order_repo=OrderRepository(db),
        price_calculator=get_price_calculator(db),
        counter_service=CounterService(CounterRepository(db))
    )


def get_membership_service(db: AsyncSession = Depends(get_db_session)) -> MembershipService:
    return MembershipService(
        membership_repo=MembershipRepository(db),
        course_repo=CourseRepository(db),
        counter_service=CounterService(CounterRepository(db))
    )
