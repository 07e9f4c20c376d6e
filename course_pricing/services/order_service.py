"""
订单业务服务层
计价、分配订单编号并保存订单
"""

import logging
import uuid

from course_pricing.core.config import settings
from course_pricing.core.exceptions import NotFoundError
from course_pricing.models.counter import CounterKind
from course_pricing.models.order import Order, OrderCreate, OrderItem, OrderStatus
from course_pricing.repositories.order_repository import OrderRepository
from course_pricing.services.counter_service import CounterService
from course_pricing.services.price_calculator_service import PriceCalculatorService

logger = logging.getLogger(__name__)


class OrderService:
    """订单业务服务"""

    def __init__(
        self,
        order_repo: OrderRepository,
        price_calculator: PriceCalculatorService,
        counter_service: CounterService
    ):
        self.order_repo = order_repo
        self.price_calculator = price_calculator
        self.counter_service = counter_service

    async def create_order(self, order_data: OrderCreate) -> Order:
        """
        创建订单

        计价结果直接写入订单项作为价格快照；编号在同一事务内分配，
        事务回滚时编号会被跳过，但不会重复。
        """
        organizer, line_items, pricing = await self.price_calculator.price_cart(
            order_data.items,
            person_id=order_data.person_id,
            promo_code=order_data.promo_code
        )

        order_number = await self.counter_service.allocate(
            organizer.id,
            CounterKind.ORDER,
            prefix=organizer.order_prefix or settings.default_order_prefix
        )

        items = [
            OrderItem(
                track_id=line_item.track_id,
                period_id=line_item.period_id,
                role=line_item.role,
                has_partner=line_item.has_partner,
                base_cents=price.base_cents,
                discount_cents=price.discount_cents,
                final_cents=price.final_cents,
                applied_rule_codes=price.applied_rule_codes
            )
            for line_item, price in zip(line_items, pricing.line_items)
        ]

        order = Order(
            order_id=str(uuid.uuid4()),
            order_number=order_number,
            organizer_id=organizer.id,
            person_id=order_data.person_id,
            items=items,
            subtotal_cents=pricing.subtotal_cents,
            discount_cents=pricing.discount_total_cents,
            total_cents=pricing.total_cents,
            promo_code=order_data.promo_code.strip() if order_data.promo_code else None,
            is_member_price=pricing.is_member,
            status=OrderStatus.PENDING,
            notes=order_data.notes
        )

        db_order = await self.order_repo.create_order_with_items(order)
        logger.info(f"创建订单 {order_number}，应付 {order.total_cents} 分")
        return self.order_repo.to_model(db_order)

    async def get_order(self, order_id: str) -> Order:
        """获取订单详情"""
        db_order = await self.order_repo.get_by_id(order_id)
        if not db_order:
            raise NotFoundError(f"订单不存在: {order_id}", details={"order_id": order_id})
        return self.order_repo.to_model(db_order)
