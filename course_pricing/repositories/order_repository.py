"""
订单数据库操作层
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from course_pricing.models.order import Order, OrderItem
from course_pricing.models.database.order_db import OrderDB, OrderItemDB


class OrderRepository:
    """订单数据库操作层"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, order_id: str) -> Optional[OrderDB]:
        """根据订单ID获取订单（包含订单项）"""
        result = await self.db.execute(
            select(OrderDB)
            .options(selectinload(OrderDB.order_items))
            .where(OrderDB.id == order_id)
        )
        return result.scalar_one_or_none()

    async def create_order_with_items(self, order: Order) -> OrderDB:
        """创建订单及订单项"""
        db_order = OrderDB(
            id=order.order_id,
            order_number=order.order_number,
            organizer_id=order.organizer_id,
            person_id=order.person_id,
            subtotal_cents=order.subtotal_cents,
            discount_cents=order.discount_cents,
            total_cents=order.total_cents,
            promo_code=order.promo_code,
            is_member_price=order.is_member_price,
            status=order.status.value,
            notes=order.notes
        )
        db_order.order_items = [
            OrderItemDB(
                track_id=item.track_id,
                period_id=item.period_id,
                role=item.role.value,
                has_partner=item.has_partner,
                base_cents=item.base_cents,
                discount_cents=item.discount_cents,
                final_cents=item.final_cents,
                applied_rule_codes=list(item.applied_rule_codes)
            )
            for item in order.items
        ]

        self.db.add(db_order)
        await self.db.flush()
        await self.db.refresh(db_order, attribute_names=["created_at", "updated_at"])
        return db_order

    def to_model(self, db_order: OrderDB) -> Order:
        """转换为Pydantic模型"""
        items = [
            OrderItem(
                item_id=db_item.id,
                track_id=db_item.track_id,
                period_id=db_item.period_id,
                role=db_item.role,
                has_partner=db_item.has_partner,
                base_cents=db_item.base_cents,
                discount_cents=db_item.discount_cents,
                final_cents=db_item.final_cents,
                applied_rule_codes=db_item.applied_rule_codes or []
            )
            for db_item in db_order.order_items
        ]

        return Order(
            order_id=db_order.id,
            order_number=db_order.order_number,
            organizer_id=db_order.organizer_id,
            person_id=db_order.person_id,
            items=items,
            subtotal_cents=db_order.subtotal_cents,
            discount_cents=db_order.discount_cents,
            total_cents=db_order.total_cents,
            promo_code=db_order.promo_code,
            is_member_price=db_order.is_member_price,
            status=db_order.status,
            notes=db_order.notes,
            created_at=db_order.created_at
        )
