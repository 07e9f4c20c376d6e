from fastapi import APIRouter, Depends, status

from course_pricing.api.dependencies import get_order_service
from course_pricing.models.order import Order, OrderCreate
from course_pricing.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["订单"])


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    service: OrderService = Depends(get_order_service)
):
    """计价并创建订单"""
    return await service.create_order(order_data)


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service)
):
    """获取订单详情"""
    return await service.get_order(order_id)
