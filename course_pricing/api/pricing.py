from fastapi import APIRouter, Depends

from course_pricing.api.dependencies import get_price_calculator
from course_pricing.models.pricing import PricingQuoteRequest, PricingResult
from course_pricing.services.price_calculator_service import PriceCalculatorService

router = APIRouter(prefix="/pricing", tags=["计价"])


@router.post("/quote", response_model=PricingResult)
async def quote_cart(
    request: PricingQuoteRequest,
    calculator: PriceCalculatorService = Depends(get_price_calculator)
):
    """计算购物车价格，不创建订单"""
    return await calculator.calculate_cart_pricing(
        request.items,
        person_id=request.person_id,
        promo_code=request.promo_code
    )
