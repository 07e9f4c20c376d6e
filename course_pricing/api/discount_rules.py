from typing import List

from fastapi import APIRouter, Depends, Response, status

from course_pricing.api.dependencies import get_discount_rule_service
from course_pricing.models.discount import (
    DiscountRule,
    DiscountRuleCreate,
    DiscountRuleUpdate,
    RuleEnabledUpdate,
)
from course_pricing.services.discount_rule_service import DiscountRuleService

router = APIRouter(tags=["折扣规则"])


@router.get("/periods/{period_id}/discount-rules", response_model=List[DiscountRule])
async def list_discount_rules(
    period_id: str,
    service: DiscountRuleService = Depends(get_discount_rule_service)
):
    """获取课程周期的折扣规则"""
    return await service.list_rules(period_id)


@router.post(
    "/periods/{period_id}/discount-rules",
    response_model=DiscountRule,
    status_code=status.HTTP_201_CREATED
)
async def create_discount_rule(
    period_id: str,
    rule_data: DiscountRuleCreate,
    service: DiscountRuleService = Depends(get_discount_rule_service)
):
    """创建折扣规则，配置按规则类型校验"""
    return await service.create_rule(period_id, rule_data)


@router.get("/discount-rules/{rule_id}", response_model=DiscountRule)
async def get_discount_rule(
    rule_id: str,
    service: DiscountRuleService = Depends(get_discount_rule_service)
):
    return await service.get_rule(rule_id)


@router.put("/discount-rules/{rule_id}", response_model=DiscountRule)
async def update_discount_rule(
    rule_id: str,
    rule_data: DiscountRuleUpdate,
    service: DiscountRuleService = Depends(get_discount_rule_service)
):
    """更新折扣规则"""
    return await service.update_rule(rule_id, rule_data)


@router.patch("/discount-rules/{rule_id}/enabled", response_model=DiscountRule)
async def toggle_discount_rule(
    rule_id: str,
    payload: RuleEnabledUpdate,
    service: DiscountRuleService = Depends(get_discount_rule_service)
):
    """启用或停用折扣规则"""
    return await service.set_enabled(rule_id, payload.enabled)


@router.delete("/discount-rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_discount_rule(
    rule_id: str,
    service: DiscountRuleService = Depends(get_discount_rule_service)
):
    await service.delete_rule(rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
