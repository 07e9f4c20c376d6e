"""
价格计算服务
加载课程、折扣规则和会员状态，交给计价引擎计算购物车价格
"""

import logging
from typing import List, Optional, Tuple

from course_pricing.core.exceptions import BusinessException, NotFoundError
from course_pricing.models.discount import DiscountRule
from course_pricing.models.pricing import CartItem, PricingResult, RegistrationLineItem
from course_pricing.models.database.course_db import OrganizerDB
from course_pricing.repositories.course_repository import CourseRepository
from course_pricing.repositories.discount_repository import DiscountRepository
from course_pricing.repositories.membership_repository import MembershipRepository
from course_pricing.services.discount_engine import PricingEngine, pricing_engine

logger = logging.getLogger(__name__)


class PriceCalculatorService:
    """价格计算服务"""

    def __init__(
        self,
        course_repo: CourseRepository,
        discount_repo: DiscountRepository,
        membership_repo: MembershipRepository,
        engine: PricingEngine = pricing_engine
    ):
        self.course_repo = course_repo
        self.discount_repo = discount_repo
        self.membership_repo = membership_repo
        self.engine = engine

    async def calculate_cart_pricing(
        self,
        items: List[CartItem],
        person_id: Optional[str] = None,
        promo_code: Optional[str] = None
    ) -> PricingResult:
        """计算购物车价格"""
        _, _, result = await self.price_cart(items, person_id, promo_code)
        return result

    async def price_cart(
        self,
        items: List[CartItem],
        person_id: Optional[str] = None,
        promo_code: Optional[str] = None
    ) -> Tuple[OrganizerDB, List[RegistrationLineItem], PricingResult]:
        """
        计算购物车价格，同时返回组织者和报名项，供下单使用

        Raises:
            NotFoundError: 课程或课程周期不存在
            BusinessException: 购物车包含多个组织者的课程
            ConfigurationError: 课程缺少所需价格
        """
        line_items = await self._build_line_items(items)
        period_ids = list(dict.fromkeys(item.period_id for item in line_items))

        organizer = await self._get_organizer(period_ids)
        rules = await self._load_rules(period_ids)
        membership = await self.membership_repo.get_membership_context(person_id, organizer.id)

        result = self.engine.evaluate(line_items, rules, membership=membership, promo_code=promo_code)
        logger.info(
            f"购物车计价完成: {len(line_items)} 个报名项, 原价 {result.subtotal_cents}, "
            f"折扣 {result.discount_total_cents}, 应付 {result.total_cents}"
        )
        return organizer, line_items, result

    async def _build_line_items(self, items: List[CartItem]) -> List[RegistrationLineItem]:
        tracks = await self.course_repo.get_tracks_by_ids([item.track_id for item in items])
        tracks_by_id = {track.id: track for track in tracks}

        missing = [item.track_id for item in items if item.track_id not in tracks_by_id]
        if missing:
            raise NotFoundError(f"课程不存在: {', '.join(missing)}", details={"track_ids": missing})

        return [self.course_repo.to_line_item(tracks_by_id[item.track_id], item) for item in items]

    async def _get_organizer(self, period_ids: List[str]) -> OrganizerDB:
        organizer_ids = set()
        for period_id in period_ids:
            period = await self.course_repo.get_period(period_id)
            if not period:
                raise NotFoundError(f"课程周期不存在: {period_id}", details={"period_id": period_id})
            organizer_ids.add(period.organizer_id)

        if len(organizer_ids) != 1:
            raise BusinessException(
                "购物车中的课程必须属于同一个组织者",
                error_code="MIXED_ORGANIZERS",
                details={"organizer_ids": sorted(organizer_ids)}
            )

        organizer_id = organizer_ids.pop()
        organizer = await self.course_repo.get_organizer(organizer_id)
        if not organizer:
            raise NotFoundError(f"组织者不存在: {organizer_id}", details={"organizer_id": organizer_id})
        return organizer

    async def _load_rules(self, period_ids: List[str]) -> List[DiscountRule]:
        """每次计价都重新加载规则"""
        rules: List[DiscountRule] = []
        for period_id in period_ids:
            db_rules = await self.discount_repo.get_enabled_rules(period_id)
            rules.extend(self.discount_repo.to_model(db_rule) for db_rule in db_rules)
        return rules
