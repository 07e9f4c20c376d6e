"""
折扣规则计价引擎

纯计算，不访问数据库和网络，不依赖当前时间，可并发调用。
规则按加载顺序依次执行，每条规则都作用在上一步之后的当前价格上，
而不是各自独立作用于基础价格。
"""

import logging
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from course_pricing.core.exceptions import ConfigurationError
from course_pricing.models.discount import (
    DiscountRule,
    MembershipTierPercentConfig,
    MultiCourseTieredConfig,
    PromoCodeFixedConfig,
    RuleConfig,
    UnknownRuleTypeError,
)
from course_pricing.models.pricing import (
    AppliedRule,
    LineItemPrice,
    MembershipContext,
    PricingResult,
    RegistrationLineItem,
)

logger = logging.getLogger(__name__)


def resolve_base_price(item: RegistrationLineItem, membership: MembershipContext) -> int:
    """
    选择报名项的基础价格

    有效会员且配置了对应会员价时使用会员价，否则使用标准价；
    双人报名使用双人价，单人报名使用单人价。
    """
    if item.has_partner:
        member_price, standard_price, variant = item.member_pair_cents, item.base_pair_cents, "双人"
    else:
        member_price, standard_price, variant = item.member_single_cents, item.base_single_cents, "单人"

    if membership.is_member and member_price is not None:
        return member_price
    if standard_price is not None:
        return standard_price

    raise ConfigurationError(
        f"课程 {item.track_id} 未配置可用的{variant}价格",
        details={"track_id": item.track_id, "has_partner": item.has_partner}
    )


def percent_of(cents: int, percent: float) -> int:
    """按百分比计算折扣金额，向下取整到分"""
    amount = Decimal(cents) * Decimal(str(percent)) / Decimal(100)
    return int(amount.to_integral_value(rounding=ROUND_FLOOR))


def split_evenly(total_cents: int, parts: int) -> List[int]:
    """平均分摊金额，余数计入第一份"""
    if parts <= 0:
        return []
    share, remainder = divmod(total_cents, parts)
    shares = [share] * parts
    shares[0] += remainder
    return shares


class _EvaluationState:
    """单次计价过程中的当前价格"""

    def __init__(self, line_items: Sequence[RegistrationLineItem], base_prices: List[int]):
        self.line_items = line_items
        self.base_prices = base_prices
        self.current = list(base_prices)
        self.rule_codes: List[List[str]] = [[] for _ in line_items]

    def indices_in_period(self, period_id: str) -> List[int]:
        return [i for i, item in enumerate(self.line_items) if item.period_id == period_id]

    def reduce(self, rule_code: str, reductions: Dict[int, int]) -> int:
        """扣减价格，单步不低于零；返回实际扣减总额"""
        total = 0
        for index, amount in reductions.items():
            applied = min(max(amount, 0), self.current[index])
            if applied > 0:
                self.current[index] -= applied
                self.rule_codes[index].append(rule_code)
                total += applied
        return total


class PricingEngine:
    """折扣规则计价引擎"""

    def evaluate(
        self,
        line_items: Sequence[RegistrationLineItem],
        rules: Sequence[DiscountRule],
        membership: Optional[MembershipContext] = None,
        promo_code: Optional[str] = None
    ) -> PricingResult:
        """
        计算一组报名项的最终价格

        Args:
            line_items: 报名项，按输入顺序计价
            rules: 已加载的规则，按 (priority, code) 顺序执行，停用的规则忽略
            membership: 购买人会员状态，默认非会员
            promo_code: 购买人输入的优惠码，不区分大小写

        Raises:
            ConfigurationError: 报名项缺少所需价格
        """
        membership = membership or MembershipContext.anonymous()

        base_prices = [resolve_base_price(item, membership) for item in line_items]
        subtotal_cents = sum(base_prices)
        state = _EvaluationState(line_items, base_prices)

        applied_rules: List[AppliedRule] = []
        for rule in self._ordered(rules):
            config = self._parse(rule)
            if config is None:
                continue

            reductions, explanation = self._reductions_for(rule, config, state, membership, promo_code)
            if not reductions:
                continue

            amount_cents = state.reduce(rule.code, reductions)
            if amount_cents > 0:
                applied_rules.append(AppliedRule(
                    rule_id=rule.id,
                    code=rule.code,
                    name=rule.name,
                    amount_cents=amount_cents,
                    explanation=explanation
                ))
                logger.debug("规则 %s 生效，折扣 %s 分", rule.code, amount_cents)

        line_prices = [
            LineItemPrice(
                track_id=item.track_id,
                base_cents=base,
                discount_cents=base - final,
                final_cents=final,
                applied_rule_codes=codes
            )
            for item, base, final, codes in zip(line_items, base_prices, state.current, state.rule_codes)
        ]
        total_cents = sum(state.current)

        return PricingResult(
            subtotal_cents=subtotal_cents,
            discount_total_cents=subtotal_cents - total_cents,
            total_cents=total_cents,
            line_items=line_prices,
            applied_rules=applied_rules,
            is_member=membership.is_member
        )

    @staticmethod
    def _ordered(rules: Sequence[DiscountRule]) -> List[DiscountRule]:
        return sorted((rule for rule in rules if rule.enabled), key=lambda rule: (rule.priority, rule.code))

    @staticmethod
    def _parse(rule: DiscountRule) -> Optional[RuleConfig]:
        """解析规则配置，未知类型或配置错误时跳过该规则"""
        try:
            return rule.typed_config()
        except UnknownRuleTypeError:
            logger.warning(f"跳过未知类型的折扣规则 {rule.code} (id={rule.id}, type={rule.rule_type})")
        except ValidationError as e:
            logger.warning(f"跳过配置无效的折扣规则 {rule.code} (id={rule.id}): {e.error_count()} 个错误")
        except TypeError as e:
            logger.warning(f"跳过配置无效的折扣规则 {rule.code} (id={rule.id}): {e}")
        return None

    def _reductions_for(
        self,
        rule: DiscountRule,
        config: RuleConfig,
        state: _EvaluationState,
        membership: MembershipContext,
        promo_code: Optional[str]
    ) -> Tuple[Dict[int, int], str]:
        eligible = state.indices_in_period(rule.period_id)
        if not eligible:
            return {}, ""

        if isinstance(config, MembershipTierPercentConfig):
            return self._membership_reductions(config, eligible, state, membership)
        if isinstance(config, MultiCourseTieredConfig):
            return self._multi_course_reductions(config, eligible, state)
        if isinstance(config, PromoCodeFixedConfig):
            return self._promo_code_reductions(rule, config, eligible, state, promo_code)
        return {}, ""

    @staticmethod
    def _membership_reductions(
        config: MembershipTierPercentConfig,
        eligible: List[int],
        state: _EvaluationState,
        membership: MembershipContext
    ) -> Tuple[Dict[int, int], str]:
        if not membership.is_member:
            return {}, ""
        if config.tier_ids and membership.tier_id not in config.tier_ids:
            return {}, ""

        reductions = {i: percent_of(state.current[i], config.discount_percent) for i in eligible}
        return reductions, f"会员折扣 {config.discount_percent:g}%"

    @staticmethod
    def _multi_course_reductions(
        config: MultiCourseTieredConfig,
        eligible: List[int],
        state: _EvaluationState
    ) -> Tuple[Dict[int, int], str]:
        qualifying_count = len(eligible)
        threshold = None
        for tier in config.sorted_tiers():
            if tier.count <= qualifying_count:
                threshold = tier
        if threshold is None:
            return {}, ""

        explanation = f"多课程折扣（{threshold.count}门及以上）"
        if threshold.discount_cents is not None:
            shares = split_evenly(threshold.discount_cents, qualifying_count)
            return dict(zip(eligible, shares)), explanation
        return {i: percent_of(state.current[i], threshold.discount_percent) for i in eligible}, explanation

    @staticmethod
    def _promo_code_reductions(
        rule: DiscountRule,
        config: PromoCodeFixedConfig,
        eligible: List[int],
        state: _EvaluationState,
        promo_code: Optional[str]
    ) -> Tuple[Dict[int, int], str]:
        if not promo_code or promo_code.strip().casefold() != rule.code.casefold():
            return {}, ""

        explanation = f"优惠码 {rule.code}"
        if config.discount_cents is not None:
            shares = split_evenly(config.discount_cents, len(eligible))
            return dict(zip(eligible, shares)), explanation
        return {i: percent_of(state.current[i], config.discount_percent) for i in eligible}, explanation


# 全局计价引擎实例
pricing_engine = PricingEngine()
