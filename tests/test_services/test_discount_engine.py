"""
计价引擎测试
"""

import logging

import pytest

from course_pricing.core.exceptions import ConfigurationError
from course_pricing.models.pricing import MembershipContext
from course_pricing.services.discount_engine import (
    PricingEngine,
    percent_of,
    resolve_base_price,
    split_evenly,
)
from factories import make_item, make_rule


MEMBER = MembershipContext(is_member=True, tier_id="tier-1", member_number="MBR-2025-0001")


def member_rule(code="MEMBER10", percent=10, tier_ids=None, priority=1, **kwargs):
    return make_rule(
        code, "MEMBERSHIP_TIER_PERCENT",
        {"tier_ids": tier_ids or [], "discount_percent": percent},
        priority=priority, **kwargs
    )


def multi_rule(code="MULTI", tiers=None, priority=2, **kwargs):
    return make_rule(
        code, "MULTI_COURSE_TIERED",
        {"tiers": tiers or [{"count": 2, "discount_percent": 10}]},
        priority=priority, **kwargs
    )


def promo_rule(code="SUMMER10", priority=3, **config):
    return make_rule(code, "PROMO_CODE_FIXED", config or {"discount_cents": 1000}, priority=priority)


class TestHelpers:
    """金额计算辅助函数测试"""

    def test_percent_of_floors(self):
        assert percent_of(9999, 10) == 999
        assert percent_of(10000, 12.5) == 1250
        assert percent_of(333, 33.3) == 110

    def test_split_evenly_remainder_goes_first(self):
        assert split_evenly(1000, 3) == [334, 333, 333]
        assert split_evenly(1000, 4) == [250, 250, 250, 250]
        assert split_evenly(5, 0) == []


class TestResolveBasePrice:
    """基础价格选择测试"""

    def test_non_member_uses_standard_price(self):
        item = make_item(single=10000, member_single=8000)
        assert resolve_base_price(item, MembershipContext.anonymous()) == 10000

    def test_member_uses_member_price(self):
        item = make_item(single=10000, member_single=8000)
        assert resolve_base_price(item, MEMBER) == 8000

    def test_member_without_member_price_falls_back(self):
        item = make_item(single=10000)
        assert resolve_base_price(item, MEMBER) == 10000

    def test_pair_registration_uses_pair_price(self):
        item = make_item(single=10000, pair=18000, member_pair=15000, has_partner=True)
        assert resolve_base_price(item, MembershipContext.anonymous()) == 18000
        assert resolve_base_price(item, MEMBER) == 15000

    def test_missing_pair_price_raises(self):
        item = make_item(single=10000, has_partner=True)
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_base_price(item, MembershipContext.anonymous())
        assert exc_info.value.details["track_id"] == "track-1"


class TestPricingEngine:
    """折扣规则计价测试"""

    @pytest.fixture
    def engine(self):
        return PricingEngine()

    @pytest.fixture
    def three_items(self):
        return [make_item(track_id=f"track-{i}") for i in range(1, 4)]

    def test_no_rules_keeps_subtotal(self, engine, three_items):
        result = engine.evaluate(three_items, [])

        assert result.total_cents == result.subtotal_cents == 30000
        assert result.discount_total_cents == 0
        assert all(item.applied_rule_codes == [] for item in result.line_items)
        assert result.applied_rules == []

    def test_membership_then_multi_course_scenario(self, engine, three_items):
        """会员 -10% 后再多课程 -10%：10000 -> 9000 -> 8100"""
        rules = [member_rule("MEMBER10", priority=1), multi_rule("MULTI3", priority=2)]

        result = engine.evaluate(three_items, rules, membership=MEMBER)

        first = result.line_items[0]
        assert first.base_cents == 10000
        assert first.final_cents == 8100
        assert first.applied_rule_codes == ["MEMBER10", "MULTI3"]
        assert result.total_cents == 3 * 8100
        assert [rule.code for rule in result.applied_rules] == ["MEMBER10", "MULTI3"]
        assert result.applied_rules[0].amount_cents == 3 * 1000
        assert result.applied_rules[1].amount_cents == 3 * 900

    def test_rules_compose_on_running_price(self, engine):
        """后执行的规则看到前一条规则的结果，而不是基础价格"""
        items = [make_item()]
        rules = [member_rule("MEMBER10", priority=2), promo_rule("SAVE10", priority=1, discount_cents=1000)]

        result = engine.evaluate(items, rules, membership=MEMBER, promo_code="SAVE10")

        # 10000 - 1000 = 9000，再减 9000 的 10%
        assert result.line_items[0].final_cents == 8100
        assert result.line_items[0].applied_rule_codes == ["SAVE10", "MEMBER10"]

    def test_same_priority_ordered_by_code(self, engine):
        items = [make_item()]
        rules = [
            member_rule("ZETA", percent=50, priority=1),
            promo_rule("ALPHA", priority=1, discount_cents=2000),
        ]

        result = engine.evaluate(items, rules, membership=MEMBER, promo_code="alpha")

        assert result.line_items[0].applied_rule_codes == ["ALPHA", "ZETA"]
        assert result.line_items[0].final_cents == 4000

    def test_multi_course_picks_highest_reached_tier(self, engine, three_items):
        tiers = [{"count": 4, "discount_percent": 20}, {"count": 2, "discount_percent": 10}]

        result = engine.evaluate(three_items, [multi_rule(tiers=tiers)])

        assert [item.final_cents for item in result.line_items] == [9000, 9000, 9000]

    def test_multi_course_below_lowest_tier_is_noop(self, engine):
        tiers = [{"count": 2, "discount_percent": 10}]

        result = engine.evaluate([make_item()], [multi_rule(tiers=tiers)])

        assert result.total_cents == 10000
        assert result.applied_rules == []

    def test_multi_course_fixed_amount_split_with_remainder(self, engine, three_items):
        tiers = [{"count": 3, "discount_cents": 1000, "discount_percent": 50}]

        result = engine.evaluate(three_items, [multi_rule(tiers=tiers)])

        # discount_cents 优先于 discount_percent
        assert [item.final_cents for item in result.line_items] == [9666, 9667, 9667]
        assert result.discount_total_cents == 1000

    def test_multi_course_counts_only_items_of_rule_period(self, engine):
        items = [
            make_item(track_id="track-1"),
            make_item(track_id="track-2"),
            make_item(track_id="track-4", period_id="period-2"),
        ]
        tiers = [{"count": 3, "discount_percent": 10}]

        result = engine.evaluate(items, [multi_rule(tiers=tiers)])

        assert result.total_cents == 30000

    def test_promo_code_case_insensitive(self, engine):
        result = engine.evaluate([make_item()], [promo_rule("SUMMER10")], promo_code=" summer10 ")

        assert result.line_items[0].final_cents == 9000
        assert result.line_items[0].applied_rule_codes == ["SUMMER10"]

    def test_unmatched_promo_code_is_ignored(self, engine):
        result = engine.evaluate([make_item()], [promo_rule("SUMMER10")], promo_code="WINTER")

        assert result.total_cents == 10000
        assert result.line_items[0].applied_rule_codes == []

    def test_promo_percent(self, engine):
        result = engine.evaluate(
            [make_item(single=9999)], [promo_rule("HALF", discount_percent=50)], promo_code="half"
        )

        assert result.line_items[0].final_cents == 5000

    def test_price_never_below_zero(self, engine):
        result = engine.evaluate([make_item()], [promo_rule("HUGE", discount_cents=50000)], promo_code="HUGE")

        assert result.line_items[0].final_cents == 0
        assert result.total_cents == 0
        assert result.discount_total_cents == 10000
        assert result.applied_rules[0].amount_cents == 10000

    def test_membership_rule_requires_member(self, engine):
        result = engine.evaluate([make_item()], [member_rule()])

        assert result.total_cents == 10000
        assert result.is_member is False

    def test_membership_rule_tier_filter(self, engine):
        result = engine.evaluate([make_item()], [member_rule(tier_ids=["tier-gold"])], membership=MEMBER)

        assert result.total_cents == 10000

    def test_member_price_is_base_for_rules(self, engine):
        result = engine.evaluate([make_item(member_single=8000)], [member_rule()], membership=MEMBER)

        assert result.subtotal_cents == 8000
        assert result.line_items[0].final_cents == 7200
        assert result.is_member is True

    def test_legacy_membership_rule_type(self, engine):
        rule = make_rule("OLD", "MEMBERSHIP_PERCENT", {"discount_percent": 10})

        result = engine.evaluate([make_item()], [rule], membership=MEMBER)

        assert result.line_items[0].final_cents == 9000

    def test_disabled_rules_are_ignored(self, engine):
        rule = make_rule("OFF", "PROMO_CODE_FIXED", {"discount_cents": 1000}, enabled=False)

        result = engine.evaluate([make_item()], [rule], promo_code="OFF")

        assert result.total_cents == 10000

    def test_unknown_rule_type_is_skipped(self, engine, caplog):
        rules = [make_rule("MYSTERY", "BUY_ONE_GET_ONE", {}), promo_rule("SUMMER10")]

        with caplog.at_level(logging.WARNING):
            result = engine.evaluate([make_item()], rules, promo_code="SUMMER10")

        assert result.line_items[0].applied_rule_codes == ["SUMMER10"]
        assert "MYSTERY" in caplog.text

    def test_malformed_config_is_skipped(self, engine, caplog):
        rules = [make_rule("BROKEN", "MULTI_COURSE_TIERED", {"tiers": []})]

        with caplog.at_level(logging.WARNING):
            result = engine.evaluate([make_item(), make_item(track_id="track-2")], rules)

        assert result.total_cents == 20000
        assert "BROKEN" in caplog.text

    def test_non_object_config_is_skipped(self, engine, caplog):
        rules = [
            make_rule("LISTCFG", "PROMO_CODE_FIXED", [{"discount_cents": 1000}]),
            make_rule("TEXTCFG", "PROMO_CODE_FIXED", "discount_cents=1000"),
            promo_rule("SUMMER10")
        ]

        with caplog.at_level(logging.WARNING):
            result = engine.evaluate([make_item()], rules, promo_code="SUMMER10")

        assert result.line_items[0].applied_rule_codes == ["SUMMER10"]
        assert "LISTCFG" in caplog.text
        assert "TEXTCFG" in caplog.text

    def test_applied_rule_logged_at_debug(self, engine, caplog):
        with caplog.at_level(logging.DEBUG, logger="course_pricing.services.discount_engine"):
            engine.evaluate([make_item()], [member_rule("MEMBER10")], membership=MEMBER)

        assert "规则 MEMBER10 生效，折扣 1000 分" in caplog.text

    def test_evaluation_is_idempotent(self, engine, three_items):
        rules = [member_rule(), multi_rule(), promo_rule()]

        first = engine.evaluate(three_items, rules, membership=MEMBER, promo_code="SUMMER10")
        second = engine.evaluate(three_items, rules, membership=MEMBER, promo_code="SUMMER10")

        assert first == second

    def test_totals_are_consistent(self, engine, three_items):
        rules = [member_rule(percent=33.3), multi_rule(), promo_rule(discount_cents=777)]

        result = engine.evaluate(three_items, rules, membership=MEMBER, promo_code="SUMMER10")

        assert result.total_cents == result.subtotal_cents - result.discount_total_cents
        assert result.total_cents == sum(item.final_cents for item in result.line_items)
        for item in result.line_items:
            assert item.final_cents >= 0
            assert item.discount_cents == item.base_cents - item.final_cents
