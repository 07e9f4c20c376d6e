"""
课程目录、会员、订单Repository数据库操作测试
"""

from datetime import datetime, timedelta

import pytest

from course_pricing.models.order import Order, OrderItem
from course_pricing.models.pricing import CartItem, RegistrationRole
from course_pricing.repositories.course_repository import CourseRepository
from course_pricing.repositories.membership_repository import MembershipRepository
from course_pricing.repositories.order_repository import OrderRepository


@pytest.mark.asyncio
class TestCourseRepository:
    """课程Repository测试类"""

    async def test_get_tracks_by_ids(self, db_session, catalog):
        repo = CourseRepository(db_session)

        tracks = await repo.get_tracks_by_ids(["track-1", "track-3", "missing"])

        assert sorted(track.id for track in tracks) == ["track-1", "track-3"]
        assert await repo.get_tracks_by_ids([]) == []

    async def test_to_line_item(self, db_session, catalog):
        repo = CourseRepository(db_session)
        track = await repo.get_track("track-1")

        item = repo.to_line_item(track, CartItem(track_id="track-1", role=RegistrationRole.LEADER, has_partner=True))

        assert item.period_id == "period-1"
        assert item.base_pair_cents == 18000
        assert item.member_pair_cents == 15000
        assert item.has_partner is True
        assert item.role == RegistrationRole.LEADER

    async def test_get_period_and_organizer(self, db_session, catalog):
        repo = CourseRepository(db_session)

        period = await repo.get_period("period-1")
        organizer = await repo.get_organizer(period.organizer_id)

        assert organizer.order_prefix == "SDC"
        assert await repo.get_period("missing") is None


@pytest.mark.asyncio
class TestMembershipRepository:
    """会员Repository测试类"""

    async def test_active_membership_context(self, db_session, catalog):
        repo = MembershipRepository(db_session)

        context = await repo.get_membership_context("person-member", "org-1")

        assert context.is_member is True
        assert context.tier_id == "tier-1"
        assert context.member_number == "MBR-2025-0001"

    async def test_expired_membership_is_not_member(self, db_session, catalog):
        repo = MembershipRepository(db_session)

        context = await repo.get_membership_context("person-expired", "org-1")

        assert context.is_member is False

    async def test_membership_scoped_to_organizer(self, db_session, catalog):
        repo = MembershipRepository(db_session)

        assert (await repo.get_membership_context("person-member", "org-2")).is_member is False
        assert (await repo.get_membership_context(None, "org-1")).is_member is False

    async def test_lookup_at_given_time(self, db_session, catalog):
        repo = MembershipRepository(db_session)

        earlier = datetime.now() - timedelta(days=100)
        membership = await repo.get_active_membership("person-expired", "org-1", at=earlier)

        assert membership is not None
        assert membership.member_number == "MBR-2024-0001"


@pytest.mark.asyncio
class TestOrderRepository:
    """订单Repository测试类"""

    async def test_create_and_get_order(self, db_session, catalog):
        repo = OrderRepository(db_session)
        order = Order(
            order_id="order-1",
            order_number="SDC-2025-0001",
            organizer_id="org-1",
            person_id="person-member",
            items=[
                OrderItem(
                    track_id="track-1", period_id="period-1",
                    base_cents=10000, discount_cents=1900, final_cents=8100,
                    applied_rule_codes=["MEMBER10", "MULTI3"]
                )
            ],
            subtotal_cents=10000,
            discount_cents=1900,
            total_cents=8100,
            is_member_price=True
        )

        await repo.create_order_with_items(order)
        await db_session.commit()

        db_order = await repo.get_by_id("order-1")
        saved = repo.to_model(db_order)

        assert saved.order_number == "SDC-2025-0001"
        assert saved.total_cents == 8100
        assert saved.items[0].applied_rule_codes == ["MEMBER10", "MULTI3"]
        assert await repo.get_by_id("missing") is None
