"""
测试配置文件 - pytest fixtures和共用配置
"""

from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from course_pricing.core.database import Base, get_db_session
import course_pricing.models.database  # noqa: F401
from course_pricing.models.database import (
    OrganizerDB,
    CoursePeriodDB,
    CourseTrackDB,
    DiscountRuleDB,
    MembershipTierDB,
    MembershipDB,
)


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_db_engine():
    """测试数据库引擎 - 内存SQLite，所有会话共享同一连接"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_db_engine) -> AsyncGenerator[AsyncSession, None]:
    """测试数据库会话"""
    session_maker = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest_asyncio.fixture
async def catalog(db_session):
    """
    示例课程目录

    组织者下有一个课程周期和三门课程，另有一个会员等级、
    一位有效会员和一位已过期会员
    """
    organizer = OrganizerDB(id="org-1", name="Swing Dance Club", slug="swing", order_prefix="SDC")
    other_organizer = OrganizerDB(id="org-2", name="Tango Club", slug="tango")
    period = CoursePeriodDB(id="period-1", organizer_id="org-1", code="2025-SPRING", name="2025 春季")
    other_period = CoursePeriodDB(id="period-2", organizer_id="org-2", code="2025-SPRING", name="2025 春季")

    tracks = [
        CourseTrackDB(
            id="track-1", period_id="period-1", title="Lindy Hop 入门",
            price_single_cents=10000, price_pair_cents=18000,
            member_price_single_cents=8000, member_price_pair_cents=15000
        ),
        CourseTrackDB(
            id="track-2", period_id="period-1", title="Lindy Hop 进阶",
            price_single_cents=10000, price_pair_cents=18000
        ),
        CourseTrackDB(
            id="track-3", period_id="period-1", title="Solo Jazz",
            price_single_cents=6000
        ),
        CourseTrackDB(
            id="track-4", period_id="period-2", title="Tango 入门",
            price_single_cents=9000
        ),
    ]

    tier = MembershipTierDB(id="tier-1", organizer_id="org-1", name="标准会员", slug="standard", price_cents=5000)
    now = datetime.now()
    memberships = [
        MembershipDB(
            id="membership-1", organizer_id="org-1", person_id="person-member", tier_id="tier-1",
            member_number="MBR-2025-0001", source="PURCHASE", status="ACTIVE",
            valid_from=now - timedelta(days=30), valid_to=now + timedelta(days=335)
        ),
        MembershipDB(
            id="membership-2", organizer_id="org-1", person_id="person-expired", tier_id="tier-1",
            member_number="MBR-2024-0001", source="PURCHASE", status="ACTIVE",
            valid_from=now - timedelta(days=400), valid_to=now - timedelta(days=35)
        ),
    ]

    db_session.add_all([organizer, other_organizer])
    await db_session.flush()
    db_session.add_all([period, other_period, tier])
    await db_session.flush()
    db_session.add_all(tracks + memberships)
    await db_session.commit()

    return SimpleNamespace(
        organizer=organizer,
        other_organizer=other_organizer,
        period=period,
        other_period=other_period,
        tracks={track.id: track for track in tracks},
        tier=tier,
        memberships=memberships
    )


@pytest.fixture
def add_rule(db_session):
    """向数据库添加折扣规则"""

    async def _add_rule(code, rule_type, config, priority=0, enabled=True, period_id="period-1"):
        db_rule = DiscountRuleDB(
            period_id=period_id,
            code=code,
            name=f"规则 {code}",
            priority=priority,
            enabled=enabled,
            rule_type=rule_type,
            config=config
        )
        db_session.add(db_rule)
        await db_session.commit()
        return db_rule

    return _add_rule


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """绑定FastAPI应用的异步HTTP客户端，请求复用测试会话"""
    from course_pricing.main import app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
