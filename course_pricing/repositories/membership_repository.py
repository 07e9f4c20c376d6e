"""
会员数据库操作层
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, and_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from course_pricing.models.membership import Membership, MembershipStatus
from course_pricing.models.pricing import MembershipContext
from course_pricing.models.database.membership_db import MembershipDB, MembershipTierDB


class MembershipRepository:
    """会员数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_membership(
        self,
        person_id: str,
        organizer_id: str,
        at: Optional[datetime] = None
    ) -> Optional[MembershipDB]:
        """获取指定时间有效的会员资格，多条有效时取到期最晚的一条"""
        if at is None:
            at = datetime.now()

        query = select(MembershipDB).where(
            and_(
                MembershipDB.person_id == person_id,
                MembershipDB.organizer_id == organizer_id,
                MembershipDB.status == MembershipStatus.ACTIVE.value,
                MembershipDB.valid_from <= at,
                MembershipDB.valid_to > at
            )
        ).order_by(desc(MembershipDB.valid_to)).limit(1)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_membership_context(
        self,
        person_id: Optional[str],
        organizer_id: str,
        at: Optional[datetime] = None
    ) -> MembershipContext:
        """会员状态查询，匿名购买人视为非会员"""
        if not person_id:
            return MembershipContext.anonymous()

        membership = await self.get_active_membership(person_id, organizer_id, at)
        if not membership:
            return MembershipContext.anonymous()

        return MembershipContext(
            is_member=True,
            tier_id=membership.tier_id,
            member_number=membership.member_number
        )

    async def get_tier(self, tier_id: str) -> Optional[MembershipTierDB]:
        """根据ID获取会员等级"""
        return await self.db.get(MembershipTierDB, tier_id)

    async def create(self, **fields) -> MembershipDB:
        """创建会员资格"""
        db_membership = MembershipDB(**fields)
        self.db.add(db_membership)
        await self.db.flush()
        return db_membership

    def to_model(self, db_membership: MembershipDB) -> Membership:
        """转换为Pydantic模型"""
        return Membership(
            membership_id=db_membership.id,
            organizer_id=db_membership.organizer_id,
            person_id=db_membership.person_id,
            tier_id=db_membership.tier_id,
            member_number=db_membership.member_number,
            source=db_membership.source,
            status=db_membership.status,
            valid_from=db_membership.valid_from,
            valid_to=db_membership.valid_to
        )
