"""
课程目录数据库操作层
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from course_pricing.models.pricing import CartItem, RegistrationLineItem
from course_pricing.models.database.course_db import OrganizerDB, CoursePeriodDB, CourseTrackDB


class CourseRepository:
    """课程目录数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_track(self, track_id: str) -> Optional[CourseTrackDB]:
        """根据ID获取课程"""
        return await self.db.get(CourseTrackDB, track_id)

    async def get_tracks_by_ids(self, track_ids: List[str]) -> List[CourseTrackDB]:
        """批量获取课程"""
        if not track_ids:
            return []
        result = await self.db.execute(
            select(CourseTrackDB).where(CourseTrackDB.id.in_(set(track_ids)))
        )
        return list(result.scalars().all())

    async def get_period(self, period_id: str) -> Optional[CoursePeriodDB]:
        """根据ID获取课程周期"""
        return await self.db.get(CoursePeriodDB, period_id)

    async def get_organizer(self, organizer_id: str) -> Optional[OrganizerDB]:
        """根据ID获取组织者"""
        return await self.db.get(OrganizerDB, organizer_id)

    def to_line_item(self, db_track: CourseTrackDB, cart_item: CartItem) -> RegistrationLineItem:
        """课程价格快照 + 购物车选项 -> 计价报名项"""
        return RegistrationLineItem(
            track_id=db_track.id,
            period_id=db_track.period_id,
            base_single_cents=db_track.price_single_cents,
            base_pair_cents=db_track.price_pair_cents,
            member_single_cents=db_track.member_price_single_cents,
            member_pair_cents=db_track.member_price_pair_cents,
            role=cart_item.role,
            has_partner=cart_item.has_partner
        )
