"""
会员服务
创建会员资格时按来源分配会员编号
"""

import logging
from datetime import datetime
from typing import Optional

from course_pricing.core.exceptions import NotFoundError
from course_pricing.models.membership import Membership, MembershipCreate, MembershipStatus
from course_pricing.repositories.course_repository import CourseRepository
from course_pricing.repositories.membership_repository import MembershipRepository
from course_pricing.services.counter_service import CounterService

logger = logging.getLogger(__name__)


class MembershipService:
    """会员服务"""

    def __init__(
        self,
        membership_repo: MembershipRepository,
        course_repo: CourseRepository,
        counter_service: CounterService
    ):
        self.membership_repo = membership_repo
        self.course_repo = course_repo
        self.counter_service = counter_service

    async def create_membership(self, membership_data: MembershipCreate) -> Membership:
        """
        创建会员资格

        导入的会员使用 IMP 前缀，购买和手工录入的会员使用 MBR 前缀，
        编号在组织者范围内唯一。

        Raises:
            NotFoundError: 组织者或会员等级不存在
        """
        organizer_id = membership_data.organizer_id
        if not await self.course_repo.get_organizer(organizer_id):
            raise NotFoundError(f"组织者不存在: {organizer_id}", details={"organizer_id": organizer_id})

        if membership_data.tier_id:
            tier = await self.membership_repo.get_tier(membership_data.tier_id)
            if not tier or tier.organizer_id != organizer_id:
                raise NotFoundError(
                    f"会员等级不存在: {membership_data.tier_id}",
                    details={"tier_id": membership_data.tier_id, "organizer_id": organizer_id}
                )

        member_number = await self.counter_service.allocate(
            organizer_id, membership_data.source.counter_kind
        )

        db_membership = await self.membership_repo.create(
            organizer_id=organizer_id,
            person_id=membership_data.person_id,
            tier_id=membership_data.tier_id,
            member_number=member_number,
            source=membership_data.source.value,
            status=MembershipStatus.ACTIVE.value,
            valid_from=membership_data.valid_from,
            valid_to=membership_data.valid_to
        )

        logger.info(f"创建会员资格 {member_number} (person={membership_data.person_id})")
        return self.membership_repo.to_model(db_membership)

    async def get_active_membership(
        self,
        person_id: str,
        organizer_id: str,
        at: Optional[datetime] = None
    ) -> Optional[Membership]:
        """获取有效会员资格，没有时返回 None"""
        db_membership = await self.membership_repo.get_active_membership(person_id, organizer_id, at)
        if not db_membership:
            return None
        return self.membership_repo.to_model(db_membership)
