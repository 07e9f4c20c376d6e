from fastapi import APIRouter, Depends, status

from course_pricing.api.dependencies import get_membership_service
from course_pricing.models.membership import Membership, MembershipCreate
from course_pricing.services.membership_service import MembershipService

router = APIRouter(prefix="/memberships", tags=["会员"])


@router.post("", response_model=Membership, status_code=status.HTTP_201_CREATED)
async def create_membership(
    membership_data: MembershipCreate,
    service: MembershipService = Depends(get_membership_service)
):
    """创建会员资格并分配会员编号"""
    return await service.create_membership(membership_data)
