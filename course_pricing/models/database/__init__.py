"""
数据库模型包初始化文件
"""

from .course_db import OrganizerDB, CoursePeriodDB, CourseTrackDB
from .discount_db import DiscountRuleDB
from .membership_db import MembershipTierDB, MembershipDB
from .counter_db import SequenceCounterDB
from .order_db import OrderDB, OrderItemDB

__all__ = [
    "OrganizerDB",
    "CoursePeriodDB",
    "CourseTrackDB",
    "DiscountRuleDB",
    "MembershipTierDB",
    "MembershipDB",
    "SequenceCounterDB",
    "OrderDB",
    "OrderItemDB"
]
