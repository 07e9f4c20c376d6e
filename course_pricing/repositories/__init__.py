"""
仓库包初始化文件 - 数据库访问层
"""

from .course_repository import CourseRepository
from .discount_repository import DiscountRepository
from .membership_repository import MembershipRepository
from .counter_repository import CounterRepository
from .order_repository import OrderRepository

__all__ = [
    "CourseRepository",
    "DiscountRepository",
    "MembershipRepository",
    "CounterRepository",
    "OrderRepository"
]
