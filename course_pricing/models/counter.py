"""
编号相关数据模型
"""

from enum import Enum


class CounterKind(str, Enum):
    """编号类型枚举"""
    MEMBER_IMPORT = "MEMBER_IMPORT"  # 导入的会员
    MEMBER_PURCHASE = "MEMBER_PURCHASE"  # 购买的会员
    MEMBER_MANUAL = "MEMBER_MANUAL"  # 手工录入的会员
    ORDER = "ORDER"  # 订单
