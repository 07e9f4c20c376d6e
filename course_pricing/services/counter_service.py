"""
编号分配服务
生成会员编号和订单编号，格式为 {前缀}-{年份}-{序号}
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from course_pricing.core.config import settings
from course_pricing.models.counter import CounterKind
from course_pricing.repositories.counter_repository import CounterRepository

logger = logging.getLogger(__name__)


def default_prefix(kind: CounterKind) -> str:
    """编号类型对应的默认前缀"""
    if kind == CounterKind.MEMBER_IMPORT:
        return settings.member_import_prefix
    if kind in (CounterKind.MEMBER_PURCHASE, CounterKind.MEMBER_MANUAL):
        return settings.member_prefix
    return settings.default_order_prefix


def format_number(prefix: str, year: int, value: int, min_digits: Optional[int] = None) -> str:
    """格式化编号，序号至少补零到 min_digits 位，超出时不截断"""
    digits = min_digits if min_digits is not None else settings.counter_min_digits
    return f"{prefix}-{year}-{value:0{digits}d}"


class CounterService:
    """编号分配服务"""

    def __init__(self, counter_repo: CounterRepository, clock: Callable[[], datetime] = datetime.now):
        self.counter_repo = counter_repo
        self.clock = clock

    async def allocate(self, scope_id: str, kind: CounterKind, prefix: Optional[str] = None) -> str:
        """
        分配下一个编号

        同一 (scope_id, kind) 下分配的编号互不相同且严格递增，跨年不重置；
        年份只用于展示，取自注入的时钟。

        Args:
            scope_id: 计数范围（组织者ID）
            kind: 编号类型
            prefix: 覆盖默认前缀，例如组织者自定义的订单前缀

        Raises:
            StorageError: 计数器写入失败
        """
        kind = CounterKind(kind)
        value = await self.counter_repo.increment(scope_id, kind.value)
        number = format_number(prefix or default_prefix(kind), self.clock().year, value)

        logger.info(f"分配编号 {number} (scope={scope_id}, kind={kind.value})")
        return number
