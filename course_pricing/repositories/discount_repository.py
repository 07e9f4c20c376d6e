"""
折扣规则数据库操作层
"""

from typing import List, Optional, Dict, Any

from sqlalchemy import select, and_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from course_pricing.core.exceptions import NotFoundError
from course_pricing.models.discount import DiscountRule
from course_pricing.models.database.course_db import CoursePeriodDB
from course_pricing.models.database.discount_db import DiscountRuleDB


class DiscountRepository:
    """折扣规则数据库操作层"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def period_exists(self, period_id: str) -> bool:
        """检查课程周期是否存在"""
        result = await self.db.execute(
            select(CoursePeriodDB.id).where(CoursePeriodDB.id == period_id)
        )
        return result.scalar_one_or_none() is not None

    async def get_enabled_rules(self, period_id: str) -> List[DiscountRuleDB]:
        """
        加载课程周期内启用的规则

        按 priority 升序、code 升序排列，不依赖存储顺序；
        周期不存在时抛出 NotFoundError，没有启用的规则时返回空列表
        """
        if not await self.period_exists(period_id):
            raise NotFoundError(f"课程周期不存在: {period_id}", details={"period_id": period_id})

        query = select(DiscountRuleDB).where(
            and_(
                DiscountRuleDB.period_id == period_id,
                DiscountRuleDB.enabled.is_(True)
            )
        ).order_by(DiscountRuleDB.priority.asc(), DiscountRuleDB.code.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_period_rules(self, period_id: str) -> List[DiscountRuleDB]:
        """获取课程周期内的全部规则（含停用）"""
        query = select(DiscountRuleDB).where(
            DiscountRuleDB.period_id == period_id
        ).order_by(DiscountRuleDB.priority.asc(), DiscountRuleDB.code.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, rule_id: str) -> Optional[DiscountRuleDB]:
        """根据ID获取规则"""
        return await self.db.get(DiscountRuleDB, rule_id)

    async def get_by_code(self, period_id: str, code: str) -> Optional[DiscountRuleDB]:
        """根据周期和代码获取规则"""
        result = await self.db.execute(
            select(DiscountRuleDB).where(
                and_(
                    DiscountRuleDB.period_id == period_id,
                    DiscountRuleDB.code == code
                )
            )
        )
        return result.scalar_one_or_none()

    async def create(self, data: Dict[str, Any]) -> DiscountRuleDB:
        """创建规则"""
        db_rule = DiscountRuleDB(**data)
        self.db.add(db_rule)
        await self.db.flush()
        await self.db.refresh(db_rule)
        return db_rule

    async def update(self, db_rule: DiscountRuleDB, data: Dict[str, Any]) -> DiscountRuleDB:
        """更新规则"""
        for field, value in data.items():
            setattr(db_rule, field, value)
        await self.db.flush()
        await self.db.refresh(db_rule)
        return db_rule

    async def delete(self, rule_id: str) -> bool:
        """删除规则"""
        result = await self.db.execute(
            delete(DiscountRuleDB).where(DiscountRuleDB.id == rule_id)
        )
        return result.rowcount > 0

    def to_model(self, db_rule: DiscountRuleDB) -> DiscountRule:
        """转换为Pydantic模型"""
        return DiscountRule(
            id=db_rule.id,
            period_id=db_rule.period_id,
            code=db_rule.code,
            name=db_rule.name,
            priority=db_rule.priority,
            enabled=db_rule.enabled,
            rule_type=db_rule.rule_type,
            config={} if db_rule.config is None else db_rule.config,
            created_at=db_rule.created_at,
            updated_at=db_rule.updated_at
        )
