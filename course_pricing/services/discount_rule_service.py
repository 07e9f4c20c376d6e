"""
折扣规则管理服务
规则在写入时按类型完整校验，计价时只需解析不需猜测
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from course_pricing.core.exceptions import ConflictError, NotFoundError, RuleValidationError
from course_pricing.models.discount import (
    DiscountRule,
    DiscountRuleCreate,
    DiscountRuleUpdate,
    UnknownRuleTypeError,
    normalize_rule_type,
    validate_rule_config,
)
from course_pricing.models.database.discount_db import DiscountRuleDB
from course_pricing.repositories.discount_repository import DiscountRepository

logger = logging.getLogger(__name__)


class DiscountRuleService:
    """折扣规则管理服务"""

    def __init__(self, discount_repo: DiscountRepository):
        self.discount_repo = discount_repo

    async def list_rules(self, period_id: str) -> List[DiscountRule]:
        """获取课程周期的全部规则（含停用），按执行顺序排列"""
        await self._ensure_period(period_id)
        db_rules = await self.discount_repo.get_period_rules(period_id)
        return [self.discount_repo.to_model(db_rule) for db_rule in db_rules]

    async def get_rule(self, rule_id: str) -> DiscountRule:
        db_rule = await self._get_db_rule(rule_id)
        return self.discount_repo.to_model(db_rule)

    async def create_rule(self, period_id: str, rule_data: DiscountRuleCreate) -> DiscountRule:
        """
        创建折扣规则

        Raises:
            NotFoundError: 课程周期不存在
            ConflictError: 同一周期内规则代码重复
        """
        await self._ensure_period(period_id)
        await self._ensure_code_available(period_id, rule_data.code)

        data = rule_data.model_dump(exclude={"period_id"})
        data["period_id"] = period_id
        data["rule_type"] = rule_data.rule_type.value

        try:
            db_rule = await self.discount_repo.create(data)
        except IntegrityError as e:
            raise self._conflict(period_id, rule_data.code) from e

        logger.info(f"创建折扣规则 {db_rule.code} (period={period_id}, type={db_rule.rule_type})")
        return self.discount_repo.to_model(db_rule)

    async def update_rule(self, rule_id: str, rule_data: DiscountRuleUpdate) -> DiscountRule:
        """
        更新折扣规则

        rule_type 和 config 与原规则合并后重新校验。

        Raises:
            NotFoundError: 规则不存在
            ConflictError: 新代码与同周期其他规则重复
            RuleValidationError: 合并后的配置无效
        """
        db_rule = await self._get_db_rule(rule_id)
        period_id, current_code = db_rule.period_id, db_rule.code
        changes = {k: v for k, v in rule_data.model_dump(exclude_unset=True).items() if v is not None}

        if "rule_type" in changes or "config" in changes:
            rule_type = changes.get("rule_type") or db_rule.rule_type
            config = changes.get("config")
            if config is None:
                config = db_rule.config
            try:
                normalized_type = normalize_rule_type(rule_type)
                changes["config"] = validate_rule_config(normalized_type, config)
            except (UnknownRuleTypeError, ValueError) as e:
                raise RuleValidationError(str(e), details={"rule_id": rule_id})
            changes["rule_type"] = normalized_type.value

        if changes.get("code") and changes["code"] != current_code:
            await self._ensure_code_available(period_id, changes["code"])

        try:
            db_rule = await self.discount_repo.update(db_rule, changes)
        except IntegrityError as e:
            raise self._conflict(period_id, changes.get("code", current_code)) from e

        logger.info(f"更新折扣规则 {db_rule.code}: {sorted(changes)}")
        return self.discount_repo.to_model(db_rule)

    async def set_enabled(self, rule_id: str, enabled: bool) -> DiscountRule:
        """启用或停用规则"""
        db_rule = await self._get_db_rule(rule_id)
        db_rule = await self.discount_repo.update(db_rule, {"enabled": enabled})

        logger.info(f"折扣规则 {db_rule.code} 已{'启用' if enabled else '停用'}")
        return self.discount_repo.to_model(db_rule)

    async def delete_rule(self, rule_id: str) -> None:
        """删除规则"""
        if not await self.discount_repo.delete(rule_id):
            raise NotFoundError(f"折扣规则不存在: {rule_id}", details={"rule_id": rule_id})
        logger.info(f"删除折扣规则 {rule_id}")

    async def _get_db_rule(self, rule_id: str) -> DiscountRuleDB:
        db_rule = await self.discount_repo.get_by_id(rule_id)
        if not db_rule:
            raise NotFoundError(f"折扣规则不存在: {rule_id}", details={"rule_id": rule_id})
        return db_rule

    async def _ensure_period(self, period_id: str) -> None:
        if not await self.discount_repo.period_exists(period_id):
            raise NotFoundError(f"课程周期不存在: {period_id}", details={"period_id": period_id})

    async def _ensure_code_available(self, period_id: str, code: str) -> None:
        if await self.discount_repo.get_by_code(period_id, code):
            raise self._conflict(period_id, code)

    @staticmethod
    def _conflict(period_id: str, code: str) -> ConflictError:
        return ConflictError(
            f"规则代码 {code} 在该课程周期内已存在",
            details={"period_id": period_id, "code": code}
        )
