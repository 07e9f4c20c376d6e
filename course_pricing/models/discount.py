"""
折扣规则相关数据模型

规则配置是按 rule_type 区分的联合类型，每种规则类型对应一个配置类，
写入时完整校验，计价引擎按配置类分派，不再猜测JSON结构。
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, Union, Literal, Annotated
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, model_validator
from enum import Enum


class RuleType(str, Enum):
    """折扣规则类型枚举"""
    MEMBERSHIP_TIER_PERCENT = "MEMBERSHIP_TIER_PERCENT"  # 会员等级百分比折扣
    MULTI_COURSE_TIERED = "MULTI_COURSE_TIERED"  # 多课程阶梯折扣
    PROMO_CODE_FIXED = "PROMO_CODE_FIXED"  # 优惠码折扣


# 旧版本数据中使用的规则类型名
LEGACY_RULE_TYPES: Dict[str, RuleType] = {
    "MEMBERSHIP_PERCENT": RuleType.MEMBERSHIP_TIER_PERCENT,
}

RULE_CODE_PATTERN = r"^[A-Z0-9_]+$"


class UnknownRuleTypeError(ValueError):
    """未知的规则类型"""

    def __init__(self, rule_type: str):
        super().__init__(f"未知的规则类型: {rule_type}")
        self.rule_type = rule_type


def _require_amount(discount_cents: Optional[int], discount_percent: Optional[float]) -> None:
    if discount_cents is None and discount_percent is None:
        raise ValueError("discount_cents 和 discount_percent 至少需要设置一个")


class MembershipTierPercentConfig(BaseModel):
    """会员等级百分比折扣配置，tier_ids 为空表示所有等级"""

    rule_type: Literal["MEMBERSHIP_TIER_PERCENT"] = "MEMBERSHIP_TIER_PERCENT"
    tier_ids: List[str] = Field(default_factory=list, description="适用会员等级ID")
    discount_percent: float = Field(..., ge=0, le=100, description="折扣百分比")


class MultiCourseTier(BaseModel):
    """多课程折扣阶梯"""

    count: int = Field(..., ge=2, description="最少课程数")
    discount_cents: Optional[int] = Field(None, ge=0, description="固定折扣金额（分），按课程平均分摊")
    discount_percent: Optional[float] = Field(None, ge=0, le=100, description="每门课程的折扣百分比")

    @model_validator(mode="after")
    def validate_amount(self) -> "MultiCourseTier":
        _require_amount(self.discount_cents, self.discount_percent)
        return self


class MultiCourseTieredConfig(BaseModel):
    """多课程阶梯折扣配置"""

    rule_type: Literal["MULTI_COURSE_TIERED"] = "MULTI_COURSE_TIERED"
    tiers: List[MultiCourseTier] = Field(..., min_length=1, description="折扣阶梯")

    def sorted_tiers(self) -> List[MultiCourseTier]:
        return sorted(self.tiers, key=lambda tier: tier.count)


class PromoCodeFixedConfig(BaseModel):
    """优惠码折扣配置，优惠码即规则代码"""

    rule_type: Literal["PROMO_CODE_FIXED"] = "PROMO_CODE_FIXED"
    discount_cents: Optional[int] = Field(None, ge=0, description="固定折扣金额（分），按课程平均分摊")
    discount_percent: Optional[float] = Field(None, ge=0, le=100, description="每门课程的折扣百分比")

    @model_validator(mode="after")
    def validate_amount(self) -> "PromoCodeFixedConfig":
        _require_amount(self.discount_cents, self.discount_percent)
        return self


RuleConfig = Annotated[
    Union[MembershipTierPercentConfig, MultiCourseTieredConfig, PromoCodeFixedConfig],
    Field(discriminator="rule_type"),
]

_rule_config_adapter = TypeAdapter(RuleConfig)


def normalize_rule_type(rule_type: str) -> RuleType:
    """规范化规则类型，兼容旧名称；未知类型抛出 UnknownRuleTypeError"""
    if isinstance(rule_type, RuleType):
        return rule_type
    if rule_type in LEGACY_RULE_TYPES:
        return LEGACY_RULE_TYPES[rule_type]
    try:
        return RuleType(rule_type)
    except ValueError:
        raise UnknownRuleTypeError(str(rule_type))


def parse_rule_config(rule_type: str, config: Any) -> RuleConfig:
    """
    将持久化的配置解析为对应的配置类

    未知类型抛出 UnknownRuleTypeError，配置不是JSON对象抛出 TypeError，
    配置结构不匹配抛出 pydantic.ValidationError
    """
    normalized = normalize_rule_type(rule_type)
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise TypeError(f"规则配置必须是JSON对象，实际为 {type(config).__name__}")
    payload = dict(config)
    payload["rule_type"] = normalized.value
    return _rule_config_adapter.validate_python(payload)


def dump_rule_config(config: RuleConfig) -> Dict[str, Any]:
    """配置类转为存储用的JSON字典（不含 rule_type）"""
    return config.model_dump(mode="json", exclude={"rule_type"}, exclude_none=True)


class DiscountRule(BaseModel):
    """已持久化的折扣规则"""

    id: str = Field(..., description="规则ID")
    period_id: str = Field(..., description="所属课程周期ID")
    code: str = Field(..., description="规则代码")
    name: str = Field(..., description="规则名称")
    priority: int = Field(default=0, description="优先级")
    enabled: bool = Field(default=True, description="是否启用")
    rule_type: str = Field(..., description="规则类型")
    config: Any = Field(default_factory=dict, description="规则配置，原样保存数据库中的JSON")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def typed_config(self) -> RuleConfig:
        """解析为类型化配置"""
        return parse_rule_config(self.rule_type, self.config)


def validate_rule_config(rule_type: RuleType, config: Any) -> Dict[str, Any]:
    """校验并规范化规则配置，失败时抛出 ValueError"""
    try:
        typed = parse_rule_config(rule_type, config)
    except TypeError as e:
        raise ValueError(f"规则配置无效: {e}")
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValueError(f"规则配置无效: {errors}")
    return dump_rule_config(typed)


class DiscountRuleCreate(BaseModel):
    """创建折扣规则模型"""

    period_id: Optional[str] = Field(None, description="所属课程周期ID，通过路径传入时可省略")
    code: str = Field(..., min_length=2, max_length=20, pattern=RULE_CODE_PATTERN, description="规则代码")
    name: str = Field(..., min_length=2, max_length=200, description="规则名称")
    priority: int = Field(default=0, description="优先级")
    enabled: bool = Field(default=True, description="是否启用")
    rule_type: RuleType = Field(..., description="规则类型")
    config: Dict[str, Any] = Field(default_factory=dict, description="规则配置")

    @model_validator(mode="after")
    def validate_config(self) -> "DiscountRuleCreate":
        """按规则类型校验配置"""
        self.config = validate_rule_config(self.rule_type, self.config)
        return self


class DiscountRuleUpdate(BaseModel):
    """更新折扣规则模型，rule_type/config 与原规则合并后再校验"""

    code: Optional[str] = Field(None, min_length=2, max_length=20, pattern=RULE_CODE_PATTERN)
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    priority: Optional[int] = None
    enabled: Optional[bool] = None
    rule_type: Optional[RuleType] = None
    config: Optional[Dict[str, Any]] = None


class RuleEnabledUpdate(BaseModel):
    """启用/停用规则"""

    enabled: bool
