"""
业务异常定义
服务层抛出，API层统一转换为JSON响应
"""

from typing import Any, Dict, Optional


class BusinessException(Exception):
    """业务异常基类"""

    status_code: int = 400
    error_code: str = "BUSINESS_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class NotFoundError(BusinessException):
    """资源不存在（课程周期、课程、规则、订单等）"""

    status_code = 404
    error_code = "NOT_FOUND"


class ConfigurationError(BusinessException):
    """目录数据配置不完整，例如课程缺少所需价格"""

    status_code = 422
    error_code = "CONFIGURATION_ERROR"


class RuleValidationError(BusinessException):
    """折扣规则写入时校验失败"""

    status_code = 400
    error_code = "RULE_VALIDATION_ERROR"


class ConflictError(BusinessException):
    """唯一约束冲突"""

    status_code = 409
    error_code = "CONFLICT"


class StorageError(BusinessException):
    """存储层写入失败，由调用方决定是否重试整个操作"""

    status_code = 503
    error_code = "STORAGE_ERROR"
