"""
API 异常处理器
将业务异常、请求校验错误和数据库错误统一转换为JSON响应
"""

import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from course_pricing.core.config import settings
from course_pricing.core.exceptions import BusinessException

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details or {})
            }
        }
    )


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """业务异常"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 业务异常: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} 业务异常 {exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": jsonable_encoder(exc.to_dict())}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求参数校验失败"""
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "请求参数校验失败",
        {"errors": exc.errors()}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTP异常"""
    return _error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """数据库异常"""
    logger.error(f"{request.method} {request.url.path} 数据库错误: {exc}")
    message = str(exc) if settings.debug else "数据库操作失败"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", message)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """未处理的异常"""
    logger.exception(f"{request.method} {request.url.path} 未处理的异常: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "服务器内部错误")
