from fastapi import APIRouter, HTTPException
import logging

from course_pricing.core.config import settings
from course_pricing.core.database import database_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["健康检查"])


@router.get("")
async def health_check():
    """基础健康检查接口"""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@router.get("/database")
async def database_health():
    """数据库连接健康检查"""
    db_status = await database_service.health_check()

    if db_status["status"] != "healthy":
        logger.warning(f"数据库连接检查失败: {db_status['message']}")
        raise HTTPException(status_code=503, detail=db_status["message"])

    return {
        "database": True,
        "details": db_status,
        "connection": await database_service.get_connection_info()
    }
