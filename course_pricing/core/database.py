from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy import text
from typing import AsyncGenerator, Optional
import logging

from course_pricing.core.config import settings

logger = logging.getLogger(__name__)

# 创建基础模型类
Base = declarative_base()

# 全局数据库引擎
engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker] = None


async def init_database(database_url: Optional[str] = None) -> None:
    """初始化数据库连接"""
    global engine, async_session_maker

    try:
        engine_kwargs = {
            "echo": settings.debug and not settings.is_testing,
            "pool_pre_ping": True,  # 连接前ping检查
        }
        if settings.is_testing:
            engine_kwargs["poolclass"] = NullPool
        else:
            engine_kwargs["pool_recycle"] = settings.db_pool_recycle

        # 创建异步数据库引擎
        engine = create_async_engine(database_url or settings.database_url_computed, **engine_kwargs)

        # 创建异步session工厂
        async_session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        logger.info("数据库连接初始化成功")

    except Exception as e:
        logger.error(f"数据库连接初始化失败: {e}")
        raise


async def create_tables() -> None:
    """按ORM定义创建数据表（开发/测试环境使用）"""
    if not engine:
        raise RuntimeError("数据库未初始化，请先调用 init_database()")

    # 注册所有表到 Base.metadata
    import course_pricing.models.database  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("数据表创建完成")


async def close_database() -> None:
    """关闭数据库连接"""
    global engine

    if engine:
        await engine.dispose()
        logger.info("数据库连接已关闭")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话依赖注入函数"""
    if not async_session_maker:
        raise RuntimeError("数据库未初始化，请先调用 init_database()")

    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


class DatabaseService:
    """数据库服务类"""

    @property
    def engine(self):
        return engine

    async def health_check(self) -> dict:
        """数据库健康检查"""
        try:
            if not self.engine:
                return {"status": "error", "message": "数据库引擎未初始化"}

            # 执行简单查询测试连接
            async with self.engine.begin() as conn:
                result = await conn.execute(text("SELECT 1"))
                row = result.fetchone()

            return {
                "status": "healthy",
                "message": "数据库连接正常",
                "test_query_result": row[0] if row else None
            }

        except Exception as e:
            logger.warning(f"数据库健康检查失败: {e}")
            return {
                "status": "error",
                "message": f"数据库连接失败: {str(e)}"
            }

    async def get_connection_info(self) -> dict:
        """获取数据库连接信息"""
        if not self.engine:
            return {"status": "not_initialized"}

        return {
            "url": self.engine.url.render_as_string(hide_password=True),
            "driver": self.engine.url.drivername,
            "database": self.engine.url.database,
            "host": self.engine.url.host,
            "port": self.engine.url.port,
        }


# 全局数据库服务实例
database_service = DatabaseService()
