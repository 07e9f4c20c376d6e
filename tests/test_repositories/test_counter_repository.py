"""
编号计数器Repository测试

并发测试使用文件SQLite，每次分配使用独立会话和连接
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from course_pricing.core.database import Base
from course_pricing.core.exceptions import StorageError
from course_pricing.repositories.counter_repository import CounterRepository
from course_pricing.services.counter_service import CounterService
from course_pricing.models.counter import CounterKind


@pytest_asyncio.fixture
async def file_session_maker(tmp_path):
    """文件数据库会话工厂"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'counters.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.mark.asyncio
class TestCounterRepository:
    """编号计数器Repository测试类"""

    async def test_first_increment_starts_at_one(self, db_session):
        repo = CounterRepository(db_session)

        assert await repo.increment("org-1", "ORDER") == 1
        assert await repo.increment("org-1", "ORDER") == 2
        assert await repo.current_value("org-1", "ORDER") == 2

    async def test_counters_are_independent(self, db_session):
        repo = CounterRepository(db_session)

        await repo.increment("org-1", "ORDER")
        await repo.increment("org-1", "ORDER")

        assert await repo.increment("org-1", "MEMBER_IMPORT") == 1
        assert await repo.increment("org-2", "ORDER") == 1
        assert await repo.current_value("org-3", "ORDER") == 0

    async def test_concurrent_allocations_are_distinct(self, file_session_maker):
        async def allocate_once():
            async with file_session_maker() as session:
                number = await CounterService(CounterRepository(session)).allocate("org-1", CounterKind.ORDER)
                await session.commit()
                return number

        numbers = await asyncio.gather(*(allocate_once() for _ in range(100)))

        assert len(set(numbers)) == 100
        sequences = sorted(int(number.rsplit("-", 1)[1]) for number in numbers)
        assert sequences == list(range(1, 101))

    async def test_storage_failure_raises_storage_error(self, file_session_maker):
        async with file_session_maker() as session:
            await session.run_sync(lambda sync_session: Base.metadata.drop_all(sync_session.connection()))

            with pytest.raises(StorageError):
                await CounterRepository(session).increment("org-1", "ORDER")
