"""
编号计数器数据库操作层

递增在存储层以单条原子语句完成，应用层不加锁、不重试。
"""

import logging

from sqlalchemy import update, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from course_pricing.core.exceptions import StorageError
from course_pricing.models.database.counter_db import SequenceCounterDB

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CounterRepository:
    """编号计数器数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def increment(self, scope_id: str, kind: str) -> int:
        """
        原子递增并返回新值

        计数器不存在时从 1 开始；并发调用得到互不相同的值。

        Raises:
            StorageError: 数据库写入失败
        """
        try:
            dialect = self.db.get_bind().dialect.name
            dialect_insert = _UPSERT_DIALECTS.get(dialect)
            if dialect_insert is not None:
                return await self._upsert(dialect_insert, scope_id, kind)
            return await self._update_or_insert(scope_id, kind)
        except SQLAlchemyError as e:
            logger.error(f"计数器递增失败 scope={scope_id} kind={kind}: {e}")
            raise StorageError(
                "编号分配失败",
                details={"scope_id": scope_id, "kind": kind}
            ) from e

    async def _upsert(self, dialect_insert, scope_id: str, kind: str) -> int:
        stmt = dialect_insert(SequenceCounterDB).values(scope_id=scope_id, kind=kind, value=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[SequenceCounterDB.scope_id, SequenceCounterDB.kind],
            set_={"value": SequenceCounterDB.value + 1}
        ).returning(SequenceCounterDB.value)

        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def _update_or_insert(self, scope_id: str, kind: str) -> int:
        """不支持 ON CONFLICT 的数据库：先 UPDATE ... RETURNING，未命中再插入"""
        stmt = (
            update(SequenceCounterDB)
            .where(SequenceCounterDB.scope_id == scope_id, SequenceCounterDB.kind == kind)
            .values(value=SequenceCounterDB.value + 1)
            .returning(SequenceCounterDB.value)
        )
        result = await self.db.execute(stmt)
        value = result.scalar_one_or_none()
        if value is not None:
            return int(value)

        try:
            async with self.db.begin_nested():
                await self.db.execute(
                    insert(SequenceCounterDB).values(scope_id=scope_id, kind=kind, value=1)
                )
            return 1
        except IntegrityError:
            # 并发插入，计数器已存在
            result = await self.db.execute(stmt)
            return int(result.scalar_one())

    async def current_value(self, scope_id: str, kind: str) -> int:
        """读取当前值，不存在时为 0"""
        db_counter = await self.db.get(SequenceCounterDB, (scope_id, kind))
        return int(db_counter.value) if db_counter else 0
