"""
Execute clear-and-replace plans against PostgreSQL with upsert logic
"""

from typing import Any, Dict, Iterable, List, Optional
from pydantic import BaseModel
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from core.config import settings
from core.exceptions import LoadError, DatabaseError, UpsertError
import logging

logger = logging.getLogger(__name__)

INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class PersistenceOperation:
    """One step of a persistence plan: clear a table or upsert rows into it"""

    CLEAR = "clear"
    UPSERT = "upsert"

    def __init__(self, action: str, model, rows: Optional[List[Any]] = None):
        self.action = action
        self.model = model
        self.rows = rows or []

    @classmethod
    def clear(cls, model) -> "PersistenceOperation":
        return cls(cls.CLEAR, model)

    @classmethod
    def upsert(cls, model, rows: Iterable[Any]) -> "PersistenceOperation":
        return cls(cls.UPSERT, model, list(rows))

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def __repr__(self) -> str:
        if self.action == self.CLEAR:
            return f"<clear {self.table_name}>"
        return f"<upsert {self.table_name} rows={len(self.rows)}>"


class PostgresLoader:
    """
    Run an ordered list of persistence operations as one transaction.

    Ensures:
    - Operations execute in plan order
    - Nothing is committed unless every operation succeeded
    - Rows sharing a primary key collapse to the last one (INSERT ON CONFLICT UPDATE)
    """

    def __init__(self, db_session: AsyncSession, batch_size: Optional[int] = None):
        self.db = db_session
        self.batch_size = batch_size or settings.IMPORT_BATCH_SIZE

    async def execute(self, operations: List[PersistenceOperation]) -> Dict[str, int]:
        """
        Execute a plan and commit once at the end.

        Returns:
            Number of rows upserted per table

        Raises:
            DatabaseError / UpsertError: After rolling the transaction back
        """
        loaded: Dict[str, int] = {}

        try:
            for operation in operations:
                if operation.action == PersistenceOperation.CLEAR:
                    await self.clear(operation.model)
                else:
                    count = await self.upsert(operation.model, operation.rows)
                    loaded[operation.table_name] = loaded.get(operation.table_name, 0) + count

            await self.db.commit()

        except LoadError:
            await self.db.rollback()
            raise

        except Exception as e:
            await self.db.rollback()
            raise DatabaseError(
                "Failed to commit persistence plan",
                context={"operation": "COMMIT", "steps": len(operations)},
                original_exception=e
            )

        logger.info(f"Committed persistence plan: {loaded}")
        return loaded

    async def clear(self, model):
        """Delete all rows of a table"""
        try:
            await self.db.execute(delete(model))
        except Exception as e:
            raise DatabaseError(
                "Failed to clear table",
                context={"operation": "DELETE", "table_name": model.__tablename__},
                original_exception=e
            )
        logger.debug(f"Cleared {model.__tablename__}")

    async def upsert(self, model, rows: List[Any]) -> int:
        """
        Bulk insert rows, updating on primary key conflict.

        Returns:
            Number of distinct rows written
        """
        records = self._collapse_by_primary_key(model, rows)
        if not records:
            return 0

        for i in range(0, len(records), self.batch_size):
            batch = records[i:i + self.batch_size]
            stmt = self._upsert_statement(model, batch)

            try:
                await self.db.execute(stmt)
            except Exception as e:
                raise UpsertError(
                    "Bulk upsert failed",
                    context={
                        "table_name": model.__tablename__,
                        "batch_index": i // self.batch_size,
                        "batch_size": len(batch)
                    },
                    original_exception=e
                )

        logger.info(f"Upserted {len(records)} rows into {model.__tablename__}")
        return len(records)

    def _upsert_statement(self, model, batch: List[Dict[str, Any]]):
        insert = INSERT_BY_DIALECT.get(self._dialect_name(), postgresql_insert)
        primary_key = self._primary_key(model)

        stmt = insert(model).values(batch)
        update_columns = [column for column in batch[0] if column not in primary_key]

        if not update_columns:
            return stmt.on_conflict_do_nothing(index_elements=primary_key)

        return stmt.on_conflict_do_update(
            index_elements=primary_key,
            set_={column: stmt.excluded[column] for column in update_columns}
        )

    def _dialect_name(self) -> Optional[str]:
        bind = getattr(self.db, "bind", None)
        dialect = getattr(bind, "dialect", None)
        return getattr(dialect, "name", None)

    @staticmethod
    def _primary_key(model) -> List[str]:
        return [column.name for column in model.__table__.primary_key.columns]

    @classmethod
    def _collapse_by_primary_key(cls, model, rows: List[Any]) -> List[Dict[str, Any]]:
        primary_key = cls._primary_key(model)
        collapsed: Dict[tuple, Dict[str, Any]] = {}

        for row in rows:
            record = row.dict() if isinstance(row, BaseModel) else dict(row)
            collapsed[tuple(record[column] for column in primary_key)] = record

        return list(collapsed.values())
