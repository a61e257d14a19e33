from typing import Any, Dict, List, Union

from loguru import logger
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, SQLAlchemyError, StatementError

from errors import StoreError


def _rejected_input(e: SQLAlchemyError) -> bool:
    # constraint and type violations, or a value the column type could not bind
    if isinstance(e, (IntegrityError, DataError)):
        return True
    return isinstance(e, StatementError) and not isinstance(e, DBAPIError)


class RecordStore:
    """Table-level select/insert/delete over the app's SQLAlchemy metadata.

    Every call runs in its own transaction: it commits on success and rolls
    back on failure, raising StoreError with a readable message. Data the
    store rejects is a 400; anything else is a 500.
    """

    def __init__(self, db):
        self.db = db

    def _table(self, name: str):
        table = self.db.metadata.tables.get(name)
        if table is None:
            raise StoreError(f'relation "{name}" does not exist')
        return table

    def _column(self, table, key: str):
        if key not in table.c:
            raise StoreError(f"Could not find the '{key}' column of '{table.name}'", status_code=400)
        return table.c[key]

    def _run(self, stmt, params=None, consume=None):
        # consume reads the result before the transaction is committed
        session = self.db.session
        try:
            result = session.execute(stmt, params) if params is not None else session.execute(stmt)
            value = consume(result) if consume else None
            session.commit()
            return value
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Store call failed: {e}")
            status = 400 if _rejected_input(e) else 500
            raise StoreError(str(getattr(e, "orig", None) or e), status_code=status)

    def select(self, table_name: str, limit: int = 50) -> List[Dict[str, Any]]:
        table = self._table(table_name)
        return self._run(select(table).limit(limit), consume=lambda r: [dict(m) for m in r.mappings().all()])

    def insert(self, table_name: str, records: Union[Dict[str, Any], List[Dict[str, Any]]]) -> int:
        table = self._table(table_name)
        if isinstance(records, dict):
            records = [records]
        if not records:
            return 0
        for record in records:
            for key in record:
                self._column(table, key)
        # a single executemany, so a bulk insert lands or fails as a whole
        self._run(insert(table), records)
        return len(records)

    def delete(self, table_name: str, key_field: str, key_value: Any) -> int:
        table = self._table(table_name)
        column = self._column(table, key_field)
        stmt = delete(table).where(column == _as_column_value(column, key_value))
        return self._run(stmt, consume=lambda r: r.rowcount)


def _as_column_value(column, value):
    # path parameters arrive as strings
    if isinstance(value, str):
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value
        if python_type is int:
            try:
                return int(value)
            except ValueError:
                raise StoreError(f'invalid input syntax for type integer: "{value}"', status_code=400)
    return value
