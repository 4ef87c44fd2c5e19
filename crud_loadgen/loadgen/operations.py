# crud_loadgen/loadgen/operations.py
"""
Row operations against the ``test`` table.

Each operation is a single auto-committed statement on a connection checked
out from the host's pool. Driver errors are wrapped in OperationError and
propagated unchanged; nothing here retries or aborts the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from mysql.connector import Error as MySQLError

from ..common.db_client import ConnectionRegistry
from ..common.errors import ConsistencyError, OperationError
from ..common.uid import generate_code

logger = logging.getLogger(__name__)

TABLE_NAME = "test"
ROW_TEXT = "test"

INSERT_SQL = f"insert into {TABLE_NAME}(code, text, is_test, created_at) values(%s, %s, %s, %s)"
UPDATE_SQL = f"update {TABLE_NAME} set is_test = false where code = %s"
DELETE_SQL = f"delete from {TABLE_NAME} where code = %s"
SELECT_ONE_SQL = f"select id, code, text, is_test, created_at from {TABLE_NAME} where code = %s"
SELECT_LIST_SQL = f"select id, code, text, is_test, created_at from {TABLE_NAME}"
SELECT_COUNT_SQL = f"select count(*) from {TABLE_NAME}"
CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INT PRIMARY KEY AUTO_INCREMENT,
    code VARCHAR(255) NOT NULL,
    text VARCHAR(255) NOT NULL,
    is_test BOOLEAN NOT NULL,
    created_at DATETIME NOT NULL,
    INDEX idx_code (code)
)
"""


@dataclass
class TestRow:
    """One row of the ``test`` table. The defaults double as the "no row" value."""

    __test__ = False  # not a pytest test class

    id: int = 0
    code: str = ""
    text: str = ""
    is_test: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_db(cls, row: Sequence[Any]) -> "TestRow":
        id_, code, text, is_test, created_at = row
        return cls(
            id=int(id_),
            code=code,
            text=text,
            is_test=bool(is_test),
            created_at=created_at,
        )


class RowOperations:
    def __init__(self, registry: ConnectionRegistry, debug: bool = False):
        self.registry = registry
        self.debug = debug

    def _execute(
        self, operation: str, host: str, sql: str, params: Sequence[Any] = ()
    ) -> Tuple[int, Optional[int]]:
        pool = self.registry.get(host)
        try:
            with pool.connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(sql, tuple(params))
                    return cursor.rowcount, cursor.lastrowid
                finally:
                    cursor.close()
        except MySQLError as e:
            raise OperationError(operation, host, e) from e

    def _query(
        self, operation: str, host: str, sql: str, params: Sequence[Any] = ()
    ) -> List[Tuple[Any, ...]]:
        pool = self.registry.get(host)
        try:
            with pool.connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(sql, tuple(params))
                    return list(cursor.fetchall())
                finally:
                    cursor.close()
        except MySQLError as e:
            raise OperationError(operation, host, e) from e

    def insert(self, host: str, code: str = "") -> str:
        """Insert a fresh test row and return the code it was stored under."""
        if not code:
            code = generate_code()
        rows, last_id = self._execute(
            "insert", host, INSERT_SQL, (code, ROW_TEXT, True, datetime.now())
        )
        if self.debug:
            print(f"rows = {rows}, last_insert_id = {last_id}")
        return code

    def update(self, host: str, code: str) -> None:
        """
        Flip is_test to false for ``code`` and read the row back.

        Raises ConsistencyError if the read on the same host still sees
        is_test = true.
        """
        rows, last_id = self._execute("update", host, UPDATE_SQL, (code,))
        if self.debug:
            # Some MySQL-compatible servers (CockroachDB) report no last id here.
            print(f"rows = {rows}, last_insert_id = {last_id}")
        row = self.select_one(host, code)
        if row.is_test:
            raise ConsistencyError(host, code)

    def delete(self, host: str, code: str) -> None:
        self._execute("delete", host, DELETE_SQL, (code,))

    def select_one(self, host: str, code: str) -> TestRow:
        # A missing row and an all-default row look the same to callers.
        rows = self._query("select_one", host, SELECT_ONE_SQL, (code,))
        if not rows:
            return TestRow()
        return TestRow.from_db(rows[0])

    def select_list(self, host: str) -> List[TestRow]:
        return [TestRow.from_db(r) for r in self._query("select_list", host, SELECT_LIST_SQL)]

    def select_count(self, host: str) -> int:
        rows = self._query("select_count", host, SELECT_COUNT_SQL)
        return int(rows[0][0]) if rows else 0

    def create_table(self, host: str) -> None:
        logger.info(f"Ensuring table `{TABLE_NAME}` exists on {host}")
        self._execute("create_table", host, CREATE_TABLE_SQL)
