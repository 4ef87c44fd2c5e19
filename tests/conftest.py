"""
Shared fixtures: an in-memory stand-in for a MySQL server.

FakeServer is passed wherever the harness takes a ``connector``; it
understands exactly the statements crud_loadgen.loadgen.operations issues.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
from mysql.connector import Error as MySQLError

from crud_loadgen.common.config import DBConfig


class FakeTable:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.next_id = 1
        self.lock = threading.Lock()

    def count_code(self, code: str) -> int:
        with self.lock:
            return sum(1 for r in self.rows if r["code"] == code)


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self.rowcount = -1
        self.lastrowid: Optional[int] = None
        self._result: List[Tuple[Any, ...]] = []
        self.closed = False

    def execute(self, sql: str, params: Tuple[Any, ...] = ()) -> None:
        server = self.conn.server
        if server.fail_on and server.fail_on in sql.lower():
            raise MySQLError(msg=f"injected failure for {server.fail_on!r}", errno=1105)
        table = server.table(self.conn.host)
        stmt = " ".join(sql.split()).lower()
        with table.lock:
            if stmt.startswith("insert into test"):
                code, text, is_test, created_at = params
                table.rows.append({
                    "id": table.next_id,
                    "code": code,
                    "text": text,
                    "is_test": bool(is_test),
                    "created_at": created_at,
                })
                self.rowcount, self.lastrowid = 1, table.next_id
                table.next_id += 1
            elif stmt.startswith("update test set is_test = false"):
                matched = [r for r in table.rows if r["code"] == params[0]]
                if not server.stale_updates:
                    for r in matched:
                        r["is_test"] = False
                self.rowcount, self.lastrowid = len(matched), 0
            elif stmt.startswith("delete from test"):
                before = len(table.rows)
                table.rows = [r for r in table.rows if r["code"] != params[0]]
                self.rowcount = before - len(table.rows)
            elif stmt.startswith("select count(*) from test"):
                self._result = [(len(table.rows),)]
            elif stmt.startswith("select id, code, text, is_test, created_at from test"):
                rows = table.rows
                if "where code" in stmt:
                    rows = [r for r in rows if r["code"] == params[0]]
                self._result = [
                    (r["id"], r["code"], r["text"], int(r["is_test"]), r["created_at"])
                    for r in rows
                ]
            elif stmt.startswith("create table if not exists test"):
                server.created_tables.add(self.conn.host)
                self.rowcount = 0
            else:
                raise MySQLError(msg=f"unsupported statement: {sql}", errno=1064)

    def fetchall(self) -> List[Tuple[Any, ...]]:
        result, self._result = self._result, []
        return result

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, server: "FakeServer", host: str, kwargs: Dict[str, Any]):
        self.server = server
        self.host = host
        self.kwargs = kwargs
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


class FakeServer:
    """Callable with the signature of ``mysql.connector.connect``."""

    def __init__(self):
        self.tables: Dict[str, FakeTable] = {}
        self.unreachable: Set[str] = set()
        self.connections: List[FakeConnection] = []
        self.created_tables: Set[str] = set()
        self.fail_on: Optional[str] = None
        self.stale_updates = False
        self._lock = threading.Lock()

    def table(self, host: str) -> FakeTable:
        with self._lock:
            return self.tables.setdefault(host, FakeTable())

    def __call__(self, **kwargs: Any) -> FakeConnection:
        host = kwargs["host"]
        if host in self.unreachable:
            raise MySQLError(
                msg=f"Can't connect to MySQL server on '{host}:{kwargs['port']}'",
                errno=2003,
            )
        conn = FakeConnection(self, host, kwargs)
        with self._lock:
            self.connections.append(conn)
        return conn


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def db_config() -> DBConfig:
    return DBConfig(user="root", hosts=["db1"], port=4000, database="test")
