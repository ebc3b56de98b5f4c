"""In-memory stand-in for a MySQL server reachable through a PyMySQL-like API.

Understands just the statements the observer sends: the customer lookup,
SQL-level PREPARE / SET / EXECUTE / DEALLOCATE PREPARE and the
Prepared_stmt_count status query.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pymysql


class FakeMySQLError(pymysql.err.ProgrammingError):
    pass


CUSTOMERS: Dict[str, Tuple[int, str, str]] = {
    "MARY": (1, "MARY", "SMITH"),
    "PATRICIA": (2, "PATRICIA", "JOHNSON"),
    "LINDA": (3, "LINDA", "WILLIAMS"),
}

_CUSTOMER_COLUMNS = ("customer_id", "first_name", "last_name")

_SELECT_CUSTOMER = re.compile(r"(?is)^SELECT \* FROM customer WHERE first_name = (\?|%s)$")
_PREPARE = re.compile(r"(?is)^PREPARE (\w+) FROM %s$")
_SET = re.compile(r"(?is)^SET @(\w+) = %s$")
_EXECUTE = re.compile(r"(?is)^EXECUTE (\w+)(?: USING (.+))?$")
_DEALLOCATE = re.compile(r"(?is)^DEALLOCATE PREPARE (\w+)$")
_STATUS = "SHOW SESSION STATUS LIKE 'Prepared_stmt_count'"


def _desc(columns: Sequence[str]) -> Tuple[Tuple[Any, ...], ...]:
    return tuple((c, None, None, None, None, None, None) for c in columns)


class FakeServer:
    def __init__(self, *, status_rows: bool = True) -> None:
        self.connections: List["FakeConnection"] = []
        self.fail_patterns: List[str] = []
        self.fail_connect = False
        self.status_rows = status_rows
        self.customer_queries: List[str] = []

    @property
    def prepared_stmt_count(self) -> int:
        return sum(len(c.prepared) for c in self.connections if not c.closed)

    def connect(self, **kwargs: Any) -> "FakeConnection":
        if self.fail_connect:
            raise pymysql.err.OperationalError(2003, "Can't connect to MySQL server")
        conn = FakeConnection(self, kwargs)
        self.connections.append(conn)
        return conn

    def executed(self) -> List[str]:
        return [sql for c in self.connections for sql in c.executed]


class FakeConnection:
    def __init__(self, server: FakeServer, kwargs: Dict[str, Any]) -> None:
        self.server = server
        self.kwargs = kwargs
        self.db = kwargs.get("database")
        self.prepared: Dict[str, str] = {}
        self.variables: Dict[str, Any] = {}
        self.executed: List[str] = []
        self.closed = False
        self.close_calls = 0

    def cursor(self, *a: Any, **k: Any) -> "FakeCursor":
        return FakeCursor(self)

    def close(self) -> None:
        self.close_calls += 1
        if self.closed:
            raise pymysql.err.Error("Already closed")
        self.closed = True
        self.prepared.clear()


class FakeCursor:
    def __init__(self, conn: FakeConnection) -> None:
        self._conn = conn
        self.description: Optional[Tuple[Tuple[Any, ...], ...]] = None
        self._rows: List[Tuple[Any, ...]] = []

    def execute(self, sql: str, args: Any = None) -> int:
        conn = self._conn
        if conn.closed:
            raise pymysql.err.InterfaceError(0, "")
        conn.executed.append(sql)
        for pattern in conn.server.fail_patterns:
            if re.search(pattern, sql):
                raise FakeMySQLError(1064, f"injected failure for {sql!r}")

        self.description, self._rows = None, []
        if sql == _STATUS:
            self.description = _desc(("Variable_name", "Value"))
            if conn.server.status_rows:
                self._rows = [("Prepared_stmt_count", str(conn.server.prepared_stmt_count))]
            return len(self._rows)

        m = _SELECT_CUSTOMER.match(sql)
        if m:
            (name,) = args
            return self._select_customer(name)

        m = _PREPARE.match(sql)
        if m:
            (text,) = args
            if not _SELECT_CUSTOMER.match(text):
                raise FakeMySQLError(1064, "You have an error in your SQL syntax")
            conn.prepared[m.group(1)] = text
            return 0

        m = _SET.match(sql)
        if m:
            (value,) = args
            conn.variables[m.group(1)] = value
            return 0

        m = _EXECUTE.match(sql)
        if m:
            if m.group(1) not in conn.prepared:
                raise FakeMySQLError(1243, f"Unknown prepared statement handler ({m.group(1)})")
            names = [v.strip().lstrip("@") for v in (m.group(2) or "").split(",") if v.strip()]
            if len(names) != 1:
                raise FakeMySQLError(1210, "Incorrect arguments to EXECUTE")
            return self._select_customer(conn.variables.get(names[0]))

        m = _DEALLOCATE.match(sql)
        if m:
            if conn.prepared.pop(m.group(1), None) is None:
                raise FakeMySQLError(1243, f"Unknown prepared statement handler ({m.group(1)})")
            return 0

        raise FakeMySQLError(1064, "You have an error in your SQL syntax")

    def _select_customer(self, name: Any) -> int:
        self._conn.server.customer_queries.append(name)
        self.description = _desc(_CUSTOMER_COLUMNS)
        row = CUSTOMERS.get(name)
        self._rows = [row] if row else []
        return len(self._rows)

    def fetchall(self) -> Tuple[Tuple[Any, ...], ...]:
        rows, self._rows = self._rows, []
        return tuple(rows)

    def close(self) -> None:
        return None
