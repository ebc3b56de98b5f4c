from __future__ import annotations

import enum
import logging
import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple, Type

from ..config.options import DriverOptions
from ..errors import DatabaseError, SessionStateError
from .cache import StatementCache
from .statements import (
    ClientPreparedStatement,
    DBAPIConnection,
    PreparedStatement,
    ResultSet,
    ServerPreparedStatement,
)

if TYPE_CHECKING:
    from ..adapters.base import DriverAdapter

logger = logging.getLogger(__name__)
profile_logger = logging.getLogger("mysql_prep_observer.profile")


class SessionState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class Session:
    """One DB-API connection plus the statements prepared on it.

    Driver options decide what ``prepare`` hands out: client-side handles,
    server-side handles, and whether closed handles are parked in a
    statement cache for reuse.
    """

    def __init__(
        self,
        *,
        adapter: "DriverAdapter",
        connect_kwargs: Dict[str, Any],
        options: DriverOptions,
    ) -> None:
        self._adapter = adapter
        self._connect_kwargs = connect_kwargs
        self._options = options
        self._conn: Optional[DBAPIConnection] = None
        self._state = SessionState.UNOPENED
        self._error_types: Tuple[Type[BaseException], ...] = ()
        self._next_statement_id = 0
        self._cache = StatementCache(
            max_size=options.prep_stmt_cache_size if options.cache_prep_stmts else 0,
            sql_limit=options.prep_stmt_cache_sql_limit,
        )
        self.database: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def options(self) -> DriverOptions:
        return self._options

    @property
    def cached_statements(self) -> int:
        return len(self._cache)

    def open(self) -> "Session":
        if self._state is not SessionState.UNOPENED:
            raise SessionStateError(f"Cannot open a session that is {self._state.value}")
        self._error_types = self._adapter.error_types()
        try:
            self._conn = self._adapter.connect(**self._connect_kwargs)
        except self._error_types as e:
            raise DatabaseError(f"Connection failed: {e}") from e
        self._state = SessionState.OPEN
        self.database = self._adapter.database_name(self._conn, self._connect_kwargs)
        return self

    def prepare(self, sql: str) -> PreparedStatement:
        self._require_open()
        if self._options.cache_enabled and self._cache.cacheable(sql):
            stmt = self._cache.checkout(sql)
            if stmt is not None:
                stmt._checkout()
                return stmt
        if self._options.use_server_prep_stmts:
            self._next_statement_id += 1
            return ServerPreparedStatement(session=self, sql=sql, statement_id=self._next_statement_id)
        return ClientPreparedStatement(session=self, sql=sql)

    def query(self, sql: str) -> ResultSet:
        """Run plain SQL, bypassing preparation entirely."""
        return self._run(sql)

    def close(self) -> None:
        """Deallocate cached statements, then close the connection once."""
        if self._state is not SessionState.OPEN:
            self._state = SessionState.CLOSED
            return
        try:
            for stmt in self._cache.drain():
                stmt.deallocate()
        finally:
            self._state = SessionState.CLOSED
            conn, self._conn = self._conn, None
            try:
                if conn is not None:
                    conn.close()
            except Exception:
                logger.warning("Error while closing connection", exc_info=True)

    def _release(self, stmt: PreparedStatement) -> None:
        if self._state is not SessionState.OPEN:
            # the server dropped its statements together with the connection
            stmt._discard()
            return
        if self._options.cache_enabled and self._cache.cacheable(stmt.sql):
            for evicted in self._cache.put(stmt):
                evicted.deallocate()
            return
        stmt.deallocate()

    def _require_open(self) -> DBAPIConnection:
        if self._state is not SessionState.OPEN or self._conn is None:
            raise SessionStateError(f"Session is {self._state.value}")
        return self._conn

    def _run(self, sql: str, args: Any = None) -> ResultSet:
        conn = self._require_open()
        t0 = time.perf_counter_ns()
        try:
            cur = conn.cursor()
            try:
                cur.execute(sql, args)
                return ResultSet.from_cursor(cur)
            finally:
                try:
                    cur.close()
                except Exception:
                    pass
        except self._error_types as e:
            raise DatabaseError(str(e)) from e
        finally:
            if self._options.profile_sql:
                duration_ms = (time.perf_counter_ns() - t0) / 1_000_000
                profile_logger.info("[QUERY] duration: %.3f ms, sql: %s, args: %r", duration_ms, sql, args)

    def __enter__(self) -> "Session":
        if self._state is SessionState.UNOPENED:
            self.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
