from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..errors import DatabaseError, SessionStateError

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

SERVER_STMT_PREFIX = "mpo_stmt_"


@runtime_checkable
class DBAPICursor(Protocol):
    description: Any

    def execute(self, operation: str, params: Any = ...) -> Any: ...
    def fetchall(self) -> Any: ...
    def close(self) -> Any: ...


@runtime_checkable
class DBAPIConnection(Protocol):
    def cursor(self, *args: Any, **kwargs: Any) -> DBAPICursor: ...
    def close(self) -> Any: ...


@runtime_checkable
class Identifiable(Protocol):
    """A statement handle able to report a driver-internal identifier."""

    def statement_id(self) -> Optional[int]: ...


@dataclass
class ResultSet:
    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_cursor(cls, cursor: DBAPICursor) -> "ResultSet":
        description = getattr(cursor, "description", None)
        if not description:
            return cls()
        columns = [str(d[0]) for d in description]
        rows = [dict(zip(columns, r)) for r in (cursor.fetchall() or ())]
        return cls(columns=columns, rows=rows)

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None

    def __len__(self) -> int:
        return len(self.rows)


def rewrite_placeholders(sql: str) -> Tuple[str, int]:
    """Turn ``?`` placeholders into pyformat ``%s`` ones.

    Returns the rewritten SQL and the number of placeholders. ``?`` inside
    quoted literals or identifiers is left alone and every literal ``%`` is
    doubled so the driver's ``%`` interpolation leaves it intact.
    """
    out: List[str] = []
    count = 0
    quote: Optional[str] = None
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch == "%":
            out.append("%%")
        elif quote is not None:
            out.append(ch)
            if ch == "\\" and quote != "`" and i + 1 < n:
                i += 1
                out.append("%%" if sql[i] == "%" else sql[i])
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
        elif ch == "?":
            out.append("%s")
            count += 1
        else:
            out.append(ch)
        i += 1
    return "".join(out), count


def _check_param_count(expected: int, params: Sequence[Any]) -> None:
    if len(params) != expected:
        raise DatabaseError(f"Statement expects {expected} parameter(s), got {len(params)}")


class PreparedStatement:
    """Base statement handle; checked out from a session until closed."""

    def __init__(self, *, session: "Session", sql: str) -> None:
        self._session = session
        self._sql = sql
        self._in_use = True

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def closed(self) -> bool:
        return not self._in_use

    def execute(self, params: Sequence[Any] = ()) -> ResultSet:
        if not self._in_use:
            raise SessionStateError("Statement is closed")
        return self._execute(tuple(params))

    def close(self) -> None:
        """Hand the statement back to its session. Never raises."""
        if not self._in_use:
            return
        self._in_use = False
        try:
            self._session._release(self)
        except Exception:
            logger.warning("Failed to release statement %r", self._sql, exc_info=True)

    def deallocate(self) -> None:
        return None

    def _discard(self) -> None:
        self._in_use = False

    def _checkout(self) -> None:
        self._in_use = True

    def _execute(self, params: Tuple[Any, ...]) -> ResultSet:
        raise NotImplementedError

    def __enter__(self) -> "PreparedStatement":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class ClientPreparedStatement(PreparedStatement):
    """Parameters are interpolated by the driver; the server never sees a statement."""

    def __init__(self, *, session: "Session", sql: str) -> None:
        super().__init__(session=session, sql=sql)
        self._operation, self._param_count = rewrite_placeholders(sql)

    def _execute(self, params: Tuple[Any, ...]) -> ResultSet:
        _check_param_count(self._param_count, params)
        if not params:
            # no interpolation happens without args, so "%%" would reach the server
            return self._session._run(self._sql)
        return self._session._run(self._operation, params)


class ServerPreparedStatement(PreparedStatement):
    """A statement prepared and held by the server under ``mpo_stmt_<id>``."""

    def __init__(self, *, session: "Session", sql: str, statement_id: int) -> None:
        super().__init__(session=session, sql=sql)
        self._id = statement_id
        self._param_count = rewrite_placeholders(sql)[1]
        self._deallocated = False
        self._session._run(f"PREPARE {self.server_name} FROM %s", (sql,))

    @property
    def server_name(self) -> str:
        return f"{SERVER_STMT_PREFIX}{self._id}"

    @property
    def deallocated(self) -> bool:
        return self._deallocated

    def statement_id(self) -> Optional[int]:
        return self._id

    def _execute(self, params: Tuple[Any, ...]) -> ResultSet:
        _check_param_count(self._param_count, params)
        names = [f"@{self.server_name}_p{i + 1}" for i in range(len(params))]
        for name, value in zip(names, params):
            self._session._run(f"SET {name} = %s", (value,))
        if names:
            return self._session._run(f"EXECUTE {self.server_name} USING {', '.join(names)}")
        return self._session._run(f"EXECUTE {self.server_name}")

    def _discard(self) -> None:
        self._in_use = False
        self._deallocated = True

    def deallocate(self) -> None:
        """Drop the server-side statement. Failures are logged, never raised."""
        if self._deallocated:
            return
        self._deallocated = True
        self._in_use = False
        try:
            self._session._run(f"DEALLOCATE PREPARE {self.server_name}")
        except Exception:
            logger.warning("Failed to deallocate server statement %s", self.server_name, exc_info=True)
