from __future__ import annotations

from collections import OrderedDict
from typing import List, Optional

from .statements import PreparedStatement


class StatementCache:
    """Per-session LRU of idle statements keyed by SQL text.

    Statements are removed while checked out and put back on close, so two
    open handles never share one server-side statement.
    """

    def __init__(self, *, max_size: int, sql_limit: int) -> None:
        self._max_size = max_size
        self._sql_limit = sql_limit
        self._idle: "OrderedDict[str, PreparedStatement]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._idle)

    def __contains__(self, sql: object) -> bool:
        return sql in self._idle

    def cacheable(self, sql: str) -> bool:
        return self._max_size > 0 and len(sql) <= self._sql_limit

    def checkout(self, sql: str) -> Optional[PreparedStatement]:
        return self._idle.pop(sql, None)

    def put(self, stmt: PreparedStatement) -> List[PreparedStatement]:
        """Park an idle statement; returns whatever had to be evicted."""
        evicted: List[PreparedStatement] = []
        previous = self._idle.pop(stmt.sql, None)
        if previous is not None and previous is not stmt:
            evicted.append(previous)
        self._idle[stmt.sql] = stmt
        while len(self._idle) > self._max_size:
            _, oldest = self._idle.popitem(last=False)
            evicted.append(oldest)
        return evicted

    def drain(self) -> List[PreparedStatement]:
        out = list(self._idle.values())
        self._idle.clear()
        return out
