from __future__ import annotations

from mysql_prep_observer.dbapi.cache import StatementCache
from mysql_prep_observer.dbapi.statements import PreparedStatement, ResultSet, rewrite_placeholders


def test_rewrite_placeholders_counts_and_converts() -> None:
    sql, n = rewrite_placeholders("SELECT * FROM customer WHERE first_name = ? AND last_name = ?")
    assert sql == "SELECT * FROM customer WHERE first_name = %s AND last_name = %s"
    assert n == 2


def test_rewrite_placeholders_skips_quoted_question_marks() -> None:
    sql, n = rewrite_placeholders("SELECT '?', \"a?b\", `c?` FROM t WHERE x = ?")
    assert sql == "SELECT '?', \"a?b\", `c?` FROM t WHERE x = %s"
    assert n == 1


def test_rewrite_placeholders_handles_escaped_quote_and_percent() -> None:
    sql, n = rewrite_placeholders("SELECT 'it\\'s ?' LIKE '10%' FROM t WHERE a = ?")
    assert sql == "SELECT 'it\\'s ?' LIKE '10%%' FROM t WHERE a = %s"
    assert n == 1


class _Cur:
    description = (("id",), ("name",))

    def fetchall(self):
        return ((1, "a"), (2, "b"))


def test_result_set_from_cursor() -> None:
    rs = ResultSet.from_cursor(_Cur())
    assert rs.columns == ["id", "name"]
    assert rs.first() == {"id": 1, "name": "a"}
    assert len(rs) == 2


def test_result_set_without_description_is_empty() -> None:
    cur = _Cur()
    cur.description = None
    rs = ResultSet.from_cursor(cur)
    assert rs.first() is None
    assert rs.columns == []


class _Stmt(PreparedStatement):
    def __init__(self, sql: str) -> None:
        self._sql = sql
        self._in_use = False


def test_cache_checkout_removes_and_put_returns() -> None:
    cache = StatementCache(max_size=2, sql_limit=100)
    s = _Stmt("SELECT 1")
    assert cache.put(s) == []
    assert "SELECT 1" in cache
    assert cache.checkout("SELECT 1") is s
    assert cache.checkout("SELECT 1") is None
    assert len(cache) == 0


def test_cache_evicts_least_recently_parked() -> None:
    cache = StatementCache(max_size=2, sql_limit=100)
    a, b, c = _Stmt("a"), _Stmt("b"), _Stmt("c")
    cache.put(a)
    cache.put(b)
    assert cache.put(c) == [a]
    assert cache.drain() == [b, c]


def test_cache_sql_limit() -> None:
    cache = StatementCache(max_size=5, sql_limit=4)
    assert cache.cacheable("abcd")
    assert not cache.cacheable("abcde")
    assert not StatementCache(max_size=0, sql_limit=100).cacheable("a")
