"""Driver options and the scenarios built from them.

Options are spelled the way MySQL Connector/J spells its connection
properties (``useServerPrepStmts``, ``cachePrepStmts`` ...) so a scenario is
described by a plain URL query string, e.g.
``useServerPrepStmts=true&cachePrepStmts=false&profileSQL=true``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Mapping, Optional, Sequence, Union

from ..errors import ConfigurationError
from .settings import Settings

if TYPE_CHECKING:
    from sqlalchemy.engine.url import URL

QueryValue = Union[str, Sequence[str]]

_TRUE = {"1", "true", "t", "yes", "y", "on"}


def _last(value: QueryValue) -> str:
    if isinstance(value, str):
        return value
    return value[-1] if value else ""


def _opt_bool(query: Mapping[str, QueryValue], key: str, default: bool) -> bool:
    if key not in query:
        return default
    return _last(query[key]).strip().lower() in _TRUE


def _opt_int(query: Mapping[str, QueryValue], key: str, default: int) -> int:
    if key not in query:
        return default
    try:
        return int(_last(query[key]).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class DriverOptions:
    use_server_prep_stmts: bool = False
    cache_prep_stmts: bool = False
    prep_stmt_cache_size: int = 25
    prep_stmt_cache_sql_limit: int = 256
    profile_sql: bool = False

    @classmethod
    def from_query(cls, query: Mapping[str, QueryValue]) -> "DriverOptions":
        """Build options from URL query parameters; unknown keys are ignored."""
        base = cls()
        return cls(
            use_server_prep_stmts=_opt_bool(query, "useServerPrepStmts", base.use_server_prep_stmts),
            cache_prep_stmts=_opt_bool(query, "cachePrepStmts", base.cache_prep_stmts),
            prep_stmt_cache_size=max(0, _opt_int(query, "prepStmtCacheSize", base.prep_stmt_cache_size)),
            prep_stmt_cache_sql_limit=max(
                0, _opt_int(query, "prepStmtCacheSqlLimit", base.prep_stmt_cache_sql_limit)
            ),
            profile_sql=_opt_bool(query, "profileSQL", base.profile_sql),
        )

    @classmethod
    def from_query_string(cls, query_string: str) -> "DriverOptions":
        from urllib.parse import parse_qs

        return cls.from_query(parse_qs(query_string.lstrip("?"), keep_blank_values=True))

    @property
    def cache_enabled(self) -> bool:
        return self.cache_prep_stmts and self.prep_stmt_cache_size > 0


@dataclass(frozen=True)
class Scenario:
    title: str
    query_string: str
    description: Optional[str] = None
    options: DriverOptions = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", DriverOptions.from_query_string(self.query_string))


DEFAULT_SCENARIOS: List[Scenario] = [
    Scenario(
        title="Scenario 1: client-side prepared statement",
        query_string="useServerPrepStmts=false&profileSQL=true",
        description="options: useServerPrepStmts=false",
    ),
    Scenario(
        title="Scenario 2: server-side prepared statement (cache off)",
        query_string="useServerPrepStmts=true&cachePrepStmts=false&profileSQL=true",
        description="options: useServerPrepStmts=true & cachePrepStmts=false",
    ),
    Scenario(
        title="Scenario 3: server-side prepared statement (cache on)",
        query_string="useServerPrepStmts=true&cachePrepStmts=true&profileSQL=true",
        description="options: useServerPrepStmts=true & cachePrepStmts=true",
    ),
]


def parse_db_url(settings: Settings) -> "URL":
    """Parse ``settings.db_url``; an unusable URL is a configuration error."""
    from sqlalchemy.engine.url import make_url
    from sqlalchemy.exc import ArgumentError

    try:
        url = make_url(settings.db_url)
        if url.port is not None:
            int(url.port)
    except (ArgumentError, ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid OBSERVER_DB_URL {settings.db_url!r}: {e}") from e
    return url


def scenario_url(settings: Settings, scenario: Scenario) -> "URL":
    """Assemble the connection URL: base URL + schema + scenario options."""
    url = parse_db_url(settings).set(database=settings.db_schema)
    return url.update_query_string(scenario.query_string, append=True)
