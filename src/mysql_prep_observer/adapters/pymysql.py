from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, Type

from ..config.settings import Settings
from .base import DriverAdapter

if TYPE_CHECKING:
    from sqlalchemy.engine.url import URL

_CONNECT_FUNC: Optional[Callable[..., Any]] = None


def set_connect_func(func: Optional[Callable[..., Any]]) -> None:
    """Inject the driver connect function (tests pass a fake server here)."""
    global _CONNECT_FUNC
    _CONNECT_FUNC = func


class PyMySQLAdapter(DriverAdapter):
    """Driver adapter for PyMySQL.

    PyMySQL only speaks the text protocol, so every statement it runs is
    client-side; server-side preparation is layered on top by the session
    with SQL ``PREPARE``/``EXECUTE``.
    """

    name = "pymysql"

    def connect_kwargs(self, url: "URL", settings: Settings) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "host": url.host or "localhost",
            "port": int(url.port or 3306),
            "user": settings.db_user if settings.db_user is not None else (url.username or ""),
            "password": settings.db_password if settings.db_password is not None else (url.password or ""),
            "connect_timeout": settings.connect_timeout,
            "autocommit": True,
        }
        if url.database:
            kwargs["database"] = url.database
        return kwargs

    def connect(self, *args: Any, **kwargs: Any) -> Any:
        import pymysql  # type: ignore

        fn = _CONNECT_FUNC or pymysql.connect
        return fn(*args, **kwargs)

    def database_name(self, conn: Any, connect_kwargs: Dict[str, Any]) -> Optional[str]:
        for k in ("db", "database"):
            v = connect_kwargs.get(k)
            if v:
                return str(v)
        for attr in ("db", "database"):
            v = getattr(conn, attr, None)
            if isinstance(v, bytes):
                return v.decode("utf-8", "replace")
            if v:
                return str(v)
        return None

    def error_types(self) -> Tuple[Type[BaseException], ...]:
        import pymysql  # type: ignore

        return (pymysql.err.Error,)
