from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Tuple, Type, runtime_checkable

from ..config.settings import Settings
from ..dbapi.statements import DBAPIConnection

if TYPE_CHECKING:
    from sqlalchemy.engine.url import URL


@runtime_checkable
class DriverAdapter(Protocol):
    name: str

    def connect_kwargs(self, url: "URL", settings: Settings) -> Dict[str, Any]: ...
    def connect(self, *args: Any, **kwargs: Any) -> DBAPIConnection: ...
    def database_name(self, conn: DBAPIConnection, connect_kwargs: Dict[str, Any]) -> Optional[str]: ...
    def error_types(self) -> Tuple[Type[BaseException], ...]: ...
