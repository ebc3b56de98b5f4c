from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

from .adapters.registry import get_adapter_with_defaults
from .config.options import DriverOptions
from .config.settings import Settings
from .dbapi.session import Session

if TYPE_CHECKING:
    from sqlalchemy.engine.url import URL


def connect(
    url: Union[str, "URL"],
    *,
    settings: Optional[Settings] = None,
    driver: Optional[str] = None,
) -> Session:
    """Open a session on ``url``; driver options come from the URL's query string."""
    from sqlalchemy.engine.url import make_url

    settings = settings or Settings.from_env()
    url = make_url(url)
    adapter = get_adapter_with_defaults(driver or settings.driver)
    options = DriverOptions.from_query(url.query)
    session = Session(adapter=adapter, connect_kwargs=adapter.connect_kwargs(url, settings), options=options)
    return session.open()
