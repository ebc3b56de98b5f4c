from __future__ import annotations

from mysql_prep_observer import CacheObserver, Scenario
from mysql_prep_observer.config.settings import Settings


def main() -> None:
    # One cache slot is enough for the single repeated customer query.
    settings = Settings.from_env()
    scenario = Scenario(
        title="Server-side statements, single-entry cache",
        query_string="useServerPrepStmts=true&cachePrepStmts=true&prepStmtCacheSize=1&profileSQL=true",
    )
    CacheObserver(settings=settings).run_all([scenario])


if __name__ == "__main__":
    main()
