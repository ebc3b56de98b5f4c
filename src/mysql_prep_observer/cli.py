from __future__ import annotations

import logging
import sys
from typing import List, Optional

from .adapters.registry import get_adapter_with_defaults
from .config.options import DEFAULT_SCENARIOS, parse_db_url
from .config.settings import Settings
from .errors import ConfigurationError, DriverAdapterError
from .observer import CacheObserver
from .reporting.console import build_reporter

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level.strip().upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    # Scenarios that ask for profileSQL should be visible at any level.
    logging.getLogger("mysql_prep_observer.profile").setLevel(min(level, logging.INFO))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the three default scenarios. Takes no arguments."""
    if argv:
        print("usage: mysql-prep-observer  (configure via OBSERVER_* environment variables)", file=sys.stderr)
        return 2

    settings = Settings.from_env()
    _configure_logging(settings)
    try:
        parse_db_url(settings)
        get_adapter_with_defaults(settings.driver)
        reporter = build_reporter(settings)
        observer = CacheObserver(settings=settings, reporter=reporter)
        try:
            observer.run_all(DEFAULT_SCENARIOS)
        finally:
            reporter.close()
    except (ConfigurationError, DriverAdapterError) as e:
        logger.error("%s", e)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
