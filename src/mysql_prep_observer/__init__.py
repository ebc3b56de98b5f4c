"""mysql-prep-observer.

Public API:
    - connect(url, ...): open a Session whose driver options come from the URL
    - CacheObserver: run scenarios and report Prepared_stmt_count
    - DEFAULT_SCENARIOS: client-side, server-side uncached and server-side cached
"""

from .config.options import DEFAULT_SCENARIOS, DriverOptions, Scenario
from .connect import connect
from .observer import CacheObserver, ScenarioResult

__all__ = ["CacheObserver", "DEFAULT_SCENARIOS", "DriverOptions", "Scenario", "ScenarioResult", "connect"]
