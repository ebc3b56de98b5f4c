from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .config.options import DEFAULT_SCENARIOS, Scenario, scenario_url
from .config.settings import Settings
from .connect import connect
from .dbapi.session import Session
from .dbapi.statements import Identifiable
from .errors import DatabaseError
from .events.models import (
    COUNT_OBSERVED,
    ROW_FETCHED,
    SCENARIO_FAILED,
    SCENARIO_STARTED,
    ObserverEvent,
)
from .reporting.console import Reporter, TextReporter
from .utils import safe_int, safe_str

logger = logging.getLogger(__name__)

CUSTOMER_QUERY = "SELECT * FROM customer WHERE first_name = ?"
# Plain statement on purpose: preparing it would move the counter it reads.
PREPARED_STMT_COUNT_QUERY = "SHOW SESSION STATUS LIKE 'Prepared_stmt_count'"


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class ScenarioResult:
    scenario: Scenario
    counts: List[Optional[int]] = field(default_factory=list)  # counts[0] is the "before" reading
    rows: List[Optional[str]] = field(default_factory=list)
    statement_ids: List[Optional[int]] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _format_row(row: Optional[Dict[str, Any]]) -> Optional[str]:
    if row is None:
        return None
    return f"{row.get('first_name')} {row.get('last_name')}"


class CacheObserver:
    """Runs the customer query under each scenario and reports the server counter."""

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        reporter: Optional[Reporter] = None,
        query: str = CUSTOMER_QUERY,
    ) -> None:
        self._settings = settings or Settings.from_env()
        self._reporter = reporter or TextReporter()
        self._query = query

    @property
    def settings(self) -> Settings:
        return self._settings

    def run_all(self, scenarios: Iterable[Scenario] = DEFAULT_SCENARIOS) -> List[ScenarioResult]:
        results: List[ScenarioResult] = []
        for scenario in scenarios:
            result = ScenarioResult(scenario=scenario)
            try:
                self.run_scenario(scenario, result=result)
            except DatabaseError as e:
                logger.exception("Scenario %r failed", scenario.title)
                result.error = e
                self._emit(SCENARIO_FAILED, scenario, errorMessage=safe_str(e))
            results.append(result)
        self._reporter.flush()
        return results

    def run_scenario(self, scenario: Scenario, *, result: Optional[ScenarioResult] = None) -> ScenarioResult:
        """Run one scenario on its own session; database errors propagate."""
        result = result if result is not None else ScenarioResult(scenario=scenario)
        url = scenario_url(self._settings, scenario)
        logger.info("Running %r against %s", scenario.title, url.render_as_string(hide_password=True))
        self._emit(SCENARIO_STARTED, scenario, description=scenario.description)

        with connect(url, settings=self._settings) as session:
            self._record_count(session, scenario, result, step=0)
            for step, name in enumerate(self._settings.test_names, start=1):
                with session.prepare(self._query) as stmt:
                    row = _format_row(stmt.execute((name,)).first())
                    statement_id = self.identify_statement(stmt)
                result.rows.append(row)
                result.statement_ids.append(statement_id)
                self._emit(ROW_FETCHED, scenario, step=step, name=name, row=row, statementId=statement_id)
                self._record_count(session, scenario, result, step=step)
        return result

    def observe_count(self, session: Session) -> Optional[int]:
        """Read ``Prepared_stmt_count``; ``None`` when the server returns no row."""
        row = session.query(PREPARED_STMT_COUNT_QUERY).first()
        if row is None:
            return None
        value = row.get("Value")
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("ascii", "replace")
        return safe_int(value)

    def identify_statement(self, handle: Any) -> Optional[int]:
        """Best-effort driver statement id; ``None`` if the handle has none."""
        if not isinstance(handle, Identifiable):
            return None
        try:
            return safe_int(handle.statement_id())
        except Exception:
            logger.debug("statement_id() failed on %r", handle, exc_info=True)
            return None

    def _record_count(self, session: Session, scenario: Scenario, result: ScenarioResult, *, step: int) -> None:
        try:
            count = self.observe_count(session)
        except DatabaseError:
            logger.exception("Could not read Prepared_stmt_count (step %d of %r)", step, scenario.title)
            count = None
        result.counts.append(count)
        self._emit(COUNT_OBSERVED, scenario, step=step, preparedStmtCount=count)

    def _emit(self, kind: str, scenario: Scenario, **fields: Any) -> None:
        self._reporter.publish(ObserverEvent(kind=kind, scenario=scenario.title, timestamp=_now_ms(), **fields))
