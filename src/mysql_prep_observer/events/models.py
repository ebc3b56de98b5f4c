from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

# ObserverEvent.kind values
SCENARIO_STARTED = "scenario_started"
COUNT_OBSERVED = "count_observed"
ROW_FETCHED = "row_fetched"
SCENARIO_FAILED = "scenario_failed"


@dataclass(frozen=True)
class ObserverEvent:
    kind: str
    scenario: str
    timestamp: int  # epoch millis (wall clock)
    step: Optional[int] = None  # 0 before the first query, then 1..n
    name: Optional[str] = None  # bound parameter value
    description: Optional[str] = None
    row: Optional[str] = None  # "FIRST LAST", None when no row matched
    statementId: Optional[int] = None
    preparedStmtCount: Optional[int] = None
    errorMessage: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
