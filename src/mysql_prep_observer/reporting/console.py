from __future__ import annotations

import json
from typing import IO, Optional, Protocol, runtime_checkable

from ..config.settings import OUTPUT_FORMATS, Settings
from ..errors import ConfigurationError
from ..events.models import (
    COUNT_OBSERVED,
    ROW_FETCHED,
    SCENARIO_FAILED,
    SCENARIO_STARTED,
    ObserverEvent,
)

_RULE = "=" * 55


@runtime_checkable
class Reporter(Protocol):
    def publish(self, event: ObserverEvent) -> None: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class TextReporter:
    """Human-readable progress, one scenario banner followed by its steps."""

    def __init__(self, *, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream
        self._scenarios = 0

    def _print(self, line: str = "") -> None:
        print(line, file=self._stream)

    def publish(self, event: ObserverEvent) -> None:
        if event.kind == SCENARIO_STARTED:
            if self._scenarios:
                self._print()
            self._scenarios += 1
            self._print(_RULE)
            self._print(event.scenario)
            if event.description:
                self._print(event.description)
            self._print(_RULE)
        elif event.kind == COUNT_OBSERVED:
            if event.step == 0:
                self._print("  [before test]")
            count = "unknown" if event.preparedStmtCount is None else str(event.preparedStmtCount)
            self._print(f"    => prepared statements held by the server: {count}")
        elif event.kind == ROW_FETCHED:
            self._print()
            self._print(f"--- [iteration {event.step}] application queries '{event.name}' ---")
            if event.row is None:
                self._print("-> no rows")
            elif event.statementId is None:
                self._print(f"-> found: {event.row}  (not a server-side prepared statement, no id)")
            else:
                self._print(f"-> found: {event.row}  (server statement id: {event.statementId})")
        elif event.kind == SCENARIO_FAILED:
            self._print(f"!! scenario failed: {event.errorMessage}")

    def flush(self) -> None:
        if self._stream is not None:
            self._stream.flush()

    def close(self) -> None:
        self.flush()


class JsonReporter:
    """One compact JSON object per event."""

    def __init__(self, *, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream

    def publish(self, event: ObserverEvent) -> None:
        payload = json.dumps(event.to_dict(), ensure_ascii=False, default=str, separators=(",", ":"))
        print(payload, file=self._stream)

    def flush(self) -> None:
        if self._stream is not None:
            self._stream.flush()

    def close(self) -> None:
        self.flush()


def build_reporter(settings: Settings, *, stream: Optional[IO[str]] = None) -> Reporter:
    if settings.output == "text":
        return TextReporter(stream=stream)
    if settings.output == "json":
        return JsonReporter(stream=stream)
    raise ConfigurationError(f"Unsupported output format: {settings.output!r} (expected one of {OUTPUT_FORMATS})")
