from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import List, Optional


def _env(name: str) -> Optional[str]:
    v = os.getenv(name)
    return v if v not in (None, "") else None


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    v = _env(name)
    if v is None:
        return default
    try:
        return int(v.strip())
    except ValueError:
        return default


def _env_csv(name: str, default: List[str]) -> List[str]:
    v = _env(name)
    if v is None:
        return default
    parts = [p.strip() for p in v.split(",")]
    return [p for p in parts if p] or default


@dataclass(frozen=True)
class EnvSpec:
    env: str
    field: str
    kind: str  # "opt_str" | "str" | "bool" | "int" | "csv"
    secret: bool = False  # holds credentials


def _coerce_env(spec: EnvSpec, *, default: object) -> object:
    if spec.kind in ("opt_str", "str"):
        v = _env(spec.env)
        return default if v is None else v
    if spec.kind == "bool":
        return _env_bool(spec.env, bool(default))
    if spec.kind == "int":
        return _env_int(spec.env, int(default))  # type: ignore[arg-type]
    if spec.kind == "csv":
        if not isinstance(default, list):
            return default
        return _env_csv(spec.env, default)
    return default


OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class Settings:
    """Static configuration loaded from environment (once)."""

    # Connection. Scenario driver options are appended to db_url's query.
    db_url: str = "mysql://localhost:3306/"
    db_schema: str = "sakila"
    db_user: Optional[str] = None  # falls back to the URL's username
    db_password: Optional[str] = None  # falls back to the URL's password
    driver: str = "pymysql"
    connect_timeout: int = 10

    # Bound parameter values, one query execution each, in order
    test_names: List[str] = field(default_factory=lambda: ["MARY", "PATRICIA", "LINDA"])

    # Output
    output: str = "text"  # "text" or "json"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        base = cls()
        overrides: dict[str, object] = {}
        for spec in ENV_SPECS:
            overrides[spec.field] = _coerce_env(spec, default=getattr(base, spec.field))
        return replace(base, **overrides)


ENV_SPECS: List[EnvSpec] = [
    # Connection
    EnvSpec("OBSERVER_DB_URL", "db_url", "str"),
    EnvSpec("OBSERVER_DB_SCHEMA", "db_schema", "str"),
    EnvSpec("OBSERVER_DB_USER", "db_user", "opt_str", secret=True),
    EnvSpec("OBSERVER_DB_PASSWORD", "db_password", "opt_str", secret=True),
    EnvSpec("OBSERVER_DB_DRIVER", "driver", "str"),
    EnvSpec("OBSERVER_CONNECT_TIMEOUT", "connect_timeout", "int"),

    # Workload
    EnvSpec("OBSERVER_TEST_NAMES", "test_names", "csv"),

    # Output
    EnvSpec("OBSERVER_OUTPUT", "output", "str"),
    EnvSpec("OBSERVER_LOG_LEVEL", "log_level", "str"),
]
