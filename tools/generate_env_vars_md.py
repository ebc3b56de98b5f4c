#!/usr/bin/env python3
"""Generate docs/ENV_VARS.md from mysql_prep_observer.config.settings.

Usage:
    python tools/generate_env_vars_md.py
"""

from __future__ import annotations

from pathlib import Path

from mysql_prep_observer.config.settings import ENV_SPECS, OUTPUT_FORMATS, Settings

_ALLOWED = {"output": ", ".join(OUTPUT_FORMATS)}


def _default_cell(value: object) -> str:
    if value is None:
        return "unset"
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return str(value)


def render() -> str:
    base = Settings()
    lines = [
        "# Environment variables",
        "",
        "This file is generated from `Settings` + `ENV_SPECS`.",
        "Credential variables override the user and password given in `OBSERVER_DB_URL`.",
        "",
        "| Env var | Field | Type | Default | Allowed | Credential |",
        "|---|---|---|---|---|---|",
    ]
    for spec in ENV_SPECS:
        default = _default_cell(getattr(base, spec.field))
        allowed = _ALLOWED.get(spec.field, "")
        credential = "yes" if spec.secret else ""
        lines.append(f"| `{spec.env}` | `{spec.field}` | `{spec.kind}` | `{default}` | {allowed} | {credential} |")
    return "\n".join(lines) + "\n"


def main() -> int:
    out = Path(__file__).resolve().parents[1] / "docs" / "ENV_VARS.md"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render(), encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
