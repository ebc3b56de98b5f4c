from __future__ import annotations

from typing import Any, Optional


def safe_str(v: Any) -> Optional[str]:
    try:
        return None if v is None else str(v)
    except Exception:
        return None


def safe_int(v: Any) -> Optional[int]:
    try:
        return None if v is None else int(v)
    except Exception:
        return None
