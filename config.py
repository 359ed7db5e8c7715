# config.py
from __future__ import annotations

import os
from typing import FrozenSet, Iterable, Optional


def log_verbosity() -> int:
    """
    Verbosity for gate logging, read on every call so tests can flip it.
      ADMISSION_LOG_VERBOSITY=0  silent (default)
      ADMISSION_LOG_VERBOSITY=2  denials and errors
      ADMISSION_LOG_VERBOSITY=3  every decision
    """
    raw = (os.environ.get("ADMISSION_LOG_VERBOSITY") or "").strip()
    try:
        return max(0, int(raw))
    except ValueError:
        return 0


def whitelist(users: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Normalize an enumerated list of usernames into the immutable set the gate checks.

    Names are kept verbatim; only empty entries are dropped. A bare string is
    one username, not a sequence of characters.
    """
    if isinstance(users, str):
        users = [users]
    return frozenset(u for u in (users or []) if u)


def split_csv(raw: str) -> list[str]:
    return [x.strip() for x in (raw or "").split(",") if x.strip()]
