# logs.py
from __future__ import annotations

from typing import Any

from config import log_verbosity

PREFIX = "[admission]"


def vlog(level: int, msg: str, **fields: Any) -> None:
    """Print `[admission] msg key=value ...` when ADMISSION_LOG_VERBOSITY >= level."""
    if log_verbosity() < level:
        return
    kv = " ".join(f"{k}={v}" for k, v in fields.items())
    print(f"{PREFIX} {msg} {kv}".rstrip())
