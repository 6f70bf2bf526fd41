# Overview: Fire-and-forget wrapper for secondary writes that must never fail the primary operation.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from flask import current_app


@dataclass(frozen=True)
class Outcome:
    """Result of a best-effort side effect. Inspected for logging only."""
    ok: bool
    error: str | None = None


OK = Outcome(True)


def run_best_effort(description: str, fn: Callable[..., Any], *args, **kwargs) -> Outcome:
    """
    Call fn; on any exception log a warning and return a failed Outcome.

    Used for confirmation emails, audit inserts and history rows that run
    after the operation's defining effect has already succeeded.
    """
    try:
        fn(*args, **kwargs)
    except Exception as exc:
        current_app.logger.warning("%s failed: %s", description, exc)
        return Outcome(False, str(exc))
    return OK
