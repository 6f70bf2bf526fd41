# Overview: Service-layer operations for the audit trail; best-effort inserts and filtered reads.

"""
Audit trail writer.

Audit inserts are secondary writes: a failure is logged and reported as a
failed Outcome, never raised into the operation being audited. When the
audit table has not been migrated yet, the warning is emitted once per
AuditLogger instance (one per app process) instead of on every call.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import OperationalError, ProgrammingError, SQLAlchemyError

from ..date_filters import apply_date_range_filter
from ..extensions import db
from ..models import AuditLog
from .best_effort import OK, Outcome


AUDIT_LOG_LIMIT = 1000


class AuditAction:
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    RESEND_INVITE = "RESEND_INVITE"
    UPDATE_STATUS = "UPDATE_STATUS"
    UPDATE_STOCK = "UPDATE_STOCK"
    UPDATE_PRICE = "UPDATE_PRICE"
    ADD_EXPENSE = "ADD_EXPENSE"


class AuditEntity:
    STAFF = "STAFF"
    STALL = "STALL"
    STOCK = "STOCK"
    MENU_ITEM = "MENU_ITEM"
    EXPENSE = "EXPENSE"


def _is_missing_table(exc: SQLAlchemyError) -> bool:
    if not isinstance(exc, (OperationalError, ProgrammingError)):
        return False
    if getattr(exc.orig, "pgcode", None) == "42P01":
        return True
    message = str(exc.orig).lower()
    return "no such table" in message or "does not exist" in message


def _snapshot(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str, sort_keys=True)


class AuditLogger:
    """
    Writes AuditLog rows. Call after the audited change is committed.

    Owns the "audit table missing" flag so the warning is logged at most
    once for the lifetime of this instance.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._missing_table_warned = False

    @property
    def missing_table_warned(self) -> bool:
        return self._missing_table_warned

    def log_activity(
        self,
        *,
        action: str,
        entity: str,
        entity_id: Any = None,
        user_id: str | None = None,
        user_name: str | None = None,
        details: str = "",
        old_value: Any = None,
        new_value: Any = None,
        stall_id: int | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Outcome:
        entry = AuditLog(
            action=action,
            entity=entity,
            entity_id=str(entity_id) if entity_id is not None else None,
            user_id=user_id,
            user_name=user_name,
            details=details,
            old_value=_snapshot(old_value),
            new_value=_snapshot(new_value),
            stall_id=stall_id,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
        )

        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            if _is_missing_table(exc):
                if not self._missing_table_warned:
                    self._logger.warning(
                        "Audit logs table does not exist. Activities will not be "
                        "logged until the audit_logs migration is applied."
                    )
                    self._missing_table_warned = True
            else:
                self._logger.error("Error logging activity %s/%s: %s", entity, action, exc)
            return Outcome(False, str(exc))

        return OK


def list_audit_logs(
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    action: str | None = None,
    entity: str | None = None,
    user_id: str | None = None,
    limit: int = AUDIT_LOG_LIMIT,
) -> list[AuditLog]:
    """Newest first, capped at `limit`. Dates filter the timestamp column in civil days."""
    query = db.session.query(AuditLog)
    query = apply_date_range_filter(query, AuditLog.timestamp, start_date, end_date, is_timestamp=True)

    if action:
        query = query.filter(AuditLog.action == action)
    if entity:
        query = query.filter(AuditLog.entity == entity)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)

    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(min(limit, AUDIT_LOG_LIMIT)).all()


def init_audit_logger(app) -> AuditLogger:
    audit_logger = AuditLogger(app.logger)
    app.extensions["audit_logger"] = audit_logger
    return audit_logger
