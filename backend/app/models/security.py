from __future__ import annotations

import json

from ..extensions import db
from app.time_utils import to_utc_z, utcnow


class AuditLog(db.Model):
    """
    Activity audit trail.

    `timestamp` is an absolute instant (UTC), so date filtering on it uses
    timestamp mode. old_value/new_value hold JSON snapshots.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_entity_action", "entity", "action"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    action = db.Column(db.String(64), nullable=False, index=True)   # CREATE, DELETE, UPDATE_STATUS, ...
    entity = db.Column(db.String(64), nullable=False, index=True)   # STAFF, STALL, SALE, ...
    entity_id = db.Column(db.String(64), nullable=True)

    # Provider user id of the actor; not a foreign key so deleted accounts keep their history
    user_id = db.Column(db.String(36), nullable=True, index=True)
    user_name = db.Column(db.String(255), nullable=True)
    stall_id = db.Column(db.Integer, nullable=True, index=True)

    details = db.Column(db.Text, nullable=True)
    old_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)

    # Client context
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "stall_id": self.stall_id,
            "details": self.details,
            "old_value": json.loads(self.old_value) if self.old_value else None,
            "new_value": json.loads(self.new_value) if self.new_value else None,
            "ip_address": self.ip_address,
            "timestamp": to_utc_z(self.timestamp),
        }
