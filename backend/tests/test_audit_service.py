"""
Audit trail tests.

Verifies:
- Entries are written with JSON snapshots
- A missing audit table is warned about once, and never raised
- Other database errors are logged as errors and reported as a failed Outcome
- Listing filters by civil-day range and exact-match fields, newest first
"""

import logging
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from app.extensions import db
from app.models import AuditLog
from app.services.audit_service import AuditAction, AuditEntity, AuditLogger, list_audit_logs


@pytest.fixture
def audit_logger():
    return AuditLogger(logging.getLogger("tests.audit"))


class TestLogActivity:

    def test_writes_entry(self, db_session, audit_logger):
        outcome = audit_logger.log_activity(
            action=AuditAction.UPDATE_STATUS,
            entity=AuditEntity.STALL,
            entity_id=7,
            user_id="u1",
            user_name="Owner",
            details="Stall status changed from open to closed",
            old_value={"status": "open"},
            new_value={"status": "closed"},
            stall_id=7,
            user_agent="pytest",
        )

        assert outcome.ok
        entry = db_session.query(AuditLog).one()
        assert entry.entity_id == "7"
        assert entry.timestamp is not None
        data = entry.to_dict()
        assert data["old_value"] == {"status": "open"}
        assert data["new_value"] == {"status": "closed"}
        assert data["timestamp"].endswith("Z")

    def test_missing_table_warns_once(self, db_session, audit_logger, caplog):
        db.session.close()
        AuditLog.__table__.drop(db.engine)
        try:
            with caplog.at_level(logging.WARNING, logger="tests.audit"):
                first = audit_logger.log_activity(action=AuditAction.CREATE, entity=AuditEntity.STAFF)
                second = audit_logger.log_activity(action=AuditAction.DELETE, entity=AuditEntity.STAFF)
        finally:
            db.session.close()
            AuditLog.__table__.create(db.engine)

        assert not first.ok
        assert not second.ok
        assert audit_logger.missing_table_warned
        warnings = [r for r in caplog.records if "Audit logs table does not exist" in r.getMessage()]
        assert len(warnings) == 1

    def test_other_errors_logged_as_error(self, db_session, audit_logger, caplog, monkeypatch):
        def failing_commit():
            raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db.session, "commit", failing_commit)

        with caplog.at_level(logging.WARNING, logger="tests.audit"):
            outcome = audit_logger.log_activity(action=AuditAction.CREATE, entity=AuditEntity.STAFF)

        assert not outcome.ok
        assert "disk I/O error" in outcome.error
        assert not audit_logger.missing_table_warned
        assert [r.levelno for r in caplog.records] == [logging.ERROR]


class TestListAuditLogs:

    @pytest.fixture
    def entries(self, db_session):
        rows = [
            AuditLog(action="CREATE", entity="STAFF", user_id="u1", timestamp=datetime(2024, 1, 4, 15, 0)),
            AuditLog(action="CREATE", entity="STAFF", user_id="u2", timestamp=datetime(2024, 1, 4, 17, 0)),
            AuditLog(action="UPDATE_STATUS", entity="STALL", user_id="u1", timestamp=datetime(2024, 1, 5, 3, 0)),
        ]
        db_session.add_all(rows)
        db_session.commit()
        return rows

    def test_newest_first(self, entries):
        assert [log.timestamp for log in list_audit_logs()] == [
            datetime(2024, 1, 5, 3, 0),
            datetime(2024, 1, 4, 17, 0),
            datetime(2024, 1, 4, 15, 0),
        ]

    def test_civil_day_range(self, entries):
        # 2024-01-04 15:00 UTC is still 01-04 in Manila
        logs = list_audit_logs(start_date="2024-01-05", end_date="2024-01-05")
        assert len(logs) == 2

    def test_exact_filters(self, entries):
        assert len(list_audit_logs(action="CREATE")) == 2
        assert len(list_audit_logs(entity="STALL")) == 1
        assert len(list_audit_logs(user_id="u1", action="CREATE")) == 1

    def test_limit(self, entries):
        assert len(list_audit_logs(limit=2)) == 2
