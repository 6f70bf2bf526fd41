"""
Reporting tests.

Verifies:
- Admin reports honour presets, explicit ranges and stall filters
- Invalid ranges and unknown presets are rejected with a reason
- Staff callers only ever see their own stall for the current civil day
- Summary ranks stalls by earnings
"""

from datetime import date, timedelta

import pytest

from app.date_filters import DateRange, civil_today
from app.models import Expense, Sale
from app.services import reporting_service
from app.services.reporting_service import ReportError, parse_report_range
from conftest import make_account


def add_sale(session, stall, day, cents, qty=1):
    sale = Sale(stall_id=stall.stall_id, sale_date=day, quantity_sold=qty, total_amount_cents=cents, payment_method="cash")
    session.add(sale)
    return sale


@pytest.fixture
def january_sales(db_session, stall, other_stall):
    add_sale(db_session, stall, date(2024, 1, 5), 1000, qty=2)
    add_sale(db_session, stall, date(2024, 1, 6), 500)
    add_sale(db_session, other_stall, date(2024, 1, 5), 3000, qty=5)
    db_session.add(Expense(stall_id=stall.stall_id, date=date(2024, 1, 5), expense_name="Cooking oil", cost_cents=700))
    db_session.add(Expense(stall_id=None, date=date(2024, 1, 7), expense_name="Permit", cost_cents=2500))
    db_session.commit()


# =============================================================================
# RANGE PARSING
# =============================================================================


class TestParseReportRange:

    def test_preset(self, fixed_now):
        assert parse_report_range({"preset": "yesterday"}, now=fixed_now) == DateRange("2024-03-14", "2024-03-14")

    def test_explicit(self, fixed_now):
        args = {"start_date": "2024-03-01", "end_date": "2024-03-05"}
        assert parse_report_range(args, now=fixed_now) == DateRange("2024-03-01", "2024-03-05")

    def test_unknown_preset(self, fixed_now):
        with pytest.raises(ReportError, match="Unknown preset: forever"):
            parse_report_range({"preset": "forever"}, now=fixed_now)

    def test_inverted_range(self, fixed_now):
        with pytest.raises(ReportError, match="Start date must be before or equal to end date"):
            parse_report_range({"start_date": "2024-03-05", "end_date": "2024-03-01"}, now=fixed_now)

    def test_max_days(self, fixed_now):
        with pytest.raises(ReportError, match="cannot exceed 31 days"):
            parse_report_range({"start_date": "2024-01-01", "end_date": "2024-03-01"}, max_days=31, now=fixed_now)

    def test_future(self, fixed_now):
        with pytest.raises(ReportError, match="Future dates are not allowed"):
            parse_report_range({"start_date": "2024-03-01", "end_date": "2024-03-16"}, now=fixed_now)


# =============================================================================
# ADMIN REPORTS
# =============================================================================


class TestAdminSalesReport:

    def test_range(self, client, admin, january_sales):
        resp = client.get("/api/reports/sales?start_date=2024-01-05&end_date=2024-01-05", headers=admin.headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["range"] == {"startDate": "2024-01-05", "endDate": "2024-01-05"}
        assert body["count"] == 2
        assert body["total_amount_cents"] == 4000
        assert body["quantity_sold"] == 7

    def test_stall_filter(self, client, admin, stall, january_sales):
        resp = client.get(
            f"/api/reports/sales?start_date=2024-01-01&end_date=2024-01-31&stall_id={stall.stall_id}",
            headers=admin.headers,
        )

        body = resp.get_json()
        assert body["count"] == 2
        assert body["total_amount_cents"] == 1500
        assert {item["stall_name"] for item in body["items"]} == {"Stall A"}

    def test_newest_first(self, client, admin, stall, january_sales):
        resp = client.get(f"/api/reports/sales?stall_id={stall.stall_id}", headers=admin.headers)
        assert [item["sale_date"] for item in resp.get_json()["items"]] == ["2024-01-06", "2024-01-05"]

    def test_invalid_range(self, client, admin):
        resp = client.get("/api/reports/sales?start_date=2024-01-06&end_date=2024-01-05", headers=admin.headers)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Start date must be before or equal to end date"}

    def test_malformed_date(self, client, admin):
        resp = client.get("/api/reports/sales?start_date=01/05/2024", headers=admin.headers)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Dates must be in YYYY-MM-DD format"}

    def test_unknown_preset(self, client, admin):
        resp = client.get("/api/reports/sales?preset=forever", headers=admin.headers)
        assert resp.status_code == 400


class TestAdminExpensesReport:

    def test_range_includes_unassigned_expenses(self, client, admin, january_sales):
        resp = client.get("/api/reports/expenses?start_date=2024-01-01&end_date=2024-01-31", headers=admin.headers)

        body = resp.get_json()
        assert body["count"] == 2
        assert body["total_cost_cents"] == 3200

    def test_single_day(self, client, admin, january_sales):
        resp = client.get("/api/reports/expenses?start_date=2024-01-07&end_date=2024-01-07", headers=admin.headers)
        assert [item["expense_name"] for item in resp.get_json()["items"]] == ["Permit"]


class TestAdminSummaryReport:

    def test_totals_and_ranking(self, client, admin, stall, other_stall, january_sales):
        resp = client.get("/api/reports/summary?start_date=2024-01-05&end_date=2024-01-05", headers=admin.headers)

        body = resp.get_json()
        assert body["total_sales_cents"] == 4000
        assert body["total_expenses_cents"] == 700
        assert body["net_cents"] == 3300
        assert body["highest_earning_stall"]["stall_id"] == other_stall.stall_id
        assert body["lowest_earning_stall"]["stall_id"] == stall.stall_id
        assert [s["total_amount_cents"] for s in body["stalls"]] == [3000, 1000]

    def test_empty_range(self, client, admin, january_sales):
        resp = client.get("/api/reports/summary?start_date=2023-06-01&end_date=2023-06-30", headers=admin.headers)

        body = resp.get_json()
        assert body["total_sales_cents"] == 0
        assert body["net_cents"] == 0
        assert body["highest_earning_stall"] is None
        assert body["stalls"] == []


# =============================================================================
# STAFF SCOPING
# =============================================================================


class TestStaffScoping:
    """Staff see their own stall, today only, whatever they ask for."""

    def test_own_stall_today_only(self, db_session, staff, stall, other_stall, fixed_now):
        today = date(2024, 3, 15)
        add_sale(db_session, stall, today, 1200)
        add_sale(db_session, stall, today - timedelta(days=1), 900)
        add_sale(db_session, other_stall, today, 4000)
        db_session.commit()

        report = reporting_service.sales_report(
            date_range=DateRange("2024-03-01", "2024-03-15"),
            profile=staff.profile,
            stall_id=other_stall.stall_id,
            now=fixed_now,
        )

        assert report["count"] == 1
        assert report["total_amount_cents"] == 1200
        assert report["range"] == {"startDate": "2024-03-15", "endDate": "2024-03-15"}

    def test_summary_is_scoped(self, db_session, staff, stall, other_stall, fixed_now):
        add_sale(db_session, stall, date(2024, 3, 15), 1200)
        add_sale(db_session, other_stall, date(2024, 3, 15), 4000)
        db_session.add(Expense(stall_id=other_stall.stall_id, date=date(2024, 3, 15), expense_name="Flour", cost_cents=300))
        db_session.commit()

        report = reporting_service.summary_report(date_range=DateRange(), profile=staff.profile, now=fixed_now)

        assert report["total_sales_cents"] == 1200
        assert report["total_expenses_cents"] == 0
        assert [s["stall_id"] for s in report["stalls"]] == [stall.stall_id]
        assert report["range"] == {"startDate": "2024-03-15", "endDate": "2024-03-15"}

    def test_staff_without_stall_sees_nothing(self, identity, db_session, stall, fixed_now):
        unassigned = make_account(identity, db_session, email="floater@stalls.test", role="staff")
        add_sale(db_session, stall, date(2024, 3, 15), 1200)
        db_session.commit()

        report = reporting_service.sales_report(date_range=DateRange(), profile=unassigned.profile, now=fixed_now)

        assert report["count"] == 0
        assert report["total_amount_cents"] == 0

    def test_route_uses_current_civil_day(self, client, db_session, staff, stall):
        today = civil_today()
        add_sale(db_session, stall, today, 800)
        add_sale(db_session, stall, today - timedelta(days=3), 600)
        db_session.commit()

        resp = client.get("/api/reports/sales?preset=last_7_days", headers=staff.headers)

        body = resp.get_json()
        assert body["count"] == 1
        assert body["items"][0]["sale_date"] == today.isoformat()
        assert body["range"] == {"startDate": today.isoformat(), "endDate": today.isoformat()}
