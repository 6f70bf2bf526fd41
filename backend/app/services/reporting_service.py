# Overview: Service-layer operations for reporting; sales/expense listings and summaries over civil-day ranges.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import false, func

from app.date_filters import (
    DateRange,
    DatePreset,
    apply_date_range_filter,
    civil_today_str,
    date_range_from_args,
    validate_date_range,
)
from app.extensions import db
from app.models import Expense, Profile, Sale, Stall


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def parse_report_range(args, max_days: int | None = None, now: datetime | None = None) -> DateRange:
    """Read and validate a preset or explicit range from query args."""
    preset = (args.get("preset") or "").strip()
    if preset and preset not in {p.value for p in DatePreset}:
        raise ReportError(f"Unknown preset: {preset}")

    date_range = date_range_from_args(args, now)
    validation = validate_date_range(
        date_range.start_date,
        date_range.end_date,
        max_days=max_days,
        now=now,
    )
    if not validation.valid:
        raise ReportError(validation.error)
    return date_range


def restrict_to_staff_stall_and_today(query, profile: Profile | None, stall_column, date_column=None, now: datetime | None = None):
    """
    Limit a staff caller to their own stall and today's civil date.

    Admins pass through unchanged. Staff with no stall assignment see nothing.
    """
    if profile is None or profile.role != "staff":
        return query

    if not profile.stall_id:
        return query.filter(false())

    query = query.filter(stall_column == profile.stall_id)
    if date_column is not None:
        today = civil_today_str(now)
        query = apply_date_range_filter(query, date_column, today, today)
    return query


def _effective_range(profile: Profile | None, date_range: DateRange, now: datetime | None = None) -> DateRange:
    """The range the rows actually cover; staff are pinned to today."""
    if profile is not None and profile.role == "staff":
        today = civil_today_str(now)
        return DateRange(today, today)
    return date_range


def _scoped(query, *, profile, stall_column, date_column, date_range: DateRange, stall_id: int | None, now=None):
    if profile is not None and profile.role == "staff":
        return restrict_to_staff_stall_and_today(query, profile, stall_column, date_column, now)

    query = apply_date_range_filter(query, date_column, date_range.start_date, date_range.end_date)
    if stall_id is not None:
        query = query.filter(stall_column == stall_id)
    return query


def sales_report(
    *,
    date_range: DateRange,
    profile: Profile | None,
    stall_id: int | None = None,
    now: datetime | None = None,
) -> dict:
    query = _scoped(
        db.session.query(Sale),
        profile=profile,
        stall_column=Sale.stall_id,
        date_column=Sale.sale_date,
        date_range=date_range,
        stall_id=stall_id,
        now=now,
    )
    sales = query.order_by(Sale.sale_date.desc(), Sale.sale_id.desc()).all()

    return {
        "range": _effective_range(profile, date_range, now).to_dict(),
        "items": [s.to_dict() for s in sales],
        "count": len(sales),
        "total_amount_cents": sum(s.total_amount_cents for s in sales),
        "quantity_sold": sum(s.quantity_sold for s in sales),
    }


def expenses_report(
    *,
    date_range: DateRange,
    profile: Profile | None,
    stall_id: int | None = None,
    now: datetime | None = None,
) -> dict:
    query = _scoped(
        db.session.query(Expense),
        profile=profile,
        stall_column=Expense.stall_id,
        date_column=Expense.date,
        date_range=date_range,
        stall_id=stall_id,
        now=now,
    )
    expenses = query.order_by(Expense.date.desc(), Expense.expense_id.desc()).all()

    return {
        "range": _effective_range(profile, date_range, now).to_dict(),
        "items": [e.to_dict() for e in expenses],
        "count": len(expenses),
        "total_cost_cents": sum(e.cost_cents for e in expenses),
    }


def summary_report(
    *,
    date_range: DateRange,
    profile: Profile | None,
    now: datetime | None = None,
) -> dict:
    """Totals for the range plus the highest and lowest earning stalls."""
    sales_total = _scoped(
        db.session.query(func.coalesce(func.sum(Sale.total_amount_cents), 0)),
        profile=profile,
        stall_column=Sale.stall_id,
        date_column=Sale.sale_date,
        date_range=date_range,
        stall_id=None,
        now=now,
    ).scalar()

    expenses_total = _scoped(
        db.session.query(func.coalesce(func.sum(Expense.cost_cents), 0)),
        profile=profile,
        stall_column=Expense.stall_id,
        date_column=Expense.date,
        date_range=date_range,
        stall_id=None,
        now=now,
    ).scalar()

    per_stall_query = db.session.query(
        Stall.stall_id,
        Stall.stall_name,
        func.coalesce(func.sum(Sale.total_amount_cents), 0).label("total"),
    ).join(Sale, Sale.stall_id == Stall.stall_id)
    per_stall_query = _scoped(
        per_stall_query,
        profile=profile,
        stall_column=Sale.stall_id,
        date_column=Sale.sale_date,
        date_range=date_range,
        stall_id=None,
        now=now,
    ).group_by(Stall.stall_id, Stall.stall_name)

    per_stall = [
        {"stall_id": row.stall_id, "stall_name": row.stall_name, "total_amount_cents": int(row.total)}
        for row in per_stall_query.all()
    ]
    ranked = sorted(per_stall, key=lambda item: (-item["total_amount_cents"], item["stall_id"]))

    return {
        "range": _effective_range(profile, date_range, now).to_dict(),
        "total_sales_cents": int(sales_total),
        "total_expenses_cents": int(expenses_total),
        "net_cents": int(sales_total) - int(expenses_total),
        "highest_earning_stall": ranked[0] if ranked else None,
        "lowest_earning_stall": ranked[-1] if ranked else None,
        "stalls": ranked,
    }
