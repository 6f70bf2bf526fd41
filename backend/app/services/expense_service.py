# Overview: Service-layer operations for recording expenses; validates input and inserts the row.

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app.date_filters import civil_today, parse_date
from app.extensions import db
from app.models import Expense, Stall


class ExpenseError(Exception):
    """Raised when an expense cannot be recorded."""
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def record_expense(data: dict, now: datetime | None = None) -> Expense:
    """
    Insert an expense.

    Fields:
    - expense_name: required
    - cost_cents: int >= 0, required
    - quantity: positive int, defaults to 1
    - date: YYYY-MM-DD, defaults to today's civil date
    - supplier_name, stall_id: optional
    """
    expense_name = data.get("expense_name")
    expense_name = expense_name.strip() if isinstance(expense_name, str) else ""
    if not expense_name:
        raise ExpenseError("Expense name required")

    cost_cents = data.get("cost_cents")
    if not _is_int(cost_cents) or cost_cents < 0:
        raise ExpenseError("Cost must be a non-negative number")

    quantity = data.get("quantity")
    if quantity is None:
        quantity = 1
    elif not _is_int(quantity) or quantity < 1:
        raise ExpenseError("Quantity must be a positive integer")

    raw_date = data.get("date")
    if raw_date:
        try:
            expense_date = parse_date(raw_date) if isinstance(raw_date, str) else None
        except ValueError:
            expense_date = None
        if expense_date is None:
            raise ExpenseError("Dates must be in YYYY-MM-DD format")
    else:
        expense_date = civil_today(now)

    supplier_name = data.get("supplier_name")
    supplier_name = (supplier_name.strip() or None) if isinstance(supplier_name, str) else None

    stall_id = data.get("stall_id")
    if stall_id is not None:
        if not _is_int(stall_id):
            raise ExpenseError("Invalid stall_id")
        if db.session.get(Stall, stall_id) is None:
            raise ExpenseError("Stall not found")

    expense = Expense(
        expense_name=expense_name,
        cost_cents=cost_cents,
        quantity=quantity,
        date=expense_date,
        supplier_name=supplier_name,
        stall_id=stall_id,
    )
    try:
        db.session.add(expense)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ExpenseError(str(getattr(exc, "orig", None) or exc), 500)

    return expense
