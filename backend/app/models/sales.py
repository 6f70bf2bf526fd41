from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


class Sale(db.Model):
    """
    A recorded sale at a stall.

    sale_date is a civil calendar day (no time of day); reports filter it in
    date-only mode.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_stall_date", "stall_id", "sale_date"),
        {"sqlite_autoincrement": True},
    )

    sale_id = db.Column(db.Integer, primary_key=True)
    stall_id = db.Column(db.Integer, db.ForeignKey("stalls.stall_id"), nullable=False, index=True)
    sale_date = db.Column(db.Date, nullable=False, index=True)

    quantity_sold = db.Column(db.Integer, nullable=False, default=0)
    # Amounts in centavos to avoid float drift
    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stall = db.relationship("Stall", backref=db.backref("sales", lazy=True))

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "stall_id": self.stall_id,
            "stall_name": self.stall.stall_name if self.stall else None,
            "sale_date": self.sale_date.isoformat(),
            "quantity_sold": self.quantity_sold,
            "total_amount_cents": self.total_amount_cents,
            "payment_method": self.payment_method,
            "created_at": to_utc_z(self.created_at),
        }


class Expense(db.Model):
    """A purchase or operating expense, dated by civil calendar day."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_stall_date", "stall_id", "date"),
        {"sqlite_autoincrement": True},
    )

    expense_id = db.Column(db.Integer, primary_key=True)
    stall_id = db.Column(db.Integer, db.ForeignKey("stalls.stall_id"), nullable=True, index=True)
    date = db.Column(db.Date, nullable=False, index=True)

    expense_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    cost_cents = db.Column(db.Integer, nullable=False, default=0)
    supplier_name = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stall = db.relationship("Stall", backref=db.backref("expenses", lazy=True))

    def to_dict(self) -> dict:
        return {
            "expense_id": self.expense_id,
            "stall_id": self.stall_id,
            "stall_name": self.stall.stall_name if self.stall else None,
            "date": self.date.isoformat(),
            "expense_name": self.expense_name,
            "quantity": self.quantity,
            "cost_cents": self.cost_cents,
            "supplier_name": self.supplier_name,
            "created_at": to_utc_z(self.created_at),
        }
