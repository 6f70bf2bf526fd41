from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z, utcnow


STALL_STATUSES = ("open", "closed")


class Stall(db.Model):
    """A selling location. Staff profiles are assigned to at most one stall."""
    __tablename__ = "stalls"
    __table_args__ = {"sqlite_autoincrement": True}

    stall_id = db.Column(db.Integer, primary_key=True)
    stall_name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="open")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Stall stall_id={self.stall_id} name={self.stall_name!r}>"

    def to_dict(self) -> dict:
        return {
            "stall_id": self.stall_id,
            "stall_name": self.stall_name,
            "location": self.location,
            "status": self.status,
        }


class StallStock(db.Model):
    """Current chicken stock on hand per stall (one row per stall)."""
    __tablename__ = "stall_stocks"

    stall_id = db.Column(db.Integer, db.ForeignKey("stalls.stall_id"), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    stall = db.relationship("Stall", backref=db.backref("stock", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "stall_id": self.stall_id,
            "quantity": self.quantity,
            "updated_at": to_utc_z(self.updated_at),
        }


class StallStatusHistory(db.Model):
    """
    Append-only log of stall status changes.

    Written best-effort after the stall row itself has been updated.
    """
    __tablename__ = "stall_status_history"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    stall_id = db.Column(db.Integer, db.ForeignKey("stalls.stall_id"), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False)
    change_source = db.Column(db.String(64), nullable=True)
    changed_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stall_id": self.stall_id,
            "status": self.status,
            "change_source": self.change_source,
            "changed_at": to_utc_z(self.changed_at),
        }


STOCK_STATUSES = ("sold_out", "not_sold_out")


class StockStatusHistory(db.Model):
    """
    One row per stall per civil day: the day's stock level and sold-out flag.

    Stock updates refresh stock_level and leave stock_status alone, so a
    sold-out mark made earlier in the day survives.
    """
    __tablename__ = "stock_status_history"
    __table_args__ = (
        db.UniqueConstraint("stall_id", "date"),
        db.CheckConstraint("stock_status IN ('sold_out', 'not_sold_out')", name="stock_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    stall_id = db.Column(db.Integer, db.ForeignKey("stalls.stall_id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    stock_level = db.Column(db.Integer, nullable=True)
    stock_status = db.Column(db.String(16), nullable=False, default="not_sold_out")
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "stall_id": self.stall_id,
            "date": self.date.isoformat(),
            "stock_level": self.stock_level,
            "stock_status": self.stock_status,
            "updated_at": to_utc_z(self.updated_at),
        }
