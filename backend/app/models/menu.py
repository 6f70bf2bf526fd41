from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


class MenuItem(db.Model):
    """A menu item and its current price (centavos)."""
    __tablename__ = "menu_items"
    __table_args__ = (
        db.CheckConstraint("price_cents >= 0", name="price_cents_non_negative"),
        {"sqlite_autoincrement": True},
    )

    item_id = db.Column(db.Integer, primary_key=True)
    item_name = db.Column(db.String(255), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<MenuItem item_id={self.item_id} name={self.item_name!r}>"

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "price_cents": self.price_cents,
            "created_at": to_utc_z(self.created_at),
        }
