# Overview: Service-layer operations for the menu; listing and price edits.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models import MenuItem


class MenuError(Exception):
    """Raised when a menu item cannot be updated."""
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def list_menu_items() -> list[MenuItem]:
    return db.session.query(MenuItem).order_by(MenuItem.item_name, MenuItem.item_id).all()


def update_menu_item(item_id: int, data: dict) -> tuple[dict, MenuItem]:
    """
    Change an item's name and/or price. Returns (previous values, item).

    Raises:
        MenuError: 404 unknown item; 400 empty name, negative or non-integer price
    """
    item = db.session.get(MenuItem, item_id)
    if item is None:
        raise MenuError("Menu item not found", 404)

    changes = {}
    if "item_name" in data:
        item_name = data["item_name"].strip() if isinstance(data["item_name"], str) else ""
        if not item_name:
            raise MenuError("Item name cannot be empty.")
        changes["item_name"] = item_name

    if "price_cents" in data:
        price_cents = data["price_cents"]
        if isinstance(price_cents, bool) or not isinstance(price_cents, int) or price_cents < 0:
            raise MenuError("Price must be a non-negative number.")
        changes["price_cents"] = price_cents

    if not changes:
        raise MenuError("No changes provided")

    previous = {"item_name": item.item_name, "price_cents": item.price_cents}
    try:
        for field, value in changes.items():
            setattr(item, field, value)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise MenuError(str(getattr(exc, "orig", None) or exc), 500)

    return previous, item
