# Overview: Flask API routes for admin screens; parses input and returns JSON responses.

# backend/app/routes/admin.py
"""
Admin routes for the dashboard.

Provides endpoints for:
- Staff listing with email confirmation sync, and profile edits
- Stall listing with stock on hand
- Stall status changes (with status history)
- Stock level updates (with the daily stock status record)
- Expense recording
- Menu prices
- Audit log browsing

All endpoints require an authenticated admin profile. Every change is
audited after it commits; a failed audit write never fails the request.
"""

from flask import Blueprint, request, jsonify, g, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..date_filters import civil_today
from ..extensions import db
from ..models import Stall, StallStatusHistory, StallStock, StockStatusHistory, STALL_STATUSES
from ..services import (
    audit_service,
    expense_service,
    menu_service,
    reporting_service,
    staff_service,
)
from ..services.audit_service import AuditAction, AuditEntity
from ..services.best_effort import run_best_effort
from ..decorators import require_auth, require_admin

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.errorhandler(403)
def forbidden(_error):
    return jsonify({"error": "Forbidden"}), 403


def _log_activity(**fields) -> None:
    current_app.extensions["audit_logger"].log_activity(
        user_id=g.caller.user_id,
        user_name=g.current_profile.full_name,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
        **fields,
    )


# =============================================================================
# STAFF
# =============================================================================

@admin_bp.get("/staff")
@require_auth
@require_admin
def list_staff():
    """
    List staff profiles with confirmation state.

    Query params:
    - stall_id: int - filter by stall

    Confirmed accounts still marked inactive are activated as a side effect.
    """
    stall_id = request.args.get("stall_id", type=int)
    try:
        staff = staff_service.list_staff_with_verification(stall_id)
        return jsonify({"staff": staff, "count": len(staff)})
    except Exception:
        current_app.logger.exception("Failed to list staff")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.put("/staff/<staff_id>")
@require_auth
@require_admin
def update_staff(staff_id: str):
    """
    Edit a staff profile. Email and role are not editable here.

    Request body (any subset):
    - full_name: non-empty string
    - contact_number: string | null
    - status: "active" | "inactive"
    - stall_id: int | null
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        previous, profile = staff_service.update_staff_profile(staff_id, data)
    except staff_service.StaffError as e:
        if e.status_code >= 500:
            current_app.logger.error("Failed to update staff %s: %s", staff_id, e.message)
            return jsonify({"error": "Internal server error"}), 500
        return jsonify({"error": e.message}), e.status_code

    _log_activity(
        action=AuditAction.UPDATE,
        entity=AuditEntity.STAFF,
        entity_id=staff_id,
        details=f"Updated staff account: {previous['full_name']} ({profile.email})",
        old_value=previous,
        new_value={field: getattr(profile, field) for field in staff_service.STAFF_EDITABLE_FIELDS},
        stall_id=profile.stall_id,
    )

    return jsonify({"staff": profile.to_dict(), "message": "Staff account updated"})


# =============================================================================
# STALLS
# =============================================================================

@admin_bp.get("/stalls")
@require_auth
@require_admin
def list_stalls():
    """Stalls with status, current stock (0 when never recorded) and today's stock status."""
    stalls = db.session.query(Stall).order_by(Stall.stall_id).all()
    today_status = {
        row.stall_id: row.stock_status
        for row in db.session.query(StockStatusHistory).filter_by(date=civil_today())
    }

    result = []
    for stall in stalls:
        item = stall.to_dict()
        item["stock_quantity"] = stall.stock.quantity if stall.stock else 0
        item["stock_status"] = today_status.get(stall.stall_id, "not_sold_out")
        result.append(item)
    return jsonify({"stalls": result, "count": len(result)})


def _record_status_history(stall_id: int, status: str) -> None:
    try:
        db.session.add(StallStatusHistory(stall_id=stall_id, status=status, change_source="admin_inventory"))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def _record_daily_stock_status(stall_id: int, stock_level: int) -> None:
    """Upsert today's stock level; an existing sold-out status is kept."""
    try:
        row = (
            db.session.query(StockStatusHistory)
            .filter_by(stall_id=stall_id, date=civil_today())
            .one_or_none()
        )
        if row is None:
            db.session.add(StockStatusHistory(
                stall_id=stall_id,
                date=civil_today(),
                stock_level=stock_level,
                stock_status="not_sold_out",
            ))
        else:
            row.stock_level = stock_level
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


@admin_bp.post("/stalls/<int:stall_id>/status")
@require_auth
@require_admin
def update_stall_status(stall_id: int):
    """
    Change a stall's status.

    Request body:
    - status: "open" | "closed"
    """
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in STALL_STATUSES:
        return jsonify({"error": f"status must be one of: {', '.join(STALL_STATUSES)}"}), 400

    stall = db.session.get(Stall, stall_id)
    if not stall:
        return jsonify({"error": "Stall not found"}), 404

    try:
        previous = stall.status
        stall.status = status
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update stall status")
        return jsonify({"error": "Internal server error"}), 500

    run_best_effort(
        f"Recording status history for stall {stall_id}",
        _record_status_history, stall_id, status,
    )
    _log_activity(
        action=AuditAction.UPDATE_STATUS,
        entity=AuditEntity.STALL,
        entity_id=stall_id,
        details=f"Stall status changed from {previous} to {status}",
        old_value={"status": previous},
        new_value={"status": status},
        stall_id=stall_id,
    )

    return jsonify({"stall": stall.to_dict(), "message": "Stall status updated"})


@admin_bp.post("/stalls/<int:stall_id>/stock")
@require_auth
@require_admin
def update_stall_stock(stall_id: int):
    """
    Set a stall's stock on hand (creates the stock row on first use).

    Request body:
    - quantity: int >= 0
    """
    data = request.get_json(silent=True) or {}
    quantity = data.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        return jsonify({"error": "quantity must be a non-negative integer"}), 400

    stall = db.session.get(Stall, stall_id)
    if not stall:
        return jsonify({"error": "Stall not found"}), 404

    try:
        stock = db.session.get(StallStock, stall_id)
        previous = stock.quantity if stock else 0
        if stock is None:
            stock = StallStock(stall_id=stall_id, quantity=quantity)
            db.session.add(stock)
        else:
            stock.quantity = quantity
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update stall stock")
        return jsonify({"error": "Internal server error"}), 500

    run_best_effort(
        f"Recording today's stock status for stall {stall_id}",
        _record_daily_stock_status, stall_id, quantity,
    )
    _log_activity(
        action=AuditAction.UPDATE_STOCK,
        entity=AuditEntity.STOCK,
        entity_id=stall_id,
        details=f"Updated stock for {stall.stall_name} from {previous} to {quantity}",
        old_value={"quantity": previous},
        new_value={"quantity": quantity},
        stall_id=stall_id,
    )

    return jsonify({"stock": stock.to_dict(), "message": "Stock level updated"})


# =============================================================================
# EXPENSES
# =============================================================================

@admin_bp.post("/expenses")
@require_auth
@require_admin
def create_expense():
    """
    Record an expense.

    Request body:
    - expense_name: string (required)
    - cost_cents: int >= 0 (required)
    - quantity: int >= 1 (default 1)
    - date: YYYY-MM-DD (default today)
    - supplier_name: string
    - stall_id: int
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        expense = expense_service.record_expense(data)
    except expense_service.ExpenseError as e:
        if e.status_code >= 500:
            current_app.logger.error("Failed to record expense: %s", e.message)
            return jsonify({"error": "Internal server error"}), 500
        return jsonify({"error": e.message}), e.status_code

    details = f"Added expense: {expense.expense_name}, Cost: {expense.cost_cents / 100:.2f}"
    if expense.quantity != 1:
        details += f", Quantity: {expense.quantity}"
    if expense.supplier_name:
        details += f", Supplier: {expense.supplier_name}"

    _log_activity(
        action=AuditAction.ADD_EXPENSE,
        entity=AuditEntity.EXPENSE,
        entity_id=expense.expense_id,
        details=details,
        new_value={
            "expense_name": expense.expense_name,
            "quantity": expense.quantity,
            "cost_cents": expense.cost_cents,
            "date": expense.date.isoformat(),
            "supplier_name": expense.supplier_name,
            "stall_id": expense.stall_id,
        },
        stall_id=expense.stall_id,
    )

    return jsonify({"expense": expense.to_dict(), "message": "Expense added"}), 201


# =============================================================================
# MENU
# =============================================================================

@admin_bp.get("/menu-items")
@require_auth
@require_admin
def list_menu_items():
    items = menu_service.list_menu_items()
    return jsonify({"items": [item.to_dict() for item in items], "count": len(items)})


@admin_bp.put("/menu-items/<int:item_id>")
@require_auth
@require_admin
def update_menu_item(item_id: int):
    """
    Rename an item or change its price.

    Request body (any subset):
    - item_name: non-empty string
    - price_cents: int >= 0
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        previous, item = menu_service.update_menu_item(item_id, data)
    except menu_service.MenuError as e:
        if e.status_code >= 500:
            current_app.logger.error("Failed to update menu item %s: %s", item_id, e.message)
            return jsonify({"error": "Internal server error"}), 500
        return jsonify({"error": e.message}), e.status_code

    _log_activity(
        action=AuditAction.UPDATE_PRICE,
        entity=AuditEntity.MENU_ITEM,
        entity_id=item_id,
        details=f"Updated menu item: {item.item_name}",
        old_value=previous,
        new_value={"item_name": item.item_name, "price_cents": item.price_cents},
    )

    return jsonify({"item": item.to_dict(), "message": "Menu item updated"})


# =============================================================================
# AUDIT LOG
# =============================================================================

@admin_bp.get("/audit-logs")
@require_auth
@require_admin
def list_audit_logs():
    """
    Browse the audit trail, newest first (max 1000 rows).

    Query params:
    - preset | start_date, end_date: civil-day range on the event timestamp
    - action, entity, user_id: exact-match filters
    """
    try:
        date_range = reporting_service.parse_report_range(request.args)
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        logs = audit_service.list_audit_logs(
            start_date=date_range.start_date,
            end_date=date_range.end_date,
            action=request.args.get("action"),
            entity=request.args.get("entity"),
            user_id=request.args.get("user_id"),
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to load audit logs")
        return jsonify({"error": "Audit log is unavailable"}), 503

    return jsonify({"logs": [log.to_dict() for log in logs], "count": len(logs)})
