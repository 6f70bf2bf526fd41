# Overview: Admin gateway routes for privileged staff account operations; plain-text errors.

# backend/app/routes/staff.py
"""
Admin gateway: privileged staff account lifecycle.

Endpoints:
- POST   /staff                 create staff account (admin)
- POST   /staff/resend-invite   resend confirmation email (admin)
- GET    /staff/<id>/auth       confirmation / last sign-in (self or admin)
- DELETE /staff/<id>            delete staff account (admin)

Error bodies are plain text so the calling UI can show them verbatim.
Unexpected failures return 500 {"message": "Internal Server Error"} and are
logged with the full traceback.
"""

from flask import Blueprint, Response, request, jsonify, g, current_app

from ..decorators import require_auth, require_operation
from ..services import staff_service
from ..services.audit_service import AuditAction, AuditEntity
from ..services.staff_service import StaffError, StaffOperation

staff_bp = Blueprint("staff", __name__, url_prefix="/staff")


def text_response(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def internal_error() -> tuple:
    return jsonify({"message": "Internal Server Error"}), 500


@staff_bp.errorhandler(403)
def forbidden(_error):
    return text_response("Forbidden", 403)


def _audit(action: str, entity_id: str, details: str, **values) -> None:
    current_app.extensions["audit_logger"].log_activity(
        action=action,
        entity=AuditEntity.STAFF,
        entity_id=entity_id,
        user_id=g.caller.user_id,
        user_name=g.current_profile.full_name,
        details=details,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
        **values,
    )


@staff_bp.post("")
@require_auth
@require_operation(StaffOperation.CREATE_STAFF)
def create_staff():
    """
    Create a staff account.

    Request body:
    - email: str (required)
    - password: str (required)
    - fullName: str (required)
    - contactNumber: str (optional)
    - stallId: int (optional)
    """
    try:
        data = request.get_json(silent=True) or {}

        created = staff_service.create_staff(
            email=data.get("email"),
            password=data.get("password"),
            full_name=data.get("fullName"),
            contact_number=data.get("contactNumber"),
            stall_id=data.get("stallId"),
        )

        _audit(
            AuditAction.CREATE,
            created.user_id,
            f"Created staff account {data.get('email')}",
            new_value=created.profile.to_dict(),
            stall_id=created.profile.stall_id,
        )

        # confirmationSent reports that a send was attempted; delivery is best-effort
        return jsonify({"userId": created.user_id, "confirmationSent": True}), 200

    except StaffError as e:
        return text_response(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to create staff")
        return internal_error()


@staff_bp.post("/resend-invite")
@require_auth
@require_operation(StaffOperation.RESEND_INVITE)
def resend_invite():
    """
    Resend the signup confirmation email.

    Request body (one of):
    - email: str
    - staffId: str - resolved to the profile's email
    """
    try:
        data = request.get_json(silent=True) or {}

        target_email = staff_service.resend_invite(
            email=data.get("email"),
            staff_id=data.get("staffId"),
        )

        _audit(
            AuditAction.RESEND_INVITE,
            data.get("staffId") or target_email,
            f"Resent confirmation email to {target_email}",
        )

        return jsonify({"message": "Email resent successfully"}), 200

    except StaffError as e:
        return text_response(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to resend invite")
        return internal_error()


@staff_bp.get("/<staff_id>/auth")
@require_auth
@require_operation(StaffOperation.READ_AUTH_METADATA, target_arg="staff_id")
def get_auth_metadata(staff_id: str):
    """Email confirmation and last sign-in timestamps (either may be null)."""
    try:
        return jsonify(staff_service.get_auth_metadata(staff_id)), 200
    except StaffError as e:
        return text_response(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to read auth metadata")
        return internal_error()


@staff_bp.delete("/<staff_id>")
@require_auth
@require_operation(StaffOperation.DELETE_STAFF)
def delete_staff(staff_id: str):
    """Delete the staff profile, then the identity record. 204 on success."""
    try:
        snapshot = staff_service.delete_staff(staff_id)

        _audit(
            AuditAction.DELETE,
            staff_id,
            f"Deleted staff account {snapshot['email'] if snapshot else staff_id}",
            old_value=snapshot,
            stall_id=snapshot["stall_id"] if snapshot else None,
        )

        return Response(status=204)

    except StaffError as e:
        return text_response(e.message, e.status_code)
    except Exception:
        current_app.logger.exception("Failed to delete staff")
        return internal_error()
