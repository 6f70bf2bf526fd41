# Overview: Service-layer operations for staff lifecycle; authorization rules and privileged identity calls.

"""
Staff account lifecycle behind the admin gateway.

WHY: Creating, deleting and inspecting provider accounts needs the
service-role key, so these operations run here and never in the browser.

AUTHORIZATION:
- create / resend invite / delete: caller role must be exactly "admin"
- read auth metadata: admin, or the caller reading their own account
Every denial looks the same to the caller (403), whatever the reason.

PARTIAL FAILURE (no compensation, by contract):
- create_staff: identity -> profile -> invite. A profile insert failure
  leaves the identity record in place.
- delete_staff: profile -> identity. A profile delete failure is ignored;
  the identity deletion is the operation's defining effect.
- Confirmation emails are best-effort and never fail the parent operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Profile, Stall
from .best_effort import Outcome, run_best_effort
from .identity_service import IdentityProviderError, IdentityUser, get_identity_client


class StaffOperation(str, Enum):
    CREATE_STAFF = "create_staff"
    RESEND_INVITE = "resend_invite"
    DELETE_STAFF = "delete_staff"
    READ_AUTH_METADATA = "read_auth_metadata"


SELF_SERVICE_OPERATIONS = frozenset({StaffOperation.READ_AUTH_METADATA})


class StaffError(Exception):
    """Staff operation failed; carries the HTTP status and caller-facing message."""
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class StaffValidationError(StaffError):
    status_code = 400


class StaffNotFoundError(StaffError):
    status_code = 404


@dataclass(frozen=True)
class CallerContext:
    user: IdentityUser
    profile: Profile

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def role(self) -> str:
        return self.profile.role


@dataclass(frozen=True)
class CreatedStaff:
    user_id: str
    profile: Profile
    invite: Outcome


def is_authorized(operation: StaffOperation, role: str | None, caller_id: str | None, target_id: str | None = None) -> bool:
    """True iff role is admin, or a self-service operation on the caller's own account."""
    if role == "admin":
        return True
    if operation in SELF_SERVICE_OPERATIONS:
        return caller_id is not None and caller_id == target_id
    return False


def resolve_caller(token: str | None) -> CallerContext | None:
    """
    Map a bearer token to (identity, profile).

    Returns None when the token is absent, rejected by the provider, or
    belongs to an account without a profile.
    """
    if not token:
        return None

    try:
        user = get_identity_client().get_user(token)
    except IdentityProviderError:
        return None

    profile = db.session.get(Profile, user.id)
    if profile is None:
        return None
    return CallerContext(user=user, profile=profile)


def confirmation_redirect_url() -> str:
    return f"{current_app.config['SITE_URL'].rstrip('/')}/login"


def _coerce_stall_id(stall_id) -> int | None:
    if stall_id is None or stall_id == "":
        return None
    if isinstance(stall_id, bool):
        raise StaffValidationError("Invalid stallId")
    try:
        return int(stall_id)
    except (TypeError, ValueError):
        raise StaffValidationError("Invalid stallId")


def create_staff(
    *,
    email: str | None,
    password: str | None,
    full_name: str | None,
    contact_number: str | None = None,
    stall_id=None,
) -> CreatedStaff:
    """
    Create an unconfirmed identity, its inactive staff profile, then send the
    confirmation email.

    Raises:
        StaffValidationError: missing email/password/fullName, bad stallId
        StaffError: provider rejected the account, or the profile insert failed
    """
    if not email or not password or not full_name:
        raise StaffValidationError("Missing required fields")

    stall_id = _coerce_stall_id(stall_id)
    if stall_id is not None and db.session.get(Stall, stall_id) is None:
        raise StaffValidationError("Stall not found")

    client = get_identity_client()

    try:
        user = client.create_user(email, password, email_confirm=False)
    except IdentityProviderError as exc:
        raise StaffError(exc.message or "Unable to create user")

    profile = Profile(
        id=user.id,
        full_name=full_name,
        email=email,
        contact_number=contact_number or None,
        role="staff",
        status="inactive",
        stall_id=stall_id,
    )
    try:
        db.session.add(profile)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(
            "Profile insert failed after identity %s was created; identity left in place: %s",
            user.id, exc,
        )
        raise StaffError(str(getattr(exc, "orig", None) or exc))

    invite = run_best_effort(
        f"Sending confirmation email to {email}",
        client.resend_signup,
        email,
        confirmation_redirect_url(),
    )
    if not invite.ok:
        current_app.logger.warning("User %s created but confirmation email failed to send", user.id)

    return CreatedStaff(user_id=user.id, profile=profile, invite=invite)


def _normalize_resend_error(message: str) -> str:
    if "already confirmed" in message:
        return "User email is already confirmed"
    if "not found" in message:
        return "User not found"
    return f"Failed to resend email: {message}"


def resend_invite(*, email: str | None = None, staff_id: str | None = None) -> str:
    """
    Resend the signup confirmation to an email, or to a staff id's email.

    Returns the email the invite went to.
    """
    target_email = email or None
    user_id = None

    if not target_email and staff_id:
        profile = db.session.get(Profile, staff_id)
        if profile is None or not profile.email:
            raise StaffNotFoundError("User not found")
        target_email = profile.email
        user_id = profile.id
    elif target_email:
        profile = db.session.query(Profile).filter_by(email=target_email).first()
        if profile is not None:
            user_id = profile.id

    if not target_email:
        raise StaffValidationError("Missing email")

    client = get_identity_client()

    if user_id:
        try:
            identity = client.get_user_by_id(user_id)
        except IdentityProviderError:
            identity = None
        if identity is not None and identity.is_confirmed:
            raise StaffValidationError("User email is already confirmed")

    try:
        client.resend_signup(target_email, confirmation_redirect_url())
    except IdentityProviderError as exc:
        current_app.logger.error("Failed to resend confirmation email: %s", exc.message)
        raise StaffError(_normalize_resend_error(exc.message))

    return target_email


def _delete_profile_row(staff_id: str) -> None:
    try:
        db.session.query(Profile).filter_by(id=staff_id).delete()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def delete_staff(staff_id: str) -> dict | None:
    """
    Delete the profile (best-effort) and then the identity record.

    Returns a snapshot of the profile as it was before deletion, if any.
    """
    existing = db.session.get(Profile, staff_id)
    snapshot = existing.to_dict() if existing is not None else None

    run_best_effort(f"Deleting profile {staff_id}", _delete_profile_row, staff_id)

    try:
        get_identity_client().delete_user(staff_id)
    except IdentityProviderError as exc:
        raise StaffError(exc.message)

    return snapshot


def get_auth_metadata(staff_id: str) -> dict:
    try:
        user = get_identity_client().get_user_by_id(staff_id)
    except IdentityProviderError as exc:
        raise StaffNotFoundError(exc.message or "User not found")

    return {
        "emailConfirmedAt": user.email_confirmed_at,
        "lastSignInAt": user.last_sign_in_at,
    }


STAFF_STATUSES = ("active", "inactive")
STAFF_EDITABLE_FIELDS = ("full_name", "contact_number", "status", "stall_id")


def update_staff_profile(staff_id: str, data: dict) -> tuple[dict, Profile]:
    """
    Edit a staff profile's name, contact number, status and stall.

    Only keys present in `data` change. Returns the editable fields as they
    were before the edit, and the updated profile.

    Raises:
        StaffNotFoundError: no staff profile with this id
        StaffValidationError: empty name, unknown status, bad or unknown stall
    """
    profile = db.session.get(Profile, staff_id)
    if profile is None or profile.role != "staff":
        raise StaffNotFoundError("Staff not found")

    changes = {}
    if "full_name" in data:
        full_name = data["full_name"].strip() if isinstance(data["full_name"], str) else ""
        if not full_name:
            raise StaffValidationError("Full name is required")
        changes["full_name"] = full_name

    if "contact_number" in data:
        contact_number = data["contact_number"]
        if contact_number is not None and not isinstance(contact_number, str):
            raise StaffValidationError("Invalid contact number")
        changes["contact_number"] = (contact_number or "").strip() or None

    if "status" in data:
        if data["status"] not in STAFF_STATUSES:
            raise StaffValidationError(f"status must be one of: {', '.join(STAFF_STATUSES)}")
        changes["status"] = data["status"]

    if "stall_id" in data:
        stall_id = _coerce_stall_id(data["stall_id"])
        if stall_id is not None and db.session.get(Stall, stall_id) is None:
            raise StaffValidationError("Stall not found")
        changes["stall_id"] = stall_id

    if not changes:
        raise StaffValidationError("No changes provided")

    previous = {field: getattr(profile, field) for field in STAFF_EDITABLE_FIELDS}
    try:
        for field, value in changes.items():
            setattr(profile, field, value)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StaffError(str(getattr(exc, "orig", None) or exc), 500)

    return previous, profile


def list_staff_with_verification(stall_id: int | None = None) -> list[dict]:
    """
    Staff profiles with provider confirmation state.

    A confirmed identity flips an inactive profile to active. If the provider
    lookup fails for one account, that row keeps its stored status.
    """
    query = db.session.query(Profile).filter(Profile.role == "staff")
    if stall_id is not None:
        query = query.filter(Profile.stall_id == stall_id)

    client = get_identity_client()
    changed = False
    result = []

    for profile in query.order_by(Profile.full_name).all():
        item = profile.to_dict()
        try:
            identity = client.get_user_by_id(profile.id)
        except IdentityProviderError as exc:
            current_app.logger.warning("Error checking email for %s: %s", profile.id, exc.message)
            item["displayStatus"] = profile.status
            item["lastSignInAt"] = None
            result.append(item)
            continue

        if identity.is_confirmed and profile.status == "inactive":
            profile.status = "active"
            item["status"] = "active"
            changed = True

        item["displayStatus"] = "active" if identity.is_confirmed else "unverified"
        item["lastSignInAt"] = identity.last_sign_in_at
        result.append(item)

    if changed:
        db.session.commit()

    return result
