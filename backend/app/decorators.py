# Overview: Request authorization decorators for API routes.

from functools import wraps
from flask import request, g, abort, current_app

from .services import staff_service
from .services.staff_service import StaffOperation, is_authorized


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _is_authenticated() -> bool:
    return hasattr(g, 'caller')


def require_auth(f):
    """
    Resolve the bearer token to an identity and profile.

    Sets on Flask g:
    - g.caller: CallerContext (identity + profile)
    - g.current_user: IdentityUser
    - g.current_profile: Profile

    SECURITY: Aborts 403 (not 401) for a missing token, a token the identity
    provider rejects, or an account with no profile. The response does not
    say which, so it cannot be used to discover accounts.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        caller = staff_service.resolve_caller(_bearer_token())
        if caller is None:
            abort(403)

        g.caller = caller
        g.current_user = caller.user
        g.current_profile = caller.profile

        return f(*args, **kwargs)

    return decorated_function


def require_operation(operation: StaffOperation, target_arg: str | None = None):
    """
    Require the caller may perform a staff operation.

    target_arg names the view argument holding the target account id, for
    operations a caller may perform on their own account.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                abort(403)

            target_id = kwargs.get(target_arg) if target_arg else None
            if not is_authorized(operation, g.caller.role, g.caller.user_id, target_id):
                current_app.logger.warning(
                    "Denied %s on %s for user %s (role=%s)",
                    operation.value, request.path, g.caller.user_id, g.caller.role,
                )
                abort(403)

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_admin(f):
    """Require the authenticated caller's profile role to be admin."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            abort(403)
        if not g.caller.profile.is_admin:
            abort(403)
        return f(*args, **kwargs)
    return decorated_function
