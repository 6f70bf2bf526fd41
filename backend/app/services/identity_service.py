# Overview: Privileged identity-provider client; wraps the auth admin REST API with the service-role key.

"""
Identity provider access for the admin gateway.

The provider (a Supabase/GoTrue-compatible auth server) owns credentials,
email confirmation and sign-in timestamps. Account lifecycle calls need the
service-role key, which only ever lives in this process: it is sent to the
provider and never echoed back to a caller.

Every failure, including transport errors, surfaces as IdentityProviderError
carrying the provider's own message so routes can pass it through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
from flask import current_app


class IdentityProviderError(Exception):
    """The identity provider rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class IdentityUser:
    id: str
    email: str | None
    email_confirmed_at: str | None
    last_sign_in_at: str | None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "IdentityUser":
        # Admin endpoints return the user object directly; some wrap it in "user"
        user = payload["user"] if isinstance(payload.get("user"), dict) else payload
        if not user.get("id"):
            raise IdentityProviderError("Identity provider returned no user")
        return cls(
            id=user["id"],
            email=user.get("email"),
            email_confirmed_at=user.get("email_confirmed_at") or user.get("confirmed_at"),
            last_sign_in_at=user.get("last_sign_in_at"),
        )

    @property
    def is_confirmed(self) -> bool:
        return bool(self.email_confirmed_at)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    text = response.text.strip()
    return text or f"Identity provider request failed with status {response.status_code}"


class IdentityClient:
    """
    Thin wrapper over the provider's auth REST endpoints.

    Sessions are never persisted or refreshed; each call is independent.
    """

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._service_role_key = service_role_key
        self._http = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            timeout=timeout,
            transport=transport,
            headers={"apikey": service_role_key},
        )

    def _admin_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._service_role_key}"}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"Identity provider unreachable: {exc}") from exc

        if response.is_error:
            raise IdentityProviderError(_error_message(response), response.status_code)
        return response

    # ------------------------------------------------------------------
    # Caller resolution
    # ------------------------------------------------------------------

    def get_user(self, jwt: str) -> IdentityUser:
        """Resolve a caller's access token to their identity record."""
        response = self._request("GET", "/user", headers={"Authorization": f"Bearer {jwt}"})
        return IdentityUser.from_payload(response.json())

    # ------------------------------------------------------------------
    # Admin operations (service-role)
    # ------------------------------------------------------------------

    def get_user_by_id(self, user_id: str) -> IdentityUser:
        response = self._request("GET", f"/admin/users/{quote(user_id, safe='')}", headers=self._admin_headers())
        return IdentityUser.from_payload(response.json())

    def create_user(self, email: str, password: str, *, email_confirm: bool = False) -> IdentityUser:
        """Create an account; with email_confirm=False it stays unconfirmed."""
        response = self._request(
            "POST",
            "/admin/users",
            headers=self._admin_headers(),
            json={"email": email, "password": password, "email_confirm": email_confirm},
        )
        return IdentityUser.from_payload(response.json())

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/admin/users/{quote(user_id, safe='')}", headers=self._admin_headers())

    def resend_signup(self, email: str, redirect_to: str | None = None) -> None:
        """(Re)send the signup confirmation email."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        self._request(
            "POST",
            "/resend",
            params=params,
            json={"type": "signup", "email": email},
        )


def init_identity_client(app, transport: httpx.BaseTransport | None = None) -> IdentityClient:
    client = IdentityClient(
        app.config["SUPABASE_URL"],
        app.config["SUPABASE_SERVICE_ROLE_KEY"],
        timeout=app.config.get("IDENTITY_TIMEOUT_SECONDS", 10.0),
        transport=transport,
    )
    app.extensions["identity_client"] = client
    return client


def get_identity_client() -> IdentityClient:
    return current_app.extensions["identity_client"]
