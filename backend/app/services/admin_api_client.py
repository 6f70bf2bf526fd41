# Overview: Caller-side wrapper for the admin gateway; used by the CLI and scripts.

from __future__ import annotations

from typing import Any, Callable
from urllib.parse import quote, urlsplit

import httpx


class AdminApiError(Exception):
    """Gateway call failed; message is the gateway's response text."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def derive_admin_api_base_url(supabase_url: str | None) -> str | None:
    """
    Default gateway URL for a project URL.

    https://abc.supabase.co -> https://abc.functions.supabase.co/admin-staff
    anything else           -> <origin>/functions/v1/admin-staff
    """
    if not supabase_url:
        return None

    parts = urlsplit(supabase_url)
    if not parts.scheme or not parts.hostname:
        return None

    if parts.hostname.endswith(".supabase.co"):
        function_host = parts.hostname.replace(".supabase.co", ".functions.supabase.co")
        return f"{parts.scheme}://{function_host}/admin-staff"

    return f"{parts.scheme}://{parts.netloc}/functions/v1/admin-staff"


class AdminApiClient:
    """
    Calls the admin gateway with the signed-in user's access token.

    token_provider returns the current access token, or None when signed out.
    """

    def __init__(
        self,
        base_url: str | None,
        token_provider: Callable[[], str | None],
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self._token_provider = token_provider
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config, token_provider: Callable[[], str | None], **kwargs) -> "AdminApiClient":
        base_url = config.get("ADMIN_API_URL") or derive_admin_api_base_url(config.get("SUPABASE_URL"))
        return cls(base_url, token_provider, **kwargs)

    def request(self, path: str, *, method: str = "GET", body: dict | None = None) -> Any:
        if not self.base_url:
            raise AdminApiError(
                "Admin API base URL is not configured. Set ADMIN_API_URL or ensure SUPABASE_URL is valid."
            )

        token = self._token_provider()
        if not token:
            raise AdminApiError("You must be signed in to perform this action.")

        with httpx.Client(timeout=self._timeout, transport=self._transport) as http:
            response = http.request(
                method,
                f"{self.base_url}{path}",
                headers={"Authorization": f"Bearer {token}"},
                json=body,
            )

        if response.is_error:
            message = response.text or f"Admin API request failed with status {response.status_code}"
            raise AdminApiError(message, response.status_code)

        if response.status_code == 204:
            return None

        return response.json()

    def create_staff_account(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        contact_number: str | None = None,
        stall_id: int | None = None,
    ) -> dict:
        return self.request("/staff", method="POST", body={
            "email": email,
            "password": password,
            "fullName": full_name,
            "contactNumber": contact_number,
            "stallId": stall_id,
        })

    def resend_staff_invite(self, email: str) -> dict:
        return self.request("/staff/resend-invite", method="POST", body={"email": email})

    def delete_staff_account(self, user_id: str) -> None:
        return self.request(f"/staff/{quote(user_id, safe='')}", method="DELETE")

    def fetch_user_auth_status(self, user_id: str) -> dict:
        if not user_id:
            raise AdminApiError("User ID is required to fetch auth status.")
        return self.request(f"/staff/{quote(user_id, safe='')}/auth")
