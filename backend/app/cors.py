# Overview: Per-request cross-origin resolution for the admin gateway.

"""
Allowed-origin resolution.

ALLOWED_ORIGIN is a comma-separated allow-list. When it only lists local
development origins but the request comes from what looks like a deployed
frontend (HTTPS or a static-hosting domain), that origin is echoed anyway.
This is an operational escape hatch for preview deployments, not a
security boundary: authorization is enforced by the bearer token.
"""

from __future__ import annotations

from typing import Optional


ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOW_METHODS = "GET,POST,DELETE,OPTIONS"

PRODUCTION_HOST_MARKERS = ("vercel.app", "netlify.app", "github.io")
LOCAL_HOST_MARKERS = ("localhost", "127.0.0.1")


def _looks_like_production(origin: str) -> bool:
    return origin.startswith("https://") or any(marker in origin for marker in PRODUCTION_HOST_MARKERS)


def _is_local(origin: str) -> bool:
    return any(marker in origin for marker in LOCAL_HOST_MARKERS)


def parse_allowed_origins(setting: Optional[str]) -> list[str]:
    if not setting:
        return []
    return [o.strip() for o in setting.split(",") if o.strip()]


def resolve_cors_origin(request_origin: Optional[str], allowed_setting: Optional[str]) -> str:
    if not allowed_setting or allowed_setting.strip() == "*":
        return request_origin or "*"

    allowed = parse_allowed_origins(allowed_setting)

    if request_origin and request_origin in allowed:
        return request_origin

    if request_origin and _looks_like_production(request_origin) and all(_is_local(o) for o in allowed):
        return request_origin

    # No match: answer with the first allowed origin so the browser rejects it
    return allowed[0] if allowed else "*"


def cors_headers(request_origin: Optional[str], allowed_setting: Optional[str]) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": resolve_cors_origin(request_origin, allowed_setting),
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Vary": "Origin",
    }
