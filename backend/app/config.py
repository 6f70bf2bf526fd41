# backend/app/config.py
from __future__ import annotations
import os


DEFAULT_SITE_URL = "https://chicken-stall-sebastian-rafhael-garcias-projects.vercel.app"


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class Config:
    # Identity provider / managed store (service-role key stays server-side)
    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    IDENTITY_TIMEOUT_SECONDS = float(os.environ.get("IDENTITY_TIMEOUT_SECONDS", "10"))

    # Comma-separated allow-list; unset or "*" means echo the request origin
    ALLOWED_ORIGIN = os.environ.get("ALLOWED_ORIGIN")

    # Used to build confirmation-email redirect links
    SITE_URL = os.environ.get("SITE_URL") or DEFAULT_SITE_URL

    # Base URL of the deployed admin gateway (CLI client side)
    ADMIN_API_URL = os.environ.get("ADMIN_API_URL")

    # Every "day" in reporting is a calendar day in this zone
    CIVIL_TIMEZONE = os.environ.get("CIVIL_TIMEZONE", "Asia/Manila")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stalls.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False


REQUIRED_SETTINGS = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")


def check_required_settings(config) -> None:
    missing = [key for key in REQUIRED_SETTINGS if not config.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}"
        )
