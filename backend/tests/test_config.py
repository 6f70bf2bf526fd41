"""
Startup configuration tests.
"""

import pytest

from app import create_app
from app.config import ConfigurationError, check_required_settings
from app.extensions import db
from conftest import SERVICE_ROLE_KEY, SUPABASE_URL


BASE_SETTINGS = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SUPABASE_URL": SUPABASE_URL,
    "SUPABASE_SERVICE_ROLE_KEY": SERVICE_ROLE_KEY,
    "CIVIL_TIMEZONE": "Asia/Manila",
}


class TestRequiredSettings:

    @pytest.mark.parametrize("missing", ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"])
    def test_missing_setting_is_fatal(self, missing):
        with pytest.raises(ConfigurationError, match=missing):
            create_app({**BASE_SETTINGS, missing: None})

    def test_reports_every_missing_setting(self):
        with pytest.raises(ConfigurationError) as exc_info:
            check_required_settings({"SUPABASE_URL": "", "SUPABASE_SERVICE_ROLE_KEY": None})

        assert str(exc_info.value) == "Missing required configuration: SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY"

    def test_complete_settings(self):
        check_required_settings({"SUPABASE_URL": SUPABASE_URL, "SUPABASE_SERVICE_ROLE_KEY": SERVICE_ROLE_KEY})


class TestCreateApp:

    def test_registers_gateway_services(self):
        app = create_app(BASE_SETTINGS)

        assert "identity_client" in app.extensions
        assert "audit_logger" in app.extensions
        assert {"staff", "admin", "reports", "system"} <= set(app.blueprints)

    def test_service_key_never_in_health_payload(self):
        app = create_app(BASE_SETTINGS)
        with app.app_context():
            db.create_all()
            resp = app.test_client().get("/api/health")

        assert SERVICE_ROLE_KEY not in resp.get_data(as_text=True)
