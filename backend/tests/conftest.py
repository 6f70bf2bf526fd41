"""
Pytest fixtures for the stall operations backend.

Provides the test app (in-memory SQLite), a per-test table wipe, and an
in-memory identity provider served through httpx.MockTransport so the admin
gateway's provider calls never leave the process.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
import pytest
from app import create_app
from app.extensions import db
from app.models import Profile, Stall
from app.services.identity_service import IdentityClient


SUPABASE_URL = "https://project.supabase.co"
SERVICE_ROLE_KEY = "service-role-test-key"
SITE_URL = "https://stalls.example.com"


class FakeIdentityProvider:
    """
    Minimal stand-in for the provider's auth REST API.

    Records every call in `calls` as (method, path) so tests can assert
    ordering, and every confirmation email in `sent_emails`.
    """

    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.calls = []
        self.sent_emails = []
        self.resend_error = None

    # --- helpers used by fixtures/tests -------------------------------------------------

    def add_user(self, email, *, confirmed=True, last_sign_in_at=None, user_id=None):
        user_id = user_id or str(uuid.uuid4())
        self.users[user_id] = {
            "id": user_id,
            "email": email,
            "email_confirmed_at": "2024-01-01T00:00:00Z" if confirmed else None,
            "last_sign_in_at": last_sign_in_at,
        }
        return user_id

    def issue_token(self, user_id):
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def confirm(self, user_id):
        self.users[user_id]["email_confirmed_at"] = "2024-02-01T08:00:00Z"

    def find_by_email(self, email):
        return next((u for u in self.users.values() if u["email"] == email), None)

    # --- transport ----------------------------------------------------------------------

    @staticmethod
    def _error(status, msg):
        return httpx.Response(status, json={"msg": msg})

    def _is_service_call(self, request):
        return (
            request.headers.get("apikey") == SERVICE_ROLE_KEY
            and request.headers.get("Authorization") == f"Bearer {SERVICE_ROLE_KEY}"
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if request.headers.get("apikey") != SERVICE_ROLE_KEY:
            return self._error(401, "Invalid API key")

        if path == "/auth/v1/user" and request.method == "GET":
            token = request.headers.get("Authorization", "").replace("Bearer ", "")
            user_id = self.tokens.get(token)
            if user_id is None or user_id not in self.users:
                return self._error(401, "invalid JWT")
            return httpx.Response(200, json=self.users[user_id])

        if path == "/auth/v1/resend" and request.method == "POST":
            if self.resend_error:
                return self._error(400, self.resend_error)
            payload = json.loads(request.content)
            self.sent_emails.append((payload["email"], request.url.params.get("redirect_to")))
            return httpx.Response(200, json={})

        if path.startswith("/auth/v1/admin/users"):
            if not self._is_service_call(request):
                return self._error(403, "User not allowed")

            user_id = path[len("/auth/v1/admin/users"):].strip("/") or None

            if request.method == "POST" and user_id is None:
                payload = json.loads(request.content)
                if self.find_by_email(payload["email"]):
                    return self._error(422, "A user with this email address has already been registered")
                new_id = self.add_user(payload["email"], confirmed=payload.get("email_confirm", False))
                return httpx.Response(200, json=self.users[new_id])

            if user_id is not None and user_id not in self.users:
                return self._error(404, "User not found")

            if request.method == "GET" and user_id:
                return httpx.Response(200, json=self.users[user_id])

            if request.method == "DELETE" and user_id:
                del self.users[user_id]
                return httpx.Response(200, json={})

        return self._error(404, "Not found")


@dataclass
class Account:
    id: str
    token: str
    profile: Profile

    @property
    def headers(self):
        return auth_headers(self.token)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SUPABASE_URL': SUPABASE_URL,
        'SUPABASE_SERVICE_ROLE_KEY': SERVICE_ROLE_KEY,
        'SITE_URL': SITE_URL,
        'ALLOWED_ORIGIN': None,
        'CIVIL_TIMEZONE': 'Asia/Manila',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def identity(app, db_session):
    """In-memory identity provider wired into the app for this test."""
    fake = FakeIdentityProvider()
    original = app.extensions["identity_client"]
    app.extensions["identity_client"] = IdentityClient(
        SUPABASE_URL,
        SERVICE_ROLE_KEY,
        transport=httpx.MockTransport(fake.handler),
    )
    yield fake
    app.extensions["identity_client"] = original


@pytest.fixture(scope='function')
def stall(db_session):
    stall = Stall(stall_name="Stall A", location="Market St")
    db_session.add(stall)
    db_session.commit()
    return stall


@pytest.fixture(scope='function')
def other_stall(db_session):
    stall = Stall(stall_name="Stall B", location="Plaza")
    db_session.add(stall)
    db_session.commit()
    return stall


def make_account(identity, db_session, *, email, role, stall_id=None, full_name=None, status="active"):
    user_id = identity.add_user(email, confirmed=True, last_sign_in_at="2024-03-01T01:00:00Z")
    profile = Profile(
        id=user_id,
        full_name=full_name or email.split("@")[0].title(),
        email=email,
        role=role,
        status=status,
        stall_id=stall_id,
    )
    db_session.add(profile)
    db_session.commit()
    return Account(id=user_id, token=identity.issue_token(user_id), profile=profile)


@pytest.fixture(scope='function')
def admin(identity, db_session):
    """Admin account with a valid token."""
    return make_account(identity, db_session, email="owner@stalls.test", role="admin", full_name="Owner")


@pytest.fixture(scope='function')
def staff(identity, db_session, stall):
    """Staff account assigned to `stall`."""
    return make_account(identity, db_session, email="crew@stalls.test", role="staff", stall_id=stall.stall_id)


@pytest.fixture(scope='function')
def fixed_now():
    """2024-03-15 12:00 in Manila."""
    return datetime(2024, 3, 15, 4, 0, tzinfo=timezone.utc)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
