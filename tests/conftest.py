"""Shared fixtures for tests."""

import json
import uuid
from datetime import datetime
from typing import Any, Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from app import app
from dal import database
from dal.database import DatabaseManager, init_database
from dal.models import Client, Pharmacy
from dal.models.base import Base
from lib.supabase_client import SupabaseClient, get_supabase_client

SUPABASE_URL = "http://supabase.test"
SERVICE_KEY = "service-role-key"


class FakeProvider:
    """In-memory stand-in for the hosted auth, storage and /rpc endpoints.

    Attributes:
        users: email -> {"id", "email", "password"}
        tokens: access token -> user id
        rpc_handlers: procedure name -> callable(params) returning JSON
        requests: every request received, in order
    """

    def __init__(self):
        self.users: Dict[str, Dict[str, str]] = {}
        self.tokens: Dict[str, str] = {}
        self.rpc_handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self.uploads: Dict[str, bytes] = {}
        self.recovery_emails = []
        self.requests = []
        self.fail_admin_update_with = None

    # Helpers used by tests

    def create_user(self, email: str, password: str) -> str:
        user_id = str(uuid.uuid4())
        self.users[email] = {"id": user_id, "email": email, "password": password}
        return user_id

    def issue_token(self, user_id: str) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def user_by_id(self, user_id: str):
        return next((u for u in self.users.values() if u["id"] == user_id), None)

    # Transport

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if path == "/auth/v1/signup" and method == "POST":
            body = json.loads(request.content)
            if body["email"] in self.users:
                return httpx.Response(422, json={"msg": "User already registered"})
            user_id = self.create_user(body["email"], body["password"])
            return httpx.Response(200, json={"id": user_id, "email": body["email"]})

        if path == "/auth/v1/token" and method == "POST":
            body = json.loads(request.content)
            user = self.users.get(body["email"])
            if not user or user["password"] != body["password"]:
                return httpx.Response(400, json={"error_description": "Invalid login credentials"})
            token = self.issue_token(user["id"])
            return httpx.Response(200, json={
                "access_token": token,
                "refresh_token": f"refresh-{user['id']}",
                "expires_in": 3600,
                "token_type": "bearer",
                "user": {"id": user["id"], "email": user["email"]},
            })

        token = request.headers.get("authorization", "").replace("Bearer ", "", 1)

        if path == "/auth/v1/user" and method == "GET":
            user = self.user_by_id(self.tokens.get(token, ""))
            if not user:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json={"id": user["id"], "email": user["email"]})

        if path == "/auth/v1/logout" and method == "POST":
            self.tokens.pop(token, None)
            return httpx.Response(204)

        if path == "/auth/v1/recover" and method == "POST":
            self.recovery_emails.append(json.loads(request.content)["email"])
            return httpx.Response(200, json={})

        if path.startswith("/auth/v1/admin/users/") and method == "PATCH":
            if request.headers.get("apikey") != SERVICE_KEY:
                return httpx.Response(401, text="Invalid API key")
            if self.fail_admin_update_with:
                raise self.fail_admin_update_with
            user = self.user_by_id(path.rsplit("/", 1)[-1])
            if not user:
                return httpx.Response(404, text='{"msg":"User not found"}')
            user["password"] = json.loads(request.content)["password"]
            return httpx.Response(200, json={"id": user["id"]})

        if path.startswith("/storage/v1/object/") and method == "POST":
            self.uploads[path[len("/storage/v1/object/"):]] = request.content
            return httpx.Response(200, json={"Key": path})

        if path.startswith("/rest/v1/rpc/") and method == "POST":
            name = path.rsplit("/", 1)[-1]
            handler = self.rpc_handlers.get(name)
            if handler is None:
                return httpx.Response(404, json={"message": f"function {name} not found"})
            result = handler(json.loads(request.content))
            if result is None:
                return httpx.Response(204)
            return httpx.Response(200, json=result)

        return httpx.Response(404, json={"message": f"unexpected {method} {path}"})


@pytest.fixture
def provider():
    """Create the fake hosted backend.

    Returns:
        FakeProvider: fake auth/storage/rpc backend
    """
    return FakeProvider()


@pytest.fixture
def supabase(provider):
    """Create SupabaseClient wired to the fake provider.

    Args:
        provider: FakeProvider fixture

    Returns:
        SupabaseClient: client using httpx.MockTransport
    """
    return SupabaseClient(
        url=SUPABASE_URL,
        anon_key="anon-key",
        service_key=SERVICE_KEY,
        timeout=5,
        transport=httpx.MockTransport(provider.handler),
    )


@pytest.fixture
def db():
    """Initialize a fresh in-memory SQLite database.

    Yields:
        None: database.SessionLocal is bound to the new engine
    """
    assert init_database("sqlite://", create_tables=True)
    yield
    Base.metadata.drop_all(bind=database.engine)
    database.engine.dispose()
    database.engine = None
    database.SessionLocal = None


@pytest.fixture
def db_manager(db):
    """Create DatabaseManager on the test database.

    Yields:
        DatabaseManager: manager with an open session
    """
    with DatabaseManager(auto_init=False) as manager:
        yield manager


@pytest.fixture
def pharmacy(db_manager, provider):
    """Create a pharmacy with a provider account.

    Returns:
        Pharmacy: pharmacy row
    """
    auth_id = provider.create_user("owner@farmacia.com", "secret123")
    return db_manager.pharmacy_service.create_pharmacy(
        auth_id=auth_id, name="Farmácia Central", email="owner@farmacia.com",
        phone="11988887777", address="Rua A, 100",
    )


@pytest.fixture
def other_pharmacy(db_manager, provider):
    """Create a second, unrelated pharmacy.

    Returns:
        Pharmacy: pharmacy row
    """
    auth_id = provider.create_user("other@farmacia.com", "secret123")
    return db_manager.pharmacy_service.create_pharmacy(auth_id=auth_id, name="Outra Farmácia")


@pytest.fixture
def client_row(db_manager, provider, pharmacy):
    """Create a client of `pharmacy` with a phone login.

    Returns:
        Client: client row
    """
    auth_id = provider.create_user("phone_5511999990000@system.local", "secret123")
    return db_manager.client_service.create_client(
        auth_id=auth_id, pharmacy_id=pharmacy.id, name="Maria Silva",
        phone_digits="11999990000", email="maria@example.com",
    )


@pytest.fixture
def api_client(db, supabase):
    """Create TestClient with the provider dependency overridden.

    Yields:
        TestClient: client for the FastAPI app
    """
    app.dependency_overrides[get_supabase_client] = lambda: supabase
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def pharmacy_headers(provider, pharmacy):
    """Authorization header for the pharmacy session."""
    return {"Authorization": f"Bearer {provider.issue_token(pharmacy.auth_id)}"}


@pytest.fixture
def client_headers(provider, client_row):
    """Authorization header for the client session."""
    return {"Authorization": f"Bearer {provider.issue_token(client_row.auth_id)}"}


@pytest.fixture
def now():
    """Fixed reference time for aggregate tests."""
    return datetime(2024, 3, 15, 12, 0)
