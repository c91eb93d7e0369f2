from __future__ import annotations

import time

import pytest
from jose import jwt
from starlette.testclient import TestClient

from employee_directory.main import app
from employee_directory.models.employee import Employee
from employee_directory.services.directory_store import directory_sessions

TEST_SESSION_SECRET = "test-session-secret"


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _make_token(
    *,
    role: str | None = "admin",
    employee_tag: str = "E100",
    name: str = "Test User",
    expired: bool = False,
    secret: str = TEST_SESSION_SECRET,
) -> str:
    now = int(time.time())
    claims: dict = {
        "employee_tag": employee_tag,
        "name": name,
        "iat": now - 60,
        "exp": now - 3600 if expired else now + 3600,
    }
    if role is not None:
        claims["role"] = role
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture(autouse=True)
def _session_settings():
    from employee_directory.core.config import settings

    original_secret = settings.SESSION_TOKEN_SECRET
    settings.SESSION_TOKEN_SECRET = TEST_SESSION_SECRET
    yield
    settings.SESSION_TOKEN_SECRET = original_secret


@pytest.fixture(autouse=True)
def _fresh_sessions():
    directory_sessions.clear()
    yield
    directory_sessions.clear()


@pytest.fixture
def make_token():
    return _make_token


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {_make_token(role='admin', employee_tag='E100', name='Admin User')}"}


@pytest.fixture
def manager_headers():
    return {"Authorization": f"Bearer {_make_token(role='manager', employee_tag='E200', name='Manager User')}"}


@pytest.fixture
def viewer_headers():
    return {"Authorization": f"Bearer {_make_token(role='viewer', employee_tag='E300', name='Viewer User')}"}


@pytest.fixture
def sample_employees() -> list[Employee]:
    return [
        Employee(employee_tag="E1", username="Alice", email="alice@example.com", phone_number="555-0101"),
        Employee(employee_tag="E2", username="Bob", email="bob@example.com", phone_number="555-0202"),
        Employee(employee_tag="E3", username="Carol", email="carol@corp.example", phone_number="777-1234"),
    ]
