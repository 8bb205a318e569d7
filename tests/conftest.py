import os

# Settings are read at import time, so configure the environment first
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SEED_SAMPLE_DATA", "false")

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.security import issue_token  # noqa: E402
from app.main import app  # noqa: E402
from app.models.auth_context import AuthClaims  # noqa: E402
from app.models.role import UserRole  # noqa: E402
from app.store.memory_store import MemoryStore  # noqa: E402
from app.store.sql_store import SqlDocumentStore  # noqa: E402

STRONG_PASSWORD = "Str0ng!Pass"
SQL_TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def store():
    """Fresh in-memory store for service-level tests"""
    memory_store = MemoryStore()
    await memory_store.start()
    yield memory_store
    await memory_store.stop()


@pytest.fixture(params=["memory", "sql"])
async def any_store(request):
    """Each store backend, for contract tests"""
    if request.param == "memory":
        backend = MemoryStore()
    else:
        backend = SqlDocumentStore(SQL_TEST_DATABASE_URL)
    await backend.start()
    yield backend
    await backend.stop()


@pytest.fixture(scope="function")
def client():
    """FastAPI test client; the lifespan creates a fresh memory store per test"""
    with TestClient(app) as test_client:
        yield test_client


def create_test_token(
    user_id: str = "user_test",
    role: UserRole = UserRole.GYM_OWNER,
    tenant_id: str | None = "gym_test",
    expired: bool = False,
) -> str:
    """
    Generate a signed JWT for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        role: Role claim
        tenant_id: Tenant claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    claims = AuthClaims(
        user_id=user_id,
        email=f"{user_id}@example.com",
        role=role,
        tenant_id=tenant_id,
        first_name="Test",
        last_name="User",
    )
    lifetime = timedelta(minutes=-5) if expired else timedelta(minutes=15)
    return issue_token(claims, expires_delta=lifetime)


def signup_gym(client, gym_name: str, email: str, password: str = STRONG_PASSWORD) -> dict:
    """Sign up a gym through the API and return the response data"""
    response = client.post(
        "/api/auth/signup",
        json={
            "email": email,
            "password": password,
            "firstName": "Owner",
            "lastName": gym_name,
            "gymName": gym_name,
        },
    )
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def tenant_headers(signup_data: dict) -> dict:
    return {
        "Authorization": f"Bearer {signup_data['token']}",
        "X-Tenant-ID": signup_data["tenant"]["id"],
    }


@pytest.fixture
def gym_a(client):
    """Signed-up gym A"""
    return signup_gym(client, "Iron Temple", "owner@irontemple.com")


@pytest.fixture
def gym_b(client):
    """Signed-up gym B"""
    return signup_gym(client, "Flex Studio", "owner@flexstudio.com")


@pytest.fixture
def gym_a_headers(gym_a):
    """Authorization and tenant headers for gym A"""
    return tenant_headers(gym_a)


@pytest.fixture
def gym_b_headers(gym_b):
    """Authorization and tenant headers for gym B"""
    return tenant_headers(gym_b)


@pytest.fixture
def admin_headers():
    """Authorization headers for a super admin"""
    token = create_test_token(user_id="user_admin", role=UserRole.SUPER_ADMIN, tenant_id=None)
    return {"Authorization": f"Bearer {token}"}


def create_plan(client, headers, name="Basic", price=30) -> dict:
    """Create a monthly plan through the API"""
    response = client.post(
        "/api/plans", headers=headers, json={"name": name, "price": price, "duration": "monthly"}
    )
    assert response.status_code == 201
    return response.json()["data"]


def create_member(client, headers, **fields) -> dict:
    """Enroll a member through the API; fields override the defaults"""
    data = {"name": "Alex Runner", "email": "alex@example.com", "phone": "+15550100"}
    data.update(fields)
    response = client.post("/api/members", headers=headers, json=data)
    assert response.status_code == 201, response.json()
    return response.json()["data"]
