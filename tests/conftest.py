import pytest
from fastapi.testclient import TestClient

from fakes import FakeSupabase
from socialnet.core.access import PolicyGateway
from socialnet.database.supabase_client import get_service_supabase, get_supabase, get_user_client_factory
from socialnet.modules.auth import service as auth_service


# ===================================================================
# Backend
# ===================================================================

@pytest.fixture(autouse=True)
def clear_auth_cache():
    """Token lookups are cached per process; start every test cold."""
    auth_service._AUTH_USER_CACHE.clear()
    yield
    auth_service._AUTH_USER_CACHE.clear()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def alice(db):
    return db.add_user("alice")


@pytest.fixture
def bob(db):
    return db.add_user("bob")


@pytest.fixture
def carol(db):
    return db.add_user("carol")


@pytest.fixture
def gateway_for(db):
    """Build a PolicyGateway acting as the given uid (None = anonymous)."""
    def build(uid):
        return PolicyGateway(db, uid)
    return build


# ===================================================================
# HTTP
# ===================================================================

@pytest.fixture
def client(db):
    from socialnet.main import app

    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_user_client_factory] = lambda: db.as_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(db):
    def build(uid):
        return {"Authorization": f"Bearer {db.token_for(uid)}"}
    return build
