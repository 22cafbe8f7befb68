import pytest
from fastapi.testclient import TestClient

from fake_supabase import FakeSupabase
from rateboard.database.supabase_client import get_supabase, get_service_supabase
from rateboard.main import app
from rateboard.modules.auth.service import clear_auth_cache
from rateboard.modules.provisioning.routes import get_admin_supabase


@pytest.fixture()
def db():
    return FakeSupabase()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_admin_supabase] = lambda: db
    clear_auth_cache()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture()
def auth_headers(db):
    """Build bearer headers for a seeded user id"""
    def make(user_id):
        return {"Authorization": f"Bearer {db.auth.issue_token(user_id)}"}
    return make


@pytest.fixture()
def admin_id(db):
    return db.add_user("admin@example.com", role="system_admin", name="Ada Admin")


@pytest.fixture()
def owner_id(db):
    return db.add_user("owner@example.com", role="store_owner", name="Olive Owner")


@pytest.fixture()
def user_id(db):
    return db.add_user("user@example.com", name="Nora Normal", address="5 Elm St")
