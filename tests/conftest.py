"""Shared pytest fixtures for the NeuraCore API test suite.

Provides:
- An in-memory Supabase double (no hosted project needed)
- A FastAPI TestClient wired to it through dependency overrides
- A user factory that seeds a profile and a bearer token per role
- Builders for workflows with ordered steps
"""

import os

# Override settings BEFORE any app imports
os.environ["PRESENCE_SWEEPER_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.database.supabase_client import get_supabase, get_service_supabase  # noqa: E402
from app.modules.ai.llm import get_llm_client  # noqa: E402
from app.modules.auth.service import clear_auth_cache  # noqa: E402
from fakes import FakeSupabase  # noqa: E402

WORKFLOW_TOOLING_ROLES = {"admin", "manager"}


@pytest.fixture
def db():
    fake = FakeSupabase()

    def has_workflow_permissions(params):
        profiles = fake.rows("profiles", id=params["user_id"])
        return bool(profiles) and profiles[0]["role"] in WORKFLOW_TOOLING_ROLES

    fake.rpc_handlers["has_workflow_permissions"] = has_workflow_permissions
    return fake


@pytest.fixture
def client(db):
    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_llm_client] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db):
    """Factory: make_user("admin") -> {"id", "email", "role", "headers"}"""
    counter = {"n": 0}

    def _make(role: str = "employee", workspace_id=None, first_name=None):
        counter["n"] += 1
        email = f"{role}{counter['n']}@example.com"
        profile = db.add_row("profiles", {
            "email": email,
            "first_name": first_name or role.capitalize(),
            "last_name": f"User{counter['n']}",
            "role": role,
            "department": None,
            "workspace_id": workspace_id,
        })
        token = f"token-{profile['id']}"
        db.auth.add_token(token, profile["id"], email)
        return {**profile, "headers": {"Authorization": f"Bearer {token}"}}

    return _make


@pytest.fixture
def root(make_user):
    return make_user("root")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def manager(make_user):
    return make_user("manager")


@pytest.fixture
def employee(make_user):
    return make_user("employee")


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------

@pytest.fixture
def make_workflow(client, manager):
    """Factory creating a workflow through the API; steps are (name, assignee_id) pairs"""
    def _make(steps, status="active", is_reusable=True, name="Onboarding"):
        response = client.post("/api/v1/workflows", headers=manager["headers"], json={
            "name": name,
            "status": status,
            "is_reusable": is_reusable,
            "steps": [
                {"name": step_name, "assigned_to": assignee, "estimated_hours": 2}
                for step_name, assignee in steps
            ],
        })
        assert response.status_code == 201, response.text
        return response.json()

    return _make
