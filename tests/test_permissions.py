"""Tests for the role permission matrix."""

from app.config.permissions_config import PERMISSION_MATRIX, RESOURCES, get_role_permissions


def test_root_holds_every_permission():
    every = {f"{r}:{a}" for r, cfg in RESOURCES.items() for a in cfg["actions"]}
    assert set(get_role_permissions("root")) == every


def test_admin_cannot_cleanup_or_manage_modules():
    perms = set(get_role_permissions("admin"))
    assert "admin:cleanup" not in perms
    assert "modules:manage" not in perms
    assert "presence:read" not in perms
    assert {"workspaces:create", "workspaces:delete"}.isdisjoint(perms)
    assert {"profiles:delete", "profiles:change_role", "workspaces:assign"} <= perms


def test_manager_authors_workflows_but_not_users():
    perms = set(get_role_permissions("manager"))
    assert {"workflows:create", "workflows:delete", "instances:manage", "assignments:create"} <= perms
    assert "profiles:change_role" not in perms
    assert "profiles:update" not in perms


def test_employee_runs_but_does_not_author():
    perms = set(get_role_permissions("employee"))
    assert {"workflows:read", "instances:start", "instances:advance", "assignments:update"} <= perms
    assert "workflows:create" not in perms
    assert "instances:manage" not in perms
    assert "assignments:create" not in perms


def test_unknown_role_holds_nothing():
    assert get_role_permissions("guest") == []
    assert get_role_permissions(None) == []


def test_every_permission_has_a_description():
    for permission in PERMISSION_MATRIX["permissions"]:
        assert permission["description"]
