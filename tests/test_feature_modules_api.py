"""Tests for module catalog seeding, access checks and activation in dependency order."""

import pytest

from app.scripts.seed_modules import MODULE_CATALOG, seed_modules

CATALOG = [
    {"name": "neura-core", "display_name": "NeuraCore", "version": "1.0.0", "is_core": True, "required_modules": []},
    {"name": "neura-forms", "display_name": "NeuraForms", "version": "1.0.0", "required_modules": ["neura-core"]},
    {"name": "neura-flow", "display_name": "NeuraFlow", "version": "1.0.0",
     "required_modules": ["neura-core", "neura-forms"]},
]


@pytest.fixture
def workspace(db):
    return db.add_row("workspaces", {"name": "Acme", "slug": "acme", "settings": {}})


@pytest.fixture
def catalog(db):
    seed_modules(db, CATALOG)
    return {m["name"]: m for m in db.rows("modules")}


def activate(client, user, workspace, modules, **extra):
    return client.post(f"/api/v1/modules/workspaces/{workspace['id']}/activate",
                       headers=user["headers"], json={"modules": modules, **extra})


def deactivate(client, user, workspace, modules, **extra):
    return client.post(f"/api/v1/modules/workspaces/{workspace['id']}/deactivate",
                       headers=user["headers"], json={"modules": modules, **extra})


class TestSeed:
    def test_seed_is_idempotent(self, db):
        assert seed_modules(db) == (len(MODULE_CATALOG), 0)
        assert seed_modules(db) == (0, len(MODULE_CATALOG))
        assert len(db.rows("modules")) == len(MODULE_CATALOG)

    def test_only_core_is_core(self):
        assert [m["name"] for m in MODULE_CATALOG if m["is_core"]] == ["neura-core"]


class TestActivation:
    def test_activates_in_dependency_order(self, client, db, root, workspace, catalog):
        activate(client, root, workspace, ["neura-core"])
        response = activate(client, root, workspace, ["neura-flow", "neura-forms"], reason="pilot")
        assert response.status_code == 200
        body = response.json()
        assert body["changed"] == ["neura-forms", "neura-flow"]
        assert body["active_modules"] == ["neura-core", "neura-flow", "neura-forms"]

        audit = db.rows("module_audit_logs", module_name="neura-flow")
        assert audit[0]["action"] == "activate"
        assert audit[0]["previous_state"] == {"is_active": False}
        assert audit[0]["reason"] == "pilot"

    def test_missing_requirement(self, client, root, workspace, catalog):
        activate(client, root, workspace, ["neura-core"])
        response = activate(client, root, workspace, ["neura-flow"])
        assert response.status_code == 400
        assert "neura-flow requires neura-forms" in response.json()["detail"]

    def test_unknown_module(self, client, root, workspace, catalog):
        assert activate(client, root, workspace, ["neura-crm"]).status_code == 404

    def test_unknown_workspace(self, client, root, catalog):
        response = activate(client, root, {"id": "ghost"}, ["neura-core"])
        assert response.status_code == 404

    def test_admin_cannot_manage(self, client, make_user, workspace, catalog):
        admin = make_user("admin", workspace_id=workspace["id"])
        assert activate(client, admin, workspace, ["neura-core"]).status_code == 403

    def test_reactivation_updates_the_same_row(self, client, db, root, workspace, catalog):
        activate(client, root, workspace, ["neura-core", "neura-forms"])
        deactivate(client, root, workspace, ["neura-forms"])
        activate(client, root, workspace, ["neura-forms"])
        rows = db.rows("workspace_modules", module_id=catalog["neura-forms"]["id"])
        assert len(rows) == 1
        assert rows[0]["is_active"] is True


class TestDeactivation:
    @pytest.fixture
    def all_active(self, client, root, workspace, catalog):
        activate(client, root, workspace, ["neura-core", "neura-forms", "neura-flow"])

    def test_refused_while_dependents_are_active(self, client, root, workspace, all_active):
        response = deactivate(client, root, workspace, ["neura-forms"])
        assert response.status_code == 409
        assert "neura-forms is required by neura-flow" in response.json()["detail"]

    def test_cascade(self, client, db, root, workspace, all_active):
        response = deactivate(client, root, workspace, ["neura-forms"], cascade=True, reason="cleanup")
        assert response.json()["changed"] == ["neura-flow", "neura-forms"]
        assert response.json()["active_modules"] == ["neura-core"]
        flow_log = [r for r in db.rows("module_audit_logs", module_name="neura-flow") if r["action"] == "deactivate"]
        assert flow_log[0]["reason"] == "Cascade deactivation: cleanup"

    def test_core_cannot_be_deactivated(self, client, root, workspace, all_active):
        response = deactivate(client, root, workspace, ["neura-core"], cascade=True)
        assert response.status_code == 400

    def test_conflicts_preview(self, client, root, workspace, all_active):
        response = client.get(f"/api/v1/modules/workspaces/{workspace['id']}/conflicts",
                              params={"modules": ["neura-forms"]}, headers=root["headers"])
        body = response.json()
        assert body["can_safely_deactivate"] is False
        assert body["conflicts"] == [{"module_name": "neura-forms", "required_by": ["neura-flow"]}]

    def test_audit_listing(self, client, root, workspace, all_active):
        logs = client.get(f"/api/v1/modules/workspaces/{workspace['id']}/audit", headers=root["headers"]).json()
        assert len(logs) == 3
        assert {log["action"] for log in logs} == {"activate"}


class TestAccess:
    def test_member_access(self, client, make_user, root, workspace, catalog):
        activate(client, root, workspace, ["neura-core", "neura-forms"])
        member = make_user("employee", workspace_id=workspace["id"])

        def can(name):
            return client.get(f"/api/v1/modules/{name}/access", headers=member["headers"]).json()["can_access"]

        assert can("neura-forms") is True
        assert can("neura-flow") is False

    def test_core_is_open_without_workspace(self, client, employee, catalog):
        response = client.get("/api/v1/modules/neura-core/access", headers=employee["headers"])
        assert response.json()["can_access"] is True

    def test_root_reaches_everything(self, client, root, catalog):
        response = client.get("/api/v1/modules/neura-flow/access", headers=root["headers"])
        assert response.json()["can_access"] is True

    def test_access_info(self, client, make_user, root, workspace, catalog):
        activate(client, root, workspace, ["neura-core"])
        member = make_user("employee", workspace_id=workspace["id"])
        info = {i["module_name"]: i for i in client.get("/api/v1/modules/access", headers=member["headers"]).json()}
        assert info["neura-core"]["is_active"] is True
        assert info["neura-forms"]["has_dependencies"] is True
        assert info["neura-flow"]["missing_dependencies"] == ["neura-forms"]

    def test_access_info_of_other_workspace(self, client, make_user, workspace, catalog):
        outsider = make_user("employee", workspace_id="elsewhere")
        response = client.get("/api/v1/modules/access", params={"workspace_id": workspace["id"]},
                              headers=outsider["headers"])
        assert response.status_code == 403
