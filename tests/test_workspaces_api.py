"""Tests for workspace management, membership and the admin cleanup."""

BASE = "/api/v1/workspaces"


def create(client, user, name, **extra):
    return client.post(BASE, headers=user["headers"], json={"name": name, **extra})


class TestWorkspaces:
    def test_root_creates_with_derived_slug(self, client, root):
        response = create(client, root, "Acme  Corp!")
        assert response.status_code == 201
        assert response.json()["slug"] == "acme-corp"
        assert response.json()["owner_id"] == root["id"]

    def test_duplicate_slug(self, client, root):
        create(client, root, "Acme")
        assert create(client, root, "ACME").status_code == 409

    def test_name_without_letters(self, client, root):
        assert create(client, root, "!!!").status_code == 400

    def test_admin_cannot_create(self, client, admin):
        assert create(client, admin, "Acme").status_code == 403

    def test_non_root_lists_own_workspace(self, client, make_user, root):
        acme = create(client, root, "Acme").json()
        create(client, root, "Globex")
        member = make_user("employee", workspace_id=acme["id"])
        assert [w["name"] for w in client.get(BASE, headers=member["headers"]).json()] == ["Acme"]
        assert len(client.get(BASE, headers=root["headers"]).json()) == 2

    def test_admin_updates_own_workspace_only(self, client, make_user, root):
        acme = create(client, root, "Acme").json()
        globex = create(client, root, "Globex").json()
        admin = make_user("admin", workspace_id=acme["id"])
        ok = client.put(f"{BASE}/{acme['id']}", headers=admin["headers"], json={"description": "Rockets"})
        assert ok.json()["description"] == "Rockets"
        denied = client.put(f"{BASE}/{globex['id']}", headers=admin["headers"], json={"description": "x"})
        assert denied.status_code == 403

    def test_delete_detaches_members(self, client, db, make_user, root):
        acme = create(client, root, "Acme").json()
        member = make_user("employee", workspace_id=acme["id"])
        db.add_row("workspace_modules", {"workspace_id": acme["id"], "module_id": "m1", "is_active": True})

        assert client.delete(f"{BASE}/{acme['id']}", headers=root["headers"]).status_code == 204
        assert db.rows("profiles", id=member["id"])[0]["workspace_id"] is None
        assert db.rows("workspace_modules") == []
        assert db.rows("workspaces") == []


class TestMembers:
    def test_assign_list_stats_unassign(self, client, db, make_user, root):
        acme = create(client, root, "Acme").json()
        admin = make_user("admin", workspace_id=acme["id"])
        newcomer = make_user("employee")
        db.add_row("workspace_modules", {"workspace_id": acme["id"], "module_id": "m1", "is_active": True})
        db.add_row("workspace_modules", {"workspace_id": acme["id"], "module_id": "m2", "is_active": False})

        assigned = client.post(f"{BASE}/{acme['id']}/members", headers=admin["headers"],
                               json={"user_id": newcomer["id"]})
        assert assigned.json()["workspace_id"] == acme["id"]

        members = client.get(f"{BASE}/{acme['id']}/members", headers=admin["headers"]).json()
        assert {m["id"] for m in members} == {admin["id"], newcomer["id"]}

        stats = client.get(f"{BASE}/{acme['id']}/stats", headers=admin["headers"]).json()
        assert stats["member_count"] == 2
        assert stats["active_module_count"] == 1
        assert stats["members_by_role"] == {"admin": 1, "employee": 1}

        removed = client.delete(f"{BASE}/{acme['id']}/members/{newcomer['id']}", headers=admin["headers"])
        assert removed.json()["workspace_id"] is None
        again = client.delete(f"{BASE}/{acme['id']}/members/{newcomer['id']}", headers=admin["headers"])
        assert again.status_code == 404

    def test_employee_cannot_assign(self, client, make_user, root):
        acme = create(client, root, "Acme").json()
        member = make_user("employee", workspace_id=acme["id"])
        response = client.post(f"{BASE}/{acme['id']}/members", headers=member["headers"], json={"user_id": "x"})
        assert response.status_code == 403


class TestAdminCleanup:
    def test_root_wipes_workflow_data(self, client, db, root, make_workflow, employee):
        workflow = make_workflow([("a", employee["id"])])
        client.post("/api/v1/instances", headers=employee["headers"], json={"workflow_id": workflow["id"]})

        response = client.post("/api/v1/admin/cleanup", headers=root["headers"])
        assert response.status_code == 200
        deleted = response.json()["deleted"]
        assert deleted["workflows"] == 1
        assert deleted["workflow_steps"] == 1
        assert deleted["workflow_instances"] == 1
        assert deleted["notifications"] == 1
        assert db.rows("workflows") == []
        assert db.rows("profiles")

    def test_admin_cannot_cleanup(self, client, admin):
        assert client.post("/api/v1/admin/cleanup", headers=admin["headers"]).status_code == 403
