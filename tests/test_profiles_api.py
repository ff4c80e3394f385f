"""Tests for profile listing, role changes and user deletion rules."""

import pytest


def delete(client, caller, target_id):
    return client.delete(f"/api/v1/profiles/{target_id}", headers=caller["headers"])


class TestListAndUpdate:
    def test_admin_sees_own_workspace_only(self, client, make_user):
        admin = make_user("admin", workspace_id="ws-1")
        make_user("employee", workspace_id="ws-1")
        make_user("employee", workspace_id="ws-2")
        listed = client.get("/api/v1/profiles", headers=admin["headers"]).json()
        assert {p["workspace_id"] for p in listed} == {"ws-1"}
        assert len(listed) == 2

    def test_caller_without_workspace_sees_unassigned(self, client, make_user):
        manager = make_user("manager")
        make_user("employee", workspace_id="ws-1")
        listed = client.get("/api/v1/profiles", headers=manager["headers"]).json()
        assert [p["id"] for p in listed] == [manager["id"]]

    def test_root_sees_everyone(self, client, make_user, root):
        make_user("employee", workspace_id="ws-1")
        make_user("employee", workspace_id="ws-2")
        assert len(client.get("/api/v1/profiles", headers=root["headers"]).json()) == 3

    def test_employee_cannot_list(self, client, employee):
        assert client.get("/api/v1/profiles", headers=employee["headers"]).status_code == 403

    def test_update_own_profile(self, client, employee):
        response = client.put(f"/api/v1/profiles/{employee['id']}", headers=employee["headers"],
                              json={"department": "Sales"})
        assert response.status_code == 200
        assert response.json()["department"] == "Sales"

    def test_employee_cannot_update_others(self, client, make_user, employee):
        other = make_user("employee")
        response = client.put(f"/api/v1/profiles/{other['id']}", headers=employee["headers"], json={"first_name": "X"})
        assert response.status_code == 403


class TestChangeRole:
    def test_admin_promotes_employee_to_manager(self, client, admin, employee):
        response = client.put(f"/api/v1/profiles/{employee['id']}/role", headers=admin["headers"], json={"role": "manager"})
        assert response.status_code == 200
        assert response.json()["role"] == "manager"

    def test_admin_cannot_grant_admin(self, client, admin, employee):
        response = client.put(f"/api/v1/profiles/{employee['id']}/role", headers=admin["headers"], json={"role": "admin"})
        assert response.status_code == 403

    def test_admin_cannot_demote_admin(self, client, make_user, admin):
        other_admin = make_user("admin")
        response = client.put(f"/api/v1/profiles/{other_admin['id']}/role", headers=admin["headers"],
                              json={"role": "employee"})
        assert response.status_code == 403

    def test_root_grants_admin(self, client, root, employee):
        response = client.put(f"/api/v1/profiles/{employee['id']}/role", headers=root["headers"], json={"role": "admin"})
        assert response.json()["role"] == "admin"

    def test_manager_has_no_role_permission(self, client, manager, employee):
        response = client.put(f"/api/v1/profiles/{employee['id']}/role", headers=manager["headers"],
                              json={"role": "manager"})
        assert response.status_code == 403


class TestDeleteUser:
    def test_admin_deletes_employee(self, client, db, admin, employee):
        response = delete(client, admin, employee["id"])
        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully", "deleted_user_id": employee["id"]}
        assert db.auth.admin.deleted == [employee["id"]]
        assert db.rows("profiles", id=employee["id"]) == []

    @pytest.mark.parametrize("role", ["employee", "manager"])
    def test_non_admin_caller(self, client, make_user, role):
        caller = make_user(role)
        target = make_user("employee")
        response = delete(client, caller, target["id"])
        assert response.status_code == 403

    def test_missing_target(self, client, admin):
        assert delete(client, admin, "ghost").status_code == 404

    def test_cannot_delete_self(self, client, admin):
        response = delete(client, admin, admin["id"])
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete your own account"

    def test_root_is_protected(self, client, make_user, root):
        other_root = make_user("root")
        response = delete(client, root, other_root["id"])
        assert response.status_code == 400
        assert response.json()["detail"] == "Root users cannot be deleted"

    def test_admin_cannot_delete_admin(self, client, make_user, admin):
        other_admin = make_user("admin")
        response = delete(client, admin, other_admin["id"])
        assert response.status_code == 403

    def test_root_may_delete_the_last_admin(self, client, db, root, admin):
        assert delete(client, root, admin["id"]).status_code == 200
        assert db.rows("profiles", role="admin") == []

    def test_platform_failure(self, client, db, admin, employee):
        db.auth.admin.fail_with = Exception("User not found in auth schema")
        response = delete(client, admin, employee["id"])
        assert response.status_code == 400
        assert response.json()["detail"] == {
            "error": "Failed to delete user",
            "details": "User not found in auth schema",
        }

    def test_rules_run_in_order(self, client, make_user):
        # A manager deleting themselves is refused for the role, not for self-deletion
        manager = make_user("manager")
        assert delete(client, manager, manager["id"]).status_code == 403
