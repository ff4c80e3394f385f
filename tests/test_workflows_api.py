"""Tests for workflow CRUD, step replacement, comments and the delete cascade."""


class TestCreateAndRead:
    def test_create_orders_steps_by_position(self, client, make_workflow, employee):
        workflow = make_workflow([("Collect documents", employee["id"]), ("Review", None)])
        assert workflow["status"] == "active"
        assert [(s["name"], s["step_order"]) for s in workflow["steps"]] == [
            ("Collect documents", 1), ("Review", 2)
        ]
        assert workflow["steps"][0]["assigned_to"] == employee["id"]

    def test_employee_cannot_create(self, client, employee):
        response = client.post("/api/v1/workflows", headers=employee["headers"], json={"name": "Nope"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions. Required: workflows:create"

    def test_employee_can_read(self, client, make_workflow, employee):
        workflow = make_workflow([("Only step", None)])
        response = client.get(f"/api/v1/workflows/{workflow['id']}", headers=employee["headers"])
        assert response.status_code == 200
        assert response.json()["name"] == "Onboarding"

    def test_list_filters_by_status(self, client, make_workflow, manager):
        make_workflow([("a", None)], status="active", name="Live")
        make_workflow([("b", None)], status="draft", name="Sketch")
        response = client.get("/api/v1/workflows", params={"status": "draft"}, headers=manager["headers"])
        assert [w["name"] for w in response.json()] == ["Sketch"]

    def test_missing_workflow(self, client, manager):
        response = client.get("/api/v1/workflows/does-not-exist", headers=manager["headers"])
        assert response.status_code == 404


class TestUpdate:
    def test_fields_only_keeps_steps(self, client, make_workflow, manager):
        workflow = make_workflow([("a", None), ("b", None)])
        response = client.put(
            f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"], json={"priority": "urgent"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["priority"] == "urgent"
        assert [s["id"] for s in body["steps"]] == [s["id"] for s in workflow["steps"]]

    def test_steps_list_replaces_everything(self, client, db, make_workflow, manager, employee):
        workflow = make_workflow([("old one", employee["id"]), ("old two", None)])
        client.post(f"/api/v1/workflows/{workflow['id']}/assignments", headers=manager["headers"])
        assert len(db.rows("workflow_step_assignments")) == 1

        response = client.put(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"], json={
            "steps": [{"name": "new one"}, {"name": "new two"}, {"name": "new three"}]
        })
        body = response.json()
        assert [(s["name"], s["step_order"]) for s in body["steps"]] == [
            ("new one", 1), ("new two", 2), ("new three", 3)
        ]
        old_ids = {s["id"] for s in workflow["steps"]}
        assert not old_ids & {s["id"] for s in db.rows("workflow_steps")}
        assert db.rows("workflow_step_assignments") == []

    def test_empty_steps_list_clears(self, client, make_workflow, manager):
        workflow = make_workflow([("a", None)])
        response = client.put(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"], json={"steps": []})
        assert response.json()["steps"] == []

    def test_running_instance_blocks_step_replacement(self, client, db, make_workflow, manager, employee):
        workflow = make_workflow([("a", employee["id"]), ("b", None)])
        instance = client.post("/api/v1/instances", headers=employee["headers"],
                               json={"workflow_id": workflow["id"]}).json()

        response = client.put(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"],
                              json={"name": "Renamed", "steps": [{"name": "fresh"}]})
        assert response.status_code == 409
        assert response.json()["detail"] == "Cannot replace steps while the workflow has active instances"
        assert [s["id"] for s in db.rows("workflow_steps")] == [s["id"] for s in workflow["steps"]]
        assert db.rows("workflows")[0]["name"] == "Onboarding"
        assert len(db.rows("workflow_step_assignments")) == 1

        renamed = client.put(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"],
                             json={"name": "Renamed"})
        assert renamed.status_code == 200

        client.post(f"/api/v1/instances/{instance['id']}/cancel", headers=employee["headers"])
        replaced = client.put(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"],
                              json={"steps": [{"name": "fresh"}]})
        assert replaced.status_code == 200
        assert [s["name"] for s in replaced.json()["steps"]] == ["fresh"]


class TestDelete:
    def test_cascade_removes_everything_hanging_off_the_workflow(self, client, db, make_workflow, manager, employee):
        workflow = make_workflow([("a", employee["id"]), ("b", employee["id"])])
        started = client.post("/api/v1/instances", headers=employee["headers"], json={"workflow_id": workflow["id"]})
        assert started.status_code == 201
        client.post(f"/api/v1/workflows/{workflow['id']}/comments", headers=manager["headers"], json={"comment": "hi"})
        assert db.rows("notifications")

        response = client.delete(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"])
        assert response.status_code == 204
        for table in ("workflows", "workflow_steps", "workflow_instances", "workflow_comments",
                      "workflow_step_assignments", "notifications"):
            assert db.rows(table) == [], table

    def test_children_are_deleted_before_parents(self, client, db, make_workflow, manager):
        workflow = make_workflow([("a", None)])
        db.calls.clear()
        client.delete(f"/api/v1/workflows/{workflow['id']}", headers=manager["headers"])
        deletes = [table for table, mode in db.calls if mode == "delete"]
        assert deletes.index("workflow_instances") < deletes.index("workflow_steps") < deletes.index("workflows")

    def test_delete_missing(self, client, manager):
        assert client.delete("/api/v1/workflows/nope", headers=manager["headers"]).status_code == 404


class TestSteps:
    def test_assignee_can_change_own_step(self, client, make_workflow, employee):
        workflow = make_workflow([("mine", employee["id"])])
        step_id = workflow["steps"][0]["id"]
        response = client.patch(
            f"/api/v1/workflows/steps/{step_id}/status", headers=employee["headers"], json={"status": "in_progress"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"

    def test_other_employee_cannot(self, client, make_workflow, make_user, employee):
        other = make_user("employee")
        workflow = make_workflow([("mine", employee["id"])])
        response = client.patch(
            f"/api/v1/workflows/steps/{workflow['steps'][0]['id']}/status",
            headers=other["headers"], json={"status": "blocked"},
        )
        assert response.status_code == 403

    def test_invalid_status(self, client, make_workflow, manager):
        workflow = make_workflow([("a", None)])
        response = client.patch(
            f"/api/v1/workflows/steps/{workflow['steps'][0]['id']}/status",
            headers=manager["headers"], json={"status": "exploded"},
        )
        assert response.status_code == 422


class TestComments:
    def test_add_and_list(self, client, make_workflow, employee):
        workflow = make_workflow([("a", None)])
        url = f"/api/v1/workflows/{workflow['id']}/comments"
        assert client.post(url, headers=employee["headers"], json={"comment": "First"}).status_code == 201
        client.post(url, headers=employee["headers"], json={"comment": "Second"})
        assert [c["comment"] for c in client.get(url, headers=employee["headers"]).json()] == ["First", "Second"]

    def test_empty_comment_rejected(self, client, make_workflow, employee):
        workflow = make_workflow([("a", None)])
        response = client.post(
            f"/api/v1/workflows/{workflow['id']}/comments", headers=employee["headers"], json={"comment": ""}
        )
        assert response.status_code == 422


class TestCreateAssignments:
    def test_only_assigned_steps_without_an_assignment(self, client, db, make_workflow, manager, employee):
        workflow = make_workflow([("a", employee["id"]), ("b", None), ("c", employee["id"])])
        url = f"/api/v1/workflows/{workflow['id']}/assignments"

        first = client.post(url, headers=manager["headers"]).json()["created"]
        assert len(first) == 2
        assert first[0]["notes"] == "Auto-created assignment for step: a"
        assert first[0]["assigned_by"] == manager["id"]

        assert client.post(url, headers=manager["headers"]).json()["created"] == []

    def test_employee_cannot(self, client, make_workflow, employee):
        workflow = make_workflow([("a", employee["id"])])
        response = client.post(f"/api/v1/workflows/{workflow['id']}/assignments", headers=employee["headers"])
        assert response.status_code == 403
