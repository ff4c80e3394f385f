"""Tests for saving, analysing and publishing builder graphs."""

BASE = "/api/v1/workflow-definitions"


def node(node_id, step_type, label, y, assigned_to=None):
    return {
        "id": node_id,
        "type": "workflowStep",
        "position": {"x": 250, "y": y},
        "data": {"label": label, "stepType": step_type, "description": f"{label} step",
                 "assignedTo": assigned_to, "estimatedHours": 1},
    }


def edge(source, target, label=None):
    e = {"id": f"e-{source}-{target}", "source": source, "target": target}
    if label:
        e["data"] = {"label": label}
    return e


def onboarding_graph(assignee=None):
    nodes = [
        node("start", "trigger", "Start", 0),
        node("form", "form-submitted", "Form received", 150, assignee),
        node("approve", "manual-approval", "Manager approval", 300),
        node("done", "end", "Done", 450),
    ]
    edges = [edge("start", "form"), edge("form", "approve"), edge("approve", "done")]
    return nodes, edges


def save(client, user, nodes, edges, **extra):
    return client.post(BASE, headers=user["headers"], json={"name": "Onboarding", "nodes": nodes, "edges": edges, **extra})


class TestPalette:
    def test_step_types(self, client, employee):
        types = {t["step_type"]: t for t in client.get(f"{BASE}/step-types", headers=employee["headers"]).json()}
        assert types["if-condition"]["is_branching"] is True
        assert types["trigger"]["is_runnable"] is False
        assert types["send-email"]["category"] == "actions"


class TestAnalysis:
    def test_validate_reports_issues(self, client, employee):
        response = client.post(f"{BASE}/validate", headers=employee["headers"], json={
            "nodes": [node("a", "trigger", "A", 0)], "edges": [edge("a", "ghost")]
        })
        body = response.json()
        assert body["is_valid"] is False
        assert any("ghost" in issue for issue in body["issues"])

    def test_analyze(self, client, employee):
        nodes, edges = onboarding_graph()
        body = client.post(f"{BASE}/analyze", headers=employee["headers"], json={"nodes": nodes, "edges": edges}).json()
        assert body["start_nodes"] == ["start"]
        assert body["dead_ends"] == ["done"]
        assert body["branching_nodes"] == ["approve"]

    def test_review(self, client, employee):
        nodes, edges = onboarding_graph()
        nodes.append(node("stray", "log", "Stray", 600))
        findings = client.post(f"{BASE}/review", headers=employee["headers"], json={"nodes": nodes, "edges": edges}).json()
        assert [f["id"] for f in findings] == ["isolated-stray"]


class TestDefinitions:
    def test_save_fills_missing_ids(self, client, manager):
        nodes, edges = onboarding_graph()
        del nodes[0]["id"]
        edges = edges[1:]
        response = save(client, manager, nodes, edges)
        assert response.status_code == 201
        body = response.json()
        assert body["nodes"][0]["id"].startswith("node-")
        assert body["created_by"] == manager["id"]

    def test_invalid_graph_is_rejected(self, client, manager):
        response = save(client, manager, [node("a", "trigger", "A", 0)], [edge("a", "nowhere")])
        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Invalid workflow graph"

    def test_employee_cannot_save(self, client, employee):
        nodes, edges = onboarding_graph()
        assert save(client, employee, nodes, edges).status_code == 403

    def test_list_update_get_delete(self, client, manager):
        nodes, edges = onboarding_graph()
        definition = save(client, manager, nodes, edges).json()

        summaries = client.get(BASE, headers=manager["headers"]).json()
        assert summaries[0]["node_count"] == 4
        assert summaries[0]["edge_count"] == 3

        updated = client.put(f"{BASE}/{definition['id']}", headers=manager["headers"], json={
            "name": "Renamed", "nodes": nodes[:2], "edges": edges[:1]
        }).json()
        assert updated["name"] == "Renamed"
        assert len(client.get(f"{BASE}/{definition['id']}", headers=manager["headers"]).json()["nodes"]) == 2

        assert client.delete(f"{BASE}/{definition['id']}", headers=manager["headers"]).status_code == 204
        assert client.get(f"{BASE}/{definition['id']}", headers=manager["headers"]).status_code == 404

    def test_update_missing(self, client, manager):
        nodes, edges = onboarding_graph()
        response = client.put(f"{BASE}/nope", headers=manager["headers"], json={"name": "x", "nodes": nodes, "edges": edges})
        assert response.status_code == 404


class TestPublish:
    def test_publish_creates_ordered_steps(self, client, manager, employee):
        nodes, edges = onboarding_graph(assignee=employee["id"])
        definition = save(client, manager, nodes, edges, is_reusable=True).json()

        response = client.post(f"{BASE}/{definition['id']}/publish", headers=manager["headers"], json={"status": "active"})
        assert response.status_code == 201
        workflow = response.json()
        assert workflow["status"] == "active"
        assert workflow["is_reusable"] is True
        assert workflow["metadata"] == {"definition_id": definition["id"]}
        assert [(s["name"], s["step_order"]) for s in workflow["steps"]] == [
            ("Form received", 1), ("Manager approval", 2)
        ]
        assert workflow["steps"][0]["assigned_to"] == employee["id"]
        assert workflow["steps"][0]["metadata"] == {"node_id": "form", "step_type": "form-submitted"}

    def test_published_workflow_can_run(self, client, manager, employee):
        nodes, edges = onboarding_graph(assignee=employee["id"])
        definition = save(client, manager, nodes, edges, is_reusable=True).json()
        workflow = client.post(f"{BASE}/{definition['id']}/publish", headers=manager["headers"],
                               json={"status": "active"}).json()
        started = client.post("/api/v1/instances", headers=employee["headers"], json={"workflow_id": workflow["id"]})
        assert started.json()["current_step_name"] == "Form received"

    def test_publish_defaults_to_draft(self, client, manager):
        nodes, edges = onboarding_graph()
        definition = save(client, manager, nodes, edges).json()
        workflow = client.post(f"{BASE}/{definition['id']}/publish", headers=manager["headers"]).json()
        assert workflow["status"] == "draft"

    def test_nothing_runnable(self, client, manager):
        nodes = [node("start", "trigger", "Start", 0), node("done", "end", "Done", 150)]
        definition = save(client, manager, nodes, [edge("start", "done")]).json()
        response = client.post(f"{BASE}/{definition['id']}/publish", headers=manager["headers"])
        assert response.status_code == 400
