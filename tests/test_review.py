"""Tests for the rule-based workflow review and step suggestions."""

from app.modules.workflow_builder.review import (
    MAX_STEP_SUGGESTIONS,
    fallback_step_suggestions,
    rule_based_review,
)


def node(node_id, step_type, label=None):
    return {"id": node_id, "data": {"label": label or node_id, "stepType": step_type}}


def edge(source, target):
    return {"id": f"{source}->{target}", "source": source, "target": target}


def by_id(suggestions):
    return {s["id"]: s for s in suggestions}


class TestRuleBasedReview:
    def test_clean_linear_workflow_has_no_findings(self):
        nodes = [node("t", "trigger"), node("task", "manual-task"), node("end", "end")]
        assert rule_based_review(nodes, [edge("t", "task"), edge("task", "end")]) == []

    def test_isolated_node(self):
        nodes = [node("t", "trigger"), node("end", "end"), node("orphan", "log", "Orphan")]
        found = by_id(rule_based_review(nodes, [edge("t", "end")]))
        assert "isolated-orphan" in found
        assert found["isolated-orphan"]["suggested_action"]["changes"] == {"nodes_to_remove": ["orphan"]}
        assert 'Node "Orphan"' in found["isolated-orphan"]["description"]

    def test_missing_end_when_everything_loops(self):
        nodes = [node("a", "manual-task"), node("b", "manual-task")]
        found = by_id(rule_based_review(nodes, [edge("a", "b"), edge("b", "a")]))
        assert found["no-end-node"]["severity"] == "high"

    def test_single_node_is_not_missing_an_end(self):
        found = by_id(rule_based_review([node("a", "manual-task")], [edge("a", "a")]))
        assert "no-end-node" not in found

    def test_condition_with_one_branch(self):
        nodes = [node("c", "if-condition", "Approved?"), node("end", "end")]
        found = by_id(rule_based_review(nodes, [edge("c", "end")]))
        assert found["incomplete-condition-c"]["type"] == "missing_branch"

    def test_condition_with_two_branches_is_fine(self):
        nodes = [node("c", "if-condition"), node("y", "end"), node("n", "end")]
        found = by_id(rule_based_review(nodes, [edge("c", "y"), edge("c", "n")]))
        assert "incomplete-condition-c" not in found

    def test_consecutive_emails(self):
        nodes = [node("a", "send-email", "Welcome"), node("b", "send-email", "Docs"), node("end", "end")]
        found = by_id(rule_based_review(nodes, [edge("a", "b"), edge("b", "end")]))
        combine = found["redundant-emails-a-b"]
        assert combine["suggested_action"]["type"] == "combine"
        assert combine["suggested_action"]["changes"]["nodes_to_modify"][0]["changes"]["label"] == "Welcome + Docs"


class TestFallbackSuggestions:
    def test_known_type(self):
        suggestions = fallback_step_suggestions("manual-approval")
        assert [s["step_type"] for s in suggestions] == ["send-email", "if-condition"]
        assert suggestions[0]["confidence"] == 0.9

    def test_unknown_type_suggests_ending(self):
        suggestions = fallback_step_suggestions("delay")
        assert [s["id"] for s in suggestions] == ["end-workflow"]

    def test_never_more_than_the_cap(self):
        for step_type in ("trigger", "send-email", "if-condition", "manual-approval", None):
            assert len(fallback_step_suggestions(step_type)) <= MAX_STEP_SUGGESTIONS
