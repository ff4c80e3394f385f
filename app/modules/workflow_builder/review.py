"""Rule-based workflow review and next-step suggestions, used when no LLM is available."""

from typing import Dict, List, Optional

from app.modules.workflow_builder.graph import (
    analyze_connectivity,
    find_sequential_pairs,
    node_data,
    step_type_of,
)

MAX_STEP_SUGGESTIONS = 3


def rule_based_review(nodes: List[dict], edges: List[dict]) -> List[Dict]:
    suggestions = []
    connectivity = analyze_connectivity(nodes, edges)
    by_id = {n["id"]: n for n in nodes if n.get("id")}

    for node_id in connectivity["isolated_nodes"]:
        label = node_data(by_id[node_id]).get("label", node_id)
        suggestions.append({
            "id": f"isolated-{node_id}",
            "type": "redundancy",
            "title": "Isolated Node Detected",
            "description": f'Node "{label}" is not connected to any other nodes.',
            "severity": "medium",
            "node_ids": [node_id],
            "edge_ids": [],
            "suggested_action": {
                "type": "remove",
                "details": "Consider removing this isolated node or connecting it to the workflow.",
                "changes": {"nodes_to_remove": [node_id]},
            },
            "reasoning": "Isolated nodes serve no purpose in the workflow execution.",
            "confidence": 0.9,
        })

    if not connectivity["dead_ends"] and len(nodes) > 1:
        suggestions.append({
            "id": "no-end-node",
            "type": "missing_branch",
            "title": "Missing End Node",
            "description": "Workflow has no clear ending point.",
            "severity": "high",
            "node_ids": [],
            "edge_ids": [],
            "suggested_action": {
                "type": "add",
                "details": 'Add an "End" node to clearly mark workflow completion.',
                "changes": {
                    "nodes_to_add": [{"type": "workflowStep", "data": {"label": "End Workflow", "stepType": "end"}}]
                },
            },
            "reasoning": "Workflows should have clear end points for better understanding and execution.",
            "confidence": 0.85,
        })

    for node_id, counts in connectivity["node_connections"].items():
        node = by_id[node_id]
        if step_type_of(node) == "if-condition" and counts["outgoing"] < 2:
            suggestions.append({
                "id": f"incomplete-condition-{node_id}",
                "type": "missing_branch",
                "title": "Incomplete Conditional Branch",
                "description": f'Condition "{node_data(node).get("label", node_id)}" only has one output path.',
                "severity": "medium",
                "node_ids": [node_id],
                "edge_ids": [],
                "suggested_action": {
                    "type": "add",
                    "details": 'Add both "Yes" and "No" paths to handle all possible outcomes.',
                    "changes": {"edges_to_add": [{"type": "conditional", "data": {"label": "No"}}]},
                },
                "reasoning": "Conditional nodes should handle both true and false cases.",
                "confidence": 0.8,
            })

    for first, second in find_sequential_pairs(nodes, edges):
        if step_type_of(first) == "send-email" and step_type_of(second) == "send-email":
            first_label = node_data(first).get("label", first["id"])
            second_label = node_data(second).get("label", second["id"])
            suggestions.append({
                "id": f"redundant-emails-{first['id']}-{second['id']}",
                "type": "redundancy",
                "title": "Consecutive Email Steps",
                "description": f'Two email steps "{first_label}" and "{second_label}" are executed consecutively.',
                "severity": "low",
                "node_ids": [first["id"], second["id"]],
                "edge_ids": [],
                "suggested_action": {
                    "type": "combine",
                    "details": "Consider combining these emails into a single comprehensive message.",
                    "changes": {
                        "nodes_to_remove": [second["id"]],
                        "nodes_to_modify": [{"id": first["id"], "changes": {"label": f"{first_label} + {second_label}"}}],
                    },
                },
                "reasoning": "Multiple consecutive emails can overwhelm recipients and reduce effectiveness.",
                "confidence": 0.7,
            })

    return suggestions


_SUGGESTIONS_BY_TYPE = {
    "trigger": [
        ("form-validation", "Form Validation", "Validate submitted form data", "if-condition",
         "Forms typically need validation after trigger", 0.9),
        ("send-notification", "Send Notification", "Notify relevant parties of the trigger", "send-email",
         "Common to notify after a trigger event", 0.8),
    ],
    "send-email": [
        ("wait-response", "Wait for Response", "Wait for email response or timeout", "delay",
         "Emails often require waiting for responses", 0.85),
        ("check-delivery", "Check Delivery Status", "Verify email was delivered successfully", "if-condition",
         "Good practice to verify email delivery", 0.7),
    ],
    "if-condition": [
        ("approval-path", "Manual Approval", "Route to human for approval", "manual-approval",
         "Conditions often lead to approval processes", 0.8),
        ("update-record", "Update Record", "Update database record based on condition", "update-record",
         "Conditions typically trigger data updates", 0.75),
    ],
    "manual-approval": [
        ("approved-notification", "Approval Notification", "Notify stakeholders of approval decision", "send-email",
         "Approvals should be communicated", 0.9),
        ("process-next", "Process Next Step", "Continue workflow based on approval", "if-condition",
         "Approvals branch the workflow", 0.85),
    ],
}

_DEFAULT_SUGGESTIONS = [
    ("end-workflow", "End Workflow", "Complete the workflow process", "end",
     "All workflows need an end point", 0.6),
]


def fallback_step_suggestions(step_type: Optional[str]) -> List[Dict]:
    rows = _SUGGESTIONS_BY_TYPE.get(step_type, _DEFAULT_SUGGESTIONS)
    return [
        {
            "id": suggestion_id,
            "label": label,
            "description": description,
            "step_type": suggested_type,
            "reason": reason,
            "confidence": confidence,
        }
        for suggestion_id, label, description, suggested_type, reason, confidence in rows
    ][:MAX_STEP_SUGGESTIONS]
