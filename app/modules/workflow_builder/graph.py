"""
Builder graph model.

A builder graph is what the canvas saves: a list of typed step nodes and a list
of edges between them, optionally labeled ("Yes", "No", "Approved", ...).
Nodes and edges are plain dicts in the canvas JSON shape so they round-trip to
the front end untouched:

    node = {"id": "node-...", "type": "workflowStep", "position": {"x": 250, "y": 50},
            "data": {"label": "...", "stepType": "send-email", "description": "...",
                     "assignedTo": None, "estimatedHours": None}}
    edge = {"id": "edge-...", "source": "node-a", "target": "node-b",
            "type": "conditional", "data": {"label": "Yes"}}
"""

import random
import string
import time
from collections import deque
from typing import Any, Dict, List, Optional, Tuple

# step type -> palette category
STEP_TYPES = {
    "trigger": "triggers",
    "schedule": "triggers",
    "webhook": "triggers",
    "form-submitted": "triggers",
    "send-email": "actions",
    "email": "actions",
    "notification": "actions",
    "create-record": "actions",
    "create_record": "actions",
    "update-record": "actions",
    "update_record": "actions",
    "assign_task": "actions",
    "manual-task": "actions",
    "manual-approval": "conditions",
    "approval": "conditions",
    "if-condition": "conditions",
    "condition": "conditions",
    "switch-case": "conditions",
    "delay": "utilities",
    "log": "utilities",
    "end": "utilities",
}

BRANCHING_TYPES = {"if-condition", "condition", "switch-case", "approval", "manual-approval"}
CONDITION_TYPES = {"if-condition", "condition"}

# Canvas-only markers that never become runnable steps
NON_RUNNABLE_TYPES = {"trigger", "schedule", "end"}

NODE_SPACING_Y = 150


class WorkflowGraphError(ValueError):
    pass


def _random_suffix(length: int = 9) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def generate_node_id() -> str:
    return f"node-{int(time.time() * 1000)}-{_random_suffix()}"


def generate_edge_id(source_id: Optional[str] = None, target_id: Optional[str] = None) -> str:
    if source_id and target_id:
        return f"edge-{source_id}-{target_id}-{int(time.time() * 1000)}-{_random_suffix()}"
    return f"edge-{int(time.time() * 1000)}-{_random_suffix()}"


def create_node(
    step_type: str,
    label: str,
    description: str,
    x: float,
    y: float,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    data = {
        "label": label,
        "stepType": step_type,
        "description": description,
        "assignedTo": None,
        "estimatedHours": None,
    }
    if extra:
        data.update(extra)
    return {
        "id": generate_node_id(),
        "type": "workflowStep",
        "position": {"x": x, "y": y},
        "data": data,
        "dragHandle": ".drag-handle",
    }


def create_edge(source_id: str, target_id: str, label: Optional[str] = None) -> Dict[str, Any]:
    edge = {
        "id": generate_edge_id(source_id, target_id),
        "source": source_id,
        "target": target_id,
        "type": "conditional" if label else "default",
        "markerEnd": {"type": "ArrowClosed", "width": 20, "height": 20},
        "style": {"strokeWidth": 2, "stroke": "#6366f1" if label else "#64748b"},
    }
    if label:
        edge["data"] = {"label": label}
    return edge


def ensure_ids(nodes: List[dict], edges: List[dict]) -> Tuple[List[dict], List[dict]]:
    """Give every node and edge a persistent id before saving"""
    nodes_with_ids = [node if node.get("id") else {**node, "id": generate_node_id()} for node in nodes]
    edges_with_ids = [edge if edge.get("id") else {**edge, "id": generate_edge_id()} for edge in edges]
    return nodes_with_ids, edges_with_ids


def node_data(node: dict) -> dict:
    return node.get("data") or {}


def step_type_of(node: dict) -> Optional[str]:
    return node_data(node).get("stepType")


def edge_label(edge: dict) -> Optional[str]:
    return (edge.get("data") or {}).get("label")


def validate_graph(nodes: List[dict], edges: List[dict]) -> Tuple[bool, List[str]]:
    """
    Minimal structural validation.
    Returns (is_valid, list_of_errors_or_warnings)
    """
    errors = []
    warnings = []

    node_ids = set()
    for index, node in enumerate(nodes):
        node_id = node.get("id")
        if not node_id:
            errors.append(f"Node at index {index} has no id")
            continue
        if node_id in node_ids:
            errors.append(f"Duplicate node id '{node_id}'")
        node_ids.add(node_id)
        step_type = step_type_of(node)
        if not step_type:
            warnings.append(f"Node '{node_id}' has no step type")
        elif step_type not in STEP_TYPES:
            warnings.append(f"Node '{node_id}' has unknown step type '{step_type}'")

    edge_ids = set()
    for index, edge in enumerate(edges):
        edge_id = edge.get("id") or f"#{index}"
        if edge.get("id"):
            if edge_id in edge_ids:
                errors.append(f"Duplicate edge id '{edge_id}'")
            edge_ids.add(edge_id)
        if edge.get("source") not in node_ids:
            errors.append(f"Edge '{edge_id}' references missing source node '{edge.get('source')}'")
        if edge.get("target") not in node_ids:
            errors.append(f"Edge '{edge_id}' references missing target node '{edge.get('target')}'")
        if edge.get("source") is not None and edge.get("source") == edge.get("target"):
            warnings.append(f"Edge '{edge_id}' connects node '{edge.get('source')}' to itself")

    return len(errors) == 0, errors + warnings


def analyze_connectivity(nodes: List[dict], edges: List[dict]) -> Dict[str, Any]:
    """Per-node incoming/outgoing counts plus isolated nodes, dead ends and start nodes"""
    connections: Dict[str, Dict[str, int]] = {
        node["id"]: {"incoming": 0, "outgoing": 0} for node in nodes if node.get("id")
    }
    for edge in edges:
        source = connections.get(edge.get("source"))
        target = connections.get(edge.get("target"))
        if source is not None:
            source["outgoing"] += 1
        if target is not None:
            target["incoming"] += 1

    return {
        "isolated_nodes": [nid for nid, c in connections.items() if c["incoming"] == 0 and c["outgoing"] == 0],
        "dead_ends": [nid for nid, c in connections.items() if c["outgoing"] == 0],
        "start_nodes": [nid for nid, c in connections.items() if c["incoming"] == 0],
        "node_connections": connections,
    }


def identify_patterns(nodes: List[dict], edges: List[dict]) -> Dict[str, List]:
    return {
        "conditional_branches": [n["id"] for n in nodes if n.get("id") and step_type_of(n) in CONDITION_TYPES],
        "branching_nodes": [n["id"] for n in nodes if n.get("id") and step_type_of(n) in BRANCHING_TYPES],
    }


def find_sequential_pairs(nodes: List[dict], edges: List[dict]) -> List[Tuple[dict, dict]]:
    """Edges whose source has one outgoing edge and whose target has one incoming edge"""
    by_id = {n["id"]: n for n in nodes if n.get("id")}
    outgoing: Dict[str, int] = {}
    incoming: Dict[str, int] = {}
    for edge in edges:
        outgoing[edge.get("source")] = outgoing.get(edge.get("source"), 0) + 1
        incoming[edge.get("target")] = incoming.get(edge.get("target"), 0) + 1

    pairs = []
    for edge in edges:
        source = by_id.get(edge.get("source"))
        target = by_id.get(edge.get("target"))
        if source and target and outgoing[source["id"]] == 1 and incoming[target["id"]] == 1:
            pairs.append((source, target))
    return pairs


def _position_key(node: dict):
    position = node.get("position") or {}
    return (position.get("y", 0), position.get("x", 0))


def linearize(nodes: List[dict], edges: List[dict]) -> List[dict]:
    """
    Order the runnable nodes of a graph for publishing as ordered steps.

    Breadth-first from the start nodes; siblings and unreachable leftovers are
    ordered by canvas position (top to bottom, then left to right). Trigger and
    end markers are dropped. Branches are flattened into one sequence because
    instances only ever advance by step_order.
    """
    ok, issues = validate_graph(nodes, edges)
    if not ok:
        raise WorkflowGraphError("; ".join(issues))

    by_id = {n["id"]: n for n in nodes}
    children: Dict[str, List[dict]] = {nid: [] for nid in by_id}
    for edge in edges:
        children[edge["source"]].append(by_id[edge["target"]])

    connectivity = analyze_connectivity(nodes, edges)
    starts = sorted((by_id[nid] for nid in connectivity["start_nodes"]), key=_position_key)

    visited = set()
    ordered = []
    queue = deque(starts)
    while queue:
        node = queue.popleft()
        if node["id"] in visited:
            continue
        visited.add(node["id"])
        ordered.append(node)
        for child in sorted(children[node["id"]], key=_position_key):
            if child["id"] not in visited:
                queue.append(child)

    leftovers = sorted((n for n in nodes if n["id"] not in visited), key=_position_key)
    ordered.extend(leftovers)

    return [n for n in ordered if step_type_of(n) not in NON_RUNNABLE_TYPES]
