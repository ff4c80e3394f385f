"""
Builder graphs from natural-language descriptions.

The LLM answers with indexed steps and connections; those are laid out in a
single column. Without an LLM, a sentence-by-sentence pattern matcher builds
a linear trigger -> steps -> end graph.
"""

import re
from typing import Any, Dict, List, Tuple

from app.modules.workflow_builder.graph import NODE_SPACING_Y, create_edge, create_node

GENERATED_STEP_TYPES = [
    "trigger", "form-submitted", "send-email", "manual-approval", "if-condition", "manual-task",
    "create-record", "update-record", "webhook", "delay", "end",
]

COLUMN_X = 250
TOP_Y = 50
TITLE_LENGTH = 50

# (pattern, step type, label) checked in order; first match wins
SENTENCE_PATTERNS = [
    (re.compile(r"when\s+(.+?)\s+fills?\s+out\s+(.+?)\s+form", re.I), "form-submitted", "Form Submission"),
    (re.compile(r"notify\s+(.+?)(?:\s+and|$|\.)", re.I), "send-email", "Send Notification"),
    (re.compile(r"wait\s+for\s+approval", re.I), "manual-approval", "Manual Approval"),
    (re.compile(r"if\s+approved", re.I), "if-condition", "Approval Check"),
    (re.compile(r"if\s+rejected", re.I), "if-condition", "Rejection Check"),
    (re.compile(r"send\s+(.+?)\s+email", re.I), "send-email", "Send Email"),
    (re.compile(r"create\s+(.+?)(?:\s+and|$|\.)", re.I), "create-record", "Create Record"),
    (re.compile(r"update\s+(.+?)(?:\s+and|$|\.)", re.I), "update-record", "Update Record"),
    (re.compile(r"schedule\s+(.+?)(?:\s+and|$|\.)", re.I), "delay", "Schedule Task"),
]

SENTENCE_SPLIT = re.compile(r"[.!?]+")

GENERATE_SYSTEM_PROMPT = (
    "You are a workflow automation expert that creates structured workflows from natural "
    "language descriptions. Always respond with valid JSON only."
)


def build_generation_prompt(description: str) -> str:
    step_types = ", ".join(f'"{t}"' for t in GENERATED_STEP_TYPES)
    return f"""
You are a workflow automation expert. Based on the following description, generate a detailed workflow with clear steps and connections.

Description: "{description}"

Please respond with a JSON object containing:
1. "title": A concise title for the workflow (max 50 characters)
2. "description": A brief description of what this workflow accomplishes
3. "steps": An array of workflow steps, each with:
   - "type": One of these step types: {step_types}
   - "label": A short, descriptive name for the step
   - "description": A detailed description of what this step does
   - "conditions": (optional) For conditional steps, what condition is being checked
4. "connections": An array of connections between steps, each with:
   - "from": The index of the source step (0-based)
   - "to": The index of the target step (0-based)
   - "label": (optional) For conditional connections, the condition label (e.g., "Yes", "No", "Approved", "Rejected")

Rules:
- Always start with a "trigger" step
- Always end with an "end" step
- Use "if-condition" for decision points with multiple outcomes
- Use "manual-approval" when human approval is needed
- Use "send-email" for notifications
- Use "delay" for waiting periods
- Make sure all steps are connected logically
- For conditional steps, create separate paths for different outcomes
"""


def graph_from_llm_payload(payload: Any, description: str) -> Dict[str, Any]:
    """Turn the LLM's {title, description, steps, connections} answer into nodes and edges"""
    if not isinstance(payload, dict) or not isinstance(payload.get("steps"), list):
        raise ValueError("LLM answer has no steps list")

    nodes = []
    for index, step in enumerate(payload["steps"]):
        if not isinstance(step, dict) or not isinstance(step.get("type"), str) or not step["type"]:
            raise ValueError(f"LLM step {index} is malformed")
        extra = {"conditionConfig": {"value": step["conditions"]}} if step.get("conditions") else None
        nodes.append(create_node(
            step["type"],
            step.get("label") or step["type"],
            step.get("description") or "",
            COLUMN_X,
            TOP_Y + index * NODE_SPACING_Y,
            extra,
        ))

    connections = payload.get("connections") or []
    if not isinstance(connections, list):
        raise ValueError("LLM connections are not a list")

    edges = []
    for connection in connections:
        if not isinstance(connection, dict):
            continue
        source, target = connection.get("from"), connection.get("to")
        if not isinstance(source, int) or not isinstance(target, int):
            continue
        if 0 <= source < len(nodes) and 0 <= target < len(nodes):
            edges.append(create_edge(nodes[source]["id"], nodes[target]["id"], connection.get("label")))

    return {
        "nodes": nodes,
        "edges": edges,
        "title": str(payload.get("title") or "Generated Workflow"),
        "description": str(payload.get("description") or description),
    }


def fallback_title(description: str) -> str:
    title = description.split(".")[0][:TITLE_LENGTH]
    return title + "..." if len(description) > TITLE_LENGTH else title


def _match_sentence(sentence: str) -> Tuple[str, str]:
    for pattern, step_type, label in SENTENCE_PATTERNS:
        if pattern.search(sentence):
            return step_type, label
    return "", ""


def parse_description_fallback(description: str) -> Dict[str, Any]:
    """Rule-based graph: trigger, one node per recognised sentence, end"""
    start = create_node("trigger", "Start", "Workflow start trigger", 50, TOP_Y)
    nodes: List[dict] = [start]
    edges: List[dict] = []
    last = start
    counter = 0

    for raw in SENTENCE_SPLIT.split(description):
        sentence = raw.strip()
        if not sentence:
            continue
        counter += 1
        y = TOP_Y + counter * NODE_SPACING_Y

        step_type, label = _match_sentence(sentence)
        if step_type:
            node = create_node(step_type, label, sentence, COLUMN_X, y)
            edge_label = None
            if step_type == "if-condition":
                if "approved" in sentence:
                    edge_label = "Yes"
                elif "rejected" in sentence:
                    edge_label = "No"
        elif len(sentence) > 5:
            node = create_node("manual-task", "Manual Task", sentence, COLUMN_X, y)
            edge_label = None
        else:
            continue

        nodes.append(node)
        edges.append(create_edge(last["id"], node["id"], edge_label))
        last = node

    end = create_node("end", "Complete", "Workflow completed", 450, TOP_Y + (counter + 1) * NODE_SPACING_Y)
    nodes.append(end)
    edges.append(create_edge(last["id"], end["id"]))

    return {
        "nodes": nodes,
        "edges": edges,
        "title": fallback_title(description),
        "description": description,
    }
