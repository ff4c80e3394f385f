"""Prompt text for the workflow assistant endpoints."""

import json
from typing import Any, Dict, List, Optional

SUGGEST_SYSTEM_PROMPT = (
    "You are a workflow automation expert that suggests logical next steps. "
    "Always respond with valid JSON array only."
)

REVIEW_SYSTEM_PROMPT = (
    "You are a workflow optimization expert that analyzes business processes and suggests "
    "specific improvements. Always respond with valid JSON array only."
)

ASSIST_BASE_PROMPT = (
    "You are an AI assistant helping users configure workflow automation steps. "
    "Be practical, professional, and provide actionable content."
)

ASSIST_FIELD_PROMPTS = {
    "email": """For email configuration, generate:
- Professional email subject lines
- Well-structured email body content
- Use personalization tokens like {{first_name}}, {{company_name}}, {{order_number}} where appropriate
- Keep content concise and actionable
- Return JSON with "subject" and "body" fields""",
    "webhook": """For webhook configuration, generate:
- Properly formatted JSON payloads
- Appropriate HTTP headers if needed
- Use placeholder variables like {{user_id}}, {{timestamp}}, {{data}} where appropriate
- Follow REST API best practices
- Return JSON with "payload" field containing the webhook payload""",
    "condition": """For condition configuration, generate:
- Clear field names that make sense in business context
- Appropriate operators (equals, not_equals, contains, greater_than, less_than)
- Realistic values for comparison
- Return JSON with "field", "operator", and "value" fields""",
    "delay": """For delay configuration, generate:
- Appropriate duration values
- Suitable time units (minutes, hours, days)
- Brief reasoning for the suggested timing
- Return JSON with "duration", "unit", and "reasoning" fields""",
}

ASSIST_GENERAL_PROMPT = (
    "Generate helpful configuration content based on the user's request. "
    "Return structured JSON that can be applied to the workflow step."
)


def build_suggest_prompt(current_step: Dict[str, Any], existing_next_steps: List[Dict[str, Any]],
                         workflow_size: int, total_connections: int) -> str:
    existing = ", ".join(f"{s.get('type')}: {s.get('label')}" for s in existing_next_steps) or "None"
    return f"""
You are a workflow automation expert. Based on the current workflow context, suggest 3 logical next steps.

Current step: {current_step.get('type')} - "{current_step.get('label')}"
Description: {current_step.get('description') or ''}
Existing next steps: {existing}
Workflow size: {workflow_size} nodes
Total connections: {total_connections}

Please respond with a JSON array of 3 step suggestions, each with:
- "id": A unique identifier for the suggestion
- "label": A short, descriptive name for the step
- "description": A brief description of what this step does
- "step_type": One of: "trigger", "form-submitted", "send-email", "manual-approval", "if-condition", "manual-task", "create-record", "update-record", "webhook", "delay", "end"
- "reason": Why this step makes sense as a next step (1-2 sentences)
- "confidence": A number between 0 and 1 indicating how confident you are in this suggestion

Consider:
- What naturally follows the current step type
- Common workflow patterns
- What hasn't been done yet in this workflow
- Logical business process flow
"""


def build_review_prompt(name: Optional[str], nodes: List[dict], edges: List[dict],
                        connectivity: Dict[str, Any]) -> str:
    return f"""
You are a workflow optimization expert. Analyze the following workflow and provide specific improvement suggestions.

Workflow: "{name or 'Untitled Workflow'}"
Nodes: {len(nodes)}
Edges: {len(edges)}

Workflow Structure:
{json.dumps(nodes, indent=2)}

Connections:
{json.dumps(edges, indent=2)}

Connectivity Analysis:
{json.dumps(connectivity, indent=2)}

Suggest improvements in these categories: redundancy, missing_branch, performance, optimization, best_practice.

Respond with a JSON array; each suggestion has:
- "id", "type" (one of the categories above), "title", "description"
- "severity" (low, medium, high)
- "node_ids" and "edge_ids" affected
- "suggested_action": {{"type": remove|combine|add|modify|reorganize, "details": "...", "changes": {{...}}}}
- "reasoning" and "confidence" (0-1)

Consider:
- Are there nodes with no connections?
- Do conditional nodes have both true/false paths?
- Are there redundant sequential steps?
- Is there proper error handling?
- Are there performance bottlenecks (like delays in critical paths)?
- Does the workflow follow logical business process flow?
"""


def build_assist_system_prompt(field_type: str) -> str:
    return f"{ASSIST_BASE_PROMPT}\n\n{ASSIST_FIELD_PROMPTS.get(field_type, ASSIST_GENERAL_PROMPT)}"


def build_assist_user_prompt(prompt: str, current_values: Optional[Dict[str, Any]]) -> str:
    if current_values:
        return f"{prompt}\n\nCurrent values: {json.dumps(current_values, indent=2)}"
    return prompt
