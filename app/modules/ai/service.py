import logging
import re
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from app.config import settings
from app.modules.ai.generator import (
    GENERATE_SYSTEM_PROMPT, build_generation_prompt, graph_from_llm_payload, parse_description_fallback
)
from app.modules.ai.llm import LLMClient, LLMError, parse_json_content
from app.modules.ai.prompts import (
    REVIEW_SYSTEM_PROMPT, SUGGEST_SYSTEM_PROMPT, build_assist_system_prompt, build_assist_user_prompt,
    build_review_prompt, build_suggest_prompt
)
from app.modules.ai.schemas import (
    AssistNodeRequest, GenerateWorkflowResponse, ReviewWorkflowRequest, ReviewWorkflowResponse,
    StepSuggestion, SuggestNextStepsRequest, SuggestNextStepsResponse
)
from app.modules.workflow_builder.graph import analyze_connectivity, identify_patterns
from app.modules.workflow_builder.review import (
    MAX_STEP_SUGGESTIONS, fallback_step_suggestions, rule_based_review
)

logger = logging.getLogger(__name__)

SUGGEST_MAX_TOKENS = 1500
REVIEW_MAX_TOKENS = 2000
ASSIST_MAX_TOKENS = 1000

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def _snake_keys(item: Dict[str, Any], nested=("suggested_action", "changes")) -> Dict[str, Any]:
    """camelCase keys from the model to snake_case, for the top level and the action block"""
    converted = {}
    for key, value in item.items():
        new_key = _snake(key)
        if new_key in nested and isinstance(value, dict):
            value = _snake_keys(value, nested)
        converted[new_key] = value
    return converted


def _shape_assist_answer(field_type: str, answer: str) -> Any:
    """Structure a non-JSON answer so the node form can still apply it"""
    if field_type == "email":
        subject_line = next((line for line in answer.split("\n") if "subject" in line.lower()), None)
        subject = re.sub(r"^.*subject:?\s*", "", subject_line, flags=re.I) if subject_line else ""
        return {"subject": subject or answer[:100], "body": answer}
    if field_type == "webhook":
        return {"payload": answer}
    if field_type == "condition":
        return {"field": "custom_field", "operator": "equals", "value": answer}
    if field_type == "delay":
        return {"duration": 1, "unit": "hours", "reasoning": answer}
    return {"text": answer}


class AIService:
    def __init__(self, llm: Optional[LLMClient]):
        self.llm = llm

    def _ask_for_list(self, system_prompt: str, prompt: str, max_tokens: int) -> List[dict]:
        """Ask the model for a JSON array; any failure yields an empty list"""
        try:
            answer = parse_json_content(self.llm.complete(
                system_prompt, prompt, temperature=settings.openai_temperature, max_tokens=max_tokens
            ))
        except (LLMError, ValueError) as e:
            logger.error(f"LLM answer unusable: {str(e)}")
            return []
        if not isinstance(answer, list):
            return []
        return [_snake_keys(item) for item in answer if isinstance(item, dict)]

    def generate_workflow(self, description: Any) -> GenerateWorkflowResponse:
        if not description or not isinstance(description, str):
            raise HTTPException(status_code=400, detail="Description is required and must be a string")

        response = None
        if self.llm is not None:
            try:
                payload = parse_json_content(self.llm.complete(
                    GENERATE_SYSTEM_PROMPT,
                    build_generation_prompt(description),
                    temperature=settings.openai_temperature,
                    max_tokens=settings.openai_max_tokens,
                ))
                response = GenerateWorkflowResponse(**graph_from_llm_payload(payload, description))
            except (LLMError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"OpenAI generation failed, falling back to rule-based parsing: {str(e)}")

        if response is None:
            response = GenerateWorkflowResponse(**parse_description_fallback(description))

        logger.info(f"Generated workflow '{response.title}' with {len(response.nodes)} node(s), {len(response.edges)} edge(s)")
        return response

    def suggest_next_steps(self, request: SuggestNextStepsRequest) -> SuggestNextStepsResponse:
        context = request.workflow_context
        if context is None or context.current_step is None:
            raise HTTPException(status_code=400, detail="Workflow context with current step is required")

        current = context.current_step
        suggestions = []
        if self.llm is not None:
            raw = self._ask_for_list(
                SUGGEST_SYSTEM_PROMPT,
                build_suggest_prompt(
                    current.model_dump(),
                    [s.model_dump() for s in context.existing_next_steps],
                    context.workflow_size,
                    context.total_connections,
                ),
                SUGGEST_MAX_TOKENS,
            )
            for item in raw:
                try:
                    suggestions.append(StepSuggestion(**item))
                except ValueError:
                    logger.debug(f"Dropping malformed step suggestion: {item}")

        if not suggestions:
            suggestions = [StepSuggestion(**s) for s in fallback_step_suggestions(current.type)]
        return SuggestNextStepsResponse(suggestions=suggestions[:MAX_STEP_SUGGESTIONS])

    def review_workflow(self, request: ReviewWorkflowRequest) -> ReviewWorkflowResponse:
        context = request.workflow_context
        if context is None or context.nodes is None:
            raise HTTPException(status_code=400, detail="Workflow context with nodes is required")

        nodes, edges = context.nodes, context.edges
        if self.llm is not None:
            connectivity = analyze_connectivity(nodes, edges)
            connectivity["patterns"] = identify_patterns(nodes, edges)
            suggestions = self._ask_for_list(
                REVIEW_SYSTEM_PROMPT,
                build_review_prompt(context.name, nodes, edges, connectivity),
                REVIEW_MAX_TOKENS,
            )
            if suggestions:
                return ReviewWorkflowResponse(suggestions=suggestions, source="ai")

        return ReviewWorkflowResponse(suggestions=rule_based_review(nodes, edges), source="rules")

    def assist_node(self, request: AssistNodeRequest) -> Any:
        if self.llm is None:
            raise HTTPException(status_code=500, detail="OpenAI API key not configured")

        logger.info(f"AI assist request: {request.field_type} for {request.node_type}")
        try:
            answer = self.llm.complete(
                build_assist_system_prompt(request.field_type),
                build_assist_user_prompt(request.prompt, request.current_values),
                temperature=settings.openai_assist_temperature,
                max_tokens=ASSIST_MAX_TOKENS,
            )
        except LLMError as e:
            raise HTTPException(status_code=500, detail=f"OpenAI API error: {str(e)}")

        try:
            return parse_json_content(answer)
        except ValueError:
            return _shape_assist_answer(request.field_type, answer)
