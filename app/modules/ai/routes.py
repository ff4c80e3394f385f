from fastapi import APIRouter, Depends
from app.modules.ai.llm import LLMClient, get_llm_client
from app.modules.ai.schemas import (
    GenerateWorkflowRequest, GenerateWorkflowResponse, SuggestNextStepsRequest, SuggestNextStepsResponse,
    ReviewWorkflowRequest, ReviewWorkflowResponse, AssistNodeRequest, AssistNodeResponse
)
from app.modules.ai.service import AIService
from app.core.dependencies import require_workflow_permissions
from typing import Dict, Optional

router = APIRouter(prefix="/ai", tags=["ai"])


def get_ai_service(llm: Optional[LLMClient] = Depends(get_llm_client)) -> AIService:
    return AIService(llm)


@router.post("/generate-workflow", response_model=GenerateWorkflowResponse)
async def generate_workflow(
    request: GenerateWorkflowRequest,
    user_data: Dict = Depends(require_workflow_permissions),
    service: AIService = Depends(get_ai_service)
):
    """Builder graph from a plain-language description (rule-based when no LLM is configured)"""
    return service.generate_workflow(request.description)


@router.post("/suggest-next-steps", response_model=SuggestNextStepsResponse)
async def suggest_next_steps(
    request: SuggestNextStepsRequest,
    user_data: Dict = Depends(require_workflow_permissions),
    service: AIService = Depends(get_ai_service)
):
    return service.suggest_next_steps(request)


@router.post("/review-workflow", response_model=ReviewWorkflowResponse)
async def review_workflow(
    request: ReviewWorkflowRequest,
    user_data: Dict = Depends(require_workflow_permissions),
    service: AIService = Depends(get_ai_service)
):
    """Improvement suggestions for a builder graph"""
    return service.review_workflow(request)


@router.post("/assist-node", response_model=AssistNodeResponse)
async def assist_node(
    request: AssistNodeRequest,
    user_data: Dict = Depends(require_workflow_permissions),
    service: AIService = Depends(get_ai_service)
):
    return AssistNodeResponse(content=service.assist_node(request))
