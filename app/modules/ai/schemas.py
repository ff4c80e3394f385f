from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal

AssistFieldType = Literal["email", "webhook", "condition", "delay", "general"]


class GenerateWorkflowRequest(BaseModel):
    # Validated in the service so a missing or non-string value answers 400
    description: Optional[Any] = None


class GenerateWorkflowResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]
    title: str
    description: str


class StepContext(BaseModel):
    type: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None


class SuggestionContext(BaseModel):
    current_step: Optional[StepContext] = None
    existing_next_steps: List[StepContext] = Field(default_factory=list)
    workflow_size: int = 0
    total_connections: int = 0


class SuggestNextStepsRequest(BaseModel):
    workflow_context: Optional[SuggestionContext] = None


class StepSuggestion(BaseModel):
    id: str
    label: str
    description: str = ""
    step_type: str
    reason: str = ""
    confidence: float = 0.5


class SuggestNextStepsResponse(BaseModel):
    suggestions: List[StepSuggestion]


class ReviewContext(BaseModel):
    name: Optional[str] = None
    nodes: Optional[List[Dict[str, Any]]] = None
    edges: List[Dict[str, Any]] = Field(default_factory=list)


class ReviewWorkflowRequest(BaseModel):
    workflow_context: Optional[ReviewContext] = None


class ReviewWorkflowResponse(BaseModel):
    suggestions: List[Dict[str, Any]]
    source: Literal["ai", "rules"] = "rules"


class AssistNodeRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    field_type: AssistFieldType = "general"
    node_type: str = ""
    current_values: Optional[Dict[str, Any]] = None


class AssistNodeResponse(BaseModel):
    content: Any
