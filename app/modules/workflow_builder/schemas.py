from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime


class GraphPayload(BaseModel):
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    edges: List[Dict[str, Any]] = Field(default_factory=list)


class WorkflowDefinitionSave(GraphPayload):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_reusable: bool = False
    viewport: Optional[Dict[str, Any]] = None


class WorkflowDefinitionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_reusable: bool = False
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    edges: List[Dict[str, Any]] = Field(default_factory=list)
    viewport: Optional[Dict[str, Any]] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkflowDefinitionSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_reusable: bool = False
    node_count: int
    edge_count: int
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class ValidationResponse(BaseModel):
    is_valid: bool
    issues: List[str]


class ConnectivityResponse(BaseModel):
    isolated_nodes: List[str]
    dead_ends: List[str]
    start_nodes: List[str]
    node_connections: Dict[str, Dict[str, int]]
    conditional_branches: List[str]
    branching_nodes: List[str]


class StepTypeInfo(BaseModel):
    step_type: str
    category: str
    is_branching: bool
    is_runnable: bool


class PublishRequest(BaseModel):
    status: Literal["draft", "active"] = "draft"
    priority: Literal["low", "medium", "high", "urgent"] = "medium"
    is_reusable: Optional[bool] = None
