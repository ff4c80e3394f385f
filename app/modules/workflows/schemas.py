from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime

WorkflowStatus = Literal["draft", "active", "paused", "completed", "archived"]
WorkflowPriority = Literal["low", "medium", "high", "urgent"]
StepStatus = Literal["pending", "in_progress", "completed", "blocked", "cancelled"]


class WorkflowStepInput(BaseModel):
    name: str
    description: Optional[str] = None
    status: StepStatus = "pending"
    assigned_to: Optional[str] = None
    estimated_hours: Optional[float] = None
    dependencies: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class WorkflowCreate(BaseModel):
    name: str
    description: Optional[str] = None
    status: WorkflowStatus = "draft"
    priority: WorkflowPriority = "medium"
    is_reusable: bool = False
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    steps: List[WorkflowStepInput] = Field(default_factory=list)


class WorkflowUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[WorkflowStatus] = None
    priority: Optional[WorkflowPriority] = None
    is_reusable: Optional[bool] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    # None keeps the current steps; a list (even empty) replaces them all
    steps: Optional[List[WorkflowStepInput]] = None


class WorkflowStepResponse(BaseModel):
    id: str
    workflow_id: str
    name: str
    description: Optional[str] = None
    step_order: int
    status: str
    assigned_to: Optional[str] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    dependencies: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkflowResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    priority: str
    is_reusable: bool = False
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    steps: List[WorkflowStepResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class StepStatusUpdate(BaseModel):
    status: StepStatus


class WorkflowCommentCreate(BaseModel):
    comment: str = Field(..., min_length=1)


class WorkflowCommentResponse(BaseModel):
    id: str
    workflow_id: str
    user_id: Optional[str] = None
    comment: str
    created_at: datetime

    class Config:
        from_attributes = True
