from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class InstanceStartRequest(BaseModel):
    workflow_id: str
    start_data: Dict[str, Any] = Field(default_factory=dict)


class InstanceResponse(BaseModel):
    id: str
    workflow_id: str
    started_by: str
    current_step_id: Optional[str] = None
    status: str
    start_data: Dict[str, Any] = Field(default_factory=dict)
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    workflow_name: Optional[str] = None
    current_step_name: Optional[str] = None

    class Config:
        from_attributes = True


class AdvanceRequest(BaseModel):
    workflow_id: str
    completed_step_id: str
    completion_notes: Optional[str] = None
    instance_id: Optional[str] = None


class AdvanceResponse(BaseModel):
    success: bool
    message: str
    workflow_id: str
    completed_step_id: str
    next_step_exists: bool
    next_step_id: Optional[str] = None
    workflow_instance_id: str
    instance_status: str


class StartableWorkflowResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    priority: Optional[str] = None
    is_reusable: bool = False
    first_step_id: str
    first_step_name: str
