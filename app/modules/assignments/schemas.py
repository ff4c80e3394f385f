from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

AssignmentStatus = Literal["pending", "in_progress", "completed", "blocked", "cancelled"]


class StepAssignmentResponse(BaseModel):
    id: str
    workflow_step_id: str
    assigned_to: str
    assigned_by: Optional[str] = None
    status: str = "pending"
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InboxAssignmentResponse(StepAssignmentResponse):
    step_name: Optional[str] = None
    step_description: Optional[str] = None
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None


class AssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus
    notes: Optional[str] = None


class AssignmentCompleteRequest(BaseModel):
    notes: Optional[str] = None


class AssignmentCompleteResponse(BaseModel):
    assignment: StepAssignmentResponse
    advanced: bool
    advance_result: Optional[dict] = None
    advance_error: Optional[str] = None


class CreateAssignmentsResponse(BaseModel):
    created: List[StepAssignmentResponse]
