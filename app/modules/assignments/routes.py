from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.assignments.schemas import (
    StepAssignmentResponse, InboxAssignmentResponse, AssignmentStatusUpdate,
    AssignmentCompleteRequest, AssignmentCompleteResponse
)
from app.modules.assignments.service import AssignmentService
from app.core.dependencies import require_permission, get_user_permissions, is_root
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/assignments", tags=["assignments"])


def get_assignment_service(supabase: Client = Depends(get_supabase)) -> AssignmentService:
    return AssignmentService(supabase)


def _check_assignee(assignment: dict, user_data: Dict) -> None:
    if assignment["assigned_to"] == user_data["id"]:
        return
    if is_root(user_data) or "assignments:create" in get_user_permissions(user_data):
        return
    raise HTTPException(status_code=403, detail="You can only update your own assignments")


@router.get("", response_model=List[InboxAssignmentResponse])
async def list_my_assignments(
    status: Optional[str] = None,
    user_data: Dict = Depends(require_permission("assignments:read")),
    service: AssignmentService = Depends(get_assignment_service)
):
    """The caller's assignment inbox"""
    return service.list_inbox(user_data["id"], status=status)


@router.patch("/{assignment_id}/status", response_model=StepAssignmentResponse)
async def update_assignment_status(
    assignment_id: str,
    status_data: AssignmentStatusUpdate,
    user_data: Dict = Depends(require_permission("assignments:update")),
    service: AssignmentService = Depends(get_assignment_service)
):
    _check_assignee(service.get_assignment_row(assignment_id), user_data)
    return service.update_status(assignment_id, status_data.status, status_data.notes)


@router.post("/{assignment_id}/complete", response_model=AssignmentCompleteResponse)
async def complete_assignment(
    assignment_id: str,
    complete_data: Optional[AssignmentCompleteRequest] = None,
    user_data: Dict = Depends(require_permission("assignments:update")),
    service: AssignmentService = Depends(get_assignment_service)
):
    """Complete the assignment and advance the running instance when the step is current"""
    _check_assignee(service.get_assignment_row(assignment_id), user_data)
    can_manage = is_root(user_data) or "instances:manage" in get_user_permissions(user_data)
    notes = complete_data.notes if complete_data else None
    return service.complete(assignment_id, user_data["id"], notes, can_manage=can_manage)
