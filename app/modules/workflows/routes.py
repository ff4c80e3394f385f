from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.workflows.schemas import (
    WorkflowCreate, WorkflowUpdate, WorkflowResponse, WorkflowStepResponse,
    StepStatusUpdate, WorkflowCommentCreate, WorkflowCommentResponse
)
from app.modules.workflows.service import WorkflowService
from app.modules.assignments.schemas import CreateAssignmentsResponse
from app.core.dependencies import require_permission, get_user_permissions, is_root
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/workflows", tags=["workflows"])


def get_workflow_service(supabase: Client = Depends(get_supabase)) -> WorkflowService:
    return WorkflowService(supabase)


@router.post("", response_model=WorkflowResponse, status_code=201)
async def create_workflow(
    workflow_data: WorkflowCreate,
    user_data: Dict = Depends(require_permission("workflows:create")),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Create a workflow with its ordered steps (admin, manager, root)"""
    return service.create_workflow(workflow_data, user_data["id"])


@router.get("", response_model=List[WorkflowResponse])
async def list_workflows(
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("workflows:read")),
    service: WorkflowService = Depends(get_workflow_service)
):
    return service.list_workflows(status=status, limit=limit, offset=offset)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    user_data: Dict = Depends(require_permission("workflows:read")),
    service: WorkflowService = Depends(get_workflow_service)
):
    return service.get_workflow(workflow_id)


@router.put("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: str,
    workflow_data: WorkflowUpdate,
    user_data: Dict = Depends(require_permission("workflows:update")),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Update a workflow. Sending `steps` replaces all existing steps."""
    return service.update_workflow(workflow_id, workflow_data)


@router.delete("/{workflow_id}", status_code=204)
async def delete_workflow(
    workflow_id: str,
    user_data: Dict = Depends(require_permission("workflows:delete")),
    service: WorkflowService = Depends(get_workflow_service)
):
    service.delete_workflow(workflow_id)
    return None


@router.patch("/steps/{step_id}/status", response_model=WorkflowStepResponse)
async def update_step_status(
    step_id: str,
    status_data: StepStatusUpdate,
    user_data: Dict = Depends(require_permission("workflows:read")),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Set a step's status (workflow editors, or the step's assignee)"""
    step = service.get_step(step_id)
    can_edit = is_root(user_data) or "workflows:update" in get_user_permissions(user_data)
    if not can_edit and step.get("assigned_to") != user_data["id"]:
        raise HTTPException(status_code=403, detail="Only the assignee or a workflow editor can change this step")
    return service.update_step_status(step_id, status_data.status)


@router.get("/{workflow_id}/comments", response_model=List[WorkflowCommentResponse])
async def list_comments(
    workflow_id: str,
    user_data: Dict = Depends(require_permission("workflows:read")),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Comments and system log entries of a workflow, oldest first"""
    service.get_workflow_row(workflow_id)
    return service.list_comments(workflow_id)


@router.post("/{workflow_id}/comments", response_model=WorkflowCommentResponse, status_code=201)
async def add_comment(
    workflow_id: str,
    comment_data: WorkflowCommentCreate,
    user_data: Dict = Depends(require_permission("workflows:read")),
    service: WorkflowService = Depends(get_workflow_service)
):
    service.get_workflow_row(workflow_id)
    return service.add_comment(workflow_id, comment_data.comment, user_data["id"])


@router.post("/{workflow_id}/assignments", response_model=CreateAssignmentsResponse, status_code=201)
async def create_assignments(
    workflow_id: str,
    user_data: Dict = Depends(require_permission("assignments:create")),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Create assignments for every assigned step that does not have one yet"""
    return CreateAssignmentsResponse(created=service.create_assignments(workflow_id, user_data["id"]))
