from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.instances.schemas import (
    InstanceStartRequest, InstanceResponse, AdvanceRequest, AdvanceResponse, StartableWorkflowResponse
)
from app.modules.instances.service import InstanceService
from app.core.dependencies import require_permission, check_instance_access, get_user_permissions, is_root
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/instances", tags=["instances"])


def get_instance_service(supabase: Client = Depends(get_supabase)) -> InstanceService:
    return InstanceService(supabase)


def _can_manage(user_data: Dict) -> bool:
    return is_root(user_data) or "instances:manage" in get_user_permissions(user_data)


@router.post("", response_model=InstanceResponse, status_code=201)
async def start_instance(
    start_request: InstanceStartRequest,
    user_data: Dict = Depends(require_permission("instances:start")),
    service: InstanceService = Depends(get_instance_service)
):
    """Start a workflow instance on the workflow's first step"""
    return service.start_instance(start_request.workflow_id, user_data["id"], start_request.start_data)


@router.get("", response_model=List[InstanceResponse])
async def list_instances(
    workflow_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("instances:read")),
    service: InstanceService = Depends(get_instance_service)
):
    """List own instances (all instances with instances:manage)"""
    started_by = None if _can_manage(user_data) else user_data["id"]
    return service.list_instances(started_by=started_by, workflow_id=workflow_id, status=status, limit=limit, offset=offset)


@router.get("/startable", response_model=List[StartableWorkflowResponse])
async def list_startable_workflows(
    user_data: Dict = Depends(require_permission("instances:start")),
    service: InstanceService = Depends(get_instance_service)
):
    """Workflows the caller can start because the first step is theirs"""
    return service.get_startable_workflows(user_data["id"])


@router.post("/advance", response_model=AdvanceResponse)
async def advance_workflow(
    advance_request: AdvanceRequest,
    user_data: Dict = Depends(require_permission("instances:advance")),
    service: InstanceService = Depends(get_instance_service)
):
    """
    Complete the current step of a running instance and move to the next pending step,
    or complete the instance when no steps remain.
    """
    return service.advance(advance_request, user_data["id"], can_manage=_can_manage(user_data))


@router.get("/{instance_id}", response_model=InstanceResponse)
async def get_instance(
    instance_id: str,
    user_data: Dict = Depends(require_permission("instances:read")),
    service: InstanceService = Depends(get_instance_service)
):
    instance = service.get_instance(instance_id)
    check_instance_access(instance.model_dump(), user_data)
    return instance


@router.post("/{instance_id}/cancel", response_model=InstanceResponse)
async def cancel_instance(
    instance_id: str,
    user_data: Dict = Depends(require_permission("instances:read")),
    service: InstanceService = Depends(get_instance_service)
):
    """Cancel an instance (its starter, or instances:cancel holders)"""
    instance = service.get_instance_row(instance_id)
    is_starter = instance.get("started_by") == user_data["id"]
    if not is_starter and not (is_root(user_data) or "instances:cancel" in get_user_permissions(user_data)):
        raise HTTPException(status_code=403, detail="You can only cancel workflow instances you started")
    return service.cancel_instance(instance_id, user_data["id"])
