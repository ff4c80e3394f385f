from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.workspaces.schemas import (
    WorkspaceCreate, WorkspaceUpdate, WorkspaceResponse, WorkspaceMemberAssign, WorkspaceStatsResponse
)
from app.modules.workspaces.service import WorkspaceService
from app.modules.profiles.schemas import ProfileResponse
from app.core.dependencies import require_permission, check_workspace_member, is_root
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def get_workspace_service(supabase: Client = Depends(get_supabase)) -> WorkspaceService:
    return WorkspaceService(supabase)


@router.post("", response_model=WorkspaceResponse, status_code=201)
async def create_workspace(
    workspace_data: WorkspaceCreate,
    user_data: Dict = Depends(require_permission("workspaces:create")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    """Create a workspace (root)"""
    return service.create_workspace(workspace_data, user_data["id"])


@router.get("", response_model=List[WorkspaceResponse])
async def list_workspaces(
    user_data: Dict = Depends(require_permission("workspaces:read")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    """All workspaces for root, otherwise the caller's own"""
    if is_root(user_data):
        return service.list_workspaces()
    if not user_data.get("workspace_id"):
        return []
    return [service.get_workspace(user_data["workspace_id"])]


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: str,
    user_data: Dict = Depends(require_permission("workspaces:read")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    check_workspace_member(workspace_id, user_data)
    return service.get_workspace(workspace_id)


@router.put("/{workspace_id}", response_model=WorkspaceResponse)
async def update_workspace(
    workspace_id: str,
    workspace_data: WorkspaceUpdate,
    user_data: Dict = Depends(require_permission("workspaces:update")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    check_workspace_member(workspace_id, user_data)
    return service.update_workspace(workspace_id, workspace_data)


@router.delete("/{workspace_id}", status_code=204)
async def delete_workspace(
    workspace_id: str,
    user_data: Dict = Depends(require_permission("workspaces:delete")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    service.delete_workspace(workspace_id)
    return None


@router.get("/{workspace_id}/members", response_model=List[ProfileResponse])
async def list_members(
    workspace_id: str,
    user_data: Dict = Depends(require_permission("workspaces:read")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    check_workspace_member(workspace_id, user_data)
    return service.list_members(workspace_id)


@router.post("/{workspace_id}/members", response_model=ProfileResponse)
async def assign_member(
    workspace_id: str,
    member_data: WorkspaceMemberAssign,
    user_data: Dict = Depends(require_permission("workspaces:assign")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    """Assign a user to the workspace (admins only within their own workspace)"""
    check_workspace_member(workspace_id, user_data)
    return service.assign_user(workspace_id, member_data.user_id)


@router.delete("/{workspace_id}/members/{user_id}", response_model=ProfileResponse)
async def unassign_member(
    workspace_id: str,
    user_id: str,
    user_data: Dict = Depends(require_permission("workspaces:assign")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    check_workspace_member(workspace_id, user_data)
    return service.unassign_user(workspace_id, user_id)


@router.get("/{workspace_id}/stats", response_model=WorkspaceStatsResponse)
async def get_workspace_stats(
    workspace_id: str,
    user_data: Dict = Depends(require_permission("workspaces:read")),
    service: WorkspaceService = Depends(get_workspace_service)
):
    check_workspace_member(workspace_id, user_data)
    return service.get_stats(workspace_id)
