from fastapi import APIRouter, Depends, HTTPException, status
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.profiles.schemas import ProfileUpdate, ProfileRoleUpdate, ProfileResponse, DeleteUserResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import (
    require_permission, require_roles, get_current_profile, get_user_permissions, is_root
)
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Client = Depends(get_service_supabase)
) -> ProfileService:
    return ProfileService(supabase, admin_client)


@router.get("", response_model=List[ProfileResponse])
async def list_profiles(
    role: Optional[str] = None,
    workspace_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_roles("admin", "manager", "root")),
    service: ProfileService = Depends(get_profile_service)
):
    """List profiles of the caller's workspace. Root sees every workspace, or the one asked for."""
    if is_root(user_data):
        return service.list_profiles(
            workspace_id=workspace_id, all_workspaces=workspace_id is None, role=role, limit=limit, offset=offset
        )
    return service.list_profiles(workspace_id=user_data.get("workspace_id"), role=role, limit=limit, offset=offset)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    user_data: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(profile_id)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_profile),
    service: ProfileService = Depends(get_profile_service)
):
    """Update own profile, or any profile with profiles:update"""
    if profile_id != user_data["id"] and not (is_root(user_data) or "profiles:update" in get_user_permissions(user_data)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own profile")
    return service.update_profile(profile_id, profile_data)


@router.put("/{profile_id}/role", response_model=ProfileResponse)
async def change_role(
    profile_id: str,
    role_data: ProfileRoleUpdate,
    user_data: Dict = Depends(require_permission("profiles:change_role")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.change_role(profile_id, role_data.role, user_data)


@router.delete("/{profile_id}", response_model=DeleteUserResponse)
async def delete_user(
    profile_id: str,
    user_data: Dict = Depends(get_current_profile),
    service: ProfileService = Depends(get_profile_service)
):
    """Delete a user account (admin or root; root alone may delete admins)"""
    return service.delete_user(profile_id, user_data)
