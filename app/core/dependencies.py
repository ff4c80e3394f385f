"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import get_role_permissions
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

PROFILE_FIELDS = "id, email, first_name, last_name, role, department, workspace_id"


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (profile, permission_names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current auth user info from the bearer JWT"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token"
        )
    return auth_service.get_current_user(credentials.credentials)


def get_profile(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """Return the profiles row for a user. Uses request-scoped cache when provided."""
    if cache is not None and "profile" in cache:
        return cache["profile"]
    result = supabase.table("profiles")\
        .select(PROFILE_FIELDS)\
        .eq("id", user_id)\
        .limit(1)\
        .execute()
    profile = result.data[0] if result.data else None
    if cache is not None:
        cache["profile"] = profile
    return profile


def get_current_profile(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Authenticated user merged with their profile row (role, workspace)"""
    cache = _get_request_cache(request)
    profile = get_profile(user_data["id"], supabase, cache)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile not found for authenticated user"
        )
    return {**profile, "id": user_data["id"], "email": profile.get("email") or user_data.get("email")}


def is_root(profile: Optional[dict]) -> bool:
    return bool(profile) and profile.get("role") == "root"


def has_role(profile: Optional[dict], roles: List[str]) -> bool:
    return bool(profile) and profile.get("role") in roles


def get_user_permissions(profile: Optional[dict]) -> List[str]:
    """Permission names held through the profile role"""
    if not profile:
        return []
    return get_role_permissions(profile.get("role"))


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(profile: dict = Depends(get_current_profile)) -> dict:
        """Dependency to check if the caller's role grants the required permission"""
        if is_root(profile):
            return profile
        if required_permission not in get_user_permissions(profile):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return profile
    return check_permission


def require_roles(*roles: str):
    """Factory for dependencies that only admit the listed profile roles"""
    def check_roles(profile: dict = Depends(get_current_profile)) -> dict:
        if not has_role(profile, list(roles)):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(roles)}"
            )
        return profile
    return check_roles


def require_workflow_permissions(
    profile: dict = Depends(get_current_profile),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Ask the platform (has_workflow_permissions RPC) whether the caller may use workflow tooling"""
    if is_root(profile):
        return profile
    try:
        result = supabase.rpc("has_workflow_permissions", {"user_id": profile["id"]}).execute()
    except Exception as e:
        logger.error(f"Error checking workflow permissions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Permission check failed"
        )
    if not result.data:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Workflow permissions required"
        )
    return profile


def check_workspace_member(workspace_id: str, profile: dict) -> dict:
    """Allow root, or a member of the workspace"""
    if is_root(profile):
        return profile
    if profile.get("workspace_id") != workspace_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be a member of this workspace"
        )
    return profile


def check_instance_access(instance: dict, profile: dict) -> dict:
    """Allow the starter, or anyone holding instances:manage"""
    if instance.get("started_by") == profile["id"]:
        return profile
    if is_root(profile) or "instances:manage" in get_user_permissions(profile):
        return profile
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only access workflow instances you started"
    )
