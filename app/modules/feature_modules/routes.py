from fastapi import APIRouter, Depends, HTTPException, Query
from app.database.supabase_client import get_supabase
from app.modules.feature_modules.schemas import (
    ModuleResponse, ModuleAccessInfo, ModuleAccessCheck, ModuleActivationRequest,
    ModuleDeactivationRequest, ModuleChangeResponse, ModuleConflictsResponse, ModuleAuditLogResponse
)
from app.modules.feature_modules.service import ModuleService
from app.core.dependencies import require_permission, check_workspace_member
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/modules", tags=["modules"])


def get_module_service(supabase: Client = Depends(get_supabase)) -> ModuleService:
    return ModuleService(supabase)


@router.get("", response_model=List[ModuleResponse])
async def list_modules(
    user_data: Dict = Depends(require_permission("modules:read")),
    service: ModuleService = Depends(get_module_service)
):
    """Module catalog"""
    return service.list_catalog()


@router.get("/access", response_model=List[ModuleAccessInfo])
async def get_module_access_info(
    workspace_id: Optional[str] = None,
    user_data: Dict = Depends(require_permission("modules:read")),
    service: ModuleService = Depends(get_module_service)
):
    """Activation and dependency status per module (own workspace unless root)"""
    target = workspace_id or user_data.get("workspace_id")
    if not target:
        raise HTTPException(status_code=400, detail="No workspace specified")
    check_workspace_member(target, user_data)
    return service.get_access_info(target)


@router.get("/{module_name}/access", response_model=ModuleAccessCheck)
async def check_module_access(
    module_name: str,
    user_data: Dict = Depends(require_permission("modules:read")),
    service: ModuleService = Depends(get_module_service)
):
    return ModuleAccessCheck(module_name=module_name, can_access=service.can_access_module(user_data, module_name))


@router.post("/workspaces/{workspace_id}/activate", response_model=ModuleChangeResponse)
async def activate_modules(
    workspace_id: str,
    request: ModuleActivationRequest,
    user_data: Dict = Depends(require_permission("modules:manage")),
    service: ModuleService = Depends(get_module_service)
):
    """Activate modules (and nothing else); required modules must already be active or be listed too"""
    return service.activate_modules(workspace_id, request.modules, user_data["id"], request.reason)


@router.post("/workspaces/{workspace_id}/deactivate", response_model=ModuleChangeResponse)
async def deactivate_modules(
    workspace_id: str,
    request: ModuleDeactivationRequest,
    user_data: Dict = Depends(require_permission("modules:manage")),
    service: ModuleService = Depends(get_module_service)
):
    """Deactivate modules; refused with 409 while active modules depend on them unless cascade=true"""
    return service.deactivate_modules(
        workspace_id, request.modules, user_data["id"], cascade=request.cascade, reason=request.reason
    )


@router.get("/workspaces/{workspace_id}/conflicts", response_model=ModuleConflictsResponse)
async def get_deactivation_conflicts(
    workspace_id: str,
    modules: List[str] = Query(...),
    user_data: Dict = Depends(require_permission("modules:manage")),
    service: ModuleService = Depends(get_module_service)
):
    return service.get_conflicts(workspace_id, modules)


@router.get("/workspaces/{workspace_id}/audit", response_model=List[ModuleAuditLogResponse])
async def list_module_audit_logs(
    workspace_id: str,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("modules:manage")),
    service: ModuleService = Depends(get_module_service)
):
    return service.list_audit_logs(workspace_id, limit=limit, offset=offset)
