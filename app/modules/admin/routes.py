from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.admin.schemas import CleanupResponse
from app.modules.admin.service import AdminService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_workflow_data(
    user_data: Dict = Depends(require_permission("admin:cleanup")),
    service: AdminService = Depends(get_admin_service)
):
    """Delete all workflows, steps, instances, assignments, comments and notifications (root only)"""
    return service.cleanup_workflow_data(user_data["id"])
