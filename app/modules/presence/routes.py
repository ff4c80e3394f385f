from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.presence.schemas import HeartbeatRequest, PresenceResponse, PresenceWithProfileResponse
from app.modules.presence.service import PresenceService
from app.core.dependencies import get_current_profile, require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/presence", tags=["presence"])


def get_presence_service(supabase: Client = Depends(get_supabase)) -> PresenceService:
    return PresenceService(supabase)


@router.post("/heartbeat", response_model=PresenceResponse)
async def heartbeat(
    heartbeat_data: Optional[HeartbeatRequest] = None,
    profile: Dict = Depends(get_current_profile),
    service: PresenceService = Depends(get_presence_service)
):
    session_id = heartbeat_data.session_id if heartbeat_data else None
    return service.heartbeat(profile["id"], session_id)


@router.post("/offline", response_model=PresenceResponse)
async def go_offline(
    profile: Dict = Depends(get_current_profile),
    service: PresenceService = Depends(get_presence_service)
):
    return service.go_offline(profile["id"])


@router.get("", response_model=List[PresenceWithProfileResponse])
async def list_presence(
    profile: Dict = Depends(require_permission("presence:read")),
    service: PresenceService = Depends(get_presence_service)
):
    """Presence dashboard: who is online (root only)"""
    return service.list_presence()
