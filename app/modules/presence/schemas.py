from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class HeartbeatRequest(BaseModel):
    session_id: Optional[str] = None


class PresenceResponse(BaseModel):
    id: Optional[str] = None
    user_id: str
    is_online: bool
    last_seen: datetime
    session_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PresenceWithProfileResponse(PresenceResponse):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    workspace_id: Optional[str] = None
