from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)


class WorkspaceUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    owner_id: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkspaceMemberAssign(BaseModel):
    user_id: str


class WorkspaceStatsResponse(BaseModel):
    workspace_id: str
    member_count: int
    active_module_count: int
    members_by_role: Dict[str, int]
