from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

ProfileRole = Literal["root", "admin", "manager", "employee"]


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileRoleUpdate(BaseModel):
    role: ProfileRole


class ProfileResponse(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    workspace_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeleteUserResponse(BaseModel):
    message: str
    deleted_user_id: str
