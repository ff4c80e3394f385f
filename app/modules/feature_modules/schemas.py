from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class ModuleResponse(BaseModel):
    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    version: str = "1.0.0"
    is_core: bool = False
    required_modules: List[str] = Field(default_factory=list)
    settings_schema: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        from_attributes = True


class ModuleAccessInfo(BaseModel):
    module_name: str
    display_name: str
    is_active: bool
    is_available: bool
    has_dependencies: bool
    missing_dependencies: List[str]
    version: str
    settings: Dict[str, Any] = Field(default_factory=dict)


class ModuleAccessCheck(BaseModel):
    module_name: str
    can_access: bool


class ModuleActivationRequest(BaseModel):
    modules: List[str] = Field(..., min_length=1)
    reason: Optional[str] = None


class ModuleDeactivationRequest(BaseModel):
    modules: List[str] = Field(..., min_length=1)
    cascade: bool = False
    reason: Optional[str] = None


class ModuleChangeResponse(BaseModel):
    workspace_id: str
    changed: List[str]
    active_modules: List[str]


class ModuleConflict(BaseModel):
    module_name: str
    required_by: List[str]


class ModuleConflictsResponse(BaseModel):
    workspace_id: str
    can_safely_deactivate: bool
    conflicts: List[ModuleConflict]


class ModuleAuditLogResponse(BaseModel):
    id: str
    workspace_id: str
    module_name: str
    action: str
    previous_state: Optional[Dict[str, Any]] = None
    new_state: Optional[Dict[str, Any]] = None
    performed_by: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
