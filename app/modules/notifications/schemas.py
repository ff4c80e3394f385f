from pydantic import BaseModel, EmailStr
from typing import Optional, List, Literal
from datetime import datetime

NotificationType = Literal["info", "warning", "success", "error"]


class NotificationCreate(BaseModel):
    user_id: str
    title: str
    message: str
    type: NotificationType = "info"
    workflow_step_id: Optional[str] = None


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    read: bool = False
    workflow_step_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class WorkflowNotificationEmail(BaseModel):
    user_email: EmailStr
    user_name: str
    step_name: str
    workflow_name: str
    step_description: Optional[str] = None
    due_date: Optional[datetime] = None


class EmailDeliveryResponse(BaseModel):
    id: Optional[str] = None
    to: List[str]
    subject: str
