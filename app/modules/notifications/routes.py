from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.notifications.schemas import (
    NotificationResponse, NotificationListResponse, WorkflowNotificationEmail, EmailDeliveryResponse
)
from app.modules.notifications.service import NotificationService
from app.modules.notifications.mailer import ResendMailer, send_workflow_notification
from app.core.dependencies import get_current_profile, require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


def get_mailer() -> ResendMailer:
    return ResendMailer()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = 50,
    offset: int = 0,
    profile: Dict = Depends(get_current_profile),
    service: NotificationService = Depends(get_notification_service)
):
    """Own notifications, newest first, with unread count"""
    return service.list_notifications(profile["id"], limit=limit, offset=offset)


@router.post("/read-all")
async def mark_all_read(
    profile: Dict = Depends(get_current_profile),
    service: NotificationService = Depends(get_notification_service)
):
    updated = service.mark_all_as_read(profile["id"])
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    profile: Dict = Depends(get_current_profile),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_as_read(notification_id, profile["id"])


@router.post("/send-workflow-email", response_model=EmailDeliveryResponse)
async def send_workflow_email(
    email: WorkflowNotificationEmail,
    profile: Dict = Depends(require_permission("assignments:create")),
    mailer: ResendMailer = Depends(get_mailer)
):
    """Email a user that a workflow step was assigned to them"""
    return send_workflow_notification(mailer, email)
