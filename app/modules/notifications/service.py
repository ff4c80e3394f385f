import logging
from supabase import Client
from app.core.utils import utc_now_iso
from app.modules.notifications.schemas import (
    NotificationCreate, NotificationResponse, NotificationListResponse
)
from typing import List
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_notification(self, notification_data: NotificationCreate) -> NotificationResponse:
        """Create an in-app notification for a user"""
        try:
            result = self.supabase.table("notifications").insert({
                "user_id": notification_data.user_id,
                "title": notification_data.title,
                "message": notification_data.message,
                "type": notification_data.type,
                "workflow_step_id": notification_data.workflow_step_id,
                "read": False
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create notification")

            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def notify_step_assigned(self, user_id: str, step: dict, workflow_name: str) -> NotificationResponse:
        return self.create_notification(NotificationCreate(
            user_id=user_id,
            title="New workflow step assigned",
            message=f'You have been assigned "{step.get("name")}" in workflow "{workflow_name}".',
            type="info",
            workflow_step_id=step.get("id"),
        ))

    def list_notifications(self, user_id: str, limit: int = 50, offset: int = 0) -> NotificationListResponse:
        """List notifications for a user, newest first, with the unread count"""
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()

            unread = self.supabase.table("notifications")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()

            return NotificationListResponse(
                notifications=[NotificationResponse(**n) for n in result.data],
                unread_count=len(unread.data or [])
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_as_read(self, notification_id: str, user_id: str) -> NotificationResponse:
        """Mark one of the user's notifications as read"""
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True, "updated_at": utc_now_iso()})\
                .eq("id", notification_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Notification not found")

            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark every unread notification of the user as read; returns how many changed"""
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True, "updated_at": utc_now_iso()})\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_for_steps(self, step_ids: List[str]) -> int:
        """Remove notifications that point at the given steps"""
        if not step_ids:
            return 0
        result = self.supabase.table("notifications")\
            .delete()\
            .in_("workflow_step_id", step_ids)\
            .execute()
        return len(result.data or [])
