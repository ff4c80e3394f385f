from supabase import Client
from app.config.permissions_config import USER_ADMIN_ROLES
from app.core.utils import utc_now_iso
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, DeleteUserResponse
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = {"root", "admin"}


class ProfileService:
    def __init__(self, supabase: Client, admin_client: Optional[Client] = None):
        self.supabase = supabase
        # auth.admin calls need the service_role key
        self.admin_client = admin_client or supabase

    def _get_profile_row(self, profile_id: str) -> Optional[dict]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", profile_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_profile(self, profile_id: str) -> ProfileResponse:
        try:
            row = self._get_profile_row(profile_id)
            if not row:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_profiles(
        self,
        workspace_id: Optional[str] = None,
        all_workspaces: bool = False,
        role: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[ProfileResponse]:
        """List profiles in a workspace (or every profile when all_workspaces)"""
        try:
            query = self.supabase.table("profiles").select("*")
            if not all_workspaces:
                if workspace_id:
                    query = query.eq("workspace_id", workspace_id)
                else:
                    query = query.is_("workspace_id", "null")
            if role:
                query = query.eq("role", role)
            result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
            return [ProfileResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, profile_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        try:
            update_data = profile_data.model_dump(exclude_unset=True)
            update_data["updated_at"] = utc_now_iso()
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", profile_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def change_role(self, profile_id: str, new_role: str, caller: dict) -> ProfileResponse:
        """Change a user's role; only root may grant or revoke root and admin"""
        try:
            target = self._get_profile_row(profile_id)
            if not target:
                raise HTTPException(status_code=404, detail="Profile not found")

            touches_privileged = new_role in PRIVILEGED_ROLES or target.get("role") in PRIVILEGED_ROLES
            if touches_privileged and caller.get("role") != "root":
                raise HTTPException(status_code=403, detail="Only root users can grant or revoke admin and root roles")

            result = self.supabase.table("profiles")\
                .update({"role": new_role, "updated_at": utc_now_iso()})\
                .eq("id", profile_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            logger.info(f"User {caller.get('id')} changed role of {profile_id}: {target.get('role')} -> {new_role}")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_user(self, user_id: str, caller: dict) -> DeleteUserResponse:
        """
        Delete a user account. Checks run in this order:
        caller is admin or root (403), target exists (404), not self (400),
        target is not root (400), only root deletes admins (403),
        the last admin stays unless root asks (400).
        The auth user is removed through the admin API; profiles cascade.
        """
        try:
            if caller.get("role") not in USER_ADMIN_ROLES:
                logger.warning(f"Unauthorized deletion attempt by {caller.get('id')}")
                raise HTTPException(status_code=403, detail="Unauthorized: Only admins can delete users")

            target = self._get_profile_row(user_id)
            if not target:
                raise HTTPException(status_code=404, detail="User not found")

            if user_id == caller.get("id"):
                raise HTTPException(status_code=400, detail="Cannot delete your own account")

            if target.get("role") == "root":
                raise HTTPException(status_code=400, detail="Root users cannot be deleted")

            if target.get("role") == "admin":
                if caller.get("role") != "root":
                    raise HTTPException(status_code=403, detail="Only root users can delete admin users")
                admins = self.supabase.table("profiles")\
                    .select("id")\
                    .eq("role", "admin")\
                    .execute()
                if len(admins.data or []) <= 1 and caller.get("role") != "root":
                    raise HTTPException(status_code=400, detail="Cannot delete the last admin user")

            try:
                self.admin_client.auth.admin.delete_user(user_id)
            except Exception as e:
                logger.error(f"Error deleting user {user_id}: {str(e)}")
                raise HTTPException(
                    status_code=400,
                    detail={"error": "Failed to delete user", "details": str(e)}
                )

            logger.info(f"User deleted successfully: {user_id}")
            return DeleteUserResponse(message="User deleted successfully", deleted_user_id=user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
