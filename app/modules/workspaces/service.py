from supabase import Client
from app.core.utils import generate_slug, utc_now_iso
from app.modules.workspaces.schemas import (
    WorkspaceCreate, WorkspaceUpdate, WorkspaceResponse, WorkspaceStatsResponse
)
from app.modules.profiles.schemas import ProfileResponse
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _slug_taken(self, slug: str, exclude_id: str = None) -> bool:
        result = self.supabase.table("workspaces")\
            .select("id")\
            .eq("slug", slug)\
            .execute()
        return any(row["id"] != exclude_id for row in result.data or [])

    def create_workspace(self, workspace_data: WorkspaceCreate, user_id: str) -> WorkspaceResponse:
        """Create a workspace; the slug is derived from the name when not given"""
        try:
            slug = generate_slug(workspace_data.slug or workspace_data.name)
            if not slug:
                raise HTTPException(status_code=400, detail="Workspace name must contain letters or digits")
            if self._slug_taken(slug):
                raise HTTPException(status_code=409, detail=f"Workspace slug '{slug}' already exists")

            result = self.supabase.table("workspaces").insert({
                "name": workspace_data.name,
                "slug": slug,
                "description": workspace_data.description,
                "owner_id": workspace_data.owner_id or user_id,
                "settings": workspace_data.settings,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create workspace")

            logger.info(f"Created workspace {result.data[0]['id']} ({slug})")
            return WorkspaceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_workspaces(self) -> List[WorkspaceResponse]:
        try:
            result = self.supabase.table("workspaces")\
                .select("*")\
                .order("name")\
                .execute()
            return [WorkspaceResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_workspace(self, workspace_id: str) -> WorkspaceResponse:
        try:
            result = self.supabase.table("workspaces")\
                .select("*")\
                .eq("id", workspace_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workspace not found")
            return WorkspaceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_workspace(self, workspace_id: str, workspace_data: WorkspaceUpdate) -> WorkspaceResponse:
        try:
            update_data = workspace_data.model_dump(exclude_unset=True)
            if update_data.get("slug"):
                update_data["slug"] = generate_slug(update_data["slug"])
                if self._slug_taken(update_data["slug"], exclude_id=workspace_id):
                    raise HTTPException(status_code=409, detail=f"Workspace slug '{update_data['slug']}' already exists")
            update_data["updated_at"] = utc_now_iso()

            result = self.supabase.table("workspaces")\
                .update(update_data)\
                .eq("id", workspace_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workspace not found")
            return WorkspaceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_workspace(self, workspace_id: str) -> None:
        """Detach members and module activations, then delete the workspace"""
        try:
            self.get_workspace(workspace_id)
            self.supabase.table("profiles")\
                .update({"workspace_id": None, "updated_at": utc_now_iso()})\
                .eq("workspace_id", workspace_id)\
                .execute()
            self.supabase.table("workspace_modules").delete().eq("workspace_id", workspace_id).execute()
            self.supabase.table("workspaces").delete().eq("id", workspace_id).execute()
            logger.info(f"Deleted workspace {workspace_id}")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, workspace_id: str) -> List[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("workspace_id", workspace_id)\
                .order("created_at")\
                .execute()
            return [ProfileResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def assign_user(self, workspace_id: str, user_id: str) -> ProfileResponse:
        """Move a user into the workspace (a user belongs to one workspace)"""
        try:
            self.get_workspace(workspace_id)
            result = self.supabase.table("profiles")\
                .update({"workspace_id": workspace_id, "updated_at": utc_now_iso()})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")
            logger.info(f"Assigned user {user_id} to workspace {workspace_id}")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unassign_user(self, workspace_id: str, user_id: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .update({"workspace_id": None, "updated_at": utc_now_iso()})\
                .eq("id", user_id)\
                .eq("workspace_id", workspace_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="User is not a member of this workspace")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_stats(self, workspace_id: str) -> WorkspaceStatsResponse:
        try:
            self.get_workspace(workspace_id)
            members = self.supabase.table("profiles")\
                .select("id, role")\
                .eq("workspace_id", workspace_id)\
                .execute()
            modules = self.supabase.table("workspace_modules")\
                .select("id")\
                .eq("workspace_id", workspace_id)\
                .eq("is_active", True)\
                .execute()

            by_role = {}
            for member in members.data or []:
                by_role[member.get("role")] = by_role.get(member.get("role"), 0) + 1

            return WorkspaceStatsResponse(
                workspace_id=workspace_id,
                member_count=len(members.data or []),
                active_module_count=len(modules.data or []),
                members_by_role=by_role,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
