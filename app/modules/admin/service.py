from supabase import Client
from app.modules.admin.schemas import CleanupResponse
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

# Children before parents
CLEANUP_TABLES = [
    "notifications",
    "workflow_step_assignments",
    "workflow_comments",
    "workflow_instances",
    "workflow_steps",
    "workflows",
]

# PostgREST refuses unfiltered deletes; no row has the nil uuid
_NIL_UUID = "00000000-0000-0000-0000-000000000000"


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def cleanup_workflow_data(self, user_id: str) -> CleanupResponse:
        """Delete every workflow-related row; returns per-table counts"""
        deleted = {}
        try:
            for table in CLEANUP_TABLES:
                result = self.supabase.table(table)\
                    .delete()\
                    .neq("id", _NIL_UUID)\
                    .execute()
                deleted[table] = len(result.data or [])
                logger.info(f"Cleanup by {user_id}: deleted {deleted[table]} row(s) from {table}")
        except Exception as e:
            logger.error(f"Cleanup failed after {deleted}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Cleanup failed: {str(e)}")

        return CleanupResponse(message="All workflow data has been deleted", deleted=deleted)
