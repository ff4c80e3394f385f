from supabase import Client
from app.core.utils import utc_now_iso
from app.modules.assignments.schemas import (
    StepAssignmentResponse, InboxAssignmentResponse, AssignmentCompleteResponse
)
from app.modules.instances.schemas import AdvanceRequest
from app.modules.instances.service import InstanceService
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class AssignmentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_assignment_row(self, assignment_id: str) -> dict:
        result = self.supabase.table("workflow_step_assignments")\
            .select("*")\
            .eq("id", assignment_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Assignment not found")
        return result.data[0]

    def list_inbox(self, user_id: str, status: Optional[str] = None) -> List[InboxAssignmentResponse]:
        """Assignments of the user with step and workflow names, newest first"""
        try:
            query = self.supabase.table("workflow_step_assignments")\
                .select("*")\
                .eq("assigned_to", user_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            rows = result.data or []
            if not rows:
                return []

            step_ids = list({row["workflow_step_id"] for row in rows})
            steps = self.supabase.table("workflow_steps")\
                .select("id, name, description, workflow_id")\
                .in_("id", step_ids)\
                .execute()
            steps_by_id = {s["id"]: s for s in steps.data or []}

            workflow_ids = list({s["workflow_id"] for s in steps_by_id.values()})
            workflow_names = {}
            if workflow_ids:
                workflows = self.supabase.table("workflows")\
                    .select("id, name")\
                    .in_("id", workflow_ids)\
                    .execute()
                workflow_names = {w["id"]: w["name"] for w in workflows.data or []}

            inbox = []
            for row in rows:
                step = steps_by_id.get(row["workflow_step_id"], {})
                inbox.append(InboxAssignmentResponse(
                    **row,
                    step_name=step.get("name"),
                    step_description=step.get("description"),
                    workflow_id=step.get("workflow_id"),
                    workflow_name=workflow_names.get(step.get("workflow_id")),
                ))
            return inbox
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_status(self, assignment_id: str, status: str, notes: Optional[str] = None) -> StepAssignmentResponse:
        """Set assignment status; completion stamps completed_at"""
        try:
            update_data = {"status": status, "updated_at": utc_now_iso()}
            if status == "completed":
                update_data["completed_at"] = utc_now_iso()
            if notes is not None:
                update_data["notes"] = notes

            result = self.supabase.table("workflow_step_assignments")\
                .update(update_data)\
                .eq("id", assignment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Assignment not found")
            return StepAssignmentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def complete(self, assignment_id: str, user_id: str, notes: Optional[str] = None,
                 can_manage: bool = False) -> AssignmentCompleteResponse:
        """
        Complete an assignment, then advance the instance sitting on its step.
        An advancement failure does not undo the completion; it is reported
        in the response instead.
        """
        assignment = self.update_status(assignment_id, "completed", notes)

        instances = InstanceService(self.supabase)
        instance = instances.find_instance_at_step(assignment.workflow_step_id)
        if instance is None:
            return AssignmentCompleteResponse(assignment=assignment, advanced=False)

        try:
            result = instances.advance(
                AdvanceRequest(
                    workflow_id=instance["workflow_id"],
                    completed_step_id=assignment.workflow_step_id,
                    completion_notes=notes,
                    instance_id=instance["id"],
                ),
                user_id,
                can_manage=can_manage,
            )
        except HTTPException as e:
            logger.warning(f"Assignment {assignment_id} completed but instance {instance['id']} did not advance: {e.detail}")
            return AssignmentCompleteResponse(assignment=assignment, advanced=False, advance_error=str(e.detail))

        return AssignmentCompleteResponse(assignment=assignment, advanced=True, advance_result=result.model_dump())
