from supabase import Client
from app.core.utils import utc_now_iso
from app.modules.workflows.schemas import (
    WorkflowCreate, WorkflowUpdate, WorkflowResponse, WorkflowStepInput,
    WorkflowStepResponse, WorkflowCommentResponse
)
from app.modules.assignments.schemas import StepAssignmentResponse
from typing import List, Optional, Dict
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class WorkflowService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_steps(self, workflow_ids: List[str]) -> Dict[str, List[WorkflowStepResponse]]:
        """Steps of the given workflows, grouped by workflow and ordered by step_order"""
        grouped: Dict[str, List[WorkflowStepResponse]] = {wid: [] for wid in workflow_ids}
        if not workflow_ids:
            return grouped
        result = self.supabase.table("workflow_steps")\
            .select("*")\
            .in_("workflow_id", workflow_ids)\
            .order("step_order")\
            .execute()
        for row in result.data or []:
            grouped.setdefault(row["workflow_id"], []).append(WorkflowStepResponse(**row))
        return grouped

    def _step_rows(self, workflow_id: str, steps: List[WorkflowStepInput]) -> List[dict]:
        return [
            {
                "workflow_id": workflow_id,
                "name": step.name,
                "description": step.description,
                "step_order": index + 1,
                "status": step.status,
                "assigned_to": step.assigned_to,
                "estimated_hours": step.estimated_hours,
                "dependencies": step.dependencies,
                "metadata": step.metadata,
            }
            for index, step in enumerate(steps)
        ]

    def list_workflows(self, status: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[WorkflowResponse]:
        """List workflows with their steps, newest first"""
        try:
            query = self.supabase.table("workflows").select("*")
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
            rows = result.data or []
            steps = self._get_steps([row["id"] for row in rows])
            return [WorkflowResponse(**{**row, "steps": steps.get(row["id"], [])}) for row in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_workflow_row(self, workflow_id: str) -> dict:
        result = self.supabase.table("workflows")\
            .select("*")\
            .eq("id", workflow_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Workflow not found")
        return result.data[0]

    def get_workflow(self, workflow_id: str) -> WorkflowResponse:
        """Get workflow by ID with ordered steps"""
        try:
            row = self.get_workflow_row(workflow_id)
            steps = self._get_steps([workflow_id])
            return WorkflowResponse(**{**row, "steps": steps.get(workflow_id, [])})
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_workflow(self, workflow_data: WorkflowCreate, user_id: str) -> WorkflowResponse:
        """Create a workflow and its steps (step_order follows list position)"""
        try:
            result = self.supabase.table("workflows").insert({
                "name": workflow_data.name,
                "description": workflow_data.description,
                "status": workflow_data.status,
                "priority": workflow_data.priority,
                "is_reusable": workflow_data.is_reusable,
                "assigned_to": workflow_data.assigned_to,
                "due_date": workflow_data.due_date.isoformat() if workflow_data.due_date else None,
                "tags": workflow_data.tags,
                "metadata": workflow_data.metadata,
                "created_by": user_id,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create workflow")

            workflow = result.data[0]
            if workflow_data.steps:
                self.supabase.table("workflow_steps")\
                    .insert(self._step_rows(workflow["id"], workflow_data.steps))\
                    .execute()

            logger.info(f"Created workflow {workflow['id']} with {len(workflow_data.steps)} step(s)")
            return self.get_workflow(workflow["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_workflow(self, workflow_id: str, workflow_data: WorkflowUpdate) -> WorkflowResponse:
        """Update workflow fields; a submitted steps list replaces every existing step"""
        try:
            self.get_workflow_row(workflow_id)
            if workflow_data.steps is not None and self._has_active_instances(workflow_id):
                raise HTTPException(
                    status_code=409,
                    detail="Cannot replace steps while the workflow has active instances"
                )

            update_data = workflow_data.model_dump(exclude_unset=True, exclude={"steps"})
            if update_data.get("due_date") is not None:
                update_data["due_date"] = update_data["due_date"].isoformat()
            update_data["updated_at"] = utc_now_iso()

            self.supabase.table("workflows")\
                .update(update_data)\
                .eq("id", workflow_id)\
                .execute()

            if workflow_data.steps is not None:
                self.replace_steps(workflow_id, workflow_data.steps)

            return self.get_workflow(workflow_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _has_active_instances(self, workflow_id: str) -> bool:
        result = self.supabase.table("workflow_instances")\
            .select("id")\
            .eq("workflow_id", workflow_id)\
            .eq("status", "active")\
            .limit(1)\
            .execute()
        return bool(result.data)

    def replace_steps(self, workflow_id: str, steps: List[WorkflowStepInput]) -> List[WorkflowStepResponse]:
        """Delete the workflow's steps (with their assignments and notifications) and insert the new list"""
        existing = self.supabase.table("workflow_steps")\
            .select("id")\
            .eq("workflow_id", workflow_id)\
            .execute()
        self.delete_steps_cascade([row["id"] for row in existing.data or []])

        if not steps:
            return []
        result = self.supabase.table("workflow_steps")\
            .insert(self._step_rows(workflow_id, steps))\
            .execute()
        return [WorkflowStepResponse(**row) for row in result.data or []]

    def delete_steps_cascade(self, step_ids: List[str]) -> None:
        """Remove steps after the notifications and assignments that reference them"""
        if not step_ids:
            return
        self.supabase.table("notifications").delete().in_("workflow_step_id", step_ids).execute()
        self.supabase.table("workflow_step_assignments").delete().in_("workflow_step_id", step_ids).execute()
        self.supabase.table("workflow_steps").delete().in_("id", step_ids).execute()

    def delete_workflow(self, workflow_id: str) -> None:
        """Delete a workflow and everything hanging off it, children first"""
        try:
            self.get_workflow_row(workflow_id)

            steps = self.supabase.table("workflow_steps")\
                .select("id")\
                .eq("workflow_id", workflow_id)\
                .execute()
            step_ids = [row["id"] for row in steps.data or []]

            if step_ids:
                self.supabase.table("notifications").delete().in_("workflow_step_id", step_ids).execute()
                self.supabase.table("workflow_step_assignments").delete().in_("workflow_step_id", step_ids).execute()
            self.supabase.table("workflow_comments").delete().eq("workflow_id", workflow_id).execute()
            self.supabase.table("workflow_instances").delete().eq("workflow_id", workflow_id).execute()
            self.supabase.table("workflow_steps").delete().eq("workflow_id", workflow_id).execute()
            self.supabase.table("workflows").delete().eq("id", workflow_id).execute()
            logger.info(f"Deleted workflow {workflow_id} and {len(step_ids)} step(s)")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_step(self, step_id: str) -> dict:
        result = self.supabase.table("workflow_steps")\
            .select("*")\
            .eq("id", step_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Workflow step not found")
        return result.data[0]

    def update_step_status(self, step_id: str, status: str) -> WorkflowStepResponse:
        try:
            result = self.supabase.table("workflow_steps")\
                .update({"status": status, "updated_at": utc_now_iso()})\
                .eq("id", step_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workflow step not found")
            return WorkflowStepResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_comments(self, workflow_id: str) -> List[WorkflowCommentResponse]:
        try:
            result = self.supabase.table("workflow_comments")\
                .select("*")\
                .eq("workflow_id", workflow_id)\
                .order("created_at")\
                .execute()
            return [WorkflowCommentResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_comment(self, workflow_id: str, comment: str, user_id: Optional[str]) -> WorkflowCommentResponse:
        try:
            result = self.supabase.table("workflow_comments").insert({
                "workflow_id": workflow_id,
                "user_id": user_id,
                "comment": comment,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add comment")
            return WorkflowCommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_assignments(self, workflow_id: str, assigned_by: str) -> List[StepAssignmentResponse]:
        """Create a pending assignment for every assigned step that has none yet"""
        try:
            self.get_workflow_row(workflow_id)

            steps = self.supabase.table("workflow_steps")\
                .select("id, name, assigned_to")\
                .eq("workflow_id", workflow_id)\
                .order("step_order")\
                .execute()
            assigned_steps = [s for s in steps.data or [] if s.get("assigned_to")]
            if not assigned_steps:
                return []

            existing = self.supabase.table("workflow_step_assignments")\
                .select("workflow_step_id")\
                .in_("workflow_step_id", [s["id"] for s in assigned_steps])\
                .execute()
            already_assigned = {row["workflow_step_id"] for row in existing.data or []}

            rows = [
                {
                    "workflow_step_id": step["id"],
                    "assigned_to": step["assigned_to"],
                    "assigned_by": assigned_by,
                    "status": "pending",
                    "notes": f"Auto-created assignment for step: {step['name']}",
                }
                for step in assigned_steps
                if step["id"] not in already_assigned
            ]
            if not rows:
                return []

            result = self.supabase.table("workflow_step_assignments").insert(rows).execute()
            logger.info(f"Created {len(rows)} assignment(s) for workflow {workflow_id}")
            return [StepAssignmentResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
