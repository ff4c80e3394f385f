from supabase import Client
from app.core.utils import utc_now_iso
from app.modules.instances.advancement import (
    AdvancementError, first_step, order_steps, plan_advance
)
from app.modules.instances.schemas import (
    AdvanceRequest, AdvanceResponse, InstanceResponse, StartableWorkflowResponse
)
from app.modules.notifications.service import NotificationService
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

WORKFLOW_COMPLETED_MESSAGE = "Workflow completed - all steps finished"
STEP_ADVANCED_MESSAGE = "Step completed, advanced to next step"


class InstanceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.notifications = NotificationService(supabase)

    def _get_workflow(self, workflow_id: str) -> dict:
        result = self.supabase.table("workflows")\
            .select("*")\
            .eq("id", workflow_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Workflow not found")
        return result.data[0]

    def _get_steps(self, workflow_id: str) -> List[dict]:
        result = self.supabase.table("workflow_steps")\
            .select("*")\
            .eq("workflow_id", workflow_id)\
            .order("step_order")\
            .execute()
        return order_steps(result.data or [])

    def _log(self, workflow_id: str, user_id: Optional[str], comment: str) -> None:
        self.supabase.table("workflow_comments").insert({
            "workflow_id": workflow_id,
            "user_id": user_id,
            "comment": comment,
        }).execute()

    def _assign_step(self, step: dict, workflow: dict, assigned_by: str) -> None:
        """Create an assignment and an in-app notification for the step's assignee"""
        if not step.get("assigned_to"):
            return
        self.supabase.table("workflow_step_assignments").insert({
            "workflow_step_id": step["id"],
            "assigned_to": step["assigned_to"],
            "assigned_by": assigned_by,
            "status": "pending",
            "due_date": (step.get("metadata") or {}).get("due_date"),
        }).execute()
        self.notifications.notify_step_assigned(step["assigned_to"], step, workflow.get("name", ""))

    def _with_names(self, rows: List[dict]) -> List[InstanceResponse]:
        workflow_ids = list({row["workflow_id"] for row in rows})
        step_ids = list({row["current_step_id"] for row in rows if row.get("current_step_id")})
        workflow_names: Dict[str, str] = {}
        step_names: Dict[str, str] = {}
        if workflow_ids:
            result = self.supabase.table("workflows").select("id, name").in_("id", workflow_ids).execute()
            workflow_names = {w["id"]: w["name"] for w in result.data or []}
        if step_ids:
            result = self.supabase.table("workflow_steps").select("id, name").in_("id", step_ids).execute()
            step_names = {s["id"]: s["name"] for s in result.data or []}
        return [
            InstanceResponse(
                **row,
                workflow_name=workflow_names.get(row["workflow_id"]),
                current_step_name=step_names.get(row.get("current_step_id")),
            )
            for row in rows
        ]

    def get_instance_row(self, instance_id: str) -> dict:
        result = self.supabase.table("workflow_instances")\
            .select("*")\
            .eq("id", instance_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Workflow instance not found")
        return result.data[0]

    def start_instance(self, workflow_id: str, user_id: str, start_data: Optional[Dict[str, Any]] = None) -> InstanceResponse:
        """Start an instance of an active workflow on its lowest step_order step"""
        try:
            workflow = self._get_workflow(workflow_id)
            if workflow.get("status") != "active":
                raise HTTPException(status_code=400, detail="Only active workflows can be started")

            if not workflow.get("is_reusable"):
                existing = self.supabase.table("workflow_instances")\
                    .select("id")\
                    .eq("workflow_id", workflow_id)\
                    .limit(1)\
                    .execute()
                if existing.data:
                    raise HTTPException(status_code=409, detail="This workflow is not reusable and already has an instance")

            try:
                start_step = first_step(self._get_steps(workflow_id))
            except AdvancementError as e:
                raise HTTPException(status_code=e.status_code, detail=str(e))

            # a new run starts from scratch; statuses left by earlier runs would be skipped
            self.supabase.table("workflow_steps")\
                .update({"status": "pending", "updated_at": utc_now_iso()})\
                .eq("workflow_id", workflow_id)\
                .execute()

            result = self.supabase.table("workflow_instances").insert({
                "workflow_id": workflow_id,
                "started_by": user_id,
                "current_step_id": start_step["id"],
                "status": "active",
                "start_data": start_data or {},
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to start workflow instance")

            instance = result.data[0]
            self._assign_step(start_step, workflow, user_id)
            self._log(workflow_id, user_id, f"Workflow instance started at step: {start_step['name']}")
            logger.info(f"Started instance {instance['id']} of workflow {workflow_id} at step {start_step['id']}")
            return self._with_names([instance])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_instances(
        self,
        started_by: Optional[str] = None,
        workflow_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[InstanceResponse]:
        """List instances, newest first; started_by=None lists every user's"""
        try:
            query = self.supabase.table("workflow_instances").select("*")
            if started_by:
                query = query.eq("started_by", started_by)
            if workflow_id:
                query = query.eq("workflow_id", workflow_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
            return self._with_names(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_instance(self, instance_id: str) -> InstanceResponse:
        try:
            return self._with_names([self.get_instance_row(instance_id)])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def cancel_instance(self, instance_id: str, user_id: str) -> InstanceResponse:
        try:
            instance = self.get_instance_row(instance_id)
            if instance["status"] in ("completed", "cancelled"):
                raise HTTPException(status_code=409, detail=f"Workflow instance is already {instance['status']}")

            result = self.supabase.table("workflow_instances")\
                .update({"status": "cancelled", "current_step_id": None, "updated_at": utc_now_iso()})\
                .eq("id", instance_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workflow instance not found")

            self._log(instance["workflow_id"], user_id, "Workflow instance cancelled")
            return self._with_names(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_startable_workflows(self, user_id: str) -> List[StartableWorkflowResponse]:
        """Active workflows whose first step is assigned to the user and that may still be started"""
        try:
            workflows = self.supabase.table("workflows")\
                .select("*")\
                .eq("status", "active")\
                .order("created_at", desc=True)\
                .execute()
            rows = workflows.data or []
            if not rows:
                return []

            workflow_ids = [w["id"] for w in rows]
            steps = self.supabase.table("workflow_steps")\
                .select("*")\
                .in_("workflow_id", workflow_ids)\
                .execute()
            steps_by_workflow: Dict[str, List[dict]] = {}
            for step in steps.data or []:
                steps_by_workflow.setdefault(step["workflow_id"], []).append(step)

            instances = self.supabase.table("workflow_instances")\
                .select("workflow_id")\
                .in_("workflow_id", workflow_ids)\
                .execute()
            started = {row["workflow_id"] for row in instances.data or []}

            startable = []
            for workflow in rows:
                ordered = order_steps(steps_by_workflow.get(workflow["id"], []))
                if not ordered or ordered[0].get("assigned_to") != user_id:
                    continue
                if not workflow.get("is_reusable") and workflow["id"] in started:
                    continue
                startable.append(StartableWorkflowResponse(
                    id=workflow["id"],
                    name=workflow["name"],
                    description=workflow.get("description"),
                    priority=workflow.get("priority"),
                    is_reusable=bool(workflow.get("is_reusable")),
                    first_step_id=ordered[0]["id"],
                    first_step_name=ordered[0]["name"],
                ))
            return startable
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _find_active_instance(self, advance: AdvanceRequest) -> dict:
        if advance.instance_id:
            instance = self.get_instance_row(advance.instance_id)
            if instance["workflow_id"] != advance.workflow_id:
                raise HTTPException(status_code=400, detail="Workflow instance does not belong to this workflow")
            return instance

        result = self.supabase.table("workflow_instances")\
            .select("*")\
            .eq("workflow_id", advance.workflow_id)\
            .eq("status", "active")\
            .order("created_at", desc=True)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="No active workflow instance found")
        return result.data[0]

    def find_instance_at_step(self, step_id: str) -> Optional[dict]:
        """Active instance currently pointing at the step, if any"""
        result = self.supabase.table("workflow_instances")\
            .select("*")\
            .eq("current_step_id", step_id)\
            .eq("status", "active")\
            .order("created_at", desc=True)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def advance(self, advance: AdvanceRequest, user_id: str, can_manage: bool = False) -> AdvanceResponse:
        """
        Complete the instance's current step and move to the next open step.

        The instance row is claimed first with a conditional update on
        current_step_id; if another completion got there first nothing matches
        and the request fails with 409 before any step is touched.
        """
        try:
            instance = self._find_active_instance(advance)
            steps = self._get_steps(instance["workflow_id"])
            try:
                plan = plan_advance(instance, steps, advance.completed_step_id)
            except AdvancementError as e:
                raise HTTPException(status_code=e.status_code, detail=str(e))

            completed = plan.completed_step
            if not can_manage and user_id not in (completed.get("assigned_to"), instance.get("started_by")):
                raise HTTPException(
                    status_code=403,
                    detail="Only the step assignee or the instance starter can complete this step"
                )

            now = utc_now_iso()
            if plan.finishes_instance:
                pointer_update = {
                    "status": "completed",
                    "current_step_id": None,
                    "completed_at": now,
                    "updated_at": now,
                }
            else:
                pointer_update = {"current_step_id": plan.next_step["id"], "updated_at": now}

            claimed = self.supabase.table("workflow_instances")\
                .update(pointer_update)\
                .eq("id", instance["id"])\
                .eq("current_step_id", completed["id"])\
                .eq("status", "active")\
                .execute()
            if not claimed.data:
                raise HTTPException(status_code=409, detail="Workflow instance was advanced by another request")

            notes = advance.completion_notes or "No additional notes"
            self._log(instance["workflow_id"], user_id, f"Step completed: {notes}")

            step_update = {"status": "completed", "updated_at": now}
            if completed.get("actual_hours") is None and completed.get("estimated_hours") is not None:
                step_update["actual_hours"] = completed["estimated_hours"]
            self.supabase.table("workflow_steps")\
                .update(step_update)\
                .eq("id", completed["id"])\
                .execute()

            if plan.finishes_instance:
                self._log(instance["workflow_id"], user_id, WORKFLOW_COMPLETED_MESSAGE)
                logger.info(f"Instance {instance['id']} completed at step {completed['id']}")
                message = WORKFLOW_COMPLETED_MESSAGE
                instance_status = "completed"
            else:
                next_step = plan.next_step
                self.supabase.table("workflow_steps")\
                    .update({"status": "pending", "updated_at": now})\
                    .eq("id", next_step["id"])\
                    .execute()
                workflow = self._get_workflow(instance["workflow_id"])
                self._assign_step(next_step, workflow, user_id)
                logger.info(f"Instance {instance['id']} advanced {completed['id']} -> {next_step['id']}")
                message = STEP_ADVANCED_MESSAGE
                instance_status = "active"

            return AdvanceResponse(
                success=True,
                message=message,
                workflow_id=instance["workflow_id"],
                completed_step_id=completed["id"],
                next_step_exists=not plan.finishes_instance,
                next_step_id=None if plan.finishes_instance else plan.next_step["id"],
                workflow_instance_id=instance["id"],
                instance_status=instance_status,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error advancing workflow {advance.workflow_id}: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
