from supabase import Client
from app.core.utils import utc_now_iso
from app.modules.workflow_builder.graph import (
    BRANCHING_TYPES, NON_RUNNABLE_TYPES, STEP_TYPES, WorkflowGraphError,
    ensure_ids, linearize, node_data, step_type_of, validate_graph
)
from app.modules.workflow_builder.schemas import (
    WorkflowDefinitionSave, WorkflowDefinitionResponse, WorkflowDefinitionSummary,
    StepTypeInfo, PublishRequest
)
from app.modules.workflows.schemas import WorkflowCreate, WorkflowResponse, WorkflowStepInput
from app.modules.workflows.service import WorkflowService
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def list_step_types() -> List[StepTypeInfo]:
    return [
        StepTypeInfo(
            step_type=step_type,
            category=category,
            is_branching=step_type in BRANCHING_TYPES,
            is_runnable=step_type not in NON_RUNNABLE_TYPES,
        )
        for step_type, category in STEP_TYPES.items()
    ]


class WorkflowDefinitionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _prepare(self, definition: WorkflowDefinitionSave) -> dict:
        nodes, edges = ensure_ids(definition.nodes, definition.edges)
        ok, issues = validate_graph(nodes, edges)
        if not ok:
            raise HTTPException(status_code=400, detail={"message": "Invalid workflow graph", "issues": issues})
        return {
            "name": definition.name,
            "description": definition.description,
            "is_reusable": definition.is_reusable,
            "nodes": nodes,
            "edges": edges,
            "viewport": definition.viewport,
        }

    def create_definition(self, definition: WorkflowDefinitionSave, user_id: str) -> WorkflowDefinitionResponse:
        try:
            row = self._prepare(definition)
            row["created_by"] = user_id
            result = self.supabase.table("workflow_definitions").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save workflow")
            logger.info(f"Saved workflow definition {result.data[0]['id']} ({len(row['nodes'])} nodes)")
            return WorkflowDefinitionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_definition(self, definition_id: str, definition: WorkflowDefinitionSave) -> WorkflowDefinitionResponse:
        try:
            row = self._prepare(definition)
            row["updated_at"] = utc_now_iso()
            result = self.supabase.table("workflow_definitions")\
                .update(row)\
                .eq("id", definition_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workflow definition not found")
            return WorkflowDefinitionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_definition(self, definition_id: str) -> WorkflowDefinitionResponse:
        try:
            result = self.supabase.table("workflow_definitions")\
                .select("*")\
                .eq("id", definition_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workflow definition not found")
            return WorkflowDefinitionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_definitions(self, created_by: Optional[str] = None) -> List[WorkflowDefinitionSummary]:
        """Saved graphs, most recently edited first"""
        try:
            query = self.supabase.table("workflow_definitions").select("*")
            if created_by:
                query = query.eq("created_by", created_by)
            result = query.order("updated_at", desc=True).execute()
            return [
                WorkflowDefinitionSummary(
                    id=row["id"],
                    name=row["name"],
                    description=row.get("description"),
                    is_reusable=bool(row.get("is_reusable")),
                    node_count=len(row.get("nodes") or []),
                    edge_count=len(row.get("edges") or []),
                    created_by=row.get("created_by"),
                    updated_at=row.get("updated_at"),
                )
                for row in result.data or []
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_definition(self, definition_id: str) -> None:
        try:
            result = self.supabase.table("workflow_definitions")\
                .delete()\
                .eq("id", definition_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Workflow definition not found")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def publish(self, definition_id: str, publish_request: PublishRequest, user_id: str) -> WorkflowResponse:
        """Create a workflow whose ordered steps are the graph's runnable nodes"""
        definition = self.get_definition(definition_id)
        try:
            ordered = linearize(definition.nodes, definition.edges)
        except WorkflowGraphError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not ordered:
            raise HTTPException(status_code=400, detail="Workflow has no runnable steps to publish")

        steps = []
        for node in ordered:
            data = node_data(node)
            steps.append(WorkflowStepInput(
                name=data.get("label") or step_type_of(node) or "Step",
                description=data.get("description"),
                assigned_to=data.get("assignedTo"),
                estimated_hours=data.get("estimatedHours"),
                metadata={"node_id": node["id"], "step_type": step_type_of(node)},
            ))

        is_reusable = definition.is_reusable if publish_request.is_reusable is None else publish_request.is_reusable
        workflow = WorkflowService(self.supabase).create_workflow(WorkflowCreate(
            name=definition.name,
            description=definition.description,
            status=publish_request.status,
            priority=publish_request.priority,
            is_reusable=is_reusable,
            metadata={"definition_id": definition.id},
            steps=steps,
        ), user_id)
        logger.info(f"Published definition {definition_id} as workflow {workflow.id} with {len(steps)} step(s)")
        return workflow
