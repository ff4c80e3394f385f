from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.workflow_builder.graph import analyze_connectivity, identify_patterns, validate_graph
from app.modules.workflow_builder.review import rule_based_review
from app.modules.workflow_builder.schemas import (
    GraphPayload, WorkflowDefinitionSave, WorkflowDefinitionResponse, WorkflowDefinitionSummary,
    ValidationResponse, ConnectivityResponse, StepTypeInfo, PublishRequest
)
from app.modules.workflow_builder.service import WorkflowDefinitionService, list_step_types
from app.modules.workflows.schemas import WorkflowResponse
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Any, Optional

router = APIRouter(prefix="/workflow-definitions", tags=["workflow-builder"])


def get_definition_service(supabase: Client = Depends(get_supabase)) -> WorkflowDefinitionService:
    return WorkflowDefinitionService(supabase)


@router.get("/step-types", response_model=List[StepTypeInfo])
async def get_step_types(user_data: Dict = Depends(require_permission("workflow_definitions:read"))):
    """Node palette: every step type with its category"""
    return list_step_types()


@router.post("/validate", response_model=ValidationResponse)
async def validate_definition(
    graph: GraphPayload,
    user_data: Dict = Depends(require_permission("workflow_definitions:read"))
):
    is_valid, issues = validate_graph(graph.nodes, graph.edges)
    return ValidationResponse(is_valid=is_valid, issues=issues)


@router.post("/analyze", response_model=ConnectivityResponse)
async def analyze_definition(
    graph: GraphPayload,
    user_data: Dict = Depends(require_permission("workflow_definitions:read"))
):
    """Connectivity of a graph: isolated nodes, dead ends, start nodes and branch points"""
    return ConnectivityResponse(
        **analyze_connectivity(graph.nodes, graph.edges),
        **identify_patterns(graph.nodes, graph.edges),
    )


@router.post("/review", response_model=List[Dict[str, Any]])
async def review_definition(
    graph: GraphPayload,
    user_data: Dict = Depends(require_permission("workflow_definitions:read"))
):
    return rule_based_review(graph.nodes, graph.edges)


@router.post("", response_model=WorkflowDefinitionResponse, status_code=201)
async def create_definition(
    definition: WorkflowDefinitionSave,
    user_data: Dict = Depends(require_permission("workflow_definitions:create")),
    service: WorkflowDefinitionService = Depends(get_definition_service)
):
    """Save a new builder graph"""
    return service.create_definition(definition, user_data["id"])


@router.get("", response_model=List[WorkflowDefinitionSummary])
async def list_definitions(
    created_by_me: bool = False,
    user_data: Dict = Depends(require_permission("workflow_definitions:read")),
    service: WorkflowDefinitionService = Depends(get_definition_service)
):
    created_by: Optional[str] = user_data["id"] if created_by_me else None
    return service.list_definitions(created_by=created_by)


@router.get("/{definition_id}", response_model=WorkflowDefinitionResponse)
async def get_definition(
    definition_id: str,
    user_data: Dict = Depends(require_permission("workflow_definitions:read")),
    service: WorkflowDefinitionService = Depends(get_definition_service)
):
    return service.get_definition(definition_id)


@router.put("/{definition_id}", response_model=WorkflowDefinitionResponse)
async def update_definition(
    definition_id: str,
    definition: WorkflowDefinitionSave,
    user_data: Dict = Depends(require_permission("workflow_definitions:update")),
    service: WorkflowDefinitionService = Depends(get_definition_service)
):
    return service.update_definition(definition_id, definition)


@router.delete("/{definition_id}", status_code=204)
async def delete_definition(
    definition_id: str,
    user_data: Dict = Depends(require_permission("workflow_definitions:delete")),
    service: WorkflowDefinitionService = Depends(get_definition_service)
):
    service.delete_definition(definition_id)
    return None


@router.post("/{definition_id}/publish", response_model=WorkflowResponse, status_code=201)
async def publish_definition(
    definition_id: str,
    publish_request: Optional[PublishRequest] = None,
    user_data: Dict = Depends(require_permission("workflow_definitions:publish")),
    service: WorkflowDefinitionService = Depends(get_definition_service)
):
    """Publish the graph as a workflow with ordered steps (branches are flattened)"""
    return service.publish(definition_id, publish_request or PublishRequest(), user_data["id"])
