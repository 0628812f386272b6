"""Read-only project routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from scopekeeper.api.dependencies import get_orchestrator
from scopekeeper.application.project import ProjectOrchestrator

router = APIRouter(prefix="/api/0.1/projects", tags=["Projects"])


@router.get("", summary="List Projects")
async def list_projects(orchestrator: ProjectOrchestrator = Depends(get_orchestrator)) -> JSONResponse:
    projects = await orchestrator.list_projects()
    return JSONResponse(content={"projects": projects})


@router.get("/{project_id}", summary="Describe Project",
            description="Network scope and live workloads of a project")
async def describe_project(project_id: str,
                           orchestrator: ProjectOrchestrator = Depends(get_orchestrator)) -> JSONResponse:
    scope = await orchestrator.scope(project_id)
    workloads = await orchestrator.describe_project(project_id)
    return JSONResponse(content={
        "scope": scope.to_dict(),
        "workloads": [w.to_dict() for w in workloads],
    })
