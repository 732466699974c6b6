import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.errors import NoPortAvailableError, ProjectExistsError, ScaffoldError
from ..models.project import (
    FrontendResult,
    ProjectCreate,
    ProjectResult,
    PromptRequest,
    PromptResponse
)
from ..services.project_manager import ProjectManager
from .dependencies import get_project_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])


def _to_http_error(error: ScaffoldError) -> HTTPException:
    """Map a scaffolding error to an HTTP response"""
    if isinstance(error, ProjectExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, NoPortAvailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.post("/prompt", response_model=PromptResponse)
async def create_from_prompt(
    request: PromptRequest,
    manager: ProjectManager = Depends(get_project_manager)
):
    """Create a NestJS backend and a vanilla frontend for a project name"""
    try:
        return await manager.create_from_prompt(request.content)
    except ScaffoldError as e:
        logger.error(f"Error in prompt flow for '{request.content}': {e}")
        raise _to_http_error(e)


@router.post("/generate-frontend/vanilla", response_model=FrontendResult)
async def generate_vanilla_frontend(
    request: ProjectCreate,
    manager: ProjectManager = Depends(get_project_manager)
):
    """Create a vanilla frontend project and start its dev server"""
    try:
        return await manager.setup_vanilla_project(request.projectName)
    except ScaffoldError as e:
        logger.error(f"Vanilla project setup failed for '{request.projectName}': {e}")
        raise _to_http_error(e)


@router.post("/generate-frontend/react", response_model=ProjectResult)
async def generate_react_frontend(
    request: ProjectCreate,
    manager: ProjectManager = Depends(get_project_manager)
):
    """Create a React TypeScript project"""
    try:
        return await manager.setup_react_project(request.projectName)
    except ScaffoldError as e:
        logger.error(f"React project setup failed for '{request.projectName}': {e}")
        raise _to_http_error(e)


@router.post("/generate-backend/nest", response_model=ProjectResult)
async def generate_nest_backend(
    request: ProjectCreate,
    manager: ProjectManager = Depends(get_project_manager)
):
    """Create a NestJS backend project"""
    try:
        return await manager.setup_nestjs_project(request.projectName)
    except ScaffoldError as e:
        logger.error(f"NestJS project setup failed for '{request.projectName}': {e}")
        raise _to_http_error(e)
