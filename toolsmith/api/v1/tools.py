"""
Tool catalog API endpoints
Read-only artifact queries plus usage recording
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from toolsmith.core.dependencies import get_container, get_repository
from toolsmith.core.exceptions import NotFoundException
from toolsmith.models import Artifact
from toolsmith.schemas.tool import UseRecorded
from toolsmith.services.repository import ArtifactRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Artifact])
async def list_tools(repository: ArtifactRepository = Depends(get_repository)):
    return repository.list_artifacts()


@router.get("/featured", response_model=List[Artifact])
async def featured_tools(
    request: Request,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
):
    """Most used tools first"""
    container = get_container(request)
    return container.repository.list_featured(limit or container.settings.FEATURED_LIMIT)


@router.get("/recent", response_model=List[Artifact])
async def recent_tools(
    request: Request,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
):
    """Newest tools first"""
    container = get_container(request)
    return container.repository.list_recent(limit or container.settings.RECENT_LIMIT)


@router.get("/search", response_model=List[Artifact])
async def search_tools(
    q: str = Query(..., min_length=1, description="Search text"),
    repository: ArtifactRepository = Depends(get_repository),
):
    return repository.search(q)


@router.get("/category/{category}", response_model=List[Artifact])
async def tools_by_category(category: str, repository: ArtifactRepository = Depends(get_repository)):
    return repository.list_by_category(category.lower())


@router.get("/{artifact_id}", response_model=Artifact)
async def get_tool(artifact_id: int, repository: ArtifactRepository = Depends(get_repository)):
    artifact = repository.get_artifact(artifact_id)
    if artifact is None:
        raise NotFoundException(
            message=f"Tool {artifact_id} not found",
            resource="tool",
            resource_id=artifact_id,
        )
    return artifact


@router.post("/{artifact_id}/use", response_model=UseRecorded)
async def record_tool_use(artifact_id: int, repository: ArtifactRepository = Depends(get_repository)):
    """Count one use; unknown ids are reported, not rejected"""
    recorded = repository.record_use(artifact_id)
    return UseRecorded(artifact_id=artifact_id, recorded=recorded)
