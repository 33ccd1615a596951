"""
Generation API endpoints
Submission and status queries for tool generation requests
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from toolsmith.core.dependencies import get_pipeline, get_repository
from toolsmith.core.exceptions import NotFoundException
from toolsmith.models import GenerationRequest
from toolsmith.schemas.generation import GenerationAccepted, GenerationCreate
from toolsmith.services.generation_pipeline import GenerationPipeline
from toolsmith.services.repository import ArtifactRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=GenerationAccepted, status_code=202)
async def submit_generation(
    payload: GenerationCreate,
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """Start generating a tool; progress follows on the /ws stream"""
    request = await pipeline.submit(payload.spec, requester_id=payload.requester_id)
    return GenerationAccepted(request_id=request.id, status=request.status, progress=request.progress)


@router.get("", response_model=List[GenerationRequest])
async def list_generations(
    requester_id: int = Query(..., description="Only requests submitted by this requester"),
    repository: ArtifactRepository = Depends(get_repository),
):
    return repository.list_requests_by_requester(requester_id)


@router.get("/{request_id}", response_model=GenerationRequest)
async def get_generation(
    request_id: int,
    repository: ArtifactRepository = Depends(get_repository),
):
    """Current snapshot of a generation request"""
    request = repository.get_request(request_id)
    if request is None:
        raise NotFoundException(
            message=f"Generation request {request_id} not found",
            resource="generation_request",
            resource_id=request_id,
        )
    return request
