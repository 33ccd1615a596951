"""
Catalog metadata endpoints
Categories, integrations, analytics and system status
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from toolsmith.core.dependencies import get_container, get_repository
from toolsmith.models import Analytics, IntegrationDescriptor
from toolsmith.schemas.tool import CategorySummary
from toolsmith.services.catalog import category_summaries
from toolsmith.services.enrichment import INTEGRATIONS
from toolsmith.services.repository import ArtifactRepository

router = APIRouter()


@router.get("/categories", response_model=List[CategorySummary])
async def list_categories(repository: ArtifactRepository = Depends(get_repository)):
    return category_summaries(repository.category_counts())


@router.get("/integrations", response_model=Dict[str, IntegrationDescriptor])
async def list_integrations():
    """Category to external service wiring table"""
    return INTEGRATIONS


@router.get("/analytics", response_model=Analytics)
async def get_analytics(repository: ArtifactRepository = Depends(get_repository)):
    return repository.get_analytics()


@router.get("/system/status")
async def system_status(request: Request) -> Dict[str, Any]:
    return get_container(request).system_status()
