"""Infrastructure layer - wells, drains, clinics shown alongside reports."""

from typing import List

from fastapi import APIRouter, Depends, status

from app.models.map import InfrastructureCreate, InfrastructureFeature
from app.models.reporter import Capability, ViewerRole
from app.routes.dependencies import ensure_capability, get_store, get_viewer_role, require_caller_id
from app.services.map_service import add_infrastructure, list_infrastructure
from app.store.base import ReportStore

router = APIRouter(prefix="/infrastructure", tags=["Infrastructure"])


@router.get("", response_model=List[InfrastructureFeature])
async def read_infrastructure(store: ReportStore = Depends(get_store)):
    return await list_infrastructure(store)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=InfrastructureFeature)
async def create_infrastructure(
    feature: InfrastructureCreate,
    caller_id: str = Depends(require_caller_id),
    role: ViewerRole = Depends(get_viewer_role),
    store: ReportStore = Depends(get_store),
):
    """Add a feature to the layer. Authorities only."""
    ensure_capability(role, Capability.MANAGE_INFRASTRUCTURE)
    return await add_infrastructure(store, feature)
