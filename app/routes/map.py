"""Map routes - role-filtered map view and the alert feed."""

from typing import List

from fastapi import APIRouter, Depends

from app.models.alert import Alert
from app.models.map import MapView
from app.models.reporter import ViewerRole
from app.routes.dependencies import get_store, get_viewer_role
from app.services.map_service import get_active_alerts, get_map_view
from app.store.base import ReportStore

router = APIRouter(tags=["Map"])


@router.get("/map", response_model=MapView)
async def map_view(
    role: ViewerRole = Depends(get_viewer_role),
    store: ReportStore = Depends(get_store),
):
    """
    Aggregated map view for the caller's role.

    Citizens get de-identified points. Field workers and authorities also
    get reporter name, address fields and age.
    """
    return await get_map_view(store, role)


@router.get("/alerts", response_model=List[Alert])
async def active_alerts(store: ReportStore = Depends(get_store)):
    """All active alerts, the same for every role."""
    return await get_active_alerts(store)
