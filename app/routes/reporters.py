"""
Reporter endpoints - profile registration and recent report history.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.models.report import ReportWithAssessment
from app.models.reporter import Capability, ReporterProfile, ReporterProfileUpdate, ViewerRole
from app.routes.dependencies import (
    ensure_self_or_capability,
    get_caller_id,
    get_store,
    get_viewer_role,
    require_caller_id,
)
from app.services.report_service import get_recent_reports
from app.services.reporter_service import get_reporter, save_profile
from app.store.base import ReportStore

router = APIRouter(prefix="/reporters", tags=["Reporters"])


@router.put("/{reporter_id}", response_model=ReporterProfile)
async def put_reporter(
    reporter_id: str,
    update: ReporterProfileUpdate,
    caller_id: str = Depends(require_caller_id),
    store: ReportStore = Depends(get_store),
):
    """Create or update a reporter profile."""
    return await save_profile(store, caller_id, reporter_id, update)


@router.get("/{reporter_id}", response_model=ReporterProfile)
async def read_reporter(
    reporter_id: str,
    caller_id: Optional[str] = Depends(get_caller_id),
    role: ViewerRole = Depends(get_viewer_role),
    store: ReportStore = Depends(get_store),
):
    ensure_self_or_capability(caller_id, role, reporter_id, Capability.VIEW_IDENTITY)
    return await get_reporter(store, reporter_id)


@router.get("/{reporter_id}/reports", response_model=List[ReportWithAssessment])
async def recent_reports(
    reporter_id: str,
    limit: Optional[int] = Query(None, description="Number of reports, defaults to RECENT_REPORTS_LIMIT"),
    caller_id: Optional[str] = Depends(get_caller_id),
    role: ViewerRole = Depends(get_viewer_role),
    store: ReportStore = Depends(get_store),
):
    """
    The reporter's most recent reports with their assessments, newest first.
    """
    ensure_self_or_capability(caller_id, role, reporter_id, Capability.VIEW_IDENTITY)
    return await get_recent_reports(store, reporter_id, limit)
