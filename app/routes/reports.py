"""
Report endpoints - submission, lookup and status change.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from app.models.base import StatusChangeResponse
from app.models.report import ReportCreate, ReportSubmitted, ReportWithAssessment
from app.models.reporter import Capability, ViewerRole
from app.routes.dependencies import (
    ensure_capability,
    ensure_self_or_capability,
    get_caller_id,
    get_orchestrator,
    get_store,
    get_viewer_role,
    require_caller_id,
)
from app.services.classification_orchestrator import ClassificationOrchestrator
from app.services.report_service import get_report_detail, mark_solved, submit_report
from app.store.base import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ReportSubmitted)
async def create_report(
    report: ReportCreate,
    reporter_id: str = Depends(require_caller_id),
    store: ReportStore = Depends(get_store),
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
):
    """
    Submit a new citizen report.

    Returns as soon as the report is stored. Risk classification runs in
    the background; until it finishes the report shows as pending.
    """
    logger.info(f"📝 POST /reports - reporter={reporter_id}, category={report.category.value}")
    stored = await submit_report(
        store,
        orchestrator,
        reporter_id=reporter_id,
        description=report.description,
        severity=report.severity,
        category=report.category,
        location=report.location,
    )
    return ReportSubmitted(report_id=stored.id, status=stored.status, classification=stored.classification)


@router.get("/{report_id}", response_model=ReportWithAssessment)
async def read_report(
    report_id: str,
    caller_id: Optional[str] = Depends(get_caller_id),
    role: ViewerRole = Depends(get_viewer_role),
    store: ReportStore = Depends(get_store),
):
    """A single report with its assessment. Owner or identity-viewing roles only."""
    detail = await get_report_detail(store, report_id)
    ensure_self_or_capability(caller_id, role, detail.report.reporter_id, Capability.VIEW_IDENTITY)
    return detail


@router.post("/{report_id}/solve", response_model=StatusChangeResponse)
async def solve_report(
    report_id: str,
    role: ViewerRole = Depends(get_viewer_role),
    store: ReportStore = Depends(get_store),
):
    """
    Mark a report as solved (field workers and authorities).

    Solving an already solved report succeeds without changing it.
    """
    ensure_capability(role, Capability.CHANGE_STATUS)
    report, changed = await mark_solved(store, report_id)
    return StatusChangeResponse(
        report_id=report.id,
        status=report.status.value,
        changed=changed,
        message="Report marked as solved" if changed else "Report was already solved",
    )
