"""
Report service - Business logic for citizen report handling.

DESIGN NOTE:
- Intake validates, stores the report, hands it to the classification
  orchestrator and returns. It never waits for classification.
- A classifier that is slow or down cannot make a submission fail.
- Status changes follow StatusWorkflowEngine (active -> solved, once).
"""

from typing import Any, List, Optional, Tuple
import asyncio
import logging

from pydantic import ValidationError as PydanticValidationError

from app.core.settings import settings
from app.models.report import (
    ClassificationState,
    ReportCreate,
    Report,
    ReportStatus,
    ReportWithAssessment,
)
from app.services.classification_orchestrator import ClassificationOrchestrator
from app.services.errors import ClassifierUnavailable, NotFound, ValidationError
from app.services.status_workflow import StatusWorkflowEngine
from app.store.base import ReportStore
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)


def validate_submission(
    reporter_id: Optional[str],
    description: Any,
    severity: Any,
    category: Any,
    location: Any,
) -> ReportCreate:
    """
    Validate intake input.

    Raises:
        ValidationError: naming the first offending field
    """
    if not isinstance(reporter_id, str) or not reporter_id.strip():
        raise ValidationError("reporter_id", "reporter identity is required")

    try:
        return ReportCreate.model_validate({
            "description": description,
            "severity": severity,
            "category": category,
            "location": location,
        })
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "report"
        raise ValidationError(field, first.get("msg", "invalid value")) from e


async def submit_report(
    store: ReportStore,
    orchestrator: ClassificationOrchestrator,
    reporter_id: str,
    description: Any,
    severity: Any,
    category: Any,
    location: Any,
) -> Report:
    """
    Create a new citizen report and schedule its classification.

    Flow:
    1. Validate (nothing is written on failure)
    2. Store report with status=active, classification=pending
    3. Queue classification (non-blocking)
    4. Return the stored report

    Returns:
        Report: the stored report, still pending classification
    """
    data = validate_submission(reporter_id, description, severity, category, location)

    try:
        report = await asyncio.to_thread(
            store.create_report,
            reporter_id=reporter_id.strip(),
            description=data.description,
            severity=data.severity,
            category=data.category,
            location=data.location,
            created_at=utc_now(),
        )
    except Exception as e:
        logger.error(f"Failed to save report: {e}", exc_info=True)
        raise

    logger.info(f"📝 Report {report.id} stored ({report.category.value}, severity {report.severity})")

    try:
        queued = orchestrator.dispatch(report)
    except RuntimeError as e:
        # Submission already succeeded; the report is just never classified
        logger.error(f"❌ Could not queue report {report.id} for classification: {e}")
        try:
            await asyncio.to_thread(
                store.set_classification, report.id, ClassificationState.UNCLASSIFIED, ClassifierUnavailable.tag
            )
        except Exception as update_error:
            logger.error(f"Failed to mark report {report.id} unclassified: {update_error}")
    else:
        if not queued:
            await orchestrator.record_overflow(report.id)

    return report


async def get_report_detail(store: ReportStore, report_id: str) -> ReportWithAssessment:
    report = await asyncio.to_thread(store.get_report, report_id)
    if report is None:
        raise NotFound("report", report_id)
    assessment = await asyncio.to_thread(store.get_assessment, report_id)
    return ReportWithAssessment(report=report, assessment=assessment)


async def mark_solved(store: ReportStore, report_id: str) -> Tuple[Report, bool]:
    """
    Move a report to SOLVED.

    Idempotent: a report that is already solved is returned unchanged.

    Returns:
        (report, changed) where changed is False if it was already solved

    Raises:
        NotFound: unknown report id
    """
    report = await asyncio.to_thread(store.get_report, report_id)
    if report is None:
        raise NotFound("report", report_id)

    if report.status == ReportStatus.SOLVED:
        logger.info(f"Report {report_id} already solved, nothing to do")
        return report, False

    StatusWorkflowEngine.validate_transition(report.status, ReportStatus.SOLVED)

    changed = await asyncio.to_thread(
        store.transition_status, report_id, report.status, ReportStatus.SOLVED, utc_now()
    )
    if changed:
        logger.info(f"✅ Report {report_id} marked solved")
    else:
        logger.info(f"Report {report_id} was solved concurrently")

    updated = await asyncio.to_thread(store.get_report, report_id)
    return updated, changed


async def get_recent_reports(
    store: ReportStore,
    reporter_id: str,
    limit: Optional[int] = None,
) -> List[ReportWithAssessment]:
    """
    Newest reports of one reporter with their assessment (if any).

    Raises:
        ValidationError: limit outside 1..RECENT_REPORTS_MAX_LIMIT
    """
    limit = settings.RECENT_REPORTS_LIMIT if limit is None else limit
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= settings.RECENT_REPORTS_MAX_LIMIT:
        raise ValidationError("limit", f"limit must be between 1 and {settings.RECENT_REPORTS_MAX_LIMIT}")

    return await asyncio.to_thread(store.list_reports_by_reporter, reporter_id, limit)
