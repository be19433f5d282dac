"""
Map service - compose the role-filtered map view.

Output:
- points: every report, de-identified unless the viewer can view identity
- risk_zones: one fixed-radius circle per High/Critical report
- alerts: every active alert, same for every role
- infrastructure: static layer features

Redaction happens here, on the server. Citizens never receive reporter
identity, address fields or the free-text description. No sorting is
applied; callers must not rely on order.
"""

from typing import Iterable, List, Optional
import asyncio
import logging

from app.core.settings import settings
from app.models.alert import Alert, AlertStatus
from app.models.assessment import RiskLevel
from app.models.map import InfrastructureCreate, InfrastructureFeature, MapView, ReportPoint, ReporterDetails, RiskZone
from app.models.report import ClassificationState
from app.models.reporter import Capability, ViewerRole
from app.store.base import ReportRecord, ReportStore

logger = logging.getLogger(__name__)

ZONE_THRESHOLD = RiskLevel.HIGH

CATEGORY_LABELS = {
    "disease": "Disease",
    "drainage": "Drainage",
    "other": "Other",
}


def _summary(record: ReportRecord, state: ClassificationState) -> str:
    label = CATEGORY_LABELS.get(record.report.category.value, "Other")
    if record.assessment is not None:
        return f"{label} report: {record.assessment.predicted_condition}"
    if state == ClassificationState.UNCLASSIFIED:
        return f"{label} report, risk not assessed"
    return f"{label} report awaiting risk assessment"


def _reporter_details(record: ReportRecord) -> ReporterDetails:
    profile = record.reporter
    if profile is None:
        return ReporterDetails(reporter_id=record.report.reporter_id)
    return ReporterDetails(
        reporter_id=record.report.reporter_id,
        full_name=profile.full_name,
        house_number=profile.house_number,
        street=profile.street,
        ward=profile.ward,
        age=profile.age,
    )


def build_point(record: ReportRecord, viewer_role: ViewerRole) -> ReportPoint:
    report = record.report
    state = ClassificationState.CLASSIFIED if record.assessment is not None else report.classification

    point = ReportPoint(
        id=report.id,
        location=report.location,
        category=report.category,
        status=report.status,
        severity=report.severity,
        risk_level=record.assessment.risk_level if record.assessment else None,
        classification=state,
        summary=_summary(record, state),
        created_at=report.created_at,
    )

    if viewer_role.can(Capability.VIEW_IDENTITY):
        point.description = report.description
        point.reporter = _reporter_details(record)

    return point


def build_zone(record: ReportRecord, radius_meters: float) -> Optional[RiskZone]:
    assessment = record.assessment
    if assessment is None or not assessment.risk_level.at_least(ZONE_THRESHOLD):
        return None
    return RiskZone(
        report_id=record.report.id,
        center=record.report.location,
        radius_meters=radius_meters,
        risk_level=assessment.risk_level,
    )


def compose_view(
    viewer_role: ViewerRole,
    records: Iterable[ReportRecord],
    alerts: Iterable[Alert],
    infrastructure: Iterable[InfrastructureFeature] = (),
    radius_meters: Optional[float] = None,
) -> MapView:
    radius = settings.RISK_ZONE_RADIUS_METERS if radius_meters is None else radius_meters

    points: List[ReportPoint] = []
    zones: List[RiskZone] = []
    for record in records:
        points.append(build_point(record, viewer_role))
        zone = build_zone(record, radius)
        if zone is not None:
            zones.append(zone)

    return MapView(
        points=points,
        risk_zones=zones,
        alerts=[alert for alert in alerts if alert.status == AlertStatus.ACTIVE],
        infrastructure=list(infrastructure),
    )


async def get_map_view(store: ReportStore, viewer_role: ViewerRole) -> MapView:
    """Read current state and compose the view. Independent of classification progress."""
    records, alerts, infrastructure = await asyncio.gather(
        asyncio.to_thread(store.list_report_records),
        asyncio.to_thread(store.list_active_alerts),
        asyncio.to_thread(store.list_infrastructure),
    )
    view = compose_view(viewer_role, records, alerts, infrastructure)
    logger.debug(
        f"Map view for {viewer_role.value}: {len(view.points)} points, "
        f"{len(view.risk_zones)} zones, {len(view.alerts)} alerts"
    )
    return view


async def add_infrastructure(store: ReportStore, feature: InfrastructureCreate) -> InfrastructureFeature:
    saved = await asyncio.to_thread(store.add_infrastructure, feature)
    logger.info(f"🗺️ Infrastructure feature added: {saved.type} '{saved.name}' ({saved.id})")
    return saved


async def list_infrastructure(store: ReportStore) -> List[InfrastructureFeature]:
    return await asyncio.to_thread(store.list_infrastructure)


async def get_active_alerts(store: ReportStore) -> List[Alert]:
    alerts = await asyncio.to_thread(store.list_active_alerts)
    return [alert for alert in alerts if alert.status == AlertStatus.ACTIVE]
