"""
Firestore-backed report store.

Collections:
- reports
- risk_assessments (document id == report id, written with create())
- alerts
- reporters (document id == reporter id)
- infrastructure_layers
"""

from datetime import datetime
from typing import Dict, List, Optional
import logging

from firebase_admin import firestore
from google.api_core import exceptions as gcp_exceptions

from app.models.alert import Alert, AlertStatus
from app.models.assessment import RiskAssessment
from app.models.map import InfrastructureCreate, InfrastructureFeature
from app.models.report import (
    ClassificationState,
    GeoPoint,
    Report,
    ReportCategory,
    ReportStatus,
    ReportWithAssessment,
)
from app.models.reporter import ReporterProfile
from app.services.errors import NotFound
from app.store.base import ReportRecord, ReportStore
from app.utils.firestore_helpers import from_document, to_document, where_filter

logger = logging.getLogger(__name__)

REPORTS = "reports"
ASSESSMENTS = "risk_assessments"
ALERTS = "alerts"
REPORTERS = "reporters"
INFRASTRUCTURE = "infrastructure_layers"


class FirestoreReportStore(ReportStore):

    def __init__(self, db: firestore.Client):
        self.db = db

    # Reports

    def create_report(
        self,
        reporter_id: str,
        description: str,
        severity: int,
        category: ReportCategory,
        location: GeoPoint,
        created_at: datetime,
    ) -> Report:
        doc_ref = self.db.collection(REPORTS).document()  # Auto-generate unique ID
        report = Report(
            id=doc_ref.id,
            reporter_id=reporter_id,
            description=description,
            severity=severity,
            category=category,
            location=location,
            created_at=created_at,
        )
        doc_ref.set(to_document(report, exclude={"id"}))
        return report

    def get_report(self, report_id: str) -> Optional[Report]:
        doc = self.db.collection(REPORTS).document(report_id).get()
        if not doc.exists:
            return None
        return from_document(Report, doc)

    def transition_status(
        self,
        report_id: str,
        from_status: ReportStatus,
        to_status: ReportStatus,
        changed_at: datetime,
    ) -> bool:
        doc_ref = self.db.collection(REPORTS).document(report_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def _apply(txn) -> bool:
            snapshot = doc_ref.get(transaction=txn)
            if not snapshot.exists:
                raise NotFound("report", report_id)
            if snapshot.get("status") != from_status.value:
                return False
            update = {"status": to_status.value}
            if to_status == ReportStatus.SOLVED:
                update["solved_at"] = changed_at
            txn.update(doc_ref, update)
            return True

        return _apply(transaction)

    def set_classification(
        self,
        report_id: str,
        state: ClassificationState,
        error: Optional[str] = None,
    ) -> None:
        try:
            self.db.collection(REPORTS).document(report_id).update({
                "classification": state.value,
                "classification_error": error,
            })
        except gcp_exceptions.NotFound:
            raise NotFound("report", report_id)

    def list_report_records(self) -> List[ReportRecord]:
        reports = [from_document(Report, doc) for doc in self.db.collection(REPORTS).stream()]
        assessments = {
            doc.id: from_document(RiskAssessment, doc, id_field=None)
            for doc in self.db.collection(ASSESSMENTS).stream()
        }
        reporters = {
            doc.id: from_document(ReporterProfile, doc, id_field="reporter_id")
            for doc in self.db.collection(REPORTERS).stream()
        }
        return [
            ReportRecord(
                report=report,
                assessment=assessments.get(report.id),
                reporter=reporters.get(report.reporter_id),
            )
            for report in reports
        ]

    def list_reports_by_reporter(self, reporter_id: str, limit: int) -> List[ReportWithAssessment]:
        # Sorted in memory so the query does not need a composite index
        query = where_filter(self.db.collection(REPORTS), "reporter_id", "==", reporter_id)
        reports = [from_document(Report, doc) for doc in query.stream()]
        reports.sort(key=lambda r: r.created_at, reverse=True)
        reports = reports[:limit]
        if not reports:
            return []

        refs = [self.db.collection(ASSESSMENTS).document(r.id) for r in reports]
        assessments = {
            snap.id: from_document(RiskAssessment, snap, id_field=None)
            for snap in self.db.get_all(refs)
            if snap.exists
        }
        return [
            ReportWithAssessment(report=report, assessment=assessments.get(report.id))
            for report in reports
        ]

    # Assessments

    def create_assessment(self, assessment: RiskAssessment) -> bool:
        doc_ref = self.db.collection(ASSESSMENTS).document(assessment.report_id)
        try:
            doc_ref.create(to_document(assessment))
        except gcp_exceptions.Conflict:
            logger.warning(f"Assessment already exists for report {assessment.report_id}")
            return False
        return True

    def get_assessment(self, report_id: str) -> Optional[RiskAssessment]:
        doc = self.db.collection(ASSESSMENTS).document(report_id).get()
        if not doc.exists:
            return None
        return from_document(RiskAssessment, doc, id_field=None)

    # Alerts

    def create_alert(
        self,
        alert_type: str,
        message: str,
        location: GeoPoint,
        report_id: Optional[str],
        created_at: datetime,
    ) -> Alert:
        doc_ref = self.db.collection(ALERTS).document()
        alert = Alert(
            id=doc_ref.id,
            type=alert_type,
            message=message,
            location=location,
            report_id=report_id,
            created_at=created_at,
        )
        doc_ref.set(to_document(alert, exclude={"id"}))
        return alert

    def list_active_alerts(self) -> List[Alert]:
        query = where_filter(self.db.collection(ALERTS), "status", "==", AlertStatus.ACTIVE.value)
        return [from_document(Alert, doc) for doc in query.stream()]

    # Reporter profiles

    def upsert_reporter(self, profile: ReporterProfile) -> ReporterProfile:
        self.db.collection(REPORTERS).document(profile.reporter_id).set(
            to_document(profile, exclude={"reporter_id"})
        )
        return profile

    def get_reporter(self, reporter_id: str) -> Optional[ReporterProfile]:
        doc = self.db.collection(REPORTERS).document(reporter_id).get()
        if not doc.exists:
            return None
        return from_document(ReporterProfile, doc, id_field="reporter_id")

    # Infrastructure layer

    def add_infrastructure(self, feature: InfrastructureCreate) -> InfrastructureFeature:
        doc_ref = self.db.collection(INFRASTRUCTURE).document()
        doc_ref.set(to_document(feature))
        return InfrastructureFeature(id=doc_ref.id, **feature.model_dump())

    def list_infrastructure(self) -> List[InfrastructureFeature]:
        return [from_document(InfrastructureFeature, doc) for doc in self.db.collection(INFRASTRUCTURE).stream()]

    def ping(self) -> Dict:
        collections = list(self.db.collections())
        return {
            "database": "firestore",
            "connected": True,
            "collections_count": len(collections),
        }
