"""
In-process report store for local development and tests (USE_MOCK_DB).

A single lock serialises every write, which gives the same per-row
atomicity the Firestore backend relies on. When a snapshot path is set the
whole store is written to JSON after each mutation and reloaded on start.
"""

import json
import logging
import os
import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional

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

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class MemoryReportStore(ReportStore):

    def __init__(self, snapshot_path: Optional[str] = None):
        self.snapshot_path = snapshot_path or None
        self._lock = threading.RLock()
        self._reports: Dict[str, Report] = {}
        self._assessments: Dict[str, RiskAssessment] = {}
        self._alerts: Dict[str, Alert] = {}
        self._reporters: Dict[str, ReporterProfile] = {}
        self._infrastructure: Dict[str, InfrastructureFeature] = {}

        if self.snapshot_path and os.path.exists(self.snapshot_path):
            self._load()

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
        report = Report(
            id=_new_id(),
            reporter_id=reporter_id,
            description=description,
            severity=severity,
            category=category,
            location=location,
            created_at=created_at,
        )
        with self._lock:
            self._reports[report.id] = report
            self._persist()
        return report.model_copy(deep=True)

    def get_report(self, report_id: str) -> Optional[Report]:
        with self._lock:
            report = self._reports.get(report_id)
            return report.model_copy(deep=True) if report else None

    def transition_status(
        self,
        report_id: str,
        from_status: ReportStatus,
        to_status: ReportStatus,
        changed_at: datetime,
    ) -> bool:
        with self._lock:
            report = self._reports.get(report_id)
            if report is None:
                raise NotFound("report", report_id)
            if report.status != from_status:
                return False
            update = {"status": to_status}
            if to_status == ReportStatus.SOLVED:
                update["solved_at"] = changed_at
            self._reports[report_id] = report.model_copy(update=update)
            self._persist()
            return True

    def set_classification(
        self,
        report_id: str,
        state: ClassificationState,
        error: Optional[str] = None,
    ) -> None:
        with self._lock:
            report = self._reports.get(report_id)
            if report is None:
                raise NotFound("report", report_id)
            self._reports[report_id] = report.model_copy(
                update={"classification": state, "classification_error": error}
            )
            self._persist()

    def list_report_records(self) -> List[ReportRecord]:
        with self._lock:
            return [
                ReportRecord(
                    report=report.model_copy(deep=True),
                    assessment=self._assessments.get(report.id),
                    reporter=self._reporters.get(report.reporter_id),
                )
                for report in self._reports.values()
            ]

    def list_reports_by_reporter(self, reporter_id: str, limit: int) -> List[ReportWithAssessment]:
        with self._lock:
            owned = [r for r in self._reports.values() if r.reporter_id == reporter_id]
            owned.sort(key=lambda r: r.created_at, reverse=True)
            return [
                ReportWithAssessment(
                    report=report.model_copy(deep=True),
                    assessment=self._assessments.get(report.id),
                )
                for report in owned[:limit]
            ]

    # Assessments

    def create_assessment(self, assessment: RiskAssessment) -> bool:
        with self._lock:
            if assessment.report_id not in self._reports:
                raise NotFound("report", assessment.report_id)
            if assessment.report_id in self._assessments:
                return False
            self._assessments[assessment.report_id] = assessment
            self._persist()
            return True

    def get_assessment(self, report_id: str) -> Optional[RiskAssessment]:
        with self._lock:
            return self._assessments.get(report_id)

    # Alerts

    def create_alert(
        self,
        alert_type: str,
        message: str,
        location: GeoPoint,
        report_id: Optional[str],
        created_at: datetime,
    ) -> Alert:
        alert = Alert(
            id=_new_id(),
            type=alert_type,
            message=message,
            location=location,
            report_id=report_id,
            created_at=created_at,
        )
        with self._lock:
            self._alerts[alert.id] = alert
            self._persist()
        return alert

    def list_active_alerts(self) -> List[Alert]:
        with self._lock:
            return [a for a in self._alerts.values() if a.status == AlertStatus.ACTIVE]

    # Reporter profiles

    def upsert_reporter(self, profile: ReporterProfile) -> ReporterProfile:
        with self._lock:
            self._reporters[profile.reporter_id] = profile
            self._persist()
        return profile

    def get_reporter(self, reporter_id: str) -> Optional[ReporterProfile]:
        with self._lock:
            return self._reporters.get(reporter_id)

    # Infrastructure layer

    def add_infrastructure(self, feature: InfrastructureCreate) -> InfrastructureFeature:
        stored = InfrastructureFeature(id=_new_id(), **feature.model_dump())
        with self._lock:
            self._infrastructure[stored.id] = stored
            self._persist()
        return stored

    def list_infrastructure(self) -> List[InfrastructureFeature]:
        with self._lock:
            return list(self._infrastructure.values())

    def ping(self) -> Dict:
        with self._lock:
            return {
                "database": "memory",
                "connected": True,
                "reports_count": len(self._reports),
                "alerts_count": len(self._alerts),
            }

    # Snapshot

    def _persist(self) -> None:
        if not self.snapshot_path:
            return
        data = {
            "reports": [r.model_dump(mode="json") for r in self._reports.values()],
            "risk_assessments": [a.model_dump(mode="json") for a in self._assessments.values()],
            "alerts": [a.model_dump(mode="json") for a in self._alerts.values()],
            "reporters": [p.model_dump(mode="json") for p in self._reporters.values()],
            "infrastructure_layers": [f.model_dump(mode="json") for f in self._infrastructure.values()],
        }
        tmp_path = f"{self.snapshot_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.snapshot_path)

    def _load(self) -> None:
        with open(self.snapshot_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for raw in data.get("reports", []):
            report = Report.model_validate(raw)
            self._reports[report.id] = report
        for raw in data.get("risk_assessments", []):
            assessment = RiskAssessment.model_validate(raw)
            self._assessments[assessment.report_id] = assessment
        for raw in data.get("alerts", []):
            alert = Alert.model_validate(raw)
            self._alerts[alert.id] = alert
        for raw in data.get("reporters", []):
            profile = ReporterProfile.model_validate(raw)
            self._reporters[profile.reporter_id] = profile
        for raw in data.get("infrastructure_layers", []):
            feature = InfrastructureFeature.model_validate(raw)
            self._infrastructure[feature.id] = feature

        logger.info(
            f"[STORE] Loaded snapshot {self.snapshot_path}: "
            f"{len(self._reports)} reports, {len(self._alerts)} alerts"
        )
