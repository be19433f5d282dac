"""
Report store interface.

All coordination between intake, classification and the map view goes
through this store. Each method is atomic on its own row; nothing here
spans more than one row in a transaction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from app.models.alert import Alert
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


@dataclass
class ReportRecord:
    """One row of the bulk map read: report + optional assessment + profile."""
    report: Report
    assessment: Optional[RiskAssessment] = None
    reporter: Optional[ReporterProfile] = None


class ReportStore(ABC):

    # Reports

    @abstractmethod
    def create_report(
        self,
        reporter_id: str,
        description: str,
        severity: int,
        category: ReportCategory,
        location: GeoPoint,
        created_at: datetime,
    ) -> Report:
        """Insert a new ACTIVE, PENDING report and return it with its id."""

    @abstractmethod
    def get_report(self, report_id: str) -> Optional[Report]:
        pass

    @abstractmethod
    def transition_status(
        self,
        report_id: str,
        from_status: ReportStatus,
        to_status: ReportStatus,
        changed_at: datetime,
    ) -> bool:
        """
        Conditionally move a report from `from_status` to `to_status`.

        Returns False (and writes nothing) if the stored status is not
        `from_status`. Raises NotFound for an unknown id.
        """

    @abstractmethod
    def set_classification(
        self,
        report_id: str,
        state: ClassificationState,
        error: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    def list_report_records(self) -> List[ReportRecord]:
        """All reports joined with their assessment and reporter profile."""

    @abstractmethod
    def list_reports_by_reporter(self, reporter_id: str, limit: int) -> List[ReportWithAssessment]:
        """Newest first."""

    # Assessments

    @abstractmethod
    def create_assessment(self, assessment: RiskAssessment) -> bool:
        """
        Insert-if-absent keyed by report id.

        Returns False when an assessment for the report already exists.
        """

    @abstractmethod
    def get_assessment(self, report_id: str) -> Optional[RiskAssessment]:
        pass

    # Alerts

    @abstractmethod
    def create_alert(
        self,
        alert_type: str,
        message: str,
        location: GeoPoint,
        report_id: Optional[str],
        created_at: datetime,
    ) -> Alert:
        pass

    @abstractmethod
    def list_active_alerts(self) -> List[Alert]:
        pass

    # Reporter profiles

    @abstractmethod
    def upsert_reporter(self, profile: ReporterProfile) -> ReporterProfile:
        pass

    @abstractmethod
    def get_reporter(self, reporter_id: str) -> Optional[ReporterProfile]:
        pass

    # Infrastructure layer

    @abstractmethod
    def add_infrastructure(self, feature: InfrastructureCreate) -> InfrastructureFeature:
        pass

    @abstractmethod
    def list_infrastructure(self) -> List[InfrastructureFeature]:
        pass

    @abstractmethod
    def ping(self) -> Dict:
        """Lightweight connectivity check for /health/db."""
