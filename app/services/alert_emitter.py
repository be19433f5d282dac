"""
Alert Emitter - turns high-risk assessments into emergency alerts.

POLICY:
- riskLevel High or Critical -> exactly one new "Outbreak Risk" alert
- Low or Medium -> nothing
- No deduplication against nearby or recent alerts: every qualifying
  report produces its own alert
"""

from typing import Callable, Optional
from datetime import datetime
import logging

from app.models.assessment import RiskLevel
from app.models.report import GeoPoint
from app.services.errors import AlertWriteFailure
from app.store.base import ReportStore
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

OUTBREAK_ALERT_TYPE = "Outbreak Risk"
ALERT_THRESHOLD = RiskLevel.HIGH


def should_alert(risk_level: RiskLevel) -> bool:
    return risk_level.at_least(ALERT_THRESHOLD)


def build_alert_message(condition: str, location: GeoPoint) -> str:
    return (
        f"High risk of {condition} detected near "
        f"({location.latitude:.4f}, {location.longitude:.4f})."
    )


class AlertEmitter:

    def __init__(self, store: ReportStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def evaluate(
        self,
        risk_level: RiskLevel,
        location: GeoPoint,
        condition: str,
        report_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Apply the alert policy.

        Returns:
            The new alert id, or None when the policy does not fire

        Raises:
            AlertWriteFailure: the policy fired but the alert insert failed
        """
        if not should_alert(risk_level):
            return None

        try:
            alert = self.store.create_alert(
                alert_type=OUTBREAK_ALERT_TYPE,
                message=build_alert_message(condition, location),
                location=location,
                report_id=report_id,
                created_at=self.clock(),
            )
        except Exception as e:
            raise AlertWriteFailure(f"Failed to write alert for report {report_id}: {e}") from e

        logger.info(f"🚨 {OUTBREAK_ALERT_TYPE} alert {alert.id} emitted for report {report_id} ({risk_level.value})")
        return alert.id
