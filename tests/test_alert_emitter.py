"""Tests for the outbreak alert policy."""

import pytest

from app.models.assessment import RiskLevel
from app.services.alert_emitter import OUTBREAK_ALERT_TYPE, AlertEmitter, build_alert_message, should_alert
from app.services.errors import AlertWriteFailure

from tests.factories import BASE_TIME, FailingAlertStore, location


class TestAlertPolicy:
    @pytest.mark.parametrize(
        "level, expected",
        [
            (RiskLevel.LOW, False),
            (RiskLevel.MEDIUM, False),
            (RiskLevel.HIGH, True),
            (RiskLevel.CRITICAL, True),
        ],
    )
    def test_threshold(self, level: RiskLevel, expected: bool) -> None:
        assert should_alert(level) is expected

    def test_message_names_condition_and_location(self) -> None:
        message = build_alert_message("Cholera", location(12.97161, 77.59463))
        assert message == "High risk of Cholera detected near (12.9716, 77.5946)."


class TestAlertEmitter:
    def test_high_risk_writes_one_alert(self, store) -> None:
        emitter = AlertEmitter(store, clock=lambda: BASE_TIME)
        alert_id = emitter.evaluate(RiskLevel.HIGH, location(), "Cholera", report_id="r1")

        alerts = store.list_active_alerts()
        assert [a.id for a in alerts] == [alert_id]
        assert alerts[0].type == OUTBREAK_ALERT_TYPE
        assert alerts[0].report_id == "r1"
        assert alerts[0].created_at == BASE_TIME

    def test_medium_risk_writes_nothing(self, store) -> None:
        assert AlertEmitter(store).evaluate(RiskLevel.MEDIUM, location(), "Viral fever") is None
        assert store.list_active_alerts() == []

    def test_no_deduplication(self, store) -> None:
        emitter = AlertEmitter(store)
        emitter.evaluate(RiskLevel.CRITICAL, location(), "Cholera")
        emitter.evaluate(RiskLevel.CRITICAL, location(), "Cholera")
        assert len(store.list_active_alerts()) == 2

    def test_store_failure_raises_alert_write_failure(self) -> None:
        with pytest.raises(AlertWriteFailure):
            AlertEmitter(FailingAlertStore()).evaluate(RiskLevel.HIGH, location(), "Cholera")
