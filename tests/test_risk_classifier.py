"""Tests for response parsing and the bounded classifier call."""

import json
import threading

import pytest

from app.models.assessment import RiskLevel
from app.models.report import ReportCategory
from app.services.errors import (
    ClassifierMalformedResponse,
    ClassifierTimeout,
    ClassifierUnavailable,
)
from app.services.risk_classifier import RiskClassifier, parse_risk_response

from tests.factories import BASE_TIME, CannedProvider, risk_json


class TestParseRiskResponse:
    def test_valid_response(self) -> None:
        result = parse_risk_response(risk_json(risk_level="Critical", confidence=0.95))
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.confidence == 0.95
        assert result.predicted_condition == "Cholera"

    def test_code_fenced_json_is_accepted(self) -> None:
        result = parse_risk_response("```json\n" + risk_json(risk_level="Low") + "\n```")
        assert result.risk_level == RiskLevel.LOW

    def test_integer_confidence_bounds_are_accepted(self) -> None:
        assert parse_risk_response(risk_json(confidence=0)).confidence == 0.0
        assert parse_risk_response(risk_json(confidence=1)).confidence == 1.0

    @pytest.mark.parametrize("confidence", [1.01, -0.1, "0.8", True, None])
    def test_bad_confidence_rejected(self, confidence) -> None:
        raw = json.dumps({
            "predicted_condition": "Dengue",
            "confidence": confidence,
            "risk_level": "High",
            "recommended_action": "Fogging",
        })
        with pytest.raises(ClassifierMalformedResponse):
            parse_risk_response(raw)

    @pytest.mark.parametrize("risk_level", ["high", "Severe", "", 3])
    def test_unknown_risk_level_rejected(self, risk_level) -> None:
        with pytest.raises(ClassifierMalformedResponse):
            parse_risk_response(risk_json(risk_level=risk_level))

    def test_missing_field_rejected(self) -> None:
        raw = json.dumps({"predicted_condition": "Dengue", "confidence": 0.5, "risk_level": "Low"})
        with pytest.raises(ClassifierMalformedResponse, match="recommended_action"):
            parse_risk_response(raw)

    def test_extra_field_rejected(self) -> None:
        with pytest.raises(ClassifierMalformedResponse, match="notes"):
            parse_risk_response(risk_json(notes="looks bad"))

    def test_blank_condition_rejected(self) -> None:
        with pytest.raises(ClassifierMalformedResponse):
            parse_risk_response(risk_json(condition="   "))

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", "", None])
    def test_non_object_rejected(self, raw) -> None:
        with pytest.raises(ClassifierMalformedResponse):
            parse_risk_response(raw)


async def _classify(classifier: RiskClassifier):
    return await classifier.classify(
        description="Fever and joint pain in several houses",
        severity=7,
        category=ReportCategory.DISEASE,
        submitted_at=BASE_TIME,
    )


class TestRiskClassifier:
    @pytest.mark.asyncio
    async def test_returns_validated_result(self) -> None:
        provider = CannedProvider(risk_json(risk_level="Medium", condition="Dengue"))
        result = await _classify(RiskClassifier(provider, timeout_seconds=1))
        assert result.risk_level == RiskLevel.MEDIUM
        assert provider.calls == 1
        assert provider.requests[0].severity == 7

    @pytest.mark.asyncio
    async def test_slow_provider_times_out(self) -> None:
        release = threading.Event()
        provider = CannedProvider(release=release)
        try:
            with pytest.raises(ClassifierTimeout):
                await _classify(RiskClassifier(provider, timeout_seconds=0.05))
        finally:
            release.set()

    @pytest.mark.asyncio
    async def test_provider_exception_becomes_unavailable(self) -> None:
        provider = CannedProvider(error=ConnectionError("connection refused"))
        with pytest.raises(ClassifierUnavailable, match="connection refused"):
            await _classify(RiskClassifier(provider, timeout_seconds=1))

    @pytest.mark.asyncio
    async def test_provider_classifier_error_passes_through(self) -> None:
        provider = CannedProvider(error=ClassifierMalformedResponse("blocked by safety filter"))
        with pytest.raises(ClassifierMalformedResponse):
            await _classify(RiskClassifier(provider, timeout_seconds=1))

    @pytest.mark.asyncio
    async def test_malformed_answer(self) -> None:
        provider = CannedProvider("I think it is probably dengue")
        with pytest.raises(ClassifierMalformedResponse):
            await _classify(RiskClassifier(provider, timeout_seconds=1))

    @pytest.mark.asyncio
    async def test_shutdown_is_repeatable_and_pool_is_recreated(self) -> None:
        classifier = RiskClassifier(CannedProvider(risk_json("Low")), timeout_seconds=1, max_workers=2)
        await _classify(classifier)

        classifier.shutdown()
        classifier.shutdown()
        assert classifier._executor is None

        result = await _classify(classifier)
        assert result.risk_level == RiskLevel.LOW
        classifier.shutdown()
