"""Tests for the rule-based, Gemini and OpenAI-style providers and provider selection."""

import pytest
import requests
from google.api_core import exceptions as gcp_exceptions

from app.core.settings import settings
from app.models.assessment import RiskLevel
from app.models.report import ReportCategory
from app.services.ai_plugin import ClassificationRequest, MockRiskProvider, build_risk_prompt, select_provider
from app.services.ai_plugin.gemini_provider import GeminiRiskProvider
from app.services.ai_plugin.openai_provider import OpenAIRiskProvider
from app.services.errors import ClassifierMalformedResponse, ClassifierTimeout, ClassifierUnavailable
from app.services.risk_classifier import parse_risk_response

from tests.factories import BASE_TIME, risk_json


def _request(description: str = "Loose motion and dehydration in children", severity: int = 9,
             category: ReportCategory = ReportCategory.DISEASE) -> ClassificationRequest:
    return ClassificationRequest(
        description=description, severity=severity, category=category, submitted_at=BASE_TIME
    )


class TestMockRiskProvider:
    def test_keyword_match(self) -> None:
        result = parse_risk_response(MockRiskProvider().generate(_request(), 1))
        assert result.predicted_condition == "Acute diarrhoeal disease"
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.confidence == 0.6

    @pytest.mark.parametrize(
        "severity, level",
        [(1, RiskLevel.LOW), (4, RiskLevel.MEDIUM), (7, RiskLevel.HIGH), (10, RiskLevel.CRITICAL)],
    )
    def test_severity_drives_risk(self, severity: int, level: RiskLevel) -> None:
        raw = MockRiskProvider().generate(_request("Blocked drain", severity, ReportCategory.DRAINAGE), 1)
        result = parse_risk_response(raw)
        assert result.risk_level == level
        assert result.predicted_condition == "Waterborne disease risk"
        assert result.confidence == 0.4


class TestPrompt:
    def test_prompt_carries_report_fields(self) -> None:
        prompt = build_risk_prompt(_request())
        assert "Loose motion and dehydration in children" in prompt
        assert "disease" in prompt
        assert "Severity (self-reported): 9/10" in prompt


class _Response:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


class TestOpenAIRiskProvider:
    def test_returns_message_content(self) -> None:
        content = risk_json("Medium")
        session = _Session(_Response(payload={"choices": [{"message": {"content": content}}]}))
        provider = OpenAIRiskProvider(api_key="sk-test", model_name="gpt-test", session=session)

        assert provider.generate(_request(), 3.0) == content
        _, kwargs = session.calls[0]
        assert kwargs["timeout"] == 3.0
        assert kwargs["json"]["model"] == "gpt-test"

    def test_not_configured(self) -> None:
        provider = OpenAIRiskProvider(api_key="", session=_Session())
        assert provider.is_enabled() is False
        with pytest.raises(ClassifierUnavailable):
            provider.generate(_request(), 1.0)

    @pytest.mark.parametrize(
        "session, error",
        [
            (_Session(error=requests.Timeout("slow")), ClassifierTimeout),
            (_Session(error=requests.ConnectionError("down")), ClassifierUnavailable),
            (_Session(_Response(status_code=500, payload={"error": "boom"})), ClassifierUnavailable),
            (_Session(_Response(payload={"choices": []})), ClassifierMalformedResponse),
            (_Session(_Response(payload=None)), ClassifierMalformedResponse),
        ],
    )
    def test_failures_are_tagged(self, session, error) -> None:
        provider = OpenAIRiskProvider(api_key="sk-test", session=session)
        with pytest.raises(error):
            provider.generate(_request(), 1.0)


class _GeminiResponse:
    def __init__(self, text=None):
        self._text = text

    @property
    def text(self):
        if self._text is None:
            raise ValueError("response has no text part (finish_reason: SAFETY)")
        return self._text


class _GeminiModel:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _gemini(model: _GeminiModel) -> GeminiRiskProvider:
    provider = GeminiRiskProvider(api_key="", model_name="gemini-test")
    provider.enabled = True
    provider._model = model
    return provider


class TestGeminiRiskProvider:
    def test_returns_response_text(self) -> None:
        content = risk_json("Critical")
        model = _GeminiModel(_GeminiResponse(content))

        assert _gemini(model).generate(_request(), 2.5) == content
        prompt, kwargs = model.calls[0]
        assert "Loose motion and dehydration in children" in prompt
        assert kwargs["request_options"] == {"timeout": 2.5}
        assert kwargs["generation_config"]["response_mime_type"] == "application/json"

    def test_not_configured(self) -> None:
        provider = GeminiRiskProvider(api_key="  ")
        assert provider.is_enabled() is False
        with pytest.raises(ClassifierUnavailable):
            provider.generate(_request(), 1.0)

    @pytest.mark.parametrize(
        "model, error",
        [
            (_GeminiModel(error=gcp_exceptions.DeadlineExceeded("deadline")), ClassifierTimeout),
            (_GeminiModel(error=gcp_exceptions.ServiceUnavailable("overloaded")), ClassifierUnavailable),
            (_GeminiModel(error=ConnectionError("reset")), ClassifierUnavailable),
            (_GeminiModel(_GeminiResponse(None)), ClassifierMalformedResponse),
        ],
    )
    def test_failures_are_tagged(self, model, error) -> None:
        with pytest.raises(error):
            _gemini(model).generate(_request(), 1.0)


class TestSelectProvider:
    def test_ai_disabled_uses_mock(self) -> None:
        assert isinstance(select_provider(ai_enabled=False, provider_name="openai"), MockRiskProvider)

    def test_unknown_provider_uses_mock(self) -> None:
        assert isinstance(select_provider(ai_enabled=True, provider_name="llama"), MockRiskProvider)

    def test_unconfigured_provider_uses_mock(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
        assert isinstance(select_provider(ai_enabled=True, provider_name="openai"), MockRiskProvider)

    def test_configured_openai(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
        provider = select_provider(ai_enabled=True, provider_name="OpenAI")
        assert isinstance(provider, OpenAIRiskProvider)
