"""
Risk Classifier - translation boundary around the risk provider.

Turns a report into a validated RiskResult or raises one of:
- ClassifierUnavailable: provider not configured or the call failed
- ClassifierTimeout: no answer within the bounded timeout
- ClassifierMalformedResponse: the answer does not match the expected shape

No retries happen here. A response that arrives after the timeout is
dropped: the waiting coroutine is cancelled and the worker thread's result
is never read.

Provider calls run on a thread pool owned by the classifier, never on the
event loop's default executor that intake and map reads use, so hung
provider calls cannot starve them.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Optional
import asyncio
import json
import logging
import math

from app.core.settings import settings
from app.models.assessment import RiskLevel, RiskResult
from app.models.report import ReportCategory
from app.services.ai_plugin.base import RESPONSE_FIELDS, ClassificationRequest, RiskProvider
from app.services.errors import (
    ClassifierError,
    ClassifierMalformedResponse,
    ClassifierTimeout,
    ClassifierUnavailable,
)

logger = logging.getLogger(__name__)

_RISK_LEVEL_VALUES = {level.value: level for level in RiskLevel}


def _strip_code_fence(text: str) -> str:
    # LLMs sometimes wrap JSON in markdown code blocks
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if text.startswith("```"):
        return text.split("```", 2)[1].strip()
    return text


def _required_text(data: dict, field: str) -> str:
    value = data[field]
    if not isinstance(value, str) or not value.strip():
        raise ClassifierMalformedResponse(f"'{field}' must be a non-empty string")
    return value.strip()


def parse_risk_response(raw: Any) -> RiskResult:
    """
    Validate the provider's raw text against the four-field schema.

    Nothing is coerced: a lowercase risk level, a confidence given as a
    string, a missing or an extra field all fail.
    """
    if not isinstance(raw, str):
        raise ClassifierMalformedResponse(f"Expected text response, got {type(raw).__name__}")

    text = _strip_code_fence(raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ClassifierMalformedResponse(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ClassifierMalformedResponse("Response JSON must be an object")

    keys = set(data)
    missing = [f for f in RESPONSE_FIELDS if f not in keys]
    extra = sorted(keys - set(RESPONSE_FIELDS))
    if missing:
        raise ClassifierMalformedResponse(f"Missing fields: {missing}")
    if extra:
        raise ClassifierMalformedResponse(f"Unexpected fields: {extra}")

    confidence = data["confidence"]
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise ClassifierMalformedResponse("'confidence' must be a number")
    if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
        raise ClassifierMalformedResponse(f"'confidence' out of range: {confidence}")

    risk_level = data["risk_level"]
    if not isinstance(risk_level, str) or risk_level not in _RISK_LEVEL_VALUES:
        raise ClassifierMalformedResponse(f"Unknown risk_level: {risk_level!r}")

    return RiskResult(
        predicted_condition=_required_text(data, "predicted_condition"),
        confidence=float(confidence),
        risk_level=_RISK_LEVEL_VALUES[risk_level],
        recommended_action=_required_text(data, "recommended_action"),
    )


class RiskClassifier:
    """Applies a bounded timeout around one provider call and validates the answer."""

    def __init__(
        self,
        provider: RiskProvider,
        timeout_seconds: Optional[float] = None,
        max_workers: Optional[int] = None,
    ):
        self.provider = provider
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.AI_TIMEOUT_SECONDS
        self.max_workers = max(1, max_workers if max_workers is not None else settings.CLASSIFICATION_WORKERS)
        self._executor: Optional[ThreadPoolExecutor] = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="risk-provider"
            )
        return self._executor

    def shutdown(self) -> None:
        """Release the provider threads. Calls still hanging are abandoned, queued ones cancelled."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    @property
    def model_name(self) -> str:
        return self.provider.get_model_info()["name"]

    async def classify(
        self,
        description: str,
        severity: int,
        category: ReportCategory,
        submitted_at: datetime,
    ) -> RiskResult:
        request = ClassificationRequest(
            description=description,
            severity=severity,
            category=category,
            submitted_at=submitted_at,
        )

        loop = asyncio.get_running_loop()
        try:
            raw = await asyncio.wait_for(
                loop.run_in_executor(self._get_executor(), self.provider.generate, request, self.timeout_seconds),
                timeout=self.timeout_seconds,
            )
        except ClassifierError:
            raise
        except asyncio.TimeoutError as e:
            raise ClassifierTimeout(
                f"{self.model_name} did not answer within {self.timeout_seconds}s"
            ) from e
        except Exception as e:
            raise ClassifierUnavailable(f"{self.model_name} call failed: {e}") from e

        return parse_risk_response(raw)
