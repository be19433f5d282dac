"""
Gemini Risk Provider - Real LLM integration.

Uses the google-generativeai SDK with a JSON response mime type.
Requires GEMINI_API_KEY in environment variables.
"""

from typing import Dict, Optional
import logging

import google.generativeai as genai
from google.api_core import exceptions as gcp_exceptions

from app.core.settings import settings
from app.services.ai_plugin.base import ClassificationRequest, RiskProvider, build_risk_prompt
from app.services.errors import ClassifierMalformedResponse, ClassifierTimeout, ClassifierUnavailable

logger = logging.getLogger(__name__)


class GeminiRiskProvider(RiskProvider):
    """
    Google Gemini provider for risk classification.

    Fails with ClassifierUnavailable if the API key is missing or the call
    fails.
    """

    MODEL_VERSION = "1.0"
    TEMPERATURE = 0.2

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model_name = model_name or settings.GEMINI_MODEL
        self.enabled = bool(self.api_key and self.api_key.strip())
        self._model = None

        if self.enabled:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
            logger.info(f"✅ Gemini Risk Provider initialized: {self.model_name}")
        else:
            logger.info("⚠️ Gemini Risk Provider disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.model_name,
            "version": self.MODEL_VERSION
        }

    def generate(self, request: ClassificationRequest, timeout_seconds: float) -> str:
        if not self.enabled:
            raise ClassifierUnavailable("Gemini API key not configured")

        try:
            response = self._model.generate_content(
                build_risk_prompt(request),
                generation_config={
                    "response_mime_type": "application/json",
                    "temperature": self.TEMPERATURE,
                },
                request_options={"timeout": timeout_seconds},
            )
        except gcp_exceptions.DeadlineExceeded as e:
            raise ClassifierTimeout(f"Gemini request timed out: {e}") from e
        except Exception as e:
            raise ClassifierUnavailable(f"Gemini API error: {e}") from e

        try:
            return response.text
        except ValueError as e:
            # Raised by the SDK when the response has no text part (blocked or empty)
            raise ClassifierMalformedResponse(f"Gemini returned no text: {e}") from e
