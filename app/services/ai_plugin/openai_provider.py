"""
OpenAI-style Risk Provider.

Calls a chat-completions endpoint over HTTP with requests.
Requires OPENAI_API_KEY in environment variables.
"""

from typing import Dict, Optional
import logging

import requests

from app.core.settings import settings
from app.services.ai_plugin.base import ClassificationRequest, RiskProvider, build_risk_prompt
from app.services.errors import ClassifierMalformedResponse, ClassifierTimeout, ClassifierUnavailable

logger = logging.getLogger(__name__)


class OpenAIRiskProvider(RiskProvider):

    API_URL = "https://api.openai.com/v1/chat/completions"
    MODEL_VERSION = "1.0"

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None, session=None):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model_name = model_name or settings.OPENAI_MODEL
        self.enabled = bool(self.api_key and self.api_key.strip())
        self.session = session or requests.Session()

        if self.enabled:
            logger.info(f"✅ OpenAI Risk Provider initialized: {self.model_name}")
        else:
            logger.info("⚠️ OpenAI Risk Provider disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.model_name,
            "version": self.MODEL_VERSION
        }

    def generate(self, request: ClassificationRequest, timeout_seconds: float) -> str:
        if not self.enabled:
            raise ClassifierUnavailable("OpenAI API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": "You are a public health risk assistant. Output only valid JSON."},
                {"role": "user", "content": build_risk_prompt(request)}
            ],
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
        }

        try:
            response = self.session.post(
                self.API_URL,
                headers=headers,
                json=payload,
                timeout=timeout_seconds
            )
        except requests.Timeout as e:
            raise ClassifierTimeout(f"OpenAI request timed out: {e}") from e
        except requests.RequestException as e:
            raise ClassifierUnavailable(f"OpenAI request failed: {e}") from e

        if response.status_code != 200:
            raise ClassifierUnavailable(f"OpenAI API returned status {response.status_code}: {response.text[:200]}")

        try:
            data = response.json()
            return data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassifierMalformedResponse(f"Unexpected OpenAI response envelope: {e}") from e
