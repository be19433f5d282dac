"""
Risk Provider Base Interface.

Defines the contract for risk classification providers. A provider turns
a classification request into the raw text returned by the model. It does
not parse or validate that text; the risk classifier does.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict

from pydantic import BaseModel

from app.models.report import ReportCategory


class ClassificationRequest(BaseModel):
    """What the classifier is told about a report."""
    description: str
    severity: int
    category: ReportCategory
    submitted_at: datetime


RESPONSE_FIELDS = ("predicted_condition", "confidence", "risk_level", "recommended_action")


def build_risk_prompt(request: ClassificationRequest) -> str:
    """Prompt shared by the LLM-backed providers."""
    return f"""You are assisting a community health surveillance team.

Analyze this citizen report and assess the disease or outbreak risk it indicates.

---
REPORT DETAILS:
Problem type: {request.category.value}
Severity (self-reported): {request.severity}/10
Reported at: {request.submitted_at.isoformat()}
Description: {request.description}

---
TASK:
Return ONLY a JSON object with exactly these four fields:

{{
  "predicted_condition": "<most likely disease or hazard>",
  "confidence": <number between 0 and 1>,
  "risk_level": "<one of: Low, Medium, High, Critical>",
  "recommended_action": "<one short sentence>"
}}"""


class RiskProvider(ABC):
    """
    Abstract base class for risk classification providers.

    Implementations may block (network I/O). They raise on failure; they
    never return a fabricated answer.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        Check if this provider is configured and ready.

        Returns:
            True if provider is enabled, False otherwise
        """
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """
        Get model information.

        Returns:
            Dict with 'name' and 'version' keys
        """
        pass

    @abstractmethod
    def generate(self, request: ClassificationRequest, timeout_seconds: float) -> str:
        """
        Ask the model for a risk assessment.

        Args:
            request: Report fields sent to the model
            timeout_seconds: Transport-level timeout hint

        Returns:
            The model's raw response text (expected to be JSON)

        Raises:
            ClassifierUnavailable: provider not configured or call failed
        """
        pass
