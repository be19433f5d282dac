"""
Mock Risk Provider - used when AI is disabled or no API key is configured.

Provides rule-based classification without external AI calls.
"""

from typing import Dict
import json
import logging

from app.models.assessment import RiskLevel
from app.models.report import ReportCategory
from app.services.ai_plugin.base import ClassificationRequest, RiskProvider

logger = logging.getLogger(__name__)

# (keywords, condition, recommended action)
DISEASE_RULES = [
    (("cholera", "diarrhea", "diarrhoea", "loose motion", "dehydration"),
     "Acute diarrhoeal disease", "Distribute ORS and test local drinking water sources."),
    (("dengue", "rash", "joint pain", "platelet"),
     "Dengue", "Check for stagnant water and arrange a fever camp."),
    (("malaria", "chills", "shivering"),
     "Malaria", "Arrange rapid diagnostic tests and indoor residual spraying."),
    (("typhoid", "stomach pain"),
     "Typhoid fever", "Refer to the nearest health centre for a blood test."),
    (("cough", "breath", "tuberculosis"),
     "Respiratory infection", "Refer for clinical examination and sputum test."),
    (("fever", "vomiting", "headache"),
     "Viral fever", "Monitor symptoms and visit the nearest health centre if they persist."),
]

CATEGORY_DEFAULTS = {
    ReportCategory.DISEASE: ("Unspecified illness", "Visit the nearest health centre for examination."),
    ReportCategory.DRAINAGE: ("Waterborne disease risk", "Clear the blocked drain and disinfect the area."),
    ReportCategory.OTHER: ("General health hazard", "Inspect the site and report to the ward office."),
}


class MockRiskProvider(RiskProvider):
    """
    Mock provider using keyword matching and self-reported severity.

    Deterministic and instant. Returns the same JSON shape as the LLM
    providers so it goes through the same validation.
    """

    MODEL_NAME = "mock-rules-v1"
    MODEL_VERSION = "1.0.0"

    def __init__(self):
        logger.info(f"✅ Mock Risk Provider initialized: {self.MODEL_NAME}")

    def is_enabled(self) -> bool:
        """Mock provider is always enabled."""
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.MODEL_NAME,
            "version": self.MODEL_VERSION
        }

    def generate(self, request: ClassificationRequest, timeout_seconds: float) -> str:
        desc_lower = request.description.lower()

        condition, action = CATEGORY_DEFAULTS[request.category]
        matched = False
        for keywords, rule_condition, rule_action in DISEASE_RULES:
            if any(word in desc_lower for word in keywords):
                condition, action = rule_condition, rule_action
                matched = True
                break

        risk_level = self._risk_from_severity(request.severity)
        confidence = 0.6 if matched else 0.4

        return json.dumps({
            "predicted_condition": condition,
            "confidence": confidence,
            "risk_level": risk_level.value,
            "recommended_action": action,
        })

    @staticmethod
    def _risk_from_severity(severity: int) -> RiskLevel:
        if severity >= 9:
            return RiskLevel.CRITICAL
        if severity >= 7:
            return RiskLevel.HIGH
        if severity >= 4:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW
