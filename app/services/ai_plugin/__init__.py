"""
Risk provider plug-ins.

A provider only talks to the model. Parsing, validation and timeouts live
in app.services.risk_classifier.
"""

from app.services.ai_plugin.base import ClassificationRequest, RiskProvider, build_risk_prompt
from app.services.ai_plugin.mock_provider import MockRiskProvider
from app.services.ai_plugin.registry import select_provider

__all__ = [
    "ClassificationRequest",
    "RiskProvider",
    "MockRiskProvider",
    "build_risk_prompt",
    "select_provider",
]
