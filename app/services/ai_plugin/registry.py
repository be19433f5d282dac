"""
Risk Provider Registry.

Selects one provider at startup based on configuration. There is no
runtime fallback: if the selected provider fails, that classification
attempt fails.
"""

from typing import Optional
import logging

from app.core.settings import settings
from app.services.ai_plugin.base import RiskProvider
from app.services.ai_plugin.mock_provider import MockRiskProvider

logger = logging.getLogger(__name__)

KNOWN_PROVIDERS = ("gemini", "openai", "mock")


def select_provider(
    ai_enabled: Optional[bool] = None,
    provider_name: Optional[str] = None,
) -> RiskProvider:
    """
    Pick the risk provider for this process.

    Order of decisions:
    1. AI disabled globally -> mock
    2. Named provider if it is configured (has an API key)
    3. Mock otherwise
    """
    ai_enabled = settings.AI_ENABLED if ai_enabled is None else ai_enabled
    provider_name = (provider_name or settings.AI_PROVIDER).strip().lower()

    if not ai_enabled:
        logger.info("⚠️ AI is disabled globally (AI_ENABLED=false), using mock provider")
        return MockRiskProvider()

    if provider_name not in KNOWN_PROVIDERS:
        logger.warning(f"⚠️ Unknown AI_PROVIDER '{provider_name}', using mock provider")
        return MockRiskProvider()

    provider: Optional[RiskProvider] = None
    if provider_name == "gemini":
        from app.services.ai_plugin.gemini_provider import GeminiRiskProvider
        provider = GeminiRiskProvider()
    elif provider_name == "openai":
        from app.services.ai_plugin.openai_provider import OpenAIRiskProvider
        provider = OpenAIRiskProvider()

    if provider is not None and provider.is_enabled():
        logger.info(f"✅ Risk provider selected: {provider.get_model_info()['name']}")
        return provider

    if provider_name != "mock":
        logger.warning(f"⚠️ {provider_name} provider not configured, using mock provider")
    return MockRiskProvider()
