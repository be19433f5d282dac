"""
Core settings and environment variables for HealthGuard Alert Hub.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "HealthGuard Alert Hub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # In-process store for local development without Firebase credentials.
    # MOCK_DB_PATH="" keeps the store purely in memory.
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: str = "./mock_db.json"

    # Risk classifier
    AI_ENABLED: bool = True  # If False, the rule-based mock provider is used
    AI_PROVIDER: str = "gemini"  # "gemini", "openai" or "mock"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    AI_TIMEOUT_SECONDS: float = 10.0  # Bounded wait per classifier call

    # Classification orchestrator
    CLASSIFICATION_WORKERS: int = 4
    CLASSIFICATION_QUEUE_SIZE: int = 0  # 0 = unbounded

    # Map view policy
    RISK_ZONE_RADIUS_METERS: float = 500.0

    # Reporter history
    RECENT_REPORTS_LIMIT: int = 5
    RECENT_REPORTS_MAX_LIMIT: int = 50

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra env vars to prevent crashes

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
