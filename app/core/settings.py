"""
Core settings and environment variables for the civic triage core.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Civic Triage"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Image labeling
    AI_ENABLED: bool = True  # If False, only the mock label provider is registered
    LABEL_PROVIDER: str = "huggingface"  # "huggingface" or "mock"
    LABEL_MODEL_NAME: str = "google/vit-base-patch16-224"
    HUGGINGFACE_API_TOKEN: Optional[str] = None  # Public models work without a token
    HUGGINGFACE_API_URL: str = "https://router.huggingface.co/hf-inference/models"
    AI_TIMEOUT_SECONDS: float = 10.0

    # Category mapping
    MAX_PREDICTIONS: int = 5  # Only the top N classifier predictions are scored
    MATCH_THRESHOLD: float = 0.1  # Below this accumulated score the issue is "other"
    KEYWORD_TABLE_PATH: Optional[str] = None  # JSON file replacing/extending the keyword table
    KEYWORD_TABLE_MODE: str = "extend"  # "extend" or "replace"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Global settings instance
settings = Settings()
