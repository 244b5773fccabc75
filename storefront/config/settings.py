"""
Application settings and configuration management.
"""
from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import model_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # REST backend (products, admin, page content)
    BACKEND_API_URL: str = "https://sdherbs-backend.onrender.com/api"
    CHATBOT_API_URL: str = "http://localhost:5000/api/chatbot"
    ADMIN_IDENTITY_PATH: str = "/admin/me"
    REQUEST_TIMEOUT: float = 15.0  # seconds

    # Admin routing
    LOGIN_PATH: str = "/admin/login"
    ADMIN_HOME_PATH: str = "/admin/dashboard"

    # Speech synthesis (optional, falls back to the backend voice proxy)
    ELEVENLABS_API_KEY: Optional[str] = None
    ELEVENLABS_VOICE_ID: Optional[str] = None
    ELEVENLABS_API_URL: str = "https://api.elevenlabs.io/v1"

    # Widget / site defaults
    DEFAULT_THEME: str = "light"
    DEFAULT_LOGO_URL: str = "/static/logo.png"

    # Service
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    LOG_DIR: str = "./logs"
    AUDIT_LOG_DIR: str = "./logs/audit"

    # Redis (transcripts and widget state)
    REDIS_URL: str = "redis://127.0.0.1:6379/0"
    REDIS_USERNAME: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None
    TRANSCRIPT_TTL: int = 86400  # 24 hours

    # CORS
    ALLOWED_ORIGINS: list = ["http://localhost:3000", "http://localhost"]

    @model_validator(mode='after')
    def normalize(self):
        """Strip trailing slashes from URLs and check the default theme"""
        self.BACKEND_API_URL = self.BACKEND_API_URL.rstrip("/")
        self.CHATBOT_API_URL = self.CHATBOT_API_URL.rstrip("/")
        self.ELEVENLABS_API_URL = self.ELEVENLABS_API_URL.rstrip("/")
        if self.DEFAULT_THEME not in ("light", "dark"):
            raise ValueError(
                f"DEFAULT_THEME must be 'light' or 'dark', got {self.DEFAULT_THEME!r}"
            )
        return self

    @property
    def elevenlabs_configured(self) -> bool:
        return bool(self.ELEVENLABS_API_KEY and self.ELEVENLABS_VOICE_ID)

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the settings instance

    Returns:
        Settings instance
    """
    return settings
