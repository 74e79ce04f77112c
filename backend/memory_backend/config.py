"""
Application configuration with environment variable validation.
"""
import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:3000",
]


class DatabaseConfig:
    """MongoDB connection configuration."""

    MONGODB_URL: str = "mongodb://localhost:27017/"
    DATABASE_NAME: str = "memory_db"

    @classmethod
    def load(cls):
        """Load database configuration from environment variables."""
        cls.MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017/").strip()
        cls.DATABASE_NAME = os.getenv("DATABASE_NAME", "memory_db").strip()


class ServerConfig:
    """HTTP server configuration."""

    ENVIRONMENT: str = "development"
    PORT: int = 5000
    FRONTEND_URL: Optional[str] = None

    @classmethod
    def load(cls):
        """Load server configuration from environment variables."""
        cls.ENVIRONMENT = os.getenv("ENVIRONMENT", "development").strip().lower()
        cls.PORT = int(os.getenv("PORT", "5000"))
        cls.FRONTEND_URL = (os.getenv("FRONTEND_URL") or "").strip() or None

        if cls.is_production() and not cls.FRONTEND_URL:
            logger.warning("FRONTEND_URL not set in production. CORS will reject browser origins.")

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == "production"

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"

    @classmethod
    def cors_origins(cls) -> list[str]:
        """Allowed CORS origins for the current environment."""
        if cls.is_production():
            return [cls.FRONTEND_URL] if cls.FRONTEND_URL else []
        return list(DEV_ORIGINS)


class WebhookConfig:
    """Voice platform webhook configuration."""

    SECRET: Optional[str] = None

    @classmethod
    def load(cls):
        """Load webhook configuration from environment variables."""
        cls.SECRET = (os.getenv("ELEVENLABS_WEBHOOK_SECRET") or "").strip() or None

        logger.debug(f"Webhook Config: Secret={'Set' if cls.SECRET else 'Not Set'}")

    @classmethod
    def is_configured(cls) -> bool:
        """Check if the webhook shared secret is configured."""
        return bool(cls.SECRET)


# Load configurations on module import
DatabaseConfig.load()
ServerConfig.load()
WebhookConfig.load()
