import logging
import sys

from pydantic_settings import BaseSettings
from typing import Optional


def setup_logging():
    """Configure application logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# Initialize logging on import
setup_logging()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Bootstrap admin account (password is REQUIRED - app will not start without it)
    admin_username: str = "admin"
    admin_password: Optional[str] = None

    # Database URL, defaults to a SQLite file under backend/data
    database_url: Optional[str] = None

    # API keys used only when seeding the default providers
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Timeout for polling a provider's /models endpoint (seconds)
    remote_fetch_timeout: float = 30.0

    # Session settings
    session_expiry_hours: int = 24
    bcrypt_rounds: int = 12

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def validate_admin_password():
    """Validate that ADMIN_PASSWORD is set. Raises SystemExit if not."""
    if not settings.admin_password:
        logger.error("=" * 60)
        logger.error("ADMIN_PASSWORD environment variable is required!")
        logger.error("=" * 60)
        logger.error("The LLM admin panel needs a bootstrap administrator account.")
        logger.error("Please set ADMIN_PASSWORD in your .env file:")
        logger.error("    ADMIN_PASSWORD=your_secure_password_here")
        logger.error("=" * 60)
        sys.exit(1)


settings = Settings()
