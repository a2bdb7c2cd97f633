# community_auth/core/config.py
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Shared between the cookie writer (login) and any reader of the cookie
COOKIE_NAME = "b3log-latke"

# 30 days
COOKIE_EXPIRY = 60 * 60 * 24 * 30


class AuthConfig(BaseModel):
    """
    Immutable configuration handed to the authenticator at construction.

    Built once at start-up (see Settings.auth_config) and never mutated, so
    it can be shared across requests without synchronization.
    """
    model_config = ConfigDict(frozen=True)

    cookie_secret: str
    server_scheme: str = "http"
    cookie_name: str = COOKIE_NAME
    cookie_max_age: int = Field(default=COOKIE_EXPIRY, gt=0)

    @property
    def secure_cookies(self) -> bool:
        """Secure flag is set only when the external scheme is https"""
        return self.server_scheme.lower() == "https"


class Settings(BaseSettings):
    """Process-wide settings, read from the environment or .env"""
    APP_NAME: str = "community-auth"

    # Cookie settings
    COOKIE_SECRET: Optional[str] = Field(default=None)
    SERVER_SCHEME: str = "http"
    COOKIE_NAME: str = COOKIE_NAME

    # HTTP layer
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_IDLE_MINUTES: int = Field(default=30, gt=0)
    LOGIN_RATE_LIMIT: str = "10/minute"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    def auth_config(self) -> AuthConfig:
        """Freeze the cookie-related settings into an AuthConfig"""
        return AuthConfig(
            cookie_secret=self.COOKIE_SECRET or "",
            server_scheme=self.SERVER_SCHEME,
            cookie_name=self.COOKIE_NAME,
        )


# Settings as a process-wide singleton
settings = Settings()


def validate_required_settings(current: Optional[Settings] = None) -> bool:
    """Check that everything needed to issue login cookies is present"""
    current = current or settings
    missing = []

    if not current.COOKIE_SECRET:
        missing.append("COOKIE_SECRET")

    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")
        logger.warning("Login cookies cannot be issued until these are set.")
        return False

    return True
