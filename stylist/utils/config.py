# stylist/utils/config.py
# Application settings loaded from environment variables

import os
import logging
from datetime import timedelta
from typing import List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = ["MONGO_URI", "JWT_SECRET"]
OPTIONAL_ENV_VARS = ["SMTP_HOST", "SMTP_USER", "SMTP_PASS", "EMAIL_FROM"]


class Settings:
    """Configuration for the API, read once at process start."""

    def __init__(self) -> None:
        load_dotenv()

        missing_vars = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
        if missing_vars:
            logger.error(f"Missing required environment variables: {missing_vars}")
            raise RuntimeError(f"Missing required environment variables: {missing_vars}")

        missing_optional = [var for var in OPTIONAL_ENV_VARS if not os.getenv(var)]
        if missing_optional:
            logger.warning(
                f"Missing optional environment variables (email delivery may not work): {missing_optional}"
            )

        self.mongo_uri = os.getenv("MONGO_URI")
        self.database_name = os.getenv("MONGO_DB_NAME", "stylist")
        self.jwt_secret = os.getenv("JWT_SECRET")
        self.jwt_expire_days = self._get_int("JWT_EXPIRE_DAYS", 30)
        self.verification_token_expire_hours = self._get_int("VERIFICATION_TOKEN_EXPIRE_HOURS", 24)
        self.password_reset_expire_minutes = self._get_int("PASSWORD_RESET_EXPIRE_MINUTES", 10)
        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", 12)
        self.client_url = os.getenv("CLIENT_URL", "http://localhost:8080").rstrip("/")

        self.smtp_host = os.getenv("SMTP_HOST")
        self.smtp_port = self._get_int("SMTP_PORT", 587)
        self.smtp_user = os.getenv("SMTP_USER")
        self.smtp_pass = os.getenv("SMTP_PASS")
        self.email_from = os.getenv("EMAIL_FROM") or self.smtp_user

        self.environment = os.getenv("ENVIRONMENT", "production")
        self.allowed_hosts = self._get_list("ALLOWED_HOSTS") or ["*"]
        self.cors_origins = self._get_list("CORS_ORIGINS") or [self.client_url]

    @property
    def verification_ttl(self) -> timedelta:
        return timedelta(hours=self.verification_token_expire_hours)

    @property
    def reset_ttl(self) -> timedelta:
        return timedelta(minutes=self.password_reset_expire_minutes)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_list(key: str) -> Optional[List[str]]:
        value = os.getenv(key)
        if not value:
            return None
        return [item.strip() for item in value.split(",") if item.strip()]
