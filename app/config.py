"""Configuration management using environment variables"""
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Development placeholder for the secret key (not secure - for local testing only)
DEV_SECRET_PLACEHOLDER = "dev_secret_key"

DEFAULT_FRONTEND_URLS = "http://localhost:3000"


class Settings:
    """Application settings read from the environment"""

    def __init__(self):
        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development")

        # Database
        self.database_url = os.getenv(
            "DATABASE_URL",
            "sqlite+aiosqlite:///./unique_api.db"
        )

        # Project / secrets
        self.project_id = os.getenv("PROJECT_ID", "")
        if self.environment == "production":
            self.secret_key = self._get_required("SECRET_KEY")
            if self.secret_key == DEV_SECRET_PLACEHOLDER:
                raise ValueError(
                    f"Cannot use placeholder secret '{DEV_SECRET_PLACEHOLDER}' in production mode. "
                    "Set a real SECRET_KEY."
                )
        else:
            self.secret_key = os.getenv("SECRET_KEY", DEV_SECRET_PLACEHOLDER)
            if self.secret_key == DEV_SECRET_PLACEHOLDER:
                logging.getLogger(__name__).warning(
                    "⚠️  Using default SECRET_KEY - set SECRET_KEY in .env before deploying"
                )

        # CORS: frontends allowed to call the API (comma-separated list)
        self.frontend_urls = self._split_list(
            os.getenv("FRONTEND_URLS", DEFAULT_FRONTEND_URLS)
        )

        # Pagination
        self.default_page_limit = int(os.getenv("DEFAULT_PAGE_LIMIT", "100"))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def _get_required(self, key: str) -> str:
        """Get required environment variable or raise error."""
        value = os.getenv(key, "").strip()
        if not value:
            raise ValueError(
                f"Missing required environment variable: {key}. "
                f"Required in production mode."
            )
        return value

    @staticmethod
    def _split_list(raw: str) -> list:
        return [item.strip() for item in raw.split(",") if item.strip()]


# Global settings instance
settings = Settings()
