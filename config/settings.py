"""Configuration management for the HR admin API."""

import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


@dataclass
class DatabaseConfig:
    """Database connection configuration."""

    url: str = "sqlite:///database/hr_admin.db"
    pool_size: int = 5
    max_overflow: int = 10
    echo: bool = False


@dataclass
class WebConfig:
    """Web interface configuration."""

    host: str = "127.0.0.1"
    port: int = 5001
    debug: bool = True
    environment: str = "development"
    client_urls: List[str] = field(default_factory=list)
    rate_limit_default: str = "1000 per hour"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@dataclass
class AuthConfig:
    """JWT bearer token configuration."""

    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24
    cookie_name: str = "auth_token"


@dataclass
class TeamConfig:
    """Team roster limits."""

    default_max_size: int = 10
    max_size_limit: int = 50
    default_member_role: str = "Member"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings:
    """Main settings manager."""

    def __init__(self):
        self.database = self._load_database_config()
        self.web = self._load_web_config()
        self.auth = self._load_auth_config()
        self.teams = self._load_team_config()
        self.logging = self._load_logging_config()

    @staticmethod
    def _load_database_config() -> DatabaseConfig:
        return DatabaseConfig(
            url=os.getenv("DATABASE_URL", "sqlite:///database/hr_admin.db"),
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
            echo=os.getenv("DB_ECHO", "false").lower() == "true",
        )

    @staticmethod
    def _load_web_config() -> WebConfig:
        # CLIENT_URL may hold several comma-separated dashboard origins
        client_urls_str = os.getenv("CLIENT_URL", "http://localhost:3000")
        client_urls = [url.strip() for url in client_urls_str.split(",") if url.strip()]
        if "http://localhost:3001" not in client_urls:
            client_urls.append("http://localhost:3001")

        return WebConfig(
            host=os.getenv("WEB_HOST", "127.0.0.1"),
            port=int(os.getenv("WEB_PORT", "5001")),
            debug=os.getenv("WEB_DEBUG", "true").lower() == "true",
            environment=os.getenv("FLASK_ENV", "development"),
            client_urls=client_urls,
            rate_limit_default=os.getenv("RATELIMIT_DEFAULT") or "1000 per hour",
        )

    @staticmethod
    def _load_auth_config() -> AuthConfig:
        return AuthConfig(
            # DigitalOcean-style secret values can carry trailing whitespace
            jwt_secret=os.getenv("JWT_SECRET_KEY", "").strip(),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expiry_hours=int(os.getenv("JWT_EXPIRY_HOURS", "24")),
            cookie_name=os.getenv("AUTH_COOKIE_NAME", "auth_token"),
        )

    @staticmethod
    def _load_team_config() -> TeamConfig:
        default_max_size = int(os.getenv("TEAM_DEFAULT_MAX_SIZE", "10"))
        max_size_limit = int(os.getenv("TEAM_MAX_SIZE_LIMIT", "50"))

        if default_max_size > max_size_limit:
            import warnings

            warnings.warn(
                f"TEAM_DEFAULT_MAX_SIZE ({default_max_size}) exceeds TEAM_MAX_SIZE_LIMIT "
                f"({max_size_limit}); clamping to the limit."
            )
            default_max_size = max_size_limit

        return TeamConfig(
            default_max_size=default_max_size,
            max_size_limit=max_size_limit,
            default_member_role=os.getenv("TEAM_DEFAULT_MEMBER_ROLE", "Member"),
        )

    @staticmethod
    def _load_logging_config() -> LoggingConfig:
        return LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    def reload(self):
        """Re-read every section from the environment."""
        self.__init__()


settings = Settings()
