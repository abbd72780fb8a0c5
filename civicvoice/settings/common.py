# Standard library imports
from pathlib import Path
import secrets
from typing import Annotated, Any, Literal

# Third-party imports
from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR: Path = Path(__file__).resolve().parent.parent


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class CommonSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General settings
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ENVIRONMENT: Literal["dev", "staging", "production"] = "dev"
    DEBUG_MODE: bool = False
    PROJECT_NAME: str = "CivicVoice"

    # Database settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "civicvoice"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "civicvoice"

    # Full async URL, wins over the POSTGRES_* settings (e.g. sqlite+aiosqlite:///./civicvoice.db)
    DATABASE_URL: str | None = None
    DATABASE_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = False

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(
            MultiHostUrl.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = [
        AnyUrl("http://localhost/"),
        AnyUrl("http://localhost:3000/"),
        AnyUrl("http://localhost:5173/"),
    ]

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Optional settings
    SENTRY_DSN: str | None = None

    # JWT settings
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 1  # 1 day

    # Upvote ledger
    UPVOTE_UNDO_WINDOW_SECONDS: int = 60

    # Storage retry policy for reads and guarded writes
    STORAGE_RETRY_ATTEMPTS: int = 3
    STORAGE_RETRY_BACKOFF_SECONDS: float = 0.1

    # Default superadmin seeded at startup (skipped when email is unset)
    DEFAULT_SUPERADMIN_EMAIL: str | None = None
    DEFAULT_SUPERADMIN_NAME: str = "Super Admin"
    DEFAULT_SUPERADMIN_REGION: str = "*"

    # Pagination configurations
    PAGINATION_CONFIGS: dict[str, dict[str, int]] = {
        "small": {
            # Audit trail pages
            "default_limit": 25,
            "max_limit": 100,
            "min_limit": 1,
            "default_offset": 0,
        },
        "medium": {
            # Admin issue listing
            "default_limit": 20,
            "max_limit": 100,
            "min_limit": 1,
            "default_offset": 0,
        },
        "large": {
            # Public issue feed
            "default_limit": 50,
            "max_limit": 500,
            "min_limit": 1,
            "default_offset": 0,
        },
    }
