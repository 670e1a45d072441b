"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with MOTORPOOL_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: the database can be configured either with one full SQLAlchemy URL
(MOTORPOOL_DATABASE_URL) or with the classic host/user/password/name quad
(MOTORPOOL_DB_HOST, MOTORPOOL_DB_USER, ...). The quad is assembled into an
asyncpg URL when no explicit URL is given.
"""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """All app configuration. Set via MOTORPOOL_* env vars."""

    # Database
    database_url: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "motorpool"
    db_password: str = "motorpool_dev"
    db_name: str = "motorpool"
    pool_size: int = 5
    max_overflow: int = 15

    # Fixed per-connection session settings
    session_sql_mode: str = "TRADITIONAL"
    session_time_zone: str = "-08:00"

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_expire_minutes: int = 60  # 0 = tokens never expire
    bcrypt_rounds: int = 10

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: list[str] = ["*"]

    model_config = {"env_prefix": "MOTORPOOL_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure sensitive defaults are changed in non-development environments."""
        if self.environment != "development" and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError(
                "MOTORPOOL_JWT_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self

    @property
    def sqlalchemy_url(self) -> str:
        """The URL handed to create_async_engine."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


# Singleton — read once at startup, injected into requests via app.state
settings = Settings()
