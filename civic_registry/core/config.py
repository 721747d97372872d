
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Civic Registry API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./civic_registry_dev.db",
        alias="DATABASE_URL",
    )
    db_echo: bool = Field(default=False, alias="DB_ECHO")  # log every SQL statement

    # JWT
    jwt_secret: str = Field(
        default="dev-only-secret-change-me-0123456789abcdef",
        alias="JWT_SECRET",
    )  # HS256 wants at least 32 bytes
    jwt_access_ttl_seconds: int = Field(default=900, alias="JWT_ACCESS_TTL_SECONDS")
    jwt_refresh_ttl_seconds: int = Field(
        default=7 * 24 * 3600, alias="JWT_REFRESH_TTL_SECONDS",
    )
    jwt_issuer: str = Field(default="civic-registry", alias="JWT_ISSUER")
    jwt_audience: str = Field(default="civic-registry-api", alias="JWT_AUDIENCE")
    jwt_refresh_audience: str = Field(
        default="civic-registry-refresh", alias="JWT_REFRESH_AUDIENCE",
    )  # refresh tokens must never pass as access tokens

    # Optional administrator seeded at startup
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def admin_bootstrap_enabled(self) -> bool:
        """An admin is seeded only when both email and password are configured."""
        return bool(self.admin_email and self.admin_password)

settings = Settings()
