"""Application configuration."""
import sys
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://notebook_user:notebook_pass@db:5432/notebook_db"
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    JWT_ISSUER: str | None = None
    JWT_AUDIENCE: str | None = None

    # Environment configuration
    ENVIRONMENT: str = "development"  # "development" or "production"
    LOG_LEVEL: str = "INFO"

    # CORS configuration - comma-separated origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Hosted relational store used by the remote storage adapter.
    # Both must be set for the remote adapter to be attempted.
    NOTEBOOK_REMOTE_URL: str | None = None
    NOTEBOOK_REMOTE_KEY: str | None = None
    REMOTE_TIMEOUT_SECONDS: float = 10.0

    # On-device store used by the local storage adapter
    LOCAL_STORE_PATH: str = ".notebook/storage.json"

    # Bootstrap admin account created by app.seed
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "admin123"

    class Config:
        env_file = ".env"

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def validate_production_settings(self) -> None:
        """Validate settings for production environment.

        Raises SystemExit if critical security settings are misconfigured.
        """
        if self.ENVIRONMENT == "production":
            if self.SECRET_KEY == "dev-secret-key-change-in-production":
                print("FATAL: SECRET_KEY must be changed in production!", file=sys.stderr)
                print("Set a secure random SECRET_KEY environment variable.", file=sys.stderr)
                sys.exit(1)

            if self.ADMIN_PASSWORD == "admin123":
                print("WARNING: the bootstrap admin password is the default!", file=sys.stderr)
                print("Set ADMIN_PASSWORD before running app.seed", file=sys.stderr)


settings = Settings()
# Validate on startup
settings.validate_production_settings()
