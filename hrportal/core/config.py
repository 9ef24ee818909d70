import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SECRET_KEY = "dev-only-insecure-key-DO-NOT-USE-IN-PROD"
# Valid Fernet key for local development only
DEFAULT_ENCRYPTION_KEY = "SUNLkSzAAepi5gfhoqjTbBCNcE74Q8NUcXfqoR-gRPg="


class Config(BaseModel):
    app_name: str = "HR Portal"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hrportal.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    refresh_token_expire_days: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

    # Encryption of sensitive columns (salary)
    encryption_key: str = os.getenv("ENCRYPTION_KEY", DEFAULT_ENCRYPTION_KEY)

    # CORS: comma-separated origins
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    # Rate limiting
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    login_rate_limit: str = os.getenv("LOGIN_RATE_LIMIT", "10/minute")

    # Generated documents
    company_name: str = os.getenv("COMPANY_NAME", "NTS Technologies")


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    _critical_missing = []
    if settings.secret_key == DEFAULT_SECRET_KEY:
        _critical_missing.append("SECRET_KEY")
    if settings.encryption_key == DEFAULT_ENCRYPTION_KEY:
        _critical_missing.append("ENCRYPTION_KEY")
    if _critical_missing:
        raise RuntimeError(
            f"FATAL: The following secrets must be set for non-development environments: "
            f"{', '.join(_critical_missing)}. Set them as environment variables."
        )
elif settings.secret_key == DEFAULT_SECRET_KEY:
    _logger.warning("⚠ Using insecure default SECRET_KEY: only acceptable in development.")
