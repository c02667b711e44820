from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Way2PG"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5001

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60  # tokens are not refreshable
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    EMAIL_VERIFICATION_EXPIRE_MINUTES: int = 10
    PHONE_VERIFICATION_EXPIRE_MINUTES: int = 10
    # No SMS provider is wired in; the phone code is handed back to the caller
    PHONE_CODE_IN_RESPONSE: bool = True
    BCRYPT_ROUNDS: int = 10
    ADMIN_SIGNUP_CODE: str = ""  # empty disables admin self-signup

    # Phone numbers are stored with a fixed international prefix
    PHONE_COUNTRY_PREFIX: str = "+91"

    # ==========================================
    # Media host (S3-compatible object storage)
    # ==========================================
    MEDIA_BUCKET: str = "way2pg-media"
    MEDIA_ENDPOINT_URL: str = ""  # Empty means AWS S3; set for MinIO/R2
    MEDIA_PUBLIC_BASE_URL: str = ""  # Empty means virtual-hosted S3 URL
    MEDIA_FOLDER: str = "way2pg_accommodations"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "ap-south-1"
    MAX_IMAGES_PER_ACCOMMODATION: int = 10
    MEDIA_MAX_RETRIES: int = 3

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "care.way2pg@gmail.com"
    EMAIL_FROM_NAME: str = "Way2PG"

    # SendGrid is used when an API key is configured
    SENDGRID_API_KEY: str = ""
    USE_SENDGRID: bool = True

    FRONTEND_URL: str = "http://localhost:5173"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "https://waytopg.netlify.app,https://waytopgdev.netlify.app,http://localhost:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_PER_MINUTE: int = 120
    AUTH_RATE_LIMIT: str = "100/15 minutes"

    MAX_REQUEST_SIZE_MB: int = 25

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
