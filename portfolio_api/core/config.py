# File: portfolio_api/core/config.py

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Basic app info
    PROJECT_NAME: str = "Portfolio API"
    VERSION: str = "1.0.0"

    api_prefix: str = "/api"
    environment: str = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
    port: int = int(os.getenv("PORT", os.getenv("API_PORT", "8080")))

    # Flat-file database
    data_dir: Path = Path(os.getenv("DATA_DIR", "data"))
    database_path: Optional[Path] = (
        Path(os.environ["DATABASE_PATH"]) if os.getenv("DATABASE_PATH") else None
    )

    # Built frontend (production only)
    static_dir: Path = Path(os.getenv("STATIC_DIR", "public"))

    # Seeded admin account
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin123")

    # Tokens
    jwt_secret: str = os.getenv("JWT_SECRET", "CHANGE_ME_IN_PRODUCTION")
    jwt_expiration: str = os.getenv("JWT_EXPIRATION", "24h")
    refresh_token_expire_days: int = 7
    jwt_issuer: str = "portfolio-api"
    jwt_audience: str = "portfolio-frontend"
    algorithm: str = "HS256"

    # Object storage (MinIO / S3)
    enable_storage: bool = _env_bool("ENABLE_STORAGE", "true")
    minio_endpoint: str = os.getenv("MINIO_ENDPOINT", "localhost")
    minio_port: int = int(os.getenv("MINIO_PORT", "9000"))
    minio_use_ssl: bool = _env_bool("MINIO_USE_SSL")
    minio_access_key: str = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
    minio_secret_key: str = os.getenv("MINIO_SECRET_KEY", "minioadmin123")
    minio_bucket_name: str = os.getenv("MINIO_BUCKET_NAME", "portfolio-files")
    minio_public_url: str = os.getenv("MINIO_PUBLIC_URL", "http://localhost:9000")
    minio_region: str = os.getenv("MINIO_REGION", "us-east-1")
    storage_connect_retries: int = int(os.getenv("STORAGE_CONNECT_RETRIES", "10"))
    storage_connect_delay: float = float(os.getenv("STORAGE_CONNECT_DELAY", "2"))

    # Uploads
    max_upload_size: int = 10 * 1024 * 1024  # 10MB
    max_video_upload_size: int = 100 * 1024 * 1024  # 100MB
    max_upload_files: int = 5

    # CORS
    backend_cors_origins: List[str] = [
        origin
        for origin in (
            os.getenv("CORS_ORIGIN"),
            os.getenv("FRONTEND_URL"),
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        )
        if origin
    ]

    # Rate limiting
    rate_limit_enabled: bool = _env_bool("RATE_LIMIT_ENABLED", "true")
    rate_limit: Optional[str] = os.getenv("RATE_LIMIT") or None

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: Optional[str] = os.getenv("LOG_FORMAT") or None

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return [i for i in v if i]
        return []

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def db_file(self) -> Path:
        return self.database_path or self.data_dir / "db.json"

    @property
    def storage_endpoint_url(self) -> str:
        scheme = "https" if self.minio_use_ssl else "http"
        return f"{scheme}://{self.minio_endpoint}:{self.minio_port}"

    @property
    def default_rate_limit(self) -> str:
        if self.rate_limit:
            return self.rate_limit
        return "100/15 minutes" if self.is_production else "1000/15 minutes"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
