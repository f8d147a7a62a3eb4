from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "flagbot")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/flagbot_dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Bearer token guarding the admin and outbox routes
    admin_token: str = os.getenv("ADMIN_TOKEN", "dev-admin-token-change-me")
    outbox_page_size: int = int(os.getenv("OUTBOX_PAGE_SIZE", "50"))

settings = Settings()
