from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./recipebox.db"

    # Page fetching
    fetch_timeout_seconds: float = 10.0
    max_body_bytes: int = 2 * 1024 * 1024
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    accept_header: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.9"

    # Instagram embed page
    instagram_timeout_seconds: float = 15.0

    # AI cleanup pass
    ai_mode: str = "mock"  # "mock" or "gemini"
    ai_cleanup_enabled: bool = False
    gemini_api_key: Optional[str] = None
    gemini_text_model: str = "gemini-2.5-flash"

    # Object store (S3-compatible, e.g. R2). Unset bucket disables uploads.
    object_store_endpoint: Optional[str] = None
    object_store_region: str = "auto"
    object_store_bucket: Optional[str] = None
    object_store_access_key_id: Optional[str] = None
    object_store_secret_access_key: Optional[str] = None
    object_public_base_url: Optional[str] = None

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def object_store_configured(self) -> bool:
        return bool(
            self.object_store_bucket
            and self.object_store_access_key_id
            and self.object_store_secret_access_key
            and self.object_public_base_url
        )
