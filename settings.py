"""
Application settings

Values come from the process environment (or a local .env file). Field names
map to upper-case environment variables, e.g. ``database_url`` -> DATABASE_URL.
"""
import logging
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = Field(None, description="MongoDB connection string")
    database_name: str = Field("marketing_site", description="MongoDB database name")

    # Auth
    jwt_secret: str = Field("dev-secret-change", description="HS256 signing secret for the admin token")
    access_token_expire_minutes: int = Field(60 * 24)
    admin_cookie_name: str = Field("admin-token")
    cookie_secure: bool = Field(False, description="Send the admin cookie over HTTPS only")
    reset_token_expire_minutes: int = Field(60)
    expose_reset_url: bool = Field(False, description="Return the reset link in the forgot-password response")

    # Uploads
    upload_dir: str = Field("uploads")
    upload_url_prefix: str = Field("/uploads")

    # Site
    site_url: str = Field("http://localhost:8000", description="Public base URL used by the sitemap")
    cors_origins: str = Field("*", description="Comma separated list of allowed origins")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO")

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
