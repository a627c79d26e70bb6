# app/config/settings.py
from pydantic_settings import BaseSettings
from typing import List, Optional
import os

class Settings(BaseSettings):
    # App Info
    app_name: str = "Mailroom Package Tracker API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    mailroom_name: str = "UNA Mailroom"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./mailroom.db")

    # Security
    secret_key: str = os.getenv("SECRET_KEY", "change-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440

    # USPS Tracking API
    usps_consumer_key: Optional[str] = None
    usps_consumer_secret: Optional[str] = None
    usps_base_url: str = "https://api.usps.com"
    usps_timeout_seconds: float = 10.0
    usps_token_safety_margin_seconds: int = 300

    # Email notifications
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", 8000))
    cors_origins: List[str] = ["*"]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = 'ignore'

settings = Settings()
