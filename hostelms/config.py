from pydantic_settings import BaseSettings
from typing import List, Optional
import os


class Settings(BaseSettings):
    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hostel.db")

    # Security
    secret_key: str = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    verification_token_expire_minutes: int = 24 * 60
    reset_token_expire_minutes: int = 60

    # App
    app_name: str = "HostelMS"
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:3000"
    api_base_url: str = "http://localhost:8000"
    cors_origins: List[str] = ["*"]

    # Mail
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    email_from: str = "HostelMS <no-reply@hostel.example.com>"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"


settings = Settings()
