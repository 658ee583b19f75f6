from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Aithena API"
    ENVIRONMENT: str = "development"
    DATABASE_URL: str = "sqlite:///./aithena.db"
    DATABASE_ECHO: bool = False

    # JWT - both secrets must be set, the app refuses to start otherwise
    JWT_SECRET: Optional[str] = None
    JWT_REFRESH_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "24h"
    JWT_REFRESH_EXPIRES_IN: str = "7d"

    # SMTP (contact form)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: Optional[int] = None
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_SECURE: bool = False
    SMTP_FROM: Optional[str] = None
    CONTACT_EMAIL: Optional[str] = None
    SMTP_TIMEOUT_SECONDS: int = 15

    FRONTEND_URL: str = "http://localhost:3000"

    # Request limits
    MAX_BODY_SIZE: int = 10 * 1024 * 1024  # 10MB, base64 images
    WRITE_TIMEOUT_SECONDS: int = 120
    READ_TIMEOUT_SECONDS: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Client
    API_URL: str = "http://localhost:3001"
    CLIENT_TIMEOUT_SECONDS: int = 15

    # Seed administrator
    SEED_ADMIN_EMAIL: Optional[str] = None
    SEED_ADMIN_PASSWORD: Optional[str] = None
    SEED_ADMIN_FIRST_NAME: str = "Site"
    SEED_ADMIN_LAST_NAME: str = "Administrator"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
