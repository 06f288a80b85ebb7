from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: Optional[str] = None

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    CONTACT_RATE_LIMIT: int = 3
    CONTACT_RATE_LIMIT_WINDOW: int = 600  # 10 minutes
    API_RATE_LIMIT: int = 100
    API_RATE_LIMIT_WINDOW: int = 900  # 15 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    VEHICLES_LIST_CACHE_TTL: int = 300
    VEHICLE_DETAIL_CACHE_TTL: int = 600
    MEMORY_CACHE_MAX_ITEMS: int = 1000
    MEMORY_CACHE_CLEANUP_INTERVAL: int = 60

    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Dealership <noreply@example.com>"
    ADMIN_EMAIL: Optional[str] = None

    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None

    INTEGRATION_TIMEOUT: int = 10
    INTEGRATION_RETRIES: int = 2

    SITE_URL: str = "http://localhost:3000"
    CORS_ORIGINS: Optional[str] = None  # comma separated

    VISITOR_STORE_DIR: Optional[str] = None

    API_TITLE: str = "Dealership Site API"
    API_DESCRIPTION: str = "Vehicle catalog, lead capture, blog and admin back-office"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def email_configured(self) -> bool:
        return bool(self.RESEND_API_KEY)

    @property
    def sms_configured(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_PHONE_NUMBER)


settings = Settings()
