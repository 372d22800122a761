from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bookings.db"
    TIMEZONE: str = "Europe/Rome"
    LOG_LEVEL: str = "INFO"

    # admin session
    ADMIN_PASSWORD: str = "admin"
    SECRET_KEY: str = "change-me"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7

    DOMAIN: str = "http://localhost:8000"

    # e-mail is sent only when MAIL_USERNAME is set
    MAIL_USERNAME: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    ADMIN_EMAIL: Optional[str] = None

    # whatsapp alerts are sent only when TWILIO_SID is set
    TWILIO_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_WHATSAPP_FROM: Optional[str] = None
    ADMIN_WHATSAPP_TO: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow"
    )

    @property
    def mail_enabled(self) -> bool:
        return bool(self.MAIL_USERNAME and self.MAIL_PASSWORD)

    @property
    def whatsapp_enabled(self) -> bool:
        return bool(self.TWILIO_SID and self.TWILIO_AUTH_TOKEN and self.ADMIN_WHATSAPP_TO)


settings = Settings()
