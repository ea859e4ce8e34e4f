from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./clinic.db"
    store_provider: str = "sql"  # "sql" or "memory"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Slot/booking business rules
    slot_granularity_minutes: int = 30
    booking_lead_minutes: int = 30
    closed_weekdays: str = "5,6"  # Monday=0; Saturday and Sunday closed
    clinic_timezone: str = "UTC"

    # Env
    env: str = "development"

    # Email (SMTP). Leave smtp_host empty to disable sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "Clinic Bookings"
    site_name: str = "Clinic"
    contact_email: str = "front-desk@clinic.example"
    contact_phone: str = ""
    contact_address: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def closed_weekdays_set(self) -> frozenset[int]:
        return frozenset(int(d) for d in self.closed_weekdays.split(",") if d.strip())

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.clinic_timezone)

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)


settings = Settings()
