from functools import lru_cache
from zoneinfo import ZoneInfo
import os


class Settings:
    app_name: str = "Event Operations CRM"
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./eventcrm.db")
    session_cookie: str = os.getenv("SESSION_COOKIE", "eventcrm_session")
    session_max_age: int = int(os.getenv("SESSION_MAX_AGE", str(8 * 60 * 60)))
    timezone: str = os.getenv("TIMEZONE", "UTC")
    permissions_file: str | None = os.getenv("PERMISSIONS_FILE") or None
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
