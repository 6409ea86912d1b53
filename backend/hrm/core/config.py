from datetime import timedelta, timezone

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Database – SQLite für lokale Entwicklung
    DATABASE_URL: str = "sqlite+aiosqlite:///./hrm.db"

    # Redis (Broker für Celery und verteilte Sperren bei USE_CELERY)
    REDIS_URL: str = "redis://localhost:6379/0"
    USE_CELERY: bool = False

    # Security
    SECRET_KEY: str = "dev_secret_key_change_in_production_min_32_chars!!"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Fester UTC-Offset der Organisation; alle Wanduhrzeiten (HH:MM) beziehen sich darauf.
    # 420 = UTC+07:00
    ORG_UTC_OFFSET_MINUTES: int = 420

    # Maximale Haltedauer der Sperre pro (Mitarbeiter, Arbeitstag) beim Nachberechnen
    OVERTIME_LOCK_TIMEOUT_SECONDS: int = 30

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    @property
    def org_timezone(self) -> timezone:
        return timezone(timedelta(minutes=self.ORG_UTC_OFFSET_MINUTES))

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
