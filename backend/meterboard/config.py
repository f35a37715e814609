from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost", "http://localhost:5173"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str = Field(default="sqlite:///./meterboard.db", validation_alias="DATABASE_URL")
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    unit_price_per_kwh: float = Field(default=10.0, ge=0, validation_alias="METERBOARD_UNIT_PRICE_PER_KWH")
    currency: str = Field(default="PHP", validation_alias="METERBOARD_CURRENCY")
    # Zone of the stored reading dates/hours; also the Celery beat clock
    timezone: str = Field(default="Asia/Manila", validation_alias="METERBOARD_TIMEZONE")
    cache_ttl: int = Field(default=30, ge=0, validation_alias="METERBOARD_CACHE_TTL")  # 0 disables
    cors_origins: Optional[str] = Field(default=None, validation_alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    def get_cors_origins(self) -> List[str]:
        raw = (self.cors_origins or "").strip()
        if not raw:
            return list(DEFAULT_CORS_ORIGINS)
        return [x.strip().rstrip("/") for x in raw.split(",") if x.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
