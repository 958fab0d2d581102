from __future__ import annotations

import os
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from momentum.days import parse_weekday


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")

    allowed_emails_raw: str = Field("", alias="ALLOWED_EMAILS")

    day_timezone: str = Field("UTC", alias="DAY_TIMEZONE")
    week_starts_on_raw: str = Field("sunday", alias="WEEK_STARTS_ON")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("week_starts_on_raw")
    @classmethod
    def _check_weekday(cls, value: str) -> str:
        parse_weekday(value)
        return value.strip().lower()

    @property
    def allowed_emails(self) -> List[str]:
        return [email.strip().lower() for email in self.allowed_emails_raw.split(",") if email.strip()]

    @property
    def week_starts_on(self) -> int:
        return parse_weekday(self.week_starts_on_raw)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


# For local dev convenience only.
if os.getenv("BACKEND_DEBUG_SETTINGS"):
    print(get_settings())
