import os
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Pre-Enrolment"
    APP_VERSION: str = "1.0.0"
    ROOT_PATH: str = os.path.dirname(os.path.abspath(__file__))
    LOG_LEVEL: str = "INFO"

    # JSON written by `python -m enrolment.services.term_dates`; built-in 2025 table when unset
    TERM_DATES_FILE: Optional[str] = None
    TERM_DATES_YEAR: Optional[int] = None
    TERM_DATES_URL: str = "https://education.qld.gov.au/about-us/calendar/term-dates"

    MAX_INTAKE_DATES: int = 4


settings = Settings()
