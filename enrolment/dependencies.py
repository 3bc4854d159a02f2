import logging
from datetime import date
from functools import lru_cache
from typing import Optional

from fastapi import HTTPException

from .config import settings
from .exceptions import InvalidCalendar
from .services.academic_calendar import TERM_DATES_2025, AcademicCalendar
from .services.term_dates import load_calendar

log = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _load_configured_calendar(path: str, year: Optional[int]) -> AcademicCalendar:
    return load_calendar(path, year)


def get_today() -> date:
    """Resolved once per request so every calculation in it sees the same day."""
    return date.today()


def get_calendar() -> AcademicCalendar:
    """Term table used for intake dates; override to supply another year's dates."""
    if not settings.TERM_DATES_FILE:
        return TERM_DATES_2025
    try:
        return _load_configured_calendar(settings.TERM_DATES_FILE, settings.TERM_DATES_YEAR)
    except (InvalidCalendar, OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        log.error("Term dates file %s is unusable: %s", settings.TERM_DATES_FILE, e)
        raise HTTPException(status_code=503, detail="Term dates are not available") from e
