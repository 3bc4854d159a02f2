"""
Academic calendar calculations for pre-enrolment.

Everything here is a pure function of its inputs. Callers that need a
consistent "today" across several calculations should capture it once and
pass it in explicitly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from enrolment.exceptions import InvalidCalendar, InvalidDateOfBirth

log = logging.getLogger(__name__)

TERMS_PER_YEAR = 4
SCHOOL_STARTING_AGE = 5
INTAKE_GAP = timedelta(weeks=5)  # first Monday -> sixth Monday

DateInput = Union[date, datetime, str, None]


class Classification(str, Enum):
    YEAR_0 = "Year 0"
    YEAR_1 = "Year 1"


@dataclass(frozen=True)
class Term:
    number: int  # 1..4
    start_date: date
    end_date: date

    def __post_init__(self):
        if not 1 <= self.number <= TERMS_PER_YEAR:
            raise InvalidCalendar(f"Term number must be 1..{TERMS_PER_YEAR}, got {self.number}")
        if self.start_date >= self.end_date:
            raise InvalidCalendar(
                f"Term {self.number} starts on {self.start_date} but ends on {self.end_date}"
            )

    @property
    def name(self) -> str:
        return f"Term {self.number}"


@dataclass(frozen=True)
class AcademicCalendar:
    year: int
    terms: Tuple[Term, ...]

    def __post_init__(self):
        # Accept any sequence but always store a tuple so instances stay hashable
        object.__setattr__(self, "terms", tuple(self.terms))
        if len(self.terms) != TERMS_PER_YEAR:
            raise InvalidCalendar(f"Expected {TERMS_PER_YEAR} terms, got {len(self.terms)}")
        numbers = [t.number for t in self.terms]
        if numbers != list(range(1, TERMS_PER_YEAR + 1)):
            raise InvalidCalendar(f"Terms must be numbered 1..{TERMS_PER_YEAR} in order, got {numbers}")
        for prev, nxt in zip(self.terms, self.terms[1:]):
            if nxt.start_date <= prev.end_date:
                raise InvalidCalendar(f"{nxt.name} overlaps {prev.name}")


@dataclass(frozen=True)
class Age:
    years: int
    months: int  # 0..11


@dataclass(frozen=True)
class EnrolmentDetails:
    enrolment_year: int
    classification: Classification


TERM_DATES_2025 = AcademicCalendar(
    year=2025,
    terms=(
        Term(1, date(2025, 2, 4), date(2025, 4, 11)),
        Term(2, date(2025, 4, 28), date(2025, 6, 27)),
        Term(3, date(2025, 7, 14), date(2025, 9, 19)),
        Term(4, date(2025, 10, 6), date(2025, 12, 18)),
    ),
)


def coerce_date_of_birth(value: DateInput) -> date:
    """Normalise a date of birth to a `date` or raise InvalidDateOfBirth."""
    if value is None:
        raise InvalidDateOfBirth("Date of birth is required")
    # datetime is a date subclass, so check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDateOfBirth("Date of birth is required")
        try:
            return date.fromisoformat(text)
        except ValueError as e:
            raise InvalidDateOfBirth(f"Invalid date of birth: {value!r}") from e
    raise InvalidDateOfBirth(f"Unsupported date of birth type: {type(value).__name__}")


def calculate_age(date_of_birth: DateInput, today: Optional[date] = None) -> Age:
    """
    Whole years and months elapsed between date_of_birth and today.

    Partial months are truncated: one month is borrowed when today's
    day-of-month is earlier than the birth day-of-month. A date of birth
    after today is rejected.
    """
    dob = coerce_date_of_birth(date_of_birth)
    today = today or date.today()
    if dob > today:
        raise InvalidDateOfBirth(f"Date of birth {dob.isoformat()} is in the future")

    years = today.year - dob.year
    months = today.month - dob.month
    if today.day < dob.day:
        months -= 1
    if months < 0:
        months += 12
        years -= 1
    return Age(years=years, months=months)


def classify_by_birth_date(date_of_birth: DateInput) -> Classification:
    """Year 1 when born on or before 1 May of the birth year, else Year 0."""
    dob = coerce_date_of_birth(date_of_birth)
    cutoff = date(dob.year, 5, 1)
    return Classification.YEAR_1 if dob <= cutoff else Classification.YEAR_0


def classify_by_age(date_of_birth: DateInput, today: Optional[date] = None) -> Classification:
    """Year 0 while the child is under five years old, else Year 1."""
    age = calculate_age(date_of_birth, today)
    return Classification.YEAR_0 if age.years < SCHOOL_STARTING_AGE else Classification.YEAR_1


def calculate_enrolment_year(date_of_birth: DateInput) -> int:
    return coerce_date_of_birth(date_of_birth).year + SCHOOL_STARTING_AGE


def calculate_enrolment_details(date_of_birth: DateInput, today: Optional[date] = None) -> EnrolmentDetails:
    return EnrolmentDetails(
        enrolment_year=calculate_enrolment_year(date_of_birth),
        classification=classify_by_age(date_of_birth, today),
    )


def first_monday_on_or_after(d: date) -> date:
    return d + timedelta(days=(8 - d.isoweekday()) % 7)


def enumerate_intake_dates(calendar: AcademicCalendar) -> List[date]:
    """First and sixth Monday of every term, in chronological order."""
    dates: List[date] = []
    for term in calendar.terms:
        first_monday = first_monday_on_or_after(term.start_date)
        dates.append(first_monday)
        sixth_monday = first_monday + INTAKE_GAP
        if sixth_monday <= term.end_date:
            dates.append(sixth_monday)
    return dates


def upcoming_intake_dates(
    dates: Iterable[date],
    today: Optional[date] = None,
    limit: Optional[int] = TERMS_PER_YEAR,
) -> List[date]:
    """Keep dates strictly after today, in their original order, up to `limit`."""
    today = today or date.today()
    future = [d for d in dates if d > today]
    return future if limit is None else future[:limit]


def get_intake_dates(enrolment_year: int, calendar: Optional[AcademicCalendar] = None) -> List[date]:
    """
    Intake dates offered to a child starting in `enrolment_year`.

    Only one term table is maintained, so the same calendar is used whatever
    the enrolment year is. Supply `calendar` to use a different table.
    """
    calendar = calendar or TERM_DATES_2025
    if calendar.year != enrolment_year:
        log.debug("Using %s term dates for enrolment year %s", calendar.year, enrolment_year)
    return enumerate_intake_dates(calendar)


def terms_as_dicts(calendar: AcademicCalendar) -> Sequence[dict]:
    return [
        {
            "number": t.number,
            "name": t.name,
            "start_date": t.start_date,
            "end_date": t.end_date,
        }
        for t in calendar.terms
    ]
