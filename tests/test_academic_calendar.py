from datetime import date, datetime, timedelta

import pytest

from enrolment.exceptions import InvalidCalendar, InvalidDateOfBirth
from enrolment.services.academic_calendar import (
    TERM_DATES_2025,
    AcademicCalendar,
    Age,
    Classification,
    EnrolmentDetails,
    Term,
    calculate_age,
    calculate_enrolment_details,
    calculate_enrolment_year,
    classify_by_age,
    classify_by_birth_date,
    coerce_date_of_birth,
    enumerate_intake_dates,
    first_monday_on_or_after,
    get_intake_dates,
    upcoming_intake_dates,
)

ALL_2025_INTAKES = [
    date(2025, 2, 10),
    date(2025, 3, 17),
    date(2025, 4, 28),
    date(2025, 6, 2),
    date(2025, 7, 14),
    date(2025, 8, 18),
    date(2025, 10, 6),
    date(2025, 11, 10),
]


# --- input normalisation ---

@pytest.mark.parametrize("value", [None, "", "   ", "not-a-date", "2020-02-30", 20200615])
def test_coerce_date_of_birth_rejects_bad_input(value):
    with pytest.raises(InvalidDateOfBirth):
        coerce_date_of_birth(value)


def test_coerce_date_of_birth_accepts_dates_datetimes_and_iso_strings():
    assert coerce_date_of_birth(date(2020, 6, 15)) == date(2020, 6, 15)
    assert coerce_date_of_birth(datetime(2020, 6, 15, 13, 45)) == date(2020, 6, 15)
    assert coerce_date_of_birth(" 2020-06-15 ") == date(2020, 6, 15)


def test_invalid_date_of_birth_is_a_value_error():
    with pytest.raises(ValueError):
        calculate_age(None, today=date(2025, 1, 1))


# --- age ---

@pytest.mark.parametrize(
    "dob, today, expected",
    [
        (date(2020, 6, 15), date(2025, 6, 15), Age(5, 0)),
        (date(2020, 6, 15), date(2025, 6, 14), Age(4, 11)),
        (date(2020, 6, 15), date(2025, 3, 1), Age(4, 8)),
        (date(2020, 6, 15), date(2020, 6, 15), Age(0, 0)),
        (date(2020, 6, 15), date(2020, 7, 14), Age(0, 0)),
        (date(2020, 2, 29), date(2025, 2, 28), Age(4, 11)),
        (date(2020, 2, 29), date(2025, 3, 1), Age(5, 0)),
    ],
)
def test_calculate_age(dob, today, expected):
    assert calculate_age(dob, today) == expected


def test_calculate_age_borrows_a_single_month_for_end_of_month_birthdays():
    # today's day-of-month is earlier than the birth day-of-month
    assert calculate_age(date(1990, 3, 31), date(2025, 3, 15)) == Age(34, 11)
    assert calculate_age(date(1990, 3, 31), date(2025, 4, 30)) == Age(35, 0)
    assert calculate_age(date(1990, 3, 31), date(2025, 2, 28)) == Age(34, 10)


def test_calculate_age_is_stable_for_a_fixed_today():
    today = date(2025, 8, 9)
    assert calculate_age(date(2021, 11, 30), today) == calculate_age(date(2021, 11, 30), today)


def test_calculate_age_is_never_negative_for_past_dates():
    today = date(2025, 3, 15)
    for offset in range(1, 2000, 17):
        age = calculate_age(today - timedelta(days=offset), today)
        assert age.years >= 0
        assert 0 <= age.months <= 11


def test_calculate_age_rejects_future_date_of_birth():
    with pytest.raises(InvalidDateOfBirth):
        calculate_age(date(2025, 3, 2), today=date(2025, 3, 1))


def test_calculate_age_defaults_to_today():
    age = calculate_age(date.today() - timedelta(days=3))
    assert age.years == 0
    assert age.months in (0, 1)


# --- classification ---

@pytest.mark.parametrize(
    "dob, expected",
    [
        (date(2020, 1, 1), Classification.YEAR_1),
        (date(2020, 4, 30), Classification.YEAR_1),
        (date(2020, 5, 1), Classification.YEAR_1),
        (date(2020, 5, 2), Classification.YEAR_0),
        (date(2020, 12, 31), Classification.YEAR_0),
    ],
)
def test_classify_by_birth_date(dob, expected):
    assert classify_by_birth_date(dob) == expected


def test_classification_values_are_display_labels():
    assert classify_by_birth_date(date(2020, 4, 30)) == "Year 1"
    assert classify_by_birth_date(date(2020, 5, 2)).value == "Year 0"


def test_classify_by_age_switches_on_fifth_birthday():
    dob = date(2020, 6, 15)
    assert classify_by_age(dob, today=date(2025, 6, 14)) == Classification.YEAR_0
    assert classify_by_age(dob, today=date(2025, 6, 15)) == Classification.YEAR_1


def test_classification_rules_can_disagree():
    dob = date(2020, 3, 1)
    today = date(2024, 6, 1)
    assert classify_by_birth_date(dob) == Classification.YEAR_1
    assert classify_by_age(dob, today) == Classification.YEAR_0


# --- enrolment year ---

def test_calculate_enrolment_year():
    assert calculate_enrolment_year(date(2020, 6, 15)) == 2025
    assert calculate_enrolment_year("2019-12-31") == 2024


def test_calculate_enrolment_details_uses_age_classification():
    details = calculate_enrolment_details(date(2020, 6, 15), today=date(2025, 3, 1))
    assert details == EnrolmentDetails(enrolment_year=2025, classification=Classification.YEAR_0)


# --- intake dates ---

@pytest.mark.parametrize(
    "d, expected",
    [
        (date(2025, 2, 3), date(2025, 2, 3)),   # Monday
        (date(2025, 2, 4), date(2025, 2, 10)),  # Tuesday
        (date(2025, 2, 8), date(2025, 2, 10)),  # Saturday
        (date(2025, 2, 9), date(2025, 2, 10)),  # Sunday
    ],
)
def test_first_monday_on_or_after(d, expected):
    assert first_monday_on_or_after(d) == expected


def test_first_monday_on_or_after_always_lands_on_monday_within_a_week():
    start = date(2025, 1, 1)
    for offset in range(14):
        d = start + timedelta(days=offset)
        monday = first_monday_on_or_after(d)
        assert monday.weekday() == 0
        assert 0 <= (monday - d).days <= 6


def test_enumerate_intake_dates_for_2025():
    dates = enumerate_intake_dates(TERM_DATES_2025)
    assert dates == ALL_2025_INTAKES
    assert dates == sorted(set(dates))


def test_term_one_first_and_sixth_monday():
    dates = enumerate_intake_dates(TERM_DATES_2025)
    assert dates[:2] == [date(2025, 2, 10), date(2025, 3, 17)]
    assert dates[1] - dates[0] == timedelta(days=35)


def _calendar_with_term_one(end: date) -> AcademicCalendar:
    return AcademicCalendar(
        year=2025,
        terms=(Term(1, date(2025, 2, 4), end),) + TERM_DATES_2025.terms[1:],
    )


def test_sixth_monday_after_term_end_is_dropped():
    dates = enumerate_intake_dates(_calendar_with_term_one(date(2025, 3, 14)))
    assert len(dates) == 7
    assert date(2025, 3, 17) not in dates
    assert dates[0] == date(2025, 2, 10)


def test_sixth_monday_on_term_end_is_kept():
    dates = enumerate_intake_dates(_calendar_with_term_one(date(2025, 3, 17)))
    assert date(2025, 3, 17) in dates
    assert len(dates) == 8


def test_get_intake_dates_uses_fixed_calendar_for_any_year():
    assert get_intake_dates(2025) == ALL_2025_INTAKES
    assert get_intake_dates(2031) == ALL_2025_INTAKES


def test_get_intake_dates_accepts_replacement_calendar():
    calendar = _calendar_with_term_one(date(2025, 3, 14))
    assert get_intake_dates(2030, calendar) == enumerate_intake_dates(calendar)


def test_upcoming_intake_dates_excludes_today_and_truncates():
    upcoming = upcoming_intake_dates(ALL_2025_INTAKES, today=date(2025, 4, 28))
    assert upcoming == [date(2025, 6, 2), date(2025, 7, 14), date(2025, 8, 18), date(2025, 10, 6)]


def test_upcoming_intake_dates_returns_fewer_when_few_remain():
    assert upcoming_intake_dates(ALL_2025_INTAKES, today=date(2025, 10, 6)) == [date(2025, 11, 10)]
    assert upcoming_intake_dates(ALL_2025_INTAKES, today=date(2025, 12, 1)) == []


def test_upcoming_intake_dates_limit():
    before = date(2024, 12, 31)
    assert upcoming_intake_dates(ALL_2025_INTAKES, today=before) == ALL_2025_INTAKES[:4]
    assert upcoming_intake_dates(ALL_2025_INTAKES, today=before, limit=None) == ALL_2025_INTAKES
    assert upcoming_intake_dates(ALL_2025_INTAKES, today=before, limit=2) == ALL_2025_INTAKES[:2]


def test_upcoming_intake_dates_preserves_order():
    for offset in range(0, 365, 9):
        today = date(2025, 1, 1) + timedelta(days=offset)
        upcoming = upcoming_intake_dates(ALL_2025_INTAKES, today=today)
        assert upcoming == sorted(upcoming)
        assert len(upcoming) <= 4
        assert all(d > today for d in upcoming)
        expected_len = min(4, len([d for d in ALL_2025_INTAKES if d > today]))
        assert len(upcoming) == expected_len


# --- calendar invariants ---

def test_calendar_requires_four_terms():
    with pytest.raises(InvalidCalendar):
        AcademicCalendar(year=2025, terms=TERM_DATES_2025.terms[:3])


def test_calendar_requires_terms_in_order():
    with pytest.raises(InvalidCalendar):
        AcademicCalendar(year=2025, terms=tuple(reversed(TERM_DATES_2025.terms)))


def test_calendar_rejects_overlapping_terms():
    t1, t2, t3, t4 = TERM_DATES_2025.terms
    overlapping = Term(2, date(2025, 4, 10), t2.end_date)
    with pytest.raises(InvalidCalendar):
        AcademicCalendar(year=2025, terms=(t1, overlapping, t3, t4))


def test_term_must_start_before_it_ends():
    with pytest.raises(InvalidCalendar):
        Term(1, date(2025, 2, 4), date(2025, 2, 4))
    with pytest.raises(InvalidCalendar):
        Term(5, date(2025, 2, 4), date(2025, 3, 4))


def test_calendar_stores_terms_as_tuple():
    calendar = AcademicCalendar(year=2025, terms=list(TERM_DATES_2025.terms))
    assert calendar == TERM_DATES_2025
    assert hash(calendar) == hash(TERM_DATES_2025)
    assert TERM_DATES_2025.terms[0].name == "Term 1"
