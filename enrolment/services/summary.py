"""Display formatting and the plain-text summary copied from the final form step."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from enrolment.schemas.enrolment import PreEnrolmentForm
from enrolment.services.academic_calendar import (
    AcademicCalendar,
    Age,
    calculate_age,
    calculate_enrolment_details,
    get_intake_dates,
    upcoming_intake_dates,
)


def ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_short_date(d: date) -> str:
    """'February 10th, 2025'"""
    return f"{d:%B} {ordinal(d.day)}, {d.year}"


def format_long_date(d: date) -> str:
    """'Monday, February 10th, 2025'"""
    return f"{d:%A}, {format_short_date(d)}"


def format_age(age: Age) -> str:
    return f"{age.years} years and {age.months} months"


DATE_OF_BIRTH_REQUIRED = "Date of birth is required."


def form_errors(form: PreEnrolmentForm) -> List[str]:
    """Required-field checks for each step of the form."""
    errors: List[str] = []
    if not form.child_name.strip():
        errors.append("Child's name is required.")
    if not form.gender.strip():
        errors.append("Gender is required.")
    if form.date_of_birth is None:
        errors.append(DATE_OF_BIRTH_REQUIRED)
    if not form.parents:
        errors.append("At least one parent or guardian is required.")
    for i, parent in enumerate(form.parents, start=1):
        if not (parent.name.strip() and parent.phone.strip() and parent.email.strip()):
            errors.append(f"Parent/guardian {i} needs a name, phone and email.")
    if not form.address.strip():
        errors.append("Address is required.")
    return errors


def build_summary(
    form: PreEnrolmentForm,
    today: Optional[date] = None,
    calendar: Optional[AcademicCalendar] = None,
    limit: Optional[int] = 4,
) -> str:
    today = today or date.today()
    sections: List[str] = []

    child = [
        "Child Details:",
        f"Name: {form.child_name}",
        f"Gender: {form.gender}",
        f"Date of Birth: {format_short_date(form.date_of_birth) if form.date_of_birth else ''}",
    ]
    if form.date_of_birth:
        child.append(f"Current Age: {format_age(calculate_age(form.date_of_birth, today))}")
    sections.append("\n".join(child))

    if form.date_of_birth:
        details = calculate_enrolment_details(form.date_of_birth, today)
        sections.append("\n".join([
            "Enrolment Details:",
            f"Enrolment Year: {details.enrolment_year}",
            f"Classification: {details.classification.value}",
        ]))
        intakes = upcoming_intake_dates(
            get_intake_dates(details.enrolment_year, calendar), today=today, limit=limit
        )
        if intakes:
            sections.append("\n".join(
                ["Next Available Intake Dates:"] + [format_long_date(d) for d in intakes]
            ))

    guardians = ["Parent/Guardian Details:"]
    for parent in form.parents:
        guardians.append(
            f"\n{parent.relationship}:\nName: {parent.name}\nPhone: {parent.phone}\nEmail: {parent.email}"
        )
    sections.append("\n".join(guardians))

    sections.append(f"Address:\n{form.address}")
    return "\n\n".join(sections).strip()
