from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse

from enrolment.config import settings
from enrolment.dependencies import get_calendar, get_today
from enrolment.exceptions import EnrolmentError, InvalidDateOfBirth
from enrolment.schemas.enrolment import (
    AgeOut,
    CalendarOut,
    EnrolmentDetailsOut,
    Parent,
    PreEnrolmentForm,
    SummaryOut,
    TermOut,
)
from enrolment.services.academic_calendar import (
    AcademicCalendar,
    calculate_age,
    calculate_enrolment_details,
    classify_by_birth_date,
    coerce_date_of_birth,
    enumerate_intake_dates,
    get_intake_dates,
    terms_as_dicts,
    upcoming_intake_dates,
)
from enrolment.services.summary import DATE_OF_BIRTH_REQUIRED, build_summary, form_errors
from enrolment.templating import render_template

log = logging.getLogger(__name__)

router = APIRouter(tags=["enrolment"])
api_router = APIRouter(prefix="/api", tags=["api"])

RELATIONSHIPS = ["Mother", "Father", "Guardian", "Grandparent", "Other"]
GENDERS = ["Male", "Female", "Other"]


def _form_from_request_data(data) -> tuple[PreEnrolmentForm, List[str]]:
    dob: Optional[date] = None
    dob_error: Optional[str] = None
    raw_dob = (data.get("date_of_birth") or "").strip()
    if raw_dob:
        try:
            dob = coerce_date_of_birth(raw_dob)
        except InvalidDateOfBirth as e:
            dob_error = str(e)

    parents = [
        Parent(relationship=rel, name=name.strip(), phone=phone.strip(), email=email.strip())
        for rel, name, phone, email in zip(
            data.getlist("parent_relationship"),
            data.getlist("parent_name"),
            data.getlist("parent_phone"),
            data.getlist("parent_email"),
        )
    ]
    form = PreEnrolmentForm(
        child_name=(data.get("child_name") or "").strip(),
        gender=(data.get("gender") or "").strip(),
        date_of_birth=dob,
        parents=parents,
        address=(data.get("address") or "").strip(),
    )
    errors = form_errors(form)
    if dob_error:
        errors = [dob_error if e == DATE_OF_BIRTH_REQUIRED else e for e in errors]
    return form, errors


@router.get("/", response_class=HTMLResponse, name="enrolment.form")
def enrolment_form(request: Request):
    return render_template("enrolment/form.html", {
        "request": request,
        "form": PreEnrolmentForm(),
        "errors": [],
        "date_of_birth_value": "",
        "relationships": RELATIONSHIPS,
        "genders": GENDERS,
    })


@router.post("/", response_class=HTMLResponse, name="enrolment.submit")
async def enrolment_submit(
    request: Request,
    today: date = Depends(get_today),
    calendar: AcademicCalendar = Depends(get_calendar),
):
    data = await request.form()
    form, errors = _form_from_request_data(data)

    if not errors:
        try:
            age = calculate_age(form.date_of_birth, today)
            details = calculate_enrolment_details(form.date_of_birth, today)
            intakes = upcoming_intake_dates(
                get_intake_dates(details.enrolment_year, calendar),
                today=today,
                limit=settings.MAX_INTAKE_DATES,
            )
            summary = build_summary(form, today=today, calendar=calendar, limit=settings.MAX_INTAKE_DATES)
        except EnrolmentError as e:
            errors.append(str(e))

    if errors:
        log.info("Pre-enrolment form rejected: %s", "; ".join(errors))
        return render_template("enrolment/form.html", {
            "request": request,
            "form": form,
            "errors": errors,
            "date_of_birth_value": (data.get("date_of_birth") or "").strip(),
            "relationships": RELATIONSHIPS,
            "genders": GENDERS,
        }, status_code=422)

    return render_template("enrolment/summary.html", {
        "request": request,
        "form": form,
        "age": age,
        "details": details,
        "intakes": intakes,
        "summary": summary,
    })


@api_router.get("/enrolment/details", response_model=EnrolmentDetailsOut, name="api.enrolment_details")
def enrolment_details(
    date_of_birth: str = Query(...),
    limit: Optional[int] = Query(None, ge=0),
    today: date = Depends(get_today),
    calendar: AcademicCalendar = Depends(get_calendar),
):
    try:
        dob = coerce_date_of_birth(date_of_birth)
        age = calculate_age(dob, today)
        details = calculate_enrolment_details(dob, today)
        birth_date_classification = classify_by_birth_date(dob)
    except InvalidDateOfBirth as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    intakes = upcoming_intake_dates(
        get_intake_dates(details.enrolment_year, calendar),
        today=today,
        limit=settings.MAX_INTAKE_DATES if limit is None else limit,
    )
    return EnrolmentDetailsOut(
        date_of_birth=dob,
        age=AgeOut(years=age.years, months=age.months),
        enrolment_year=details.enrolment_year,
        classification=details.classification.value,
        birth_date_classification=birth_date_classification.value,
        intake_dates=intakes,
    )


@api_router.post("/enrolment/summary", response_model=SummaryOut, name="api.enrolment_summary")
def enrolment_summary(
    form: PreEnrolmentForm,
    today: date = Depends(get_today),
    calendar: AcademicCalendar = Depends(get_calendar),
):
    try:
        summary = build_summary(form, today=today, calendar=calendar, limit=settings.MAX_INTAKE_DATES)
    except EnrolmentError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return SummaryOut(summary=summary)


@api_router.get("/calendar", response_model=CalendarOut, name="api.calendar")
def term_calendar(calendar: AcademicCalendar = Depends(get_calendar)):
    return CalendarOut(
        year=calendar.year,
        terms=[TermOut(**t) for t in terms_as_dicts(calendar)],
        intake_dates=enumerate_intake_dates(calendar),
    )
