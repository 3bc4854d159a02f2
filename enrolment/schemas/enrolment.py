from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field


class Parent(BaseModel):
    relationship: str = "Mother"
    name: str = ""
    phone: str = ""
    email: str = ""


class PreEnrolmentForm(BaseModel):
    child_name: str = ""
    gender: str = ""
    date_of_birth: Optional[date] = None
    parents: List[Parent] = Field(default_factory=lambda: [Parent()])
    address: str = ""


class AgeOut(BaseModel):
    years: int
    months: int


class EnrolmentDetailsOut(BaseModel):
    date_of_birth: date
    age: AgeOut
    enrolment_year: int
    classification: str
    birth_date_classification: str
    intake_dates: List[date]


class TermOut(BaseModel):
    number: int
    name: str
    start_date: date
    end_date: date


class CalendarOut(BaseModel):
    year: int
    terms: List[TermOut]
    intake_dates: List[date]


class SummaryOut(BaseModel):
    summary: str
