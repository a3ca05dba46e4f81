import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from models import IR35Status, Seniority, WorkLocationType

# Filter value meaning "no preference", sent by the search form's selects
ANY = "any"

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrmModel(CamelModel):
    model_config = ConfigDict(from_attributes=True)


# --- Search ---
class JobFilters(CamelModel):
    """Criteria accepted by the job search.

    Every filter is optional. Empty strings and "Any" mean the filter is not
    applied. ``distance`` is accepted for form compatibility but does not
    filter anything.
    """

    keywords: Optional[str] = None
    city: Optional[str] = None
    distance: Optional[str] = None
    ir35_status: Optional[IR35Status] = None
    work_location_type: Optional[WorkLocationType] = None
    seniority: Optional[Seniority] = None
    day_rate_min: Optional[float] = None
    day_rate_max: Optional[float] = None
    date_posted: Optional[Literal["today", "week", "month"]] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_by: Literal["date", "salary"] = "date"

    @field_validator(
        "keywords",
        "city",
        "distance",
        "ir35_status",
        "work_location_type",
        "seniority",
        "day_rate_min",
        "day_rate_max",
        "date_posted",
        mode="before",
    )
    @classmethod
    def _blank_or_any_is_absent(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value or value.lower() == ANY:
                return None
        return value


# --- Company ---
class CompanyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=256)
    scrape_url: AnyHttpUrl
    logo_url: Optional[AnyHttpUrl] = None
    first_page_hash: Optional[str] = None


class CompanySummary(OrmModel):
    id: uuid.UUID
    name: str
    logo_url: Optional[str] = None


class Company(CompanySummary):
    scrape_url: str
    first_page_hash: Optional[str] = None


# --- Job ---
class JobCreate(CamelModel):
    company_id: uuid.UUID
    url: AnyHttpUrl
    title: str = Field(min_length=1, max_length=256)
    summary: Optional[str] = Field(default=None, max_length=5000)
    city: Optional[str] = Field(default=None, max_length=191)
    lat: Optional[float] = None
    lng: Optional[float] = None
    work_location_type: WorkLocationType
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    ir35_status: IR35Status
    posted_at: Optional[datetime] = None
    seniority: Seniority
    years_of_experience: Optional[int] = None
    contract_length: Optional[int] = None
    tech_stack: Optional[List[str]] = None

    # tech_stack_text is derived from tech_stack and cannot be supplied
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _salary_range_is_ordered(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salaryMin must not exceed salaryMax")
        return self


class Job(OrmModel):
    id: uuid.UUID
    company_id: uuid.UUID
    url: str
    title: str
    summary: Optional[str] = None
    city: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    work_location_type: WorkLocationType
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    ir35_status: IR35Status
    created_at: datetime
    posted_at: Optional[datetime] = None
    seniority: Seniority
    years_of_experience: Optional[int] = None
    contract_length: Optional[int] = None
    tech_stack: Optional[List[str]] = None
    tech_stack_text: Optional[str] = None


class JobWithCompany(Job):
    company: Optional[CompanySummary] = None


class JobPage(CamelModel):
    jobs: List[JobWithCompany]
    total: int
    page: int
    limit: int
    total_pages: int


# --- Ignored jobs ---
class IgnoredJobCreate(CamelModel):
    company_id: uuid.UUID
    url: AnyHttpUrl
    reason: Optional[str] = Field(default=None, max_length=1024)


class IgnoredJob(OrmModel):
    id: uuid.UUID
    company_id: uuid.UUID
    url: str
    reason: Optional[str] = None
    created_at: datetime


# --- Profiles ---
class ProfileCreate(CamelModel):
    email: EmailStr
    id: Optional[uuid.UUID] = None  # external identity id, when known


class Profile(OrmModel):
    id: uuid.UUID
    email: str
    is_paid: bool
    created_at: datetime
