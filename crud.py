import uuid
from datetime import timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

import models
import schemas


class UnknownCompanyError(LookupError):
    """A job or ignored job referenced a company that does not exist."""

    def __init__(self, company_id: uuid.UUID):
        super().__init__(f"Company {company_id} does not exist")
        self.company_id = company_id


def _require_company(db: Session, company_id: uuid.UUID) -> models.Company:
    company = db.get(models.Company, company_id)
    if company is None:
        raise UnknownCompanyError(company_id)
    return company


# --- Company CRUD ---
def get_company(db: Session, company_id: uuid.UUID):
    return db.get(models.Company, company_id)


def list_companies(db: Session):
    return db.scalars(select(models.Company).order_by(models.Company.id.desc())).all()


def create_company(db: Session, company: schemas.CompanyCreate):
    db_company = models.Company(
        name=company.name,
        scrape_url=str(company.scrape_url),
        logo_url=str(company.logo_url) if company.logo_url else None,
        first_page_hash=company.first_page_hash,
    )
    db.add(db_company)
    db.flush()  # Assign ID without committing
    db.refresh(db_company)
    return db_company


def delete_company(db: Session, company_id: uuid.UUID):
    """Delete a company; its jobs and ignored jobs go with it."""
    db_company = db.get(models.Company, company_id)
    if not db_company:
        return False

    db.delete(db_company)
    db.commit()
    return True


# --- Job CRUD ---
def create_job(db: Session, job: schemas.JobCreate):
    """Insert a job for an existing company. tech_stack_text is derived by the model."""
    _require_company(db, job.company_id)

    posted_at = job.posted_at
    if posted_at is not None:
        # Stored as UTC so SQLite compares timestamps consistently
        if posted_at.tzinfo is None:
            posted_at = posted_at.replace(tzinfo=timezone.utc)
        posted_at = posted_at.astimezone(timezone.utc)

    db_job = models.Job(
        company_id=job.company_id,
        url=str(job.url),
        title=job.title,
        summary=job.summary,
        city=job.city,
        lat=job.lat,
        lng=job.lng,
        work_location_type=job.work_location_type,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        ir35_status=job.ir35_status,
        posted_at=posted_at,
        seniority=job.seniority,
        years_of_experience=job.years_of_experience,
        contract_length=job.contract_length,
        tech_stack=job.tech_stack,
    )
    db.add(db_job)
    db.flush()
    db.refresh(db_job)
    return db_job


# --- Ignored job CRUD ---
def create_ignored_job(db: Session, ignored: schemas.IgnoredJobCreate):
    _require_company(db, ignored.company_id)
    db_ignored = models.IgnoredJob(
        company_id=ignored.company_id,
        url=str(ignored.url),
        reason=ignored.reason,
    )
    db.add(db_ignored)
    db.flush()
    db.refresh(db_ignored)
    return db_ignored


# --- Profile CRUD ---
def get_profile_by_email(db: Session, email: str):
    return db.scalars(select(models.Profile).where(models.Profile.email == email)).first()


def create_profile(db: Session, profile: schemas.ProfileCreate):
    db_profile = models.Profile(email=profile.email, is_paid=False)
    if profile.id is not None:
        db_profile.id = profile.id
    db.add(db_profile)
    db.flush()
    db.refresh(db_profile)
    return db_profile
