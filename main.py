import uuid
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

import models
import schemas
import crud
from database import create_db_and_tables, get_db
from auth import get_current_profile
from search import SearchService, SqlJobStore
from settings import get_settings
from request_id_middleware import RequestIdMiddleware
from observability import init_observability


# Initialise observability before creating app
init_observability()
logger = structlog.get_logger(__name__)

# Create DB tables on startup
create_db_and_tables()

app = FastAPI(
    title="Contract Jobs",
    description="Search API for UK contract job listings",
    version="0.1.0",
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)


# --- Error handlers ---
@app.exception_handler(crud.UnknownCompanyError)
async def unknown_company_handler(request: Request, exc: crud.UnknownCompanyError):
    logger.warning("Rejected write for unknown company", company_id=str(exc.company_id))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)}
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # The session is rolled back when get_db closes it
    logger.warning("Integrity error on write", error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Write conflicts with existing data"},
    )


# --- Dependencies ---
def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(SqlJobStore(db))


@app.get("/healthz", include_in_schema=False)
def healthz():
    return {"status": "ok"}


@app.get("/profiles/me", response_model=schemas.Profile, tags=["Auth"])
def get_me(current_profile: models.Profile = Depends(get_current_profile)):
    """Returns the authenticated caller's profile."""
    return current_profile


# --- Job search (public) ---
@app.get("/jobs/search", response_model=schemas.JobPage, tags=["Jobs"])
def search_jobs_endpoint(
    filters: Annotated[schemas.JobFilters, Query()],
    service: SearchService = Depends(get_search_service),
):
    return service.search(filters)


@app.get("/jobs/{job_id}", response_model=Optional[schemas.JobWithCompany], tags=["Jobs"])
def get_job_endpoint(job_id: uuid.UUID, service: SearchService = Depends(get_search_service)):
    """Single job with its company, or null when there is no such job."""
    return service.by_id(job_id)


# --- Write paths (scraper / admin, authenticated) ---
@app.post(
    "/jobs",
    response_model=schemas.Job,
    status_code=status.HTTP_201_CREATED,
    tags=["Jobs"],
)
def create_job_endpoint(
    job: schemas.JobCreate,
    current_profile: models.Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    db_job = crud.create_job(db=db, job=job)
    db.commit()
    logger.info(
        "Job created",
        job_id=str(db_job.id),
        company_id=str(db_job.company_id),
        profile_id=str(current_profile.id),
    )
    return db_job


@app.get("/companies", response_model=List[schemas.Company], tags=["Companies"])
def list_companies_endpoint(
    current_profile: models.Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return crud.list_companies(db)


@app.post(
    "/companies",
    response_model=schemas.Company,
    status_code=status.HTTP_201_CREATED,
    tags=["Companies"],
)
def create_company_endpoint(
    company: schemas.CompanyCreate,
    current_profile: models.Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    db_company = crud.create_company(db=db, company=company)
    db.commit()
    logger.info("Company created", company_id=str(db_company.id), profile_id=str(current_profile.id))
    return db_company


@app.delete("/companies/{company_id}", tags=["Companies"])
def delete_company_endpoint(
    company_id: uuid.UUID,
    current_profile: models.Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    logger.info(f"Deleting company {company_id} and its jobs", profile_id=str(current_profile.id))
    if not crud.delete_company(db=db, company_id=company_id):
        raise HTTPException(status_code=404, detail="Company not found")
    return {"status": "deleted", "company_id": str(company_id)}


@app.post(
    "/ignored-jobs",
    response_model=schemas.IgnoredJob,
    status_code=status.HTTP_201_CREATED,
    tags=["Companies"],
)
def create_ignored_job_endpoint(
    ignored: schemas.IgnoredJobCreate,
    current_profile: models.Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    db_ignored = crud.create_ignored_job(db=db, ignored=ignored)
    db.commit()
    return db_ignored
