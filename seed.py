"""Insert an example company and job into the configured database.

Usage: ``python seed.py``. Extend with real seed data as needed.
"""
import structlog

import crud
import schemas
from database import SessionLocal, create_db_and_tables
from observability import init_observability

logger = structlog.get_logger(__name__)


def seed(db) -> None:
    company = crud.create_company(
        db,
        schemas.CompanyCreate(name="Example Ltd", scrape_url="https://example.com/jobs"),
    )
    job = crud.create_job(
        db,
        schemas.JobCreate(
            company_id=company.id,
            url="https://example.com/jobs/123",
            title="Senior TypeScript Contractor",
            summary="Example job posting for a senior TypeScript engineer.",
            city="Remote",
            work_location_type="remote",
            ir35_status="outside",
            seniority="senior",
        ),
    )
    db.commit()
    logger.info("Seed completed", company_id=str(company.id), job_id=str(job.id))


if __name__ == "__main__":
    init_observability()
    create_db_and_tables()
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
