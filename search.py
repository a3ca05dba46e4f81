"""Job search: run filter predicates against a store and assemble result pages.

``SearchService`` never touches the database directly. It talks to a
``JobStore`` capability (``SqlJobStore`` in production) so that the count and
the page fetch are two explicit calls that tests can observe.
"""
from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.sql.expression import ColumnElement

import models
import schemas
from filters import build_predicates

logger = structlog.get_logger(__name__)


class JobStore(Protocol):
    def count(self, predicates: Sequence[ColumnElement]) -> int:
        ...

    def fetch(
        self,
        predicates: Sequence[ColumnElement],
        order_by: Sequence[ColumnElement],
        limit: int,
        offset: int,
    ) -> List[models.Job]:
        ...

    def get(self, job_id: uuid.UUID) -> Optional[models.Job]:
        ...


class SqlJobStore:
    """``JobStore`` backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def count(self, predicates):
        stmt = select(func.count()).select_from(models.Job).where(*predicates)
        return self.db.scalar(stmt) or 0

    def fetch(self, predicates, order_by, limit, offset):
        # joinedload is a LEFT OUTER JOIN, a job without a company is still returned
        stmt = (
            select(models.Job)
            .options(joinedload(models.Job.company))
            .where(*predicates)
            .order_by(*order_by)
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.scalars(stmt).unique())

    def get(self, job_id):
        return self.db.get(models.Job, job_id, options=[joinedload(models.Job.company)])


def order_by_for(sort_by: str) -> List[ColumnElement]:
    """ORDER BY clauses for ``sort_by``; id breaks ties so paging is stable."""
    if sort_by == "salary":
        return [models.Job.salary_max.desc().nulls_last(), models.Job.id.asc()]
    return [models.Job.effective_posted_at.desc(), models.Job.id.asc()]


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


class SearchService:
    def __init__(self, store: JobStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or models.utcnow

    def search(self, filters: schemas.JobFilters) -> schemas.JobPage:
        """Return one page of jobs matching ``filters`` plus the full match count.

        A page past the end comes back empty with ``total`` unchanged.
        """
        predicates = build_predicates(filters, now=self.clock())
        offset = (filters.page - 1) * filters.limit

        total = self.store.count(predicates)
        jobs = self.store.fetch(predicates, order_by_for(filters.sort_by), filters.limit, offset)

        logger.info(
            "Job search",
            filters=sorted(
                filters.model_dump(exclude_none=True, exclude={"page", "limit", "sort_by"})
            ),
            sort_by=filters.sort_by,
            page=filters.page,
            limit=filters.limit,
            total=total,
            returned=len(jobs),
        )

        return schemas.JobPage(
            jobs=[schemas.JobWithCompany.model_validate(job) for job in jobs],
            total=total,
            page=filters.page,
            limit=filters.limit,
            total_pages=total_pages(total, filters.limit),
        )

    def by_id(self, job_id: uuid.UUID) -> Optional[schemas.JobWithCompany]:
        job = self.store.get(job_id)
        if job is None:
            return None
        return schemas.JobWithCompany.model_validate(job)
