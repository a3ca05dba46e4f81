"""Translate search criteria into SQL predicates over the ``jobs`` table.

Each filter is independent: it either contributes one predicate or nothing,
and the caller ANDs the resulting list together. Keyword search uses
PostgreSQL full-text search (english stemming and stop words). Other
dialects, SQLite in local development and tests, fall back to a
case-insensitive match of every keyword term.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import Boolean, and_, func
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement

import schemas
from models import Job, search_document

TEXT_SEARCH_CONFIG = "english"


class TextSearchMatch(ColumnElement):
    """``document`` matches the plain-text ``query`` (all terms must match)."""

    type = Boolean()
    inherit_cache = False

    def __init__(self, document, query: str, config: str = TEXT_SEARCH_CONFIG):
        self.document = document
        self.query = query
        self.config = config

    @property
    def _from_objects(self):
        return self.document._from_objects


@compiles(TextSearchMatch, "postgresql")
def _compile_text_search_postgresql(element, compiler, **kw):
    tsvector = func.to_tsvector(element.config, element.document)
    tsquery = func.plainto_tsquery(element.config, element.query)
    return compiler.process(tsvector.bool_op("@@")(tsquery), **kw)


@compiles(TextSearchMatch)
def _compile_text_search_default(element, compiler, **kw):
    terms = element.query.split()
    clause = and_(*[element.document.icontains(term, autoescape=True) for term in terms])
    return compiler.process(clause, **kw)


def _one_month_before(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def posted_since(date_posted: str, now: datetime) -> datetime:
    """Earliest effective posting time accepted by a ``datePosted`` filter.

    ``today`` starts at UTC midnight, ``week`` is seven days back and
    ``month`` is one calendar month back (day clamped to the month's end).
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    if date_posted == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_posted == "week":
        return now - timedelta(days=7)
    if date_posted == "month":
        return _one_month_before(now)
    raise ValueError(f"Unknown datePosted value: {date_posted!r}")


def build_predicates(
    filters: schemas.JobFilters, now: Optional[datetime] = None
) -> List[ColumnElement]:
    """Return the predicates for every filter set on ``filters``, in a fixed order."""
    predicates: List[ColumnElement] = []

    if filters.keywords:
        predicates.append(TextSearchMatch(search_document(), filters.keywords))

    if filters.city:
        predicates.append(Job.city.icontains(filters.city, autoescape=True))

    # filters.distance is accepted but not applied

    if filters.ir35_status is not None:
        predicates.append(Job.ir35_status == filters.ir35_status)

    if filters.work_location_type is not None:
        predicates.append(Job.work_location_type == filters.work_location_type)

    if filters.seniority is not None:
        predicates.append(Job.seniority == filters.seniority)

    if filters.day_rate_min is not None:
        predicates.append(Job.salary_min >= filters.day_rate_min)

    if filters.day_rate_max is not None:
        predicates.append(Job.salary_max <= filters.day_rate_max)

    if filters.date_posted:
        threshold = posted_since(filters.date_posted, now or datetime.now(timezone.utc))
        predicates.append(Job.effective_posted_at >= threshold)

    return predicates
