from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy.dialects import postgresql, sqlite

import schemas
from filters import TextSearchMatch, build_predicates, posted_since

NOW = datetime(2025, 3, 31, 15, 45, 12, tzinfo=timezone.utc)


def _sql(clause, dialect) -> str:
    return str(clause.compile(dialect=dialect))


def test_no_filters_gives_no_predicates():
    assert build_predicates(schemas.JobFilters(), now=NOW) == []


def test_any_and_blank_values_are_ignored():
    filters = schemas.JobFilters.model_validate(
        {
            "keywords": "   ",
            "city": "Any",
            "ir35Status": "any",
            "workLocationType": "ANY",
            "seniority": "",
            "datePosted": "Any",
            "dayRateMin": "",
        }
    )
    assert build_predicates(filters, now=NOW) == []


def test_distance_is_accepted_but_never_filters():
    filters = schemas.JobFilters(distance="10 miles")
    assert filters.distance == "10 miles"
    assert build_predicates(filters, now=NOW) == []


def test_every_filter_contributes_one_predicate():
    filters = schemas.JobFilters(
        keywords="python",
        city="London",
        distance="5",
        ir35_status="outside",
        work_location_type="remote",
        seniority="senior",
        day_rate_min=500,
        day_rate_max=750,
        date_posted="week",
    )
    predicates = build_predicates(filters, now=NOW)
    assert len(predicates) == 8
    assert isinstance(predicates[0], TextSearchMatch)


def test_day_rate_bounds_are_independent():
    only_min = build_predicates(schemas.JobFilters(day_rate_min=500), now=NOW)
    assert len(only_min) == 1
    assert "salary_min >=" in _sql(only_min[0], sqlite.dialect())

    only_max = build_predicates(schemas.JobFilters(day_rate_max=400), now=NOW)
    assert len(only_max) == 1
    assert "salary_max <=" in _sql(only_max[0], sqlite.dialect())

    # An empty range is the caller's business
    assert len(build_predicates(schemas.JobFilters(day_rate_min=900, day_rate_max=100), now=NOW)) == 2


def test_keywords_use_postgres_full_text_search():
    (predicate,) = build_predicates(schemas.JobFilters(keywords="frontend developer"), now=NOW)
    sql = _sql(predicate, postgresql.dialect())
    assert "to_tsvector" in sql
    assert "plainto_tsquery" in sql
    assert "@@" in sql
    assert "coalesce(jobs.tech_stack_text" in sql
    assert "coalesce(jobs.summary" in sql


def test_keywords_fall_back_to_term_matching_elsewhere():
    (predicate,) = build_predicates(schemas.JobFilters(keywords="frontend developer"), now=NOW)
    sql = _sql(predicate, sqlite.dialect())
    assert "to_tsvector" not in sql
    assert sql.count("LIKE") == 2


def test_city_is_case_insensitive_substring():
    (predicate,) = build_predicates(schemas.JobFilters(city="lond"), now=NOW)
    sql = _sql(predicate, postgresql.dialect())
    assert "jobs.city" in sql
    assert "LIKE" in sql.upper()


def test_date_posted_compares_effective_posted_timestamp():
    (predicate,) = build_predicates(schemas.JobFilters(date_posted="today"), now=NOW)
    assert "coalesce(jobs.posted_at, jobs.created_at) >=" in _sql(predicate, sqlite.dialect())


def test_posted_since_today_is_utc_midnight():
    assert posted_since("today", NOW) == datetime(2025, 3, 31, tzinfo=timezone.utc)


def test_posted_since_week_is_seven_days_back():
    assert posted_since("week", NOW) == datetime(2025, 3, 24, 15, 45, 12, tzinfo=timezone.utc)


def test_posted_since_month_clamps_to_month_end():
    assert posted_since("month", NOW) == datetime(2025, 2, 28, 15, 45, 12, tzinfo=timezone.utc)
    leap = datetime(2024, 3, 30, 9, 0, tzinfo=timezone.utc)
    assert posted_since("month", leap) == datetime(2024, 2, 29, 9, 0, tzinfo=timezone.utc)


def test_posted_since_month_crosses_year_boundary():
    january = datetime(2025, 1, 15, 8, 30, tzinfo=timezone.utc)
    assert posted_since("month", january) == datetime(2024, 12, 15, 8, 30, tzinfo=timezone.utc)


def test_posted_since_treats_naive_now_as_utc():
    assert posted_since("today", datetime(2025, 5, 1, 23, 59)) == datetime(2025, 5, 1, tzinfo=timezone.utc)


# --- Boundary validation of the criteria ---
def test_filter_defaults():
    filters = schemas.JobFilters()
    assert (filters.page, filters.limit, filters.sort_by) == (1, 10, "date")


@pytest.mark.parametrize(
    "params",
    [
        {"limit": 101},
        {"limit": 0},
        {"page": 0},
        {"ir35Status": "maybe"},
        {"workLocationType": "moon"},
        {"datePosted": "year"},
        {"sortBy": "relevance"},
    ],
)
def test_malformed_criteria_are_rejected(params):
    with pytest.raises(ValidationError):
        schemas.JobFilters.model_validate(params)


def test_camel_case_query_keys_are_accepted():
    filters = schemas.JobFilters.model_validate(
        {"ir35Status": "inside", "dayRateMin": "450", "sortBy": "salary", "page": "3"}
    )
    assert filters.ir35_status == "inside"
    assert filters.day_rate_min == 450
    assert filters.sort_by == "salary"
    assert filters.page == 3
