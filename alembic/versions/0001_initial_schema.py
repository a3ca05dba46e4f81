"""initial schema: companies, jobs, ignored jobs, profiles

Revision ID: 0001
Revises:
Create Date: 2025-06-02 10:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

work_location_type = sa.Enum("remote", "hybrid", "onsite", name="work_location_type")
ir35_status = sa.Enum("inside", "outside", name="ir35_status")
seniority_level = sa.Enum("junior", "mid", "senior", "lead", name="seniority_level")

SEARCH_INDEX_SQL = (
    "CREATE INDEX jobs_search_idx ON jobs USING gin ("
    "to_tsvector('english', title || ' ' || coalesce(tech_stack_text, '') "
    "|| ' ' || coalesce(summary, '')))"
)


def upgrade() -> None:
    is_postgresql = op.get_bind().dialect.name == "postgresql"
    tech_stack_type = (
        postgresql.ARRAY(sa.Text()) if is_postgresql else sa.JSON()
    )

    op.create_table(
        "companies",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("scrape_url", sa.Text(), nullable=False),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("first_page_hash", sa.Text(), nullable=True),
    )

    op.create_table(
        "jobs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "company_id",
            sa.Uuid(),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("city", sa.String(length=191), nullable=True),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("work_location_type", work_location_type, nullable=False),
        sa.Column("salary_min", sa.Integer(), nullable=True),
        sa.Column("salary_max", sa.Integer(), nullable=True),
        sa.Column("ir35_status", ir35_status, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("seniority", seniority_level, nullable=False),
        sa.Column("years_of_experience", sa.Integer(), nullable=True),
        sa.Column("contract_length", sa.Integer(), nullable=True),
        sa.Column("tech_stack", tech_stack_type, nullable=True),
        sa.Column("tech_stack_text", sa.Text(), nullable=True),
    )
    op.create_index("ix_jobs_company_id", "jobs", ["company_id"])
    if is_postgresql:
        op.execute(SEARCH_INDEX_SQL)

    op.create_table(
        "ignored_jobs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column(
            "company_id",
            sa.Uuid(),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_ignored_jobs_company_id", "ignored_jobs", ["company_id"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("is_paid", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
    op.drop_index("ix_ignored_jobs_company_id", table_name="ignored_jobs")
    op.drop_table("ignored_jobs")
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP INDEX IF EXISTS jobs_search_idx")
    op.drop_index("ix_jobs_company_id", table_name="jobs")
    op.drop_table("jobs")
    op.drop_table("companies")

    bind = op.get_bind()
    seniority_level.drop(bind, checkfirst=True)
    ir35_status.drop(bind, checkfirst=True)
    work_location_type.drop(bind, checkfirst=True)
