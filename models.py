import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, validates
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    false,
    func,
)
from database import Base


class WorkLocationType(str, enum.Enum):
    remote = "remote"
    hybrid = "hybrid"
    onsite = "onsite"


class IR35Status(str, enum.Enum):
    inside = "inside"
    outside = "outside"


class Seniority(str, enum.Enum):
    junior = "junior"
    mid = "mid"
    senior = "senior"
    lead = "lead"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Company(Base):
    __tablename__ = "companies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(256), nullable=False)
    scrape_url = Column(Text, nullable=False)
    logo_url = Column(Text, nullable=True)
    first_page_hash = Column(Text, nullable=True)  # used by the scraper to skip unchanged pages

    jobs = relationship(
        "Job", back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )
    ignored_jobs = relationship(
        "IgnoredJob", back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(
        Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = Column(Text, nullable=False)
    title = Column(String(256), nullable=False)
    summary = Column(Text, nullable=True)
    city = Column(String(191), nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    work_location_type = Column(
        Enum(WorkLocationType, name="work_location_type", values_callable=_enum_values),
        nullable=False,
    )
    salary_min = Column(Integer, nullable=True)  # day rate
    salary_max = Column(Integer, nullable=True)  # day rate
    ir35_status = Column(
        Enum(IR35Status, name="ir35_status", values_callable=_enum_values), nullable=False
    )
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    posted_at = Column(DateTime(timezone=True), nullable=True)
    seniority = Column(
        Enum(Seniority, name="seniority_level", values_callable=_enum_values), nullable=False
    )
    years_of_experience = Column(Integer, nullable=True)
    contract_length = Column(Integer, nullable=True)  # months
    tech_stack = Column(JSON().with_variant(ARRAY(Text), "postgresql"), nullable=True)
    # Derived from tech_stack, see _sync_tech_stack_text
    tech_stack_text = Column(Text, nullable=True)

    company = relationship("Company", back_populates="jobs")

    @validates("tech_stack")
    def _sync_tech_stack_text(self, key, value):
        self.tech_stack_text = " ".join(value) if value else None
        return list(value) if value is not None else None

    @hybrid_property
    def effective_posted_at(self):
        """When the job was posted, falling back to when it was stored."""
        return self.posted_at if self.posted_at is not None else self.created_at

    @effective_posted_at.expression
    def effective_posted_at(cls):
        return func.coalesce(cls.posted_at, cls.created_at)


def search_document():
    """Text the keyword search runs against: title, tech stack and summary."""
    return (
        Job.title
        + " "
        + func.coalesce(Job.tech_stack_text, "")
        + " "
        + func.coalesce(Job.summary, "")
    )


# Full-text index; only PostgreSQL has to_tsvector
Index(
    "jobs_search_idx",
    func.to_tsvector("english", search_document()),
    postgresql_using="gin",
).ddl_if(dialect="postgresql")


class IgnoredJob(Base):
    __tablename__ = "ignored_jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    url = Column(Text, nullable=False)
    company_id = Column(
        Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reason = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    company = relationship("Company", back_populates="ignored_jobs")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)  # external identity id
    email = Column(Text, unique=True, index=True, nullable=False)
    is_paid = Column(Boolean, default=False, server_default=false(), nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
