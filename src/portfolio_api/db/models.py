from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from portfolio_api.db.base import Base
from portfolio_api.db.utils import utcnow


class TimestampMixin:
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class PersonalInfo(TimestampMixin, Base):
    __tablename__ = "personal_info"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    avatar = Column(Text, nullable=True)
    # {"github": ..., "linkedin": ..., "twitter": ..., "instagram": ...}
    social = Column(JSON, nullable=False, default=dict)


class Skill(TimestampMixin, Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False)  # technical or soft
    icon = Column(Text, nullable=True)
    proficiency = Column(Integer, nullable=True)
    ordinal = Column(Integer, nullable=False)


class Education(TimestampMixin, Base):
    __tablename__ = "education"

    id = Column(Integer, primary_key=True)
    institution = Column(Text, nullable=False)
    degree = Column(Text, nullable=False)
    field = Column(Text, nullable=False)
    start_date = Column(Text, nullable=False)  # YYYY-MM
    end_date = Column(Text, nullable=True)  # YYYY-MM or "Present"
    description = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    gpa = Column(Text, nullable=True)
    ordinal = Column(Integer, nullable=False)


class Experience(TimestampMixin, Base):
    __tablename__ = "experience"

    id = Column(Integer, primary_key=True)
    company = Column(Text, nullable=False)
    position = Column(Text, nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=True)
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=True)
    logo = Column(Text, nullable=True)
    ordinal = Column(Integer, nullable=False)


class Project(TimestampMixin, Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    github = Column(Text, nullable=True)
    demo = Column(Text, nullable=True)
    featured = Column(Boolean, nullable=True, default=False)
    year = Column(String(4), nullable=True)
    ordinal = Column(Integer, nullable=False)


class Technology(TimestampMixin, Base):
    __tablename__ = "technologies"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)


class ProjectTechnology(Base):
    __tablename__ = "project_technologies"
    __table_args__ = (
        UniqueConstraint("project_id", "technology_id", name="uq_project_technology"),
    )

    id = Column(Integer, primary_key=True)
    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    technology_id = Column(
        Integer, ForeignKey("technologies.id", ondelete="CASCADE"), nullable=False
    )
