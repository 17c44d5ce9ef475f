"""Request and response models for the portfolio API.

Each entity has three models kept next to each other:

* ``<Entity>Create`` mirrors the table's non-null columns as required fields
  and is used for POST (and PUT for personal info).
* ``<Entity>Update`` makes every field optional for PATCH. Sending ``null``
  for a column that cannot be null is rejected instead of reaching the store.
* ``<Entity>Out`` is the response shape, read straight off the ORM row.

JSON uses camelCase keys (``startDate``, ``updatedAt``); snake_case is also
accepted on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


def _not_null(value):
    if value is None:
        raise ValueError("Field may not be null")
    return value


NotNullStr = Annotated[Optional[str], BeforeValidator(_not_null)]
NotNullInt = Annotated[Optional[int], BeforeValidator(_not_null)]
Proficiency = Annotated[Optional[int], Field(ge=0, le=100)]
Year = Annotated[Optional[str], Field(max_length=4)]


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on read; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrmModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -----------------------------
# Personal info
# -----------------------------
class SocialLinks(CamelModel):
    github: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None


class PersonalInfoCreate(CamelModel):
    name: str
    title: str
    description: str
    email: str
    location: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    social: SocialLinks = Field(default_factory=SocialLinks)


class PersonalInfoOut(OrmModel):
    id: int
    name: str
    title: str
    description: str
    email: str
    location: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    social: SocialLinks
    updated_at: UtcDatetime


# -----------------------------
# Skills
# -----------------------------
class SkillCreate(CamelModel):
    name: str
    category: str
    icon: Optional[str] = None
    proficiency: Proficiency = None
    ordinal: int


class SkillUpdate(CamelModel):
    name: NotNullStr = None
    category: NotNullStr = None
    icon: Optional[str] = None
    proficiency: Proficiency = None
    ordinal: NotNullInt = None


class SkillOut(OrmModel):
    id: int
    name: str
    category: str
    icon: Optional[str] = None
    proficiency: Optional[int] = None
    ordinal: int
    updated_at: UtcDatetime


# -----------------------------
# Education
# -----------------------------
class EducationCreate(CamelModel):
    institution: str
    degree: str
    field: str
    start_date: str
    end_date: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    gpa: Optional[str] = None
    ordinal: int


class EducationUpdate(CamelModel):
    institution: NotNullStr = None
    degree: NotNullStr = None
    field: NotNullStr = None
    start_date: NotNullStr = None
    end_date: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    gpa: Optional[str] = None
    ordinal: NotNullInt = None


class EducationOut(OrmModel):
    id: int
    institution: str
    degree: str
    field: str
    start_date: str
    end_date: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    gpa: Optional[str] = None
    ordinal: int
    updated_at: UtcDatetime


# -----------------------------
# Experience
# -----------------------------
class ExperienceCreate(CamelModel):
    company: str
    position: str
    start_date: str
    end_date: Optional[str] = None
    description: str
    location: Optional[str] = None
    logo: Optional[str] = None
    ordinal: int


class ExperienceUpdate(CamelModel):
    company: NotNullStr = None
    position: NotNullStr = None
    start_date: NotNullStr = None
    end_date: Optional[str] = None
    description: NotNullStr = None
    location: Optional[str] = None
    logo: Optional[str] = None
    ordinal: NotNullInt = None


class ExperienceOut(OrmModel):
    id: int
    company: str
    position: str
    start_date: str
    end_date: Optional[str] = None
    description: str
    location: Optional[str] = None
    logo: Optional[str] = None
    ordinal: int
    updated_at: UtcDatetime


# -----------------------------
# Projects
# -----------------------------
class ProjectCreate(CamelModel):
    title: str
    description: str
    image: str
    github: Optional[str] = None
    demo: Optional[str] = None
    featured: Optional[bool] = False
    year: Year = None
    ordinal: int


class ProjectUpdate(CamelModel):
    title: NotNullStr = None
    description: NotNullStr = None
    image: NotNullStr = None
    github: Optional[str] = None
    demo: Optional[str] = None
    featured: Optional[bool] = None
    year: Year = None
    ordinal: NotNullInt = None


class ProjectOut(OrmModel):
    id: int
    title: str
    description: str
    image: str
    github: Optional[str] = None
    demo: Optional[str] = None
    featured: Optional[bool] = None
    year: Optional[str] = None
    ordinal: int
    updated_at: UtcDatetime


# -----------------------------
# Technologies
# -----------------------------
class TechnologyCreate(CamelModel):
    name: str


class TechnologyOut(OrmModel):
    id: int
    name: str
    updated_at: UtcDatetime


# -----------------------------
# Contact
# -----------------------------
class ContactSubmission(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    subject: str = Field(min_length=5)
    message: str = Field(min_length=10)


class MessageResponse(BaseModel):
    message: str
