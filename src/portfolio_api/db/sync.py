from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from portfolio_api.db.models import (
    Education,
    Experience,
    PersonalInfo,
    Project,
    ProjectTechnology,
    Skill,
    Technology,
)
from portfolio_api.db.storage import DatabaseStorage
from portfolio_api.schemas import (
    EducationCreate,
    EducationOut,
    ExperienceCreate,
    ExperienceOut,
    PersonalInfoCreate,
    PersonalInfoOut,
    ProjectCreate,
    ProjectOut,
    SkillCreate,
    SkillOut,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "portfolio_v1"


def _dump(model_cls, row) -> Dict[str, Any]:
    return model_cls.model_validate(row).model_dump(mode="json", by_alias=True)


def export_portfolio_data(storage: DatabaseStorage) -> Dict[str, Any]:
    """Build the full public snapshot: everything the portfolio page renders."""
    info = storage.get_personal_info()

    skills: Dict[str, List[Dict[str, Any]]] = {}
    for skill in storage.get_all_skills():
        skills.setdefault(skill.category, []).append(_dump(SkillOut, skill))

    projects = []
    for proj in storage.get_all_projects():
        item = _dump(ProjectOut, proj)
        item["technologies"] = [tech.name for tech in storage.get_project_technologies(proj.id)]
        projects.append(item)

    return {
        "personalInfo": _dump(PersonalInfoOut, info) if info else None,
        "skills": skills,
        "education": [_dump(EducationOut, edu) for edu in storage.get_all_education()],
        "experience": [_dump(ExperienceOut, exp) for exp in storage.get_all_experience()],
        "projects": projects,
        "schemaVersion": SCHEMA_VERSION,
    }


def _db_has_rows(session: Session) -> bool:
    total = 0
    for model in (PersonalInfo, Skill, Education, Experience, Project, Technology):
        total += session.query(func.count(model.id)).scalar() or 0
    return total > 0


def _with_ordinals(items: Iterable[Any]) -> List[Tuple[int, Dict[str, Any]]]:
    out: List[Tuple[int, Dict[str, Any]]] = []
    for idx, item in enumerate(items or [], start=1):
        if not isinstance(item, dict):
            continue
        out.append((idx, item))
    return out


def _iter_seed_skills(raw: Any) -> Iterable[Dict[str, Any]]:
    # Accept either a flat list or a {category: [skills]} mapping.
    if isinstance(raw, dict):
        for category, items in raw.items():
            for _, item in _with_ordinals(items):
                yield {"category": category, **item}
    else:
        for _, item in _with_ordinals(raw):
            yield item


def seed_db_if_empty(session: Session, data_path: str) -> bool:
    """Load a portfolio snapshot into an empty database.

    Returns True when rows were written. Rows without an ``ordinal`` are
    numbered in file order; technologies are shared by name.
    """
    if _db_has_rows(session):
        return False

    path = Path(data_path)
    if not path.exists():
        logger.info("Seed file %s not found; starting with an empty portfolio.", data_path)
        return False

    data = json.loads(path.read_text(encoding="utf-8"))

    personal = data.get("personalInfo")
    if isinstance(personal, dict):
        payload = PersonalInfoCreate.model_validate(personal)
        session.add(PersonalInfo(**payload.model_dump()))

    for idx, skill in enumerate(_iter_seed_skills(data.get("skills")), start=1):
        payload = SkillCreate.model_validate({"ordinal": idx, **skill})
        session.add(Skill(**payload.model_dump()))

    for idx, edu in _with_ordinals(data.get("education")):
        payload = EducationCreate.model_validate({"ordinal": idx, **edu})
        session.add(Education(**payload.model_dump()))

    for idx, exp in _with_ordinals(data.get("experience")):
        payload = ExperienceCreate.model_validate({"ordinal": idx, **exp})
        session.add(Experience(**payload.model_dump()))

    tech_by_name: Dict[str, Technology] = {}
    for idx, proj in _with_ordinals(data.get("projects")):
        payload = ProjectCreate.model_validate({"ordinal": idx, **proj})
        proj_row = Project(**payload.model_dump())
        session.add(proj_row)
        session.flush()

        linked: set[int] = set()
        for name in proj.get("technologies", []) or []:
            if not isinstance(name, str) or not name.strip():
                continue
            tech = tech_by_name.get(name)
            if tech is None:
                tech = Technology(name=name)
                session.add(tech)
                session.flush()
                tech_by_name[name] = tech
            if tech.id in linked:
                continue
            linked.add(tech.id)
            session.add(ProjectTechnology(project_id=proj_row.id, technology_id=tech.id))

    session.commit()
    logger.info("Seeded portfolio database from %s", data_path)
    return True
