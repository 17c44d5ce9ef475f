from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import and_, insert
from sqlalchemy.dialects import postgresql, sqlite
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
from portfolio_api.db.utils import apply_changes

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class DatabaseStorage:
    """Table-scoped CRUD over a single SQLAlchemy session.

    Every method maps to one select/insert/update/delete. Missing rows are
    reported as ``None`` (reads and updates) or ``False`` (deletes). Database
    errors are not caught here.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # -----------------------------
    # Generic helpers
    # -----------------------------
    def _list(self, model: Type[ModelT]) -> List[ModelT]:
        return self.db.query(model).order_by(model.ordinal.asc(), model.id.asc()).all()

    def _get(self, model: Type[ModelT], row_id: int) -> Optional[ModelT]:
        return self.db.query(model).filter(model.id == row_id).first()

    def _create(self, model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
        row = model(**data)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def _update(self, model: Type[ModelT], row_id: int, data: Dict[str, Any]) -> Optional[ModelT]:
        row = self._get(model, row_id)
        if row is None:
            return None
        apply_changes(row, data)
        self.db.commit()
        self.db.refresh(row)
        return row

    def _delete(self, model: Type[ModelT], row_id: int) -> bool:
        # Bulk delete so ON DELETE CASCADE constraints do the dependent cleanup.
        deleted = self.db.query(model).filter(model.id == row_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    # -----------------------------
    # Personal info
    # -----------------------------
    def get_personal_info(self) -> Optional[PersonalInfo]:
        return (
            self.db.query(PersonalInfo)
            .order_by(PersonalInfo.updated_at.desc(), PersonalInfo.id.desc())
            .first()
        )

    def update_personal_info(self, data: Dict[str, Any]) -> PersonalInfo:
        """Update the current personal info row, or create it if none exists.

        The read and the write share one transaction; the read takes a row lock
        on stores that support ``SELECT ... FOR UPDATE``.
        """
        info = (
            self.db.query(PersonalInfo)
            .order_by(PersonalInfo.updated_at.desc(), PersonalInfo.id.desc())
            .with_for_update()
            .first()
        )
        if info is None:
            info = PersonalInfo(**data)
            self.db.add(info)
            logger.info("Created personal info record")
        else:
            apply_changes(info, data)
        self.db.commit()
        self.db.refresh(info)
        return info

    # -----------------------------
    # Skills
    # -----------------------------
    def get_all_skills(self) -> List[Skill]:
        return self._list(Skill)

    def get_skills_by_category(self, category: str) -> List[Skill]:
        return (
            self.db.query(Skill)
            .filter(Skill.category == category)
            .order_by(Skill.ordinal.asc(), Skill.id.asc())
            .all()
        )

    def get_skill(self, skill_id: int) -> Optional[Skill]:
        return self._get(Skill, skill_id)

    def create_skill(self, data: Dict[str, Any]) -> Skill:
        return self._create(Skill, data)

    def update_skill(self, skill_id: int, data: Dict[str, Any]) -> Optional[Skill]:
        return self._update(Skill, skill_id, data)

    def delete_skill(self, skill_id: int) -> bool:
        return self._delete(Skill, skill_id)

    # -----------------------------
    # Education
    # -----------------------------
    def get_all_education(self) -> List[Education]:
        return self._list(Education)

    def get_education(self, education_id: int) -> Optional[Education]:
        return self._get(Education, education_id)

    def create_education(self, data: Dict[str, Any]) -> Education:
        return self._create(Education, data)

    def update_education(self, education_id: int, data: Dict[str, Any]) -> Optional[Education]:
        return self._update(Education, education_id, data)

    def delete_education(self, education_id: int) -> bool:
        return self._delete(Education, education_id)

    # -----------------------------
    # Experience
    # -----------------------------
    def get_all_experience(self) -> List[Experience]:
        return self._list(Experience)

    def get_experience(self, experience_id: int) -> Optional[Experience]:
        return self._get(Experience, experience_id)

    def create_experience(self, data: Dict[str, Any]) -> Experience:
        return self._create(Experience, data)

    def update_experience(
        self, experience_id: int, data: Dict[str, Any]
    ) -> Optional[Experience]:
        return self._update(Experience, experience_id, data)

    def delete_experience(self, experience_id: int) -> bool:
        return self._delete(Experience, experience_id)

    # -----------------------------
    # Projects
    # -----------------------------
    def get_all_projects(self) -> List[Project]:
        return self._list(Project)

    def get_project(self, project_id: int) -> Optional[Project]:
        return self._get(Project, project_id)

    def create_project(self, data: Dict[str, Any]) -> Project:
        return self._create(Project, data)

    def update_project(self, project_id: int, data: Dict[str, Any]) -> Optional[Project]:
        return self._update(Project, project_id, data)

    def delete_project(self, project_id: int) -> bool:
        return self._delete(Project, project_id)

    # -----------------------------
    # Technologies
    # -----------------------------
    def get_all_technologies(self) -> List[Technology]:
        return self.db.query(Technology).order_by(Technology.name.asc(), Technology.id.asc()).all()

    def get_technology(self, technology_id: int) -> Optional[Technology]:
        return self._get(Technology, technology_id)

    def create_technology(self, data: Dict[str, Any]) -> Technology:
        return self._create(Technology, data)

    def get_project_technologies(self, project_id: int) -> List[Technology]:
        return (
            self.db.query(Technology)
            .join(ProjectTechnology, ProjectTechnology.technology_id == Technology.id)
            .filter(ProjectTechnology.project_id == project_id)
            .order_by(Technology.name.asc(), Technology.id.asc())
            .all()
        )

    def add_technology_to_project(self, project_id: int, technology_id: int) -> None:
        """Link a technology to a project. Adding an existing pair is a no-op."""
        values = {"project_id": project_id, "technology_id": technology_id}
        dialect_insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)
        if dialect_insert is not None:
            stmt = dialect_insert(ProjectTechnology).values(**values).on_conflict_do_nothing(
                index_elements=["project_id", "technology_id"]
            )
            self.db.execute(stmt)
        else:
            exists = (
                self.db.query(ProjectTechnology.id)
                .filter(
                    and_(
                        ProjectTechnology.project_id == project_id,
                        ProjectTechnology.technology_id == technology_id,
                    )
                )
                .first()
            )
            if exists is None:
                self.db.execute(insert(ProjectTechnology).values(**values))
        self.db.commit()

    def remove_technology_from_project(self, project_id: int, technology_id: int) -> None:
        self.db.query(ProjectTechnology).filter(
            ProjectTechnology.project_id == project_id,
            ProjectTechnology.technology_id == technology_id,
        ).delete(synchronize_session=False)
        self.db.commit()
