import logging
import os
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.orm import Session

from portfolio_api.contact import ContactNotifier, get_contact_notifier
from portfolio_api.db.session import SessionLocal, get_db, init_db
from portfolio_api.db.storage import DatabaseStorage
from portfolio_api.db.sync import export_portfolio_data, seed_db_if_empty
from portfolio_api.resume import build_resume_pdf
from portfolio_api.schemas import (
    ContactSubmission,
    EducationCreate,
    EducationOut,
    EducationUpdate,
    ExperienceCreate,
    ExperienceOut,
    ExperienceUpdate,
    MessageResponse,
    PersonalInfoCreate,
    PersonalInfoOut,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    SkillCreate,
    SkillOut,
    SkillUpdate,
    TechnologyCreate,
    TechnologyOut,
)
from portfolio_api.settings import get_settings
from portfolio_api.utils.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

INVALID_REQUEST_MESSAGE = "Invalid request data"
INTERNAL_ERROR_MESSAGE = "An error occurred while processing your request."

CORS_ORIGINS = settings.cors_origins


# -----------------------------
# FastAPI
# -----------------------------
app = FastAPI(title="Portfolio API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"]
    if CORS_ORIGINS.strip() == "*"
    else [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    """Wrap the request's database session in the storage layer."""
    return DatabaseStorage(db)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``{"field", "message"}`` pairs.

    Args:
        exc: The validation error raised by FastAPI.

    Returns:
        One entry per failing field.
    """
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if err.get("type") == "json_invalid":
            # loc carries the byte offset of the parse error, not a field
            loc = []
        elif loc and loc[0] in ("body", "path", "query"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "")})
    return errors


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"detail": INVALID_REQUEST_MESSAGE, "errors": _field_errors(exc)},
        status_code=400,
    )


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse({"detail": INTERNAL_ERROR_MESSAGE}, status_code=500)


def _not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{entity} not found")


def _deleted() -> Response:
    return Response(status_code=204)


# -----------------------------
# Startup
# -----------------------------
@app.on_event("startup")
def _startup() -> None:
    logger.info("API Server starting: Initializing portfolio DB...")
    init_db()
    if settings.seed_on_startup:
        with SessionLocal() as db:
            seed_db_if_empty(db, settings.seed_file)
    logger.info("API Server ready.")


# -----------------------------
# Routes
# -----------------------------
@app.get("/health")
def health():
    """Return API health metadata."""
    return {"status": "ok"}


@app.post("/api/contact", response_model=MessageResponse)
def submit_contact(
    payload: ContactSubmission, notifier: ContactNotifier = Depends(get_contact_notifier)
):
    """Accept a contact form submission."""
    return MessageResponse(message=notifier.deliver(payload))


@app.get("/resume.pdf")
def download_resume(storage: DatabaseStorage = Depends(get_storage)):
    """Serve the resume as a PDF download.

    A file at ``resume_pdf_path`` wins; otherwise a PDF is generated
    from the stored portfolio.
    """
    path = settings.resume_pdf_path
    if path and os.path.isfile(path):
        return FileResponse(path, media_type="application/pdf", filename=settings.resume_download_name)
    content = build_resume_pdf(storage, settings.resume_font, settings.resume_font_bold)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{settings.resume_download_name}"'},
    )


@app.get("/api/portfolio")
def get_portfolio(storage: DatabaseStorage = Depends(get_storage)) -> Dict[str, Any]:
    """Return the whole portfolio in one payload for the public site."""
    return export_portfolio_data(storage)


# Personal info
@app.get("/api/portfolio/personal-info", response_model=PersonalInfoOut)
def get_personal_info(storage: DatabaseStorage = Depends(get_storage)):
    info = storage.get_personal_info()
    if info is None:
        raise _not_found("Personal info")
    return info


@app.put("/api/portfolio/personal-info", response_model=PersonalInfoOut)
def update_personal_info(
    payload: PersonalInfoCreate, storage: DatabaseStorage = Depends(get_storage)
):
    """Replace the personal info record, creating it on first save."""
    return storage.update_personal_info(payload.model_dump())


# Skills
@app.get("/api/portfolio/skills", response_model=List[SkillOut])
def list_skills(
    category: Optional[str] = None, storage: DatabaseStorage = Depends(get_storage)
):
    """List skills, optionally only one category."""
    if category:
        return storage.get_skills_by_category(category)
    return storage.get_all_skills()


@app.get("/api/portfolio/skills/{skill_id}", response_model=SkillOut)
def get_skill(skill_id: int, storage: DatabaseStorage = Depends(get_storage)):
    skill = storage.get_skill(skill_id)
    if skill is None:
        raise _not_found("Skill")
    return skill


@app.post("/api/portfolio/skills", response_model=SkillOut, status_code=201)
def create_skill(payload: SkillCreate, storage: DatabaseStorage = Depends(get_storage)):
    return storage.create_skill(payload.model_dump())


@app.patch("/api/portfolio/skills/{skill_id}", response_model=SkillOut)
def update_skill(
    skill_id: int, payload: SkillUpdate, storage: DatabaseStorage = Depends(get_storage)
):
    skill = storage.update_skill(skill_id, payload.model_dump(exclude_unset=True))
    if skill is None:
        raise _not_found("Skill")
    return skill


@app.delete("/api/portfolio/skills/{skill_id}", status_code=204)
def delete_skill(skill_id: int, storage: DatabaseStorage = Depends(get_storage)):
    if not storage.delete_skill(skill_id):
        raise _not_found("Skill")
    return _deleted()


# Education
@app.get("/api/portfolio/education", response_model=List[EducationOut])
def list_education(storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_all_education()


@app.get("/api/portfolio/education/{education_id}", response_model=EducationOut)
def get_education(education_id: int, storage: DatabaseStorage = Depends(get_storage)):
    edu = storage.get_education(education_id)
    if edu is None:
        raise _not_found("Education entry")
    return edu


@app.post("/api/portfolio/education", response_model=EducationOut, status_code=201)
def create_education(payload: EducationCreate, storage: DatabaseStorage = Depends(get_storage)):
    return storage.create_education(payload.model_dump())


@app.patch("/api/portfolio/education/{education_id}", response_model=EducationOut)
def update_education(
    education_id: int, payload: EducationUpdate, storage: DatabaseStorage = Depends(get_storage)
):
    edu = storage.update_education(education_id, payload.model_dump(exclude_unset=True))
    if edu is None:
        raise _not_found("Education entry")
    return edu


@app.delete("/api/portfolio/education/{education_id}", status_code=204)
def delete_education(education_id: int, storage: DatabaseStorage = Depends(get_storage)):
    if not storage.delete_education(education_id):
        raise _not_found("Education entry")
    return _deleted()


# Experience
@app.get("/api/portfolio/experience", response_model=List[ExperienceOut])
def list_experience(storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_all_experience()


@app.get("/api/portfolio/experience/{experience_id}", response_model=ExperienceOut)
def get_experience(experience_id: int, storage: DatabaseStorage = Depends(get_storage)):
    exp = storage.get_experience(experience_id)
    if exp is None:
        raise _not_found("Experience")
    return exp


@app.post("/api/portfolio/experience", response_model=ExperienceOut, status_code=201)
def create_experience(payload: ExperienceCreate, storage: DatabaseStorage = Depends(get_storage)):
    return storage.create_experience(payload.model_dump())


@app.patch("/api/portfolio/experience/{experience_id}", response_model=ExperienceOut)
def update_experience(
    experience_id: int, payload: ExperienceUpdate, storage: DatabaseStorage = Depends(get_storage)
):
    exp = storage.update_experience(experience_id, payload.model_dump(exclude_unset=True))
    if exp is None:
        raise _not_found("Experience")
    return exp


@app.delete("/api/portfolio/experience/{experience_id}", status_code=204)
def delete_experience(experience_id: int, storage: DatabaseStorage = Depends(get_storage)):
    if not storage.delete_experience(experience_id):
        raise _not_found("Experience")
    return _deleted()


# Projects
@app.get("/api/portfolio/projects", response_model=List[ProjectOut])
def list_projects(storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_all_projects()


@app.get("/api/portfolio/projects/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, storage: DatabaseStorage = Depends(get_storage)):
    proj = storage.get_project(project_id)
    if proj is None:
        raise _not_found("Project")
    return proj


@app.post("/api/portfolio/projects", response_model=ProjectOut, status_code=201)
def create_project(payload: ProjectCreate, storage: DatabaseStorage = Depends(get_storage)):
    return storage.create_project(payload.model_dump())


@app.patch("/api/portfolio/projects/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int, payload: ProjectUpdate, storage: DatabaseStorage = Depends(get_storage)
):
    proj = storage.update_project(project_id, payload.model_dump(exclude_unset=True))
    if proj is None:
        raise _not_found("Project")
    return proj


@app.delete("/api/portfolio/projects/{project_id}", status_code=204)
def delete_project(project_id: int, storage: DatabaseStorage = Depends(get_storage)):
    """Delete a project; its technology links go with it."""
    if not storage.delete_project(project_id):
        raise _not_found("Project")
    return _deleted()


# Technologies
@app.get("/api/portfolio/technologies", response_model=List[TechnologyOut])
def list_technologies(storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_all_technologies()


@app.post("/api/portfolio/technologies", response_model=TechnologyOut, status_code=201)
def create_technology(payload: TechnologyCreate, storage: DatabaseStorage = Depends(get_storage)):
    return storage.create_technology(payload.model_dump())


@app.get("/api/portfolio/projects/{project_id}/technologies", response_model=List[TechnologyOut])
def list_project_technologies(project_id: int, storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_project_technologies(project_id)


@app.post("/api/portfolio/projects/{project_id}/technologies/{technology_id}", status_code=201)
def add_project_technology(
    project_id: int, technology_id: int, storage: DatabaseStorage = Depends(get_storage)
):
    """Link a technology to a project. Linking twice is not an error."""
    if storage.get_project(project_id) is None:
        raise _not_found("Project")
    if storage.get_technology(technology_id) is None:
        raise _not_found("Technology")
    storage.add_technology_to_project(project_id, technology_id)
    return Response(status_code=201)


@app.delete(
    "/api/portfolio/projects/{project_id}/technologies/{technology_id}", status_code=204
)
def remove_project_technology(
    project_id: int, technology_id: int, storage: DatabaseStorage = Depends(get_storage)
):
    storage.remove_technology_from_project(project_id, technology_id)
    return _deleted()


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
