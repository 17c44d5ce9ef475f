from __future__ import annotations

from functools import lru_cache
from io import BytesIO
from typing import Any, List
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from portfolio_api.db.storage import DatabaseStorage

FONT_NAME = "ResumeSans"
FONT_NAME_BOLD = "ResumeSans-Bold"


@lru_cache
def register_fonts(regular_path: str, bold_path: str) -> str:
    """Register the TTF pair used for resume text and return the family name.

    Bare file names resolve against reportlab's bundled fonts (``Vera.ttf``).
    """
    pdfmetrics.registerFont(TTFont(FONT_NAME, regular_path))
    pdfmetrics.registerFont(TTFont(FONT_NAME_BOLD, bold_path))
    pdfmetrics.registerFontFamily(
        FONT_NAME,
        normal=FONT_NAME,
        bold=FONT_NAME_BOLD,
        italic=FONT_NAME,
        boldItalic=FONT_NAME_BOLD,
    )
    return FONT_NAME


def _styles(font: str) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "name": ParagraphStyle("ResumeName", parent=base["Title"], fontName=FONT_NAME_BOLD),
        "heading": ParagraphStyle("ResumeHeading", parent=base["Heading2"], fontName=FONT_NAME_BOLD),
        "entry": ParagraphStyle("ResumeEntry", parent=base["Heading4"], fontName=FONT_NAME_BOLD),
        "normal": ParagraphStyle("ResumeNormal", parent=base["Normal"], fontName=font),
    }


def _p(text: Any, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(str(text or "")), style)


def _period(start: str | None, end: str | None) -> str:
    return f"{start or ''} - {end or 'Present'}"


def resume_story(storage: DatabaseStorage, font: str) -> List[Any]:
    """Lay out the stored portfolio as platypus flowables, one block per section."""
    styles = _styles(font)
    story: List[Any] = []

    info = storage.get_personal_info()
    if info is not None:
        story.append(_p(info.name, styles["name"]))
        story.append(_p(info.title, styles["normal"]))
        contact = " | ".join(p for p in (info.email, info.phone, info.location) if p)
        story.append(_p(contact, styles["normal"]))
        story.append(Spacer(1, 12))

    experience = storage.get_all_experience()
    if experience:
        story.append(_p("Experience", styles["heading"]))
        for exp in experience:
            story.append(_p(f"{exp.position}, {exp.company}", styles["entry"]))
            story.append(_p(_period(exp.start_date, exp.end_date), styles["normal"]))
            story.append(_p(exp.description, styles["normal"]))
            story.append(Spacer(1, 8))

    education = storage.get_all_education()
    if education:
        story.append(_p("Education", styles["heading"]))
        for edu in education:
            story.append(_p(f"{edu.degree} in {edu.field}", styles["entry"]))
            story.append(_p(edu.institution, styles["normal"]))
            story.append(_p(_period(edu.start_date, edu.end_date), styles["normal"]))
            if edu.description:
                story.append(_p(edu.description, styles["normal"]))
            story.append(Spacer(1, 8))

    skills = storage.get_all_skills()
    if skills:
        story.append(_p("Skills", styles["heading"]))
        story.append(_p(", ".join(s.name for s in skills), styles["normal"]))

    if not story:
        story.append(_p("Resume coming soon.", styles["normal"]))
    return story


def build_resume_pdf(
    storage: DatabaseStorage,
    font_path: str = "Vera.ttf",
    bold_font_path: str = "VeraBd.ttf",
) -> bytes:
    """Render the resume PDF in memory. Long sections wrap and flow onto new pages."""
    font = register_fonts(font_path, bold_font_path)
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=72,
        leftMargin=72,
        topMargin=72,
        bottomMargin=72,
    )
    doc.build(resume_story(storage, font))
    return buffer.getvalue()
