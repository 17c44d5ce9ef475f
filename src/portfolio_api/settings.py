from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from dotenv import dotenv_values
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_KEYS = {
    "DATABASE_URL": "sql_db_url",
    "SEED_FILE": "seed_file",
    "SEED_ON_STARTUP": "seed_on_startup",
    "RESUME_PDF_PATH": "resume_pdf_path",
    "RESUME_FONT": "resume_font",
    "RESUME_FONT_BOLD": "resume_font_bold",
    "CORS_ORIGINS": "cors_origins",
    "LOG_LEVEL": "log_level",
    "LOG_JSON": "log_json",
    "HOST": "host",
    "PORT": "port",
}


def _limited_env_settings_source() -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    env: Dict[str, Any] = {}
    env.update(dotenv_values(".env"))
    env.update(os.environ)

    for env_key, field in ENV_KEYS.items():
        if env.get(env_key) is not None:
            data[field] = env[env_key]
    return data


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    sql_db_url: str = "sqlite:///data/portfolio.db"

    seed_file: str = "data/portfolio.json"
    seed_on_startup: bool = True

    resume_pdf_path: str = "data/resume.pdf"
    resume_download_name: str = "Jane_Doe_Resume.pdf"
    # TTF files; bare names resolve against the fonts bundled with reportlab
    resume_font: str = "Vera.ttf"
    resume_font_bold: str = "VeraBd.ttf"

    # set to "http://localhost:5173" if you want strict
    cors_origins: str = "*"

    log_level: str = "INFO"
    log_json: bool = False

    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        return (
            init_settings,
            _limited_env_settings_source,
            file_secret_settings,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
