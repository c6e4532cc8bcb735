from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


PROJECT_ROOT = Path(__file__).resolve().parent.parent

GEMINI_MODEL_NAME = "gemini-2.5-flash"


class Settings(BaseModel):
    """Runtime configuration resolved from environment variables."""

    gemini_api_key: Optional[str] = Field(
        default=None, alias="GEMINI_API_KEY", description="Google Gemini API key"
    )
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_API_BASE",
        description="Base URL of the Gemini REST API.",
    )
    host: str = Field(
        default="0.0.0.0",
        alias="HOST",
        description="Interface the HTTP server binds to.",
    )
    port: int = Field(
        default=3000,
        alias="PORT",
        description="Port the HTTP server listens on.",
    )
    static_dir: str = Field(
        default="public",
        alias="STATIC_DIR",
        description="Directory served for paths not handled by the API.",
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def gemini_model(self) -> str:
        return GEMINI_MODEL_NAME

    def resolve_static_dir(self) -> Path:
        path = Path(self.static_dir)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path

    @classmethod
    def from_env(cls) -> "Settings":
        return cls.model_validate(os.environ)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance built from environment variables."""
    return Settings.from_env()
