from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    ok: bool = Field(default=True, description="Always true while the process serves requests.")
    model: str = Field(..., description="Gemini model identifier in use.")
    has_key: bool = Field(
        ..., alias="hasKey", description="Whether GEMINI_API_KEY is configured."
    )

    model_config = {"populate_by_name": True}
