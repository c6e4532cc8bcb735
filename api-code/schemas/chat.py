from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    message: Optional[str] = Field(
        default=None, description="User message forwarded to the model."
    )

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> Optional[str]:
        # Scalars are stringified; objects and arrays count as no message.
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, (int, float)):
            return str(value) if value else None
        return None

    @property
    def text(self) -> str:
        return (self.message or "").strip()


class ChatResponse(BaseModel):
    reply: str = Field(..., description="Model answer or a human-readable error.")
