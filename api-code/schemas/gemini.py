"""Optional-field views over the Gemini ``generateContent`` response body.

Every field is optional and each one is decoded on its own: a value of the
wrong shape becomes ``None`` (or is dropped from its list) without touching
its siblings, so a stray field never hides the reply text or error message.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, field_validator


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _object_or_none(value: Any) -> Any:
    return value if isinstance(value, dict) else None


def _objects_only(value: Any) -> Any:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, dict)]


def _objects_in_place(value: Any) -> Any:
    if not isinstance(value, list):
        return None
    return [item if isinstance(item, dict) else {} for item in value]


class GeminiPart(BaseModel):
    text: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _lenient_text(cls, value: Any) -> Optional[str]:
        return _str_or_none(value)


class GeminiContent(BaseModel):
    role: Optional[str] = None
    parts: Optional[List[GeminiPart]] = None

    @field_validator("role", mode="before")
    @classmethod
    def _lenient_role(cls, value: Any) -> Optional[str]:
        return _str_or_none(value)

    @field_validator("parts", mode="before")
    @classmethod
    def _lenient_parts(cls, value: Any) -> Any:
        return _objects_only(value)


class GeminiCandidate(BaseModel):
    content: Optional[GeminiContent] = None

    @field_validator("content", mode="before")
    @classmethod
    def _lenient_content(cls, value: Any) -> Any:
        return _object_or_none(value)


class GeminiError(BaseModel):
    # Only ``message`` is read; ``code`` and ``status`` are kept as sent.
    code: Any = None
    message: Optional[str] = None
    status: Any = None

    @field_validator("message", mode="before")
    @classmethod
    def _lenient_message(cls, value: Any) -> Optional[str]:
        return _str_or_none(value)


class GeminiResponse(BaseModel):
    candidates: Optional[List[GeminiCandidate]] = None
    error: Optional[GeminiError] = None

    @field_validator("candidates", mode="before")
    @classmethod
    def _lenient_candidates(cls, value: Any) -> Any:
        return _objects_in_place(value)

    @field_validator("error", mode="before")
    @classmethod
    def _lenient_error(cls, value: Any) -> Any:
        return _object_or_none(value)

    @classmethod
    def decode(cls, data: Any) -> "GeminiResponse":
        if not isinstance(data, dict):
            return cls()
        return cls.model_validate(data)

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return self.error.message or None

    def first_candidate_text(self) -> str:
        """Concatenate the text parts of the first candidate, trimmed."""
        if not self.candidates:
            return ""
        content = self.candidates[0].content
        if content is None or not content.parts:
            return ""
        return "".join(part.text or "" for part in content.parts).strip()
