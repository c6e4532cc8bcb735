from .chat import ChatRequest, ChatResponse
from .gemini import GeminiCandidate, GeminiContent, GeminiError, GeminiPart, GeminiResponse
from .health import HealthResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "GeminiCandidate",
    "GeminiContent",
    "GeminiError",
    "GeminiPart",
    "GeminiResponse",
    "HealthResponse",
]
