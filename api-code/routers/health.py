from __future__ import annotations

from fastapi import APIRouter

from schemas import HealthResponse
from services import GeminiChatService


def build_health_router(chat_service: GeminiChatService) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["health"])

    @router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
    async def healthcheck() -> HealthResponse:
        return HealthResponse(model=chat_service.model_name, has_key=chat_service.has_key)

    return router
