from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from schemas import ChatRequest, ChatResponse
from services import ChatRelayError, GeminiChatService
from services.chat_service import INTERNAL_ERROR_REPLY


logger = logging.getLogger("gemini-relay.chat")


def build_chat_router(chat_service: GeminiChatService) -> APIRouter:
    """Create the chat router wired to the provided chat service."""
    router = APIRouter(prefix="/api", tags=["chat"])

    @router.post(
        "/chat",
        response_model=ChatResponse,
        responses={
            400: {"model": ChatResponse},
            500: {"model": ChatResponse},
            502: {"model": ChatResponse},
        },
    )
    async def chat_endpoint(payload: Optional[ChatRequest] = None):
        message = payload.text if payload is not None else ""
        try:
            reply = await chat_service.generate_reply(message)
        except ChatRelayError as exc:
            return reply_response(exc.reply, exc.status_code)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Chat relay crashed: %s", exc)
            return reply_response(INTERNAL_ERROR_REPLY, status.HTTP_500_INTERNAL_SERVER_ERROR)

        return ChatResponse(reply=reply)

    return router


def reply_response(reply: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ChatResponse(reply=reply).model_dump())
