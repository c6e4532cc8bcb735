from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles


PROJECT_ROOT = Path(__file__).resolve().parent
API_CODE_PATH = PROJECT_ROOT / "api-code"
if str(API_CODE_PATH) not in sys.path:
    sys.path.insert(0, str(API_CODE_PATH))

from env_loader import load_local_env  # noqa: E402
from routers import build_chat_router, build_health_router, reply_response  # noqa: E402
from services import GeminiChatService  # noqa: E402
from services.chat_service import INVALID_INPUT_REPLY  # noqa: E402
from settings import Settings, get_settings  # noqa: E402


logger = logging.getLogger("gemini-relay")

CHAT_PATH = "/api/chat"


def create_app(settings: Settings, chat_service: Optional[GeminiChatService] = None) -> FastAPI:
    """Assemble the relay application from an explicit configuration."""
    chat_service = chat_service or GeminiChatService.from_settings(settings)

    app = FastAPI(
        title="Gemini Chat Relay",
        version="0.1.0",
        description="Forwards a single chat message to Gemini and returns the reply text.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError):
        # A body that cannot be read as {"message": ...} counts as an empty message.
        if request.url.path == CHAT_PATH:
            return reply_response(INVALID_INPUT_REPLY, status.HTTP_400_BAD_REQUEST)
        return await request_validation_exception_handler(request, exc)

    app.include_router(build_chat_router(chat_service))
    app.include_router(build_health_router(chat_service))

    static_dir = settings.resolve_static_dir()
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.warning("Static directory %s not found; serving API routes only.", static_dir)

    @app.on_event("startup")
    async def on_startup() -> None:
        if not chat_service.has_key:
            logger.warning("GEMINI_API_KEY is not set. Add it to .env or the environment.")
        logger.info("Server started: http://localhost:%s", settings.port)
        logger.info("Model: %s", chat_service.model_name)

    return app


def build_app_from_env(env_path: Path = PROJECT_ROOT / ".env") -> FastAPI:
    """Factory for ``uvicorn app_main:build_app_from_env --factory``."""
    load_local_env(env_path)
    return create_app(get_settings())


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)

    app = build_app_from_env()
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
