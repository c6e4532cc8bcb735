from .chat import build_chat_router, reply_response
from .health import build_health_router

__all__ = ["build_chat_router", "build_health_router", "reply_response"]
