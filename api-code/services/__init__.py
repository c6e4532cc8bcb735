from .chat_service import (
    ChatRelayError,
    EmptyUpstreamResponseError,
    GeminiChatService,
    InvalidInputError,
    MisconfiguredError,
    UpstreamError,
)

__all__ = [
    "ChatRelayError",
    "EmptyUpstreamResponseError",
    "GeminiChatService",
    "InvalidInputError",
    "MisconfiguredError",
    "UpstreamError",
]
