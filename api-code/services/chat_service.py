from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple
from urllib import error as urllib_error, parse as urllib_parse, request as urllib_request

from schemas import GeminiResponse
from settings import GEMINI_MODEL_NAME, Settings


logger = logging.getLogger("gemini-relay.chat")

GENERATION_TEMPERATURE = 0.4
GENERATION_MAX_OUTPUT_TOKENS = 512

INVALID_INPUT_REPLY = "Please enter a message."
MISCONFIGURED_REPLY = "GEMINI_API_KEY is not configured on the server."
EMPTY_RESPONSE_REPLY = "The model returned no text. Try rephrasing your question."
INTERNAL_ERROR_REPLY = "Internal server error. Check the backend logs."
UNKNOWN_UPSTREAM_ERROR = "unknown error"


class ChatRelayError(RuntimeError):
    """Failure that maps onto a ``{"reply": ...}`` body and an HTTP status."""

    status_code = 500

    def __init__(self, reply: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(reply)
        self.reply = reply
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(ChatRelayError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__(INVALID_INPUT_REPLY)


class MisconfiguredError(ChatRelayError):
    status_code = 500

    def __init__(self) -> None:
        super().__init__(MISCONFIGURED_REPLY)


class UpstreamError(ChatRelayError):
    def __init__(self, upstream_status: int, message: Optional[str], payload: Any = None) -> None:
        super().__init__(
            f"Gemini error {upstream_status}: {message or UNKNOWN_UPSTREAM_ERROR}",
            status_code=upstream_status,
        )
        self.upstream_status = upstream_status
        self.payload = payload


class EmptyUpstreamResponseError(ChatRelayError):
    status_code = 502

    def __init__(self, payload: Any = None) -> None:
        super().__init__(EMPTY_RESPONSE_REPLY)
        self.payload = payload


class GeminiChatService:
    """Relays a single user message to Gemini ``generateContent`` over REST."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        model_name: str = GEMINI_MODEL_NAME,
    ):
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.model_name = model_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiChatService":
        return cls(
            settings.gemini_api_key,
            api_base=settings.gemini_api_base,
            model_name=settings.gemini_model,
        )

    @property
    def has_key(self) -> bool:
        return bool(self.api_key)

    def build_url(self) -> str:
        model = urllib_parse.quote(self.model_name, safe="-._")
        key = urllib_parse.quote(self.api_key or "", safe="")
        return f"{self.api_base}/models/{model}:generateContent?key={key}"

    @staticmethod
    def build_payload(message: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": message}],
                }
            ],
            "generationConfig": {
                "temperature": GENERATION_TEMPERATURE,
                "maxOutputTokens": GENERATION_MAX_OUTPUT_TOKENS,
            },
        }

    @staticmethod
    def extract_reply(data: Any) -> str:
        return GeminiResponse.decode(data).first_candidate_text()

    async def generate_reply(self, message: Optional[str]) -> str:
        prompt = (message or "").strip()
        if not prompt:
            raise InvalidInputError()

        if not self.has_key:
            raise MisconfiguredError()

        status, data = await asyncio.to_thread(
            self._post_generate_content, self.build_url(), self.build_payload(prompt)
        )

        if not 200 <= status < 300:
            logger.error("Gemini API error status=%s payload=%s", status, data)
            raise UpstreamError(status, GeminiResponse.decode(data).error_message, data)

        reply = self.extract_reply(data)
        if not reply:
            logger.error("Gemini empty response payload=%s", data)
            raise EmptyUpstreamResponseError(data)

        return reply

    def _post_generate_content(self, url: str, payload: Dict[str, Any]) -> Tuple[int, Any]:
        """POST ``payload`` and return ``(status, decoded_json)``.

        Non-2xx responses are returned, not raised; a non-2xx body that is not
        JSON decodes to ``None``. Transport failures and an undecodable 2xx
        body propagate to the caller.
        """
        body = json.dumps(payload).encode("utf-8")
        request = urllib_request.Request(
            url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib_request.urlopen(request) as response:
                status = response.status
                raw = response.read()
        except urllib_error.HTTPError as exc:
            try:
                raw_error = exc.read()
            finally:
                exc.close()
            return exc.code, _decode_json(raw_error, strict=False)

        return status, _decode_json(raw, strict=True)


def _decode_json(raw: bytes, *, strict: bool) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        if strict:
            raise
        return None
