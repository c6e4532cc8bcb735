from __future__ import annotations

import unittest

from stubs import StubGeminiChatService, text_response

from services import (
    EmptyUpstreamResponseError,
    GeminiChatService,
    InvalidInputError,
    MisconfiguredError,
    UpstreamError,
)
from services.chat_service import EMPTY_RESPONSE_REPLY, INVALID_INPUT_REPLY, MISCONFIGURED_REPLY
from settings import Settings


class GeminiChatServiceTest(unittest.IsolatedAsyncioTestCase):
    async def test_reply_is_trimmed_concatenation_of_parts(self) -> None:
        service = StubGeminiChatService(data=text_response("  Hello", ", ", "world!\n"))

        reply = await service.generate_reply("Hi there")

        self.assertEqual(reply, "Hello, world!")
        self.assertEqual(len(service.calls), 1)

    async def test_payload_carries_trimmed_message_and_generation_config(self) -> None:
        service = StubGeminiChatService()

        await service.generate_reply("  What is FastAPI?  ")

        url, payload = service.calls[0]
        self.assertEqual(
            url,
            "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent?key=test-key",
        )
        self.assertEqual(
            payload,
            {
                "contents": [{"role": "user", "parts": [{"text": "What is FastAPI?"}]}],
                "generationConfig": {"temperature": 0.4, "maxOutputTokens": 512},
            },
        )

    async def test_blank_message_never_reaches_upstream(self) -> None:
        service = StubGeminiChatService()

        for message in ("", " ", "\n\t", None):
            with self.subTest(message=message):
                with self.assertRaises(InvalidInputError) as ctx:
                    await service.generate_reply(message)
                self.assertEqual(ctx.exception.status_code, 400)
                self.assertEqual(ctx.exception.reply, INVALID_INPUT_REPLY)

        self.assertEqual(service.calls, [])

    async def test_missing_key_never_reaches_upstream(self) -> None:
        for api_key in (None, ""):
            service = StubGeminiChatService(api_key=api_key)
            with self.subTest(api_key=api_key):
                with self.assertRaises(MisconfiguredError) as ctx:
                    await service.generate_reply("hello")
                self.assertEqual(ctx.exception.status_code, 500)
                self.assertEqual(ctx.exception.reply, MISCONFIGURED_REPLY)
                self.assertEqual(service.calls, [])

    async def test_upstream_error_forwards_status_and_message(self) -> None:
        service = StubGeminiChatService(
            status=429,
            data={"error": {"code": 429, "message": "rate limited", "status": "RESOURCE_EXHAUSTED"}},
        )

        with self.assertLogs("gemini-relay.chat", level="ERROR"):
            with self.assertRaises(UpstreamError) as ctx:
                await service.generate_reply("hello")

        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.upstream_status, 429)
        self.assertEqual(ctx.exception.reply, "Gemini error 429: rate limited")

    async def test_upstream_error_without_message_uses_fallback(self) -> None:
        for data in (None, {}, {"error": {}}, ["not", "an", "object"]):
            service = StubGeminiChatService(status=503, data=data)
            with self.subTest(data=data):
                with self.assertLogs("gemini-relay.chat", level="ERROR"):
                    with self.assertRaises(UpstreamError) as ctx:
                        await service.generate_reply("hello")
                self.assertEqual(ctx.exception.status_code, 503)
                self.assertEqual(ctx.exception.reply, "Gemini error 503: unknown error")

    async def test_success_without_text_is_empty_upstream_response(self) -> None:
        payloads = [
            {},
            {"candidates": []},
            {"candidates": [{}]},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
            {"candidates": [{"content": {"parts": [{"text": "   "}]}}]},
            {"candidates": "oops", "error": {"message": "partial failure"}},
        ]
        for data in payloads:
            service = StubGeminiChatService(data=data)
            with self.subTest(data=data):
                with self.assertLogs("gemini-relay.chat", level="ERROR"):
                    with self.assertRaises(EmptyUpstreamResponseError) as ctx:
                        await service.generate_reply("hello")
                self.assertEqual(ctx.exception.status_code, 502)
                self.assertEqual(ctx.exception.reply, EMPTY_RESPONSE_REPLY)

    async def test_malformed_sibling_error_keeps_reply(self) -> None:
        data = text_response("hello")
        data["error"] = "transient"
        service = StubGeminiChatService(data=data)

        reply = await service.generate_reply("hi")

        self.assertEqual(reply, "hello")

    async def test_error_message_survives_malformed_code(self) -> None:
        service = StubGeminiChatService(
            status=400,
            data={"error": {"code": "INVALID", "message": "bad key", "status": 7}},
        )

        with self.assertLogs("gemini-relay.chat", level="ERROR"):
            with self.assertRaises(UpstreamError) as ctx:
                await service.generate_reply("hello")

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.reply, "Gemini error 400: bad key")

    async def test_error_message_survives_malformed_candidates(self) -> None:
        service = StubGeminiChatService(
            status=403,
            data={"candidates": 5, "error": {"message": "permission denied"}},
        )

        with self.assertLogs("gemini-relay.chat", level="ERROR"):
            with self.assertRaises(UpstreamError) as ctx:
                await service.generate_reply("hello")

        self.assertEqual(ctx.exception.reply, "Gemini error 403: permission denied")

    async def test_transport_failure_propagates(self) -> None:
        service = StubGeminiChatService(error=OSError("connection refused"))

        with self.assertRaises(OSError):
            await service.generate_reply("hello")

    async def test_repeated_requests_are_identical(self) -> None:
        service = StubGeminiChatService(data=text_response("Same answer"))

        replies = [await service.generate_reply("ping") for _ in range(3)]

        self.assertEqual(replies, ["Same answer"] * 3)
        self.assertEqual(len({repr(call) for call in service.calls}), 1)


class ExtractReplyTest(unittest.TestCase):
    def test_only_first_candidate_is_used(self) -> None:
        data = {
            "candidates": [
                {"content": {"parts": [{"text": "first"}]}},
                {"content": {"parts": [{"text": "second"}]}},
            ]
        }
        self.assertEqual(GeminiChatService.extract_reply(data), "first")

    def test_malformed_parts_are_skipped(self) -> None:
        data = {"candidates": [{"content": {"parts": [None, {"text": "a"}, "junk", {"text": "b"}]}}]}
        self.assertEqual(GeminiChatService.extract_reply(data), "ab")

    def test_malformed_second_candidate_keeps_first(self) -> None:
        data = {
            "candidates": [
                {"content": {"parts": [{"text": "first"}]}},
                {"content": "x"},
                "junk",
            ]
        }
        self.assertEqual(GeminiChatService.extract_reply(data), "first")

    def test_non_object_first_candidate_is_not_replaced(self) -> None:
        data = {"candidates": ["junk", {"content": {"parts": [{"text": "second"}]}}]}
        self.assertEqual(GeminiChatService.extract_reply(data), "")

    def test_non_string_text_part_is_skipped(self) -> None:
        data = {"candidates": [{"content": {"role": 3, "parts": [{"text": 5}, {"text": "kept"}]}}]}
        self.assertEqual(GeminiChatService.extract_reply(data), "kept")

    def test_malformed_error_beside_text(self) -> None:
        for error in ("transient", ["a"], {"code": "INVALID", "message": 1}):
            data = text_response("hello")
            data["error"] = error
            with self.subTest(error=error):
                self.assertEqual(GeminiChatService.extract_reply(data), "hello")

    def test_non_object_payloads_have_no_text(self) -> None:
        for data in (None, "text", 42, [text_response("x")]):
            with self.subTest(data=data):
                self.assertEqual(GeminiChatService.extract_reply(data), "")


class FromSettingsTest(unittest.TestCase):
    def test_service_reflects_settings(self) -> None:
        settings = Settings.model_validate(
            {"GEMINI_API_KEY": "k/ey+1", "GEMINI_API_BASE": "http://127.0.0.1:9/v1beta/"}
        )
        service = GeminiChatService.from_settings(settings)

        self.assertTrue(service.has_key)
        self.assertEqual(service.model_name, "gemini-2.5-flash")
        self.assertEqual(
            service.build_url(),
            "http://127.0.0.1:9/v1beta/models/gemini-2.5-flash:generateContent?key=k%2Fey%2B1",
        )


if __name__ == "__main__":
    unittest.main()
