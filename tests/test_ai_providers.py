import unittest
from unittest import mock

from ai_providers import (
    AnthropicProvider,
    OpenAIProvider,
    _is_retryable,
    _retry_with_backoff,
    get_provider,
)


class StatusError(Exception):
    def __init__(self, status_code):
        super().__init__(f"status {status_code}")
        self.status_code = status_code


class APITimeoutError(Exception):
    pass


class RetryTests(unittest.IsolatedAsyncioTestCase):
    def test_is_retryable(self):
        self.assertTrue(_is_retryable(StatusError(429)))
        self.assertTrue(_is_retryable(StatusError(503)))
        self.assertTrue(_is_retryable(APITimeoutError()))
        self.assertFalse(_is_retryable(StatusError(400)))
        self.assertFalse(_is_retryable(ValueError("bad request")))

    async def test_retries_transient_failures(self):
        attempts = []

        async def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise StatusError(529)
            return "ok"

        with mock.patch("ai_providers.asyncio.sleep", new=mock.AsyncMock()) as sleep:
            result = await _retry_with_backoff(flaky)

        self.assertEqual(result, "ok")
        self.assertEqual(len(attempts), 3)
        self.assertEqual(sleep.await_count, 2)

    async def test_does_not_retry_permanent_failures(self):
        attempts = []

        async def broken():
            attempts.append(1)
            raise StatusError(401)

        with mock.patch("ai_providers.asyncio.sleep", new=mock.AsyncMock()):
            with self.assertRaises(StatusError):
                await _retry_with_backoff(broken)
        self.assertEqual(len(attempts), 1)

    async def test_gives_up_after_max_retries(self):
        async def always_busy():
            raise StatusError(503)

        with mock.patch("ai_providers.asyncio.sleep", new=mock.AsyncMock()) as sleep:
            with self.assertRaises(StatusError):
                await _retry_with_backoff(always_busy, max_retries=2)
        self.assertEqual(sleep.await_count, 2)


class ProviderFactoryTests(unittest.TestCase):
    def test_get_provider(self):
        self.assertIsInstance(get_provider("test-key"), AnthropicProvider)
        openai_provider = get_provider("test-key", provider="openai")
        self.assertIsInstance(openai_provider, OpenAIProvider)
        self.assertEqual(openai_provider.model, "gpt-5.2")
        self.assertEqual(get_provider("test-key", model="claude-opus-4-1").model, "claude-opus-4-1")

    def test_unknown_provider_raises(self):
        with self.assertRaises(ValueError):
            get_provider("test-key", provider="gemini")


if __name__ == "__main__":
    unittest.main()
