"""Tests for async retry and transient-error classification."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from oxira.errors import ConfigurationError, FetchError, ProviderError
from oxira.retry import RetryExhaustedError, async_with_retry, is_transient_error


def _run(coro):
    return asyncio.run(coro)


class TestIsTransientError:
    def test_network_errors(self) -> None:
        assert is_transient_error(httpx.ConnectError("refused")) is True
        assert is_transient_error(httpx.ReadTimeout("slow")) is True

    def test_rate_limited_provider(self) -> None:
        assert is_transient_error(ProviderError("Brave Search", 429, "Too Many Requests")) is True

    def test_other_status_not_transient(self) -> None:
        assert is_transient_error(ProviderError("Brave Search", 401, "Unauthorized")) is False
        assert is_transient_error(FetchError("https://acme.io", 404, "Not Found")) is False

    def test_rate_limited_fetch(self) -> None:
        assert is_transient_error(FetchError("https://acme.io", 429)) is True

    def test_rate_limit_message(self) -> None:
        assert is_transient_error(RuntimeError("Rate limit exceeded")) is True

    def test_configuration_error_never_retried(self) -> None:
        assert is_transient_error(ConfigurationError("missing key")) is False


class TestAsyncWithRetry:
    def test_succeeds_first_try(self) -> None:
        async def ok() -> int:
            return 42

        assert _run(async_with_retry(ok, max_retries=3, base_delay=0.0)) == 42

    def test_succeeds_after_transient_failures(self) -> None:
        attempts = {"count": 0}

        async def flaky() -> str:
            attempts["count"] += 1
            if attempts["count"] < 3:
                raise httpx.ConnectError("refused")
            return "ok"

        result = _run(async_with_retry(flaky, max_retries=3, base_delay=0.0))
        assert result == "ok"
        assert attempts["count"] == 3

    def test_exhausted_raises(self) -> None:
        async def always_fail() -> None:
            raise httpx.ReadTimeout("slow")

        with pytest.raises(RetryExhaustedError, match="Failed after 3 attempts"):
            _run(async_with_retry(always_fail, max_retries=2, base_delay=0.0))

    def test_exhausted_chains_last_error(self) -> None:
        async def always_fail() -> None:
            raise httpx.ReadTimeout("slow")

        with pytest.raises(RetryExhaustedError) as exc_info:
            _run(async_with_retry(always_fail, max_retries=1, base_delay=0.0))
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    def test_non_transient_raises_immediately(self) -> None:
        attempts = {"count": 0}

        async def unauthorized() -> None:
            attempts["count"] += 1
            raise ProviderError("Tavily", 401, "bad key")

        with pytest.raises(ProviderError, match="401"):
            _run(async_with_retry(unauthorized, max_retries=3, base_delay=0.0))
        assert attempts["count"] == 1  # No retries

    def test_custom_should_retry(self) -> None:
        attempts = {"count": 0}

        async def fail_once() -> str:
            attempts["count"] += 1
            if attempts["count"] < 2:
                raise ValueError("retry me")
            return "done"

        result = _run(
            async_with_retry(
                fail_once,
                max_retries=2,
                base_delay=0.0,
                jitter=False,
                should_retry=lambda exc: isinstance(exc, ValueError),
            )
        )
        assert result == "done"

    def test_zero_retries_runs_once(self) -> None:
        attempts = {"count": 0}

        async def fail() -> None:
            attempts["count"] += 1
            raise httpx.ConnectError("refused")

        with pytest.raises(RetryExhaustedError, match="Failed after 1 attempts"):
            _run(async_with_retry(fail, max_retries=0, base_delay=0.0))
        assert attempts["count"] == 1
