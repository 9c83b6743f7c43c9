"""Unit tests for RetryPolicy, RetryingHttpCaller and throttled_gather."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from soniccompass.utils.concurrency import throttled_gather
from soniccompass.utils.errors import ProviderResponseError, TransientNetworkError
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.retry import RetryPolicy


# ======================================================================
# RetryPolicy
# ======================================================================


class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert policy.max_retries == 2
        assert policy.total_attempts == 3
        assert policy.delay_for(1) == 1.0
        assert policy.delay_for(2) == 2.0

    @pytest.mark.parametrize("kwargs", [{"max_retries": -1}, {"backoff_base": -0.5}])
    def test_negative_values_rejected(self, kwargs) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    @pytest.mark.asyncio
    async def test_success_first_try_does_not_sleep(self, fast_policy, fake_sleep) -> None:
        async def _ok() -> str:
            return "ok"

        assert await fast_policy.run(_ok) == "ok"
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_two_failures_then_success_backs_off_linearly(
        self, fast_policy, fake_sleep
    ) -> None:
        calls = 0

        async def _flaky() -> str:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise TransientNetworkError("HTTP 503: busy", status=503)
            return "ok"

        assert await fast_policy.run(_flaky, label="flaky") == "ok"
        assert calls == 3
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_last_failure(self, fast_policy, fake_sleep) -> None:
        calls = 0

        async def _down() -> str:
            nonlocal calls
            calls += 1
            raise TransientNetworkError(f"HTTP 500: attempt {calls}", provider_name="x", status=500)

        with pytest.raises(TransientNetworkError) as exc_info:
            await fast_policy.run(_down, label="down")

        assert calls == 3
        # No sleep after the final attempt.
        assert fake_sleep.delays == [1.0, 2.0]
        assert "attempt 3" in exc_info.value.message
        assert exc_info.value.status == 500
        assert exc_info.value.provider_name == "x"

    @pytest.mark.asyncio
    async def test_non_transient_error_is_not_retried(self, fast_policy, fake_sleep) -> None:
        calls = 0

        async def _broken() -> str:
            nonlocal calls
            calls += 1
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            await fast_policy.run(_broken)

        assert calls == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self, fake_sleep) -> None:
        policy = RetryPolicy(max_retries=0, sleep=fake_sleep)
        calls = 0

        async def _down() -> None:
            nonlocal calls
            calls += 1
            raise TransientNetworkError("nope")

        with pytest.raises(TransientNetworkError):
            await policy.run(_down)
        assert calls == 1
        assert fake_sleep.delays == []


# ======================================================================
# RetryingHttpCaller
# ======================================================================


class TestRetryingHttpCaller:
    @pytest.mark.asyncio
    async def test_returns_parsed_json(self, http_handler, make_client, fast_policy) -> None:
        handler = http_handler(httpx.Response(200, json={"hello": "world"}))
        async with make_client(handler) as client:
            caller = RetryingHttpCaller(client, fast_policy)
            result = await caller.call(
                RequestSpec(url="https://api.example.com/x", params={"q": "Spartanburg"})
            )

        assert result == {"hello": "world"}
        assert handler.calls == 1
        assert handler.requests[0].url.params["q"] == "Spartanburg"

    @pytest.mark.asyncio
    async def test_retries_non_success_status(
        self, http_handler, make_client, fast_policy, fake_sleep
    ) -> None:
        handler = http_handler(
            httpx.Response(500, text="oops"),
            httpx.Response(429, text="slow down"),
            httpx.Response(200, json={"ok": True}),
        )
        async with make_client(handler) as client:
            caller = RetryingHttpCaller(client, fast_policy)
            result = await caller.call(RequestSpec(url="https://api.example.com/x"))

        assert result == {"ok": True}
        assert handler.calls == 3
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_transport_error_becomes_transient(
        self, http_handler, make_client, fast_policy
    ) -> None:
        handler = http_handler(httpx.ConnectError("connection refused"))
        async with make_client(handler) as client:
            caller = RetryingHttpCaller(client, fast_policy, provider_name="test")
            with pytest.raises(TransientNetworkError) as exc_info:
                await caller.call(RequestSpec(url="https://api.example.com/x"))

        assert handler.calls == 3
        assert "ConnectError" in exc_info.value.message
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_invalid_json_is_not_retried(
        self, http_handler, make_client, fast_policy
    ) -> None:
        handler = http_handler(httpx.Response(200, text="<html>not json</html>"))
        async with make_client(handler) as client:
            caller = RetryingHttpCaller(client, fast_policy)
            with pytest.raises(ProviderResponseError):
                await caller.call(RequestSpec(url="https://api.example.com/x"))

        assert handler.calls == 1

    @pytest.mark.asyncio
    async def test_sends_method_headers_and_body(
        self, http_handler, make_client, fast_policy
    ) -> None:
        handler = http_handler(httpx.Response(200, json={"id": "1"}))
        async with make_client(handler) as client:
            caller = RetryingHttpCaller(client, fast_policy)
            await caller.call(
                RequestSpec(
                    url="https://api.example.com/items",
                    method="POST",
                    headers={"Authorization": "Bearer t"},
                    json_body={"name": "x"},
                )
            )

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer t"
        assert handler.json_body() == {"name": "x"}


# ======================================================================
# throttled_gather
# ======================================================================


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_preserves_input_order(self) -> None:
        async def _delayed(value: int, delay: float) -> int:
            await asyncio.sleep(delay)
            return value

        results = await throttled_gather(
            [_delayed(1, 0.03), _delayed(2, 0.0), _delayed(3, 0.01)],
            semaphore=asyncio.Semaphore(3),
        )
        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_bounds_concurrency(self) -> None:
        in_flight = 0
        peak = 0

        async def _work() -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        await throttled_gather([_work() for _ in range(6)], semaphore=asyncio.Semaphore(2))
        assert peak == 2

    @pytest.mark.asyncio
    async def test_returns_exceptions_in_place(self) -> None:
        async def _fail() -> int:
            raise RuntimeError("boom")

        async def _ok() -> int:
            return 7

        results = await throttled_gather([_ok(), _fail()], semaphore=asyncio.Semaphore(1))
        assert results[0] == 7
        assert isinstance(results[1], RuntimeError)

    def test_semaphore_is_required(self) -> None:
        with pytest.raises(TypeError):
            throttled_gather([])
