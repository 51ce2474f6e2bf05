"""Tests for Error Handling Framework.

Exception classes, retry and timeout helper tests.
"""

import asyncio
import logging

import pytest

from tansaku.errors import (
    ConfigurationError,
    ErrorContext,
    ErrorSeverity,
    ExpansionError,
    ExpansionTimeoutError,
    MalformedResultError,
    RetryConfig,
    StartResolutionError,
    TansakuError,
    ValidationError,
    retry,
    with_timeout,
)


# ============================================================
# ErrorSeverity / ErrorContext Tests
# ============================================================


class TestErrorSeverity:
    """ErrorSeverity tests."""

    def test_to_logging_level(self):
        assert ErrorSeverity.DEBUG.to_logging_level() == logging.DEBUG
        assert ErrorSeverity.WARNING.to_logging_level() == logging.WARNING
        assert ErrorSeverity.CRITICAL.to_logging_level() == logging.CRITICAL


class TestErrorContext:
    """ErrorContext tests."""

    def test_defaults(self):
        ctx = ErrorContext()
        assert ctx.error_id.startswith("err_")
        assert ctx.details == {}

    def test_to_dict(self):
        ctx = ErrorContext(component="AsyncSearch", details={"k": "v"})
        data = ctx.to_dict()
        assert data["component"] == "AsyncSearch"
        assert data["details"] == {"k": "v"}
        assert "timestamp" in data


# ============================================================
# Exception Tests
# ============================================================


class TestTansakuError:
    """TansakuError tests."""

    def test_basic(self):
        error = TansakuError("Something failed")
        assert error.code == "TANSAKU_ERROR"
        assert error.severity == ErrorSeverity.ERROR
        assert str(error) == "[TANSAKU_ERROR] Something failed"

    def test_str_with_context_and_cause(self):
        cause = ValueError("bad")
        error = TansakuError(
            "Failed", cause=cause, component="engine", operation="expand"
        )
        text = str(error)
        assert "(component: engine)" in text
        assert "(operation: expand)" in text
        assert "ValueError('bad')" in text

    def test_stack_trace_from_cause(self):
        try:
            raise RuntimeError("inner")
        except RuntimeError as e:
            error = TansakuError("outer", cause=e)
        assert "RuntimeError: inner" in error.context.stack_trace

    def test_to_dict(self):
        error = ConfigurationError("bad cores", field="cores")
        data = error.to_dict()
        assert data["error_type"] == "ConfigurationError"
        assert data["code"] == "CONFIG_ERROR"
        assert data["context"]["details"]["field"] == "cores"

    def test_with_context(self):
        error = TansakuError("x").with_context(round=3)
        assert error.context.details["round"] == 3

    def test_from_exception(self):
        error = StartResolutionError.from_exception(OSError("disk"))
        assert isinstance(error, StartResolutionError)
        assert error.message == "disk"
        assert isinstance(error.cause, OSError)

    def test_repr(self):
        assert "code='START_ERROR'" in repr(StartResolutionError("x"))


class TestExpansionErrors:
    """ExpansionError tests."""

    def test_batch_and_candidate(self):
        error = ExpansionError("failed", batch=[1, 2], candidate=2)
        assert error.batch == [1, 2]
        assert error.candidate == 2
        assert error.context.details["batch"] == ["1", "2"]
        assert error.context.details["candidate"] == "2"

    def test_batch_is_copied(self):
        batch = [1]
        error = ExpansionError("failed", batch=batch)
        batch.append(2)
        assert error.batch == [1]

    def test_malformed_is_expansion_error(self):
        error = MalformedResultError("bad", value=3, batch=[1])
        assert isinstance(error, ExpansionError)
        assert error.code == "MALFORMED_RESULT"
        assert error.context.details["value_type"] == "int"

    def test_validation_error(self):
        error = ValidationError("bad", field="frontier", value=[1])
        assert error.severity == ErrorSeverity.WARNING
        assert error.context.details["value"] == "[1]"


# ============================================================
# Retry Tests
# ============================================================


class TestRetryConfig:
    """RetryConfig tests."""

    def test_calculate_delay(self):
        config = RetryConfig(delay=1.0, backoff=2.0, max_delay=5.0)
        assert config.calculate_delay(1) == 1.0
        assert config.calculate_delay(2) == 2.0
        assert config.calculate_delay(4) == 5.0


class TestRetry:
    """retry decorator tests."""

    @pytest.mark.asyncio
    async def test_async_retry_succeeds(self):
        attempts = []

        @retry(max_attempts=3, delay=0.001)
        async def flaky(n):
            attempts.append(n)
            if len(attempts) < 3:
                raise ConnectionError("flaky")
            return [n + 1]

        assert await flaky(1) == [2]
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_async_retry_exhausted(self):
        @retry(max_attempts=2, delay=0.001)
        async def broken(n):
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await broken(1)

    @pytest.mark.asyncio
    async def test_async_retry_wait_yields_to_loop(self):
        events = []

        @retry(max_attempts=2, delay=0.05)
        async def flaky():
            events.append("attempt")
            if events.count("attempt") == 1:
                raise ConnectionError("flaky")
            return "ok"

        async def ticker():
            for _ in range(5):
                events.append("tick")
                await asyncio.sleep(0.001)

        result, _ = await asyncio.gather(flaky(), ticker())

        assert result == "ok"
        assert events[0] == "attempt"
        assert events[-1] == "attempt"
        assert events.count("tick") == 5

    def test_sync_retry_with_callback(self):
        seen = []

        @retry(max_attempts=2, delay=0.001, on_retry=lambda a, e, w: seen.append(a))
        def flaky():
            if not seen:
                raise ValueError("once")
            return "ok"

        assert flaky() == "ok"
        assert seen == [1]

    def test_non_matching_exception_not_retried(self):
        calls = []

        @retry(max_attempts=3, delay=0.001, exceptions=(ConnectionError,))
        def fails():
            calls.append(1)
            raise KeyError("x")

        with pytest.raises(KeyError):
            fails()
        assert len(calls) == 1

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            retry(max_attempts=0)


# ============================================================
# Timeout Tests
# ============================================================


class TestWithTimeout:
    """with_timeout tests."""

    @pytest.mark.asyncio
    async def test_fast_rule(self):
        async def rule(n):
            return [n]

        assert await with_timeout(rule, 1.0)(5) == [5]

    @pytest.mark.asyncio
    async def test_slow_rule_times_out(self):
        async def rule(n):
            await asyncio.sleep(1.0)
            return [n]

        with pytest.raises(ExpansionTimeoutError) as exc_info:
            await with_timeout(rule, 0.01)(5)
        assert exc_info.value.context.details["timeout_seconds"] == 0.01

    @pytest.mark.asyncio
    async def test_sync_rule_passthrough(self):
        assert await with_timeout(lambda n: [n, n], 1.0)(2) == [2, 2]

    @pytest.mark.asyncio
    async def test_slow_async_generator_times_out(self):
        async def rule(n):
            await asyncio.sleep(1.0)
            yield n

        with pytest.raises(ExpansionTimeoutError):
            await with_timeout(rule, 0.01)(5)

    @pytest.mark.asyncio
    async def test_async_generator_resolved_to_list(self):
        async def rule(n):
            yield n
            yield n + 1

        assert await with_timeout(rule, 1.0)(5) == [5, 6]

    @pytest.mark.asyncio
    async def test_malformed_result_not_masked(self):
        with pytest.raises(MalformedResultError):
            await with_timeout(lambda n: "abc", 1.0)(1)

    def test_invalid_seconds(self):
        with pytest.raises(ValueError):
            with_timeout(lambda n: [], 0)
