"""Tests for the throttle-aware executor."""

import pytest

from site_batch import (
    ExponentialBackoffStrategy,
    FatalOperationError,
    GetPolicy,
    MetricsObserver,
    OutcomeStatus,
    RetryConfig,
    SiteOperation,
    ThrottleAwareExecutor,
    ThrottledError,
)
from site_batch.testing import MockSiteSession


class ScriptedOperation(SiteOperation):
    """Operation that plays back a script of exceptions and payloads."""

    name = "scripted"

    def __init__(self, steps):
        self.steps = list(steps)
        self.invocations = 0

    async def invoke(self, session):
        self.invocations += 1
        step = self.steps.pop(0) if self.steps else {"ok": True}
        if isinstance(step, BaseException):
            raise step
        return step


def make_executor(sleep, max_attempts=5, initial_wait=30.0, **kwargs):
    return ThrottleAwareExecutor(
        retry=RetryConfig(max_attempts=max_attempts, initial_wait=initial_wait),
        sleep=sleep,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_success_on_first_attempt(recording_sleep):
    """Test that a successful operation returns its payload without waiting."""
    executor = make_executor(recording_sleep)
    session = MockSiteSession("https://a.example/sites/one")

    result = await executor.execute(GetPolicy(), session.target, session)

    assert result.status is OutcomeStatus.SUCCEEDED
    assert result.success
    assert result.output == {"auto_expiration": True}
    assert result.retry_state.attempts == 1
    assert recording_sleep.waits == []
    assert session.calls == ["get_policy"]


@pytest.mark.asyncio
async def test_always_throttled_uses_exponential_backoff(recording_sleep):
    """Test waits of initial * 2^k for every attempt and exhaustion after max attempts."""
    operation = ScriptedOperation([ThrottledError("429 Too Many Requests")] * 10)
    executor = make_executor(recording_sleep, max_attempts=5, initial_wait=30.0)

    result = await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert result.status is OutcomeStatus.RETRIES_EXHAUSTED
    assert not result.success
    assert operation.invocations == 5
    assert result.retry_state.attempts == 5
    assert recording_sleep.waits == [30.0, 60.0, 120.0, 240.0, 480.0]
    assert result.retry_state.waits == recording_sleep.waits
    assert result.retry_state.total_wait == 930.0
    assert "429" in result.last_error


@pytest.mark.asyncio
async def test_server_suggested_wait_overrides_backoff(recording_sleep):
    """Test that Throttled(retry_after=R) waits exactly R at every attempt index."""
    operation = ScriptedOperation([ThrottledError("busy", retry_after=7.0)] * 3)
    executor = make_executor(recording_sleep, max_attempts=3, initial_wait=30.0)

    result = await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert result.status is OutcomeStatus.RETRIES_EXHAUSTED
    assert recording_sleep.waits == [7.0, 7.0, 7.0]


@pytest.mark.asyncio
async def test_mixed_hints_fall_back_to_backoff_per_attempt(recording_sleep):
    """Test that attempts without a hint use the backoff for their own index."""
    operation = ScriptedOperation(
        [
            ThrottledError("throttled"),
            ThrottledError("throttled", retry_after=3.0),
            ThrottledError("throttled"),
            {"done": True},
        ]
    )
    executor = make_executor(recording_sleep, max_attempts=5, initial_wait=1.0)

    result = await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert result.success
    assert recording_sleep.waits == [1.0, 3.0, 4.0]


@pytest.mark.asyncio
async def test_success_on_third_attempt(recording_sleep):
    """Test that success on attempt 3 of 5 stops retrying."""
    operation = ScriptedOperation(
        [ThrottledError("throttled"), ThrottledError("throttled"), {"value": 3}]
    )
    executor = make_executor(recording_sleep, max_attempts=5, initial_wait=30.0)

    result = await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert result.status is OutcomeStatus.SUCCEEDED
    assert result.output == {"value": 3}
    assert operation.invocations == 3
    assert result.retry_state.attempts == 3
    assert recording_sleep.waits == [30.0, 60.0]


@pytest.mark.asyncio
async def test_non_throttle_failure_is_fatal(recording_sleep):
    """Test that a non-throttling error is raised after exactly one attempt."""
    original = PermissionError("access denied")
    operation = ScriptedOperation([original, {"never": "reached"}])
    executor = make_executor(recording_sleep)

    with pytest.raises(FatalOperationError) as exc_info:
        await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert operation.invocations == 1
    assert recording_sleep.waits == []
    assert exc_info.value.attempt == 1
    assert exc_info.value.target == "https://a.example"
    assert exc_info.value.__cause__ is original
    assert "PermissionError" in str(exc_info.value)


@pytest.mark.asyncio
async def test_status_digits_in_error_text_are_not_throttling(recording_sleep):
    """Test that an ordinary error mentioning 429 in a URL fails after one attempt."""
    target = "https://contoso.example/sites/proj4290"
    operation = ScriptedOperation([KeyError(f"list missing on {target}")] * 5)
    executor = make_executor(recording_sleep, initial_wait=1.0)

    with pytest.raises(FatalOperationError) as exc_info:
        await executor.execute(operation, target, MockSiteSession(target))

    assert operation.invocations == 1
    assert exc_info.value.attempt == 1
    assert recording_sleep.waits == []


@pytest.mark.asyncio
async def test_fatal_after_throttle_keeps_retry_state(recording_sleep):
    """Test that a fatal error after throttling reports the attempts already made."""
    operation = ScriptedOperation([ThrottledError("throttled"), KeyError("missing")])
    executor = make_executor(recording_sleep, initial_wait=2.0)

    with pytest.raises(FatalOperationError) as exc_info:
        await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert exc_info.value.attempt == 2
    assert exc_info.value.retry_state.waits == [2.0]


@pytest.mark.asyncio
async def test_throttle_message_patterns_are_retried(recording_sleep):
    """Test that plain exceptions carrying throttle messages are retried."""
    operation = ScriptedOperation(
        [Exception("HTTP 503 Server Unavailable"), Exception("Request was throttled"), "ok"]
    )
    executor = make_executor(recording_sleep, initial_wait=1.0)

    result = await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert result.success
    assert result.output == "ok"
    assert recording_sleep.waits == [1.0, 2.0]


@pytest.mark.asyncio
async def test_single_attempt_config(recording_sleep):
    """Test that max_attempts=1 still waits once before reporting exhaustion."""
    operation = ScriptedOperation([ThrottledError("throttled")])
    executor = make_executor(recording_sleep, max_attempts=1, initial_wait=5.0)

    result = await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert result.status is OutcomeStatus.RETRIES_EXHAUSTED
    assert operation.invocations == 1
    assert recording_sleep.waits == [5.0]


@pytest.mark.asyncio
async def test_custom_backoff_strategy_with_cap(recording_sleep):
    """Test that a capped backoff strategy limits computed waits."""
    operation = ScriptedOperation([ThrottledError("throttled")] * 4)
    executor = ThrottleAwareExecutor(
        retry=RetryConfig(max_attempts=4),
        backoff_strategy=ExponentialBackoffStrategy(initial_wait=10.0, max_wait=25.0),
        sleep=recording_sleep,
    )

    await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    assert recording_sleep.waits == [10.0, 20.0, 25.0, 25.0]


@pytest.mark.asyncio
async def test_observers_see_throttle_and_backoff(recording_sleep):
    """Test that throttle and backoff events reach observers."""
    metrics = MetricsObserver()
    operation = ScriptedOperation([ThrottledError("throttled", retry_after=4.0), "ok"])
    executor = make_executor(recording_sleep, observers=[metrics])

    await executor.execute(operation, "https://a.example", MockSiteSession("x"))

    collected = await metrics.get_metrics()
    assert collected["throttles_hit"] == 1
    assert collected["total_backoff_time"] == 4.0


def test_invalid_retry_config_rejected():
    """Test that the executor validates its retry configuration."""
    with pytest.raises(ValueError, match="max_attempts"):
        ThrottleAwareExecutor(retry=RetryConfig(max_attempts=0))
