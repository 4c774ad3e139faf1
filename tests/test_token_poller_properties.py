"""
Property-based tests for the validation token poller.

Fetch functions are plain coroutines returning scripted values; delays go
through a RecordingSleeper so no test waits.
"""

import asyncio
from typing import Optional

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_binder.audit_logger import AuditLogger
from domain_binder.config import PollerConfig
from domain_binder.exceptions import ValidationTimeoutError, WorkflowCancelledError
from domain_binder.models import NULL_SENTINEL, ValidationInfo
from domain_binder.sleeper import RecordingSleeper
from domain_binder.token_poller import ValidationTokenPoller


class ScriptedFetch:
    """Returns the scripted values in order, then the last one forever."""

    def __init__(self, values: list) -> None:
        self.values = values
        self.calls = 0

    async def __call__(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


# Strategies for generating valid test data

@st.composite
def absent_value_strategy(draw) -> Optional[str]:
    """Values that mean "not ready yet"."""
    return draw(st.sampled_from([None, "", "   ", NULL_SENTINEL, " null "]))


@st.composite
def token_strategy(draw) -> str:
    return draw(st.text(
        alphabet="abcdefghijklmnopqrstuvwxyz0123456789",
        min_size=8,
        max_size=40,
    ))


def make_poller(max_attempts: int, interval: float = 10.0, initial: float = 10.0):
    sleeper = RecordingSleeper()
    poller = ValidationTokenPoller(
        PollerConfig(
            max_attempts=max_attempts,
            interval_seconds=interval,
            initial_delay_seconds=initial,
        ),
        sleeper=sleeper,
    )
    return poller, sleeper


class TestPollerSuccessProperty:
    """
    Property-based tests for the success path.
    """

    @given(
        max_attempts=st.integers(min_value=1, max_value=15),
        data=st.data(),
        token=token_strategy(),
    )
    @settings(max_examples=100)
    def test_token_on_call_n_within_limit(self, max_attempts: int, data, token: str) -> None:
        """
        *For any* N <= max_attempts, a fetch that is absent N-1 times and then
        returns a token SHALL succeed on call N.
        """
        n = data.draw(st.integers(min_value=1, max_value=max_attempts))
        absent = [data.draw(absent_value_strategy()) for _ in range(n - 1)]
        fetch = ScriptedFetch(absent + [token])
        poller, sleeper = make_poller(max_attempts)

        result = asyncio.run(poller.poll(fetch))

        assert result.value == token
        assert fetch.calls == n
        # initial delay plus one interval per miss
        assert sleeper.calls == [10.0] + [10.0] * (n - 1)

    @given(token=token_strategy())
    @settings(max_examples=100)
    def test_surrounding_whitespace_is_stripped(self, token: str) -> None:
        fetch = ScriptedFetch([f"  {token}\n"])
        poller, _ = make_poller(3)

        result = asyncio.run(poller.poll(fetch))

        assert result.value == token

    @given(token=token_strategy(), verification=token_strategy())
    @settings(max_examples=100)
    def test_validation_info_keeps_both_values(self, token: str, verification: str) -> None:
        """
        *For any* ValidationInfo result, both the token and the domain
        verification value SHALL be kept.
        """
        fetch = ScriptedFetch([ValidationInfo(token, verification)])
        poller, _ = make_poller(3)

        result = asyncio.run(poller.poll(fetch))

        assert result.value == token
        assert result.domain_verification == verification

    @given(token=token_strategy(), verification=token_strategy())
    @settings(max_examples=50)
    def test_domain_verification_whitespace_is_stripped(self, token: str, verification: str) -> None:
        fetch = ScriptedFetch([ValidationInfo(f" {token}\n", f"\t{verification}\n")])
        poller, _ = make_poller(3)

        result = asyncio.run(poller.poll(fetch))

        assert result.value == token
        assert result.domain_verification == verification

    def test_null_domain_verification_is_dropped(self) -> None:
        fetch = ScriptedFetch([ValidationInfo("abc123", NULL_SENTINEL)])
        poller, _ = make_poller(3)

        result = asyncio.run(poller.poll(fetch))

        assert result.domain_verification is None


class TestPollerTimeoutProperty:
    """
    Property-based tests for the timeout path.
    """

    @given(
        max_attempts=st.integers(min_value=1, max_value=15),
        absent=absent_value_strategy(),
    )
    @settings(max_examples=100)
    def test_always_absent_times_out_with_attempt_count(
        self, max_attempts: int, absent: Optional[str]
    ) -> None:
        """
        *For any* always-absent fetch, poll SHALL fail with the attempt count
        after exactly max_attempts calls.
        """
        fetch = ScriptedFetch([absent])
        poller, _ = make_poller(max_attempts)

        with pytest.raises(ValidationTimeoutError) as exc_info:
            asyncio.run(poller.poll(fetch))

        assert exc_info.value.attempts == max_attempts
        assert exc_info.value.details["attempts"] == max_attempts
        assert fetch.calls == max_attempts

    @given(
        max_attempts=st.integers(min_value=1, max_value=10),
        interval=st.floats(min_value=0.5, max_value=60.0),
        initial=st.floats(min_value=0.0, max_value=60.0),
    )
    @settings(max_examples=100)
    def test_worst_case_wait(self, max_attempts: int, interval: float, initial: float) -> None:
        """
        *For any* configuration, the total wait before timing out SHALL be
        initial + max_attempts * interval.
        """
        poller, sleeper = make_poller(max_attempts, interval=interval, initial=initial)

        with pytest.raises(ValidationTimeoutError):
            asyncio.run(poller.poll(ScriptedFetch([None])))

        assert sleeper.total_seconds == pytest.approx(initial + max_attempts * interval)

    def test_token_after_limit_is_never_fetched(self) -> None:
        fetch = ScriptedFetch([None, None, None, "late-token"])
        poller, _ = make_poller(3)

        with pytest.raises(ValidationTimeoutError):
            asyncio.run(poller.poll(fetch))

        assert fetch.calls == 3

    def test_three_attempts_always_absent(self) -> None:
        poller, _ = make_poller(3)

        with pytest.raises(ValidationTimeoutError) as exc_info:
            asyncio.run(poller.poll(ScriptedFetch([None])))

        assert exc_info.value.attempts == 3
        assert exc_info.value.code == "validation_timeout"


class TestPollerCancellation:
    """A cancelled sleeper stops the poll loop."""

    def test_cancel_before_poll(self) -> None:
        poller, sleeper = make_poller(3)
        sleeper.cancel()
        fetch = ScriptedFetch(["token"])

        with pytest.raises(WorkflowCancelledError):
            asyncio.run(poller.poll(fetch))

        assert fetch.calls == 0

    def test_attempts_are_logged(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=_NullStream())
        poller = ValidationTokenPoller(
            PollerConfig(max_attempts=2, interval_seconds=1.0, initial_delay_seconds=0.0),
            sleeper=RecordingSleeper(),
            logger=logger,
        )

        asyncio.run(poller.poll(ScriptedFetch([None, "token"])))

        attempts = [e.data["attempt"] for e in logger.entries if "attempt" in e.data]
        assert 1 in attempts and 2 in attempts


class _NullStream:
    def write(self, text: str) -> int:
        return len(text)

    def flush(self) -> None:
        pass
