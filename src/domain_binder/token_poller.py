"""
Validation token poller.

The hosting provider computes the domain validation token asynchronously
after a validation request, so the token is fetched in a constant-interval
retry loop:

- wait ``initial_delay_seconds`` once
- call ``fetch`` up to ``max_attempts`` times, waiting ``interval_seconds``
  after every miss (no backoff)
- None, "" and "null" mean "not ready yet"

Worst case the loop waits ``initial + max_attempts * interval`` seconds.
"""

from typing import Awaitable, Callable, Optional, Union

from .audit_logger import AuditLogger
from .config import PollerConfig
from .exceptions import ValidationTimeoutError
from .models import ValidationAttempt, ValidationInfo, ValidationToken, is_absent
from .sleeper import Sleeper


FetchResult = Union[None, str, ValidationInfo]
TokenFetcher = Callable[[], Awaitable[FetchResult]]


class ValidationTokenPoller:
    """Polls a fetch coroutine until a validation token appears."""

    COMPONENT = "TokenPoller"

    def __init__(
        self,
        config: Optional[PollerConfig] = None,
        sleeper: Optional[Sleeper] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config or PollerConfig()
        self._sleeper = sleeper or Sleeper()
        self._logger = logger

    @property
    def config(self) -> PollerConfig:
        return self._config

    @staticmethod
    def _unpack(result: FetchResult) -> tuple[Optional[str], Optional[str]]:
        if isinstance(result, ValidationInfo):
            return result.validation_token, result.domain_verification
        return result, None

    async def poll(self, fetch: TokenFetcher) -> ValidationToken:
        """
        Poll until fetch returns a usable token.

        Args:
            fetch: Coroutine function returning a token string, a
                   ValidationInfo, or None

        Returns:
            The first usable ValidationToken

        Raises:
            ValidationTimeoutError: If max_attempts fetches found no token
            WorkflowCancelledError: If the sleeper was cancelled
        """
        attempt = ValidationAttempt(
            attempt_number=0,
            max_attempts=self._config.max_attempts,
            interval_seconds=self._config.interval_seconds,
        )

        await self._sleeper.sleep(self._config.initial_delay_seconds)

        while not attempt.exhausted:
            attempt.attempt_number += 1
            self._log(
                f"Attempt {attempt.attempt_number} of {attempt.max_attempts} to get validation token",
                {"attempt": attempt.attempt_number, "max_attempts": attempt.max_attempts},
            )

            value, domain_verification = self._unpack(await fetch())
            if not is_absent(value):
                self._log(
                    "Validation token obtained",
                    {"attempt": attempt.attempt_number},
                )
                return ValidationToken.now(value.strip(), domain_verification)

            self._log(
                f"Validation token not ready yet, waiting {attempt.interval_seconds}s",
                {"attempt": attempt.attempt_number},
            )
            await self._sleeper.sleep(attempt.interval_seconds)

        raise ValidationTimeoutError(attempts=attempt.attempt_number)

    def _log(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.info(self.COMPONENT, message, data)
