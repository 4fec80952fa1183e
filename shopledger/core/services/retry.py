"""
Bounded retry policy for store access.

One policy object applied at the store boundary instead of ad-hoc retry loops
at each call site.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shopledger.config import get_logger
from shopledger.config.settings import LedgerSettings
from shopledger.core.exceptions import StoreError

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Max attempts plus exponential backoff, retrying only transient errors."""

    max_attempts: int = 3
    delay: float = 0.1
    multiplier: float = 2.0
    max_delay: float = 2.0
    retry_on: tuple[type[BaseException], ...] = (StoreError,)

    @classmethod
    def from_settings(cls, settings: LedgerSettings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.invoice_retry_attempts,
            delay=settings.retry_delay,
            multiplier=settings.retry_multiplier,
            max_delay=settings.retry_max_delay,
        )

    async def run(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Await operation, retrying on ``retry_on`` errors until attempts run out.

        The last error is re-raised unchanged when every attempt fails.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.delay,
                exp_base=self.multiplier,
                max=self.max_delay,
            ),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(operation, *args, **kwargs)

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "store_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )
