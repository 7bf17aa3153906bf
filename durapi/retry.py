from __future__ import annotations

"""
Retry policy for remote calls.

Only transport level failures are retried: a send that was rejected or
aborted before a response came back. A response that was decoded, including
an error descriptor from the dispatcher, is final.

Delays grow as `2 ** n * base_delay` for the n-th retry (0-indexed) and are
applied sequentially without jitter. A retry only suspends the call it
belongs to.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import anyio

from .conf import TRANSIENT_PHRASES, RpcSettings, settings as default_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class RetryState:
    """
    Per-call retry bookkeeping. Created for one logical call and discarded after it.
    """

    max_attempts: int
    retries: int = 0
    delays: list[float] = field(default_factory=list)

    @property
    def attempts(self) -> int:
        return self.retries + 1


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Decides whether a failed call is re-issued and how long to wait first.

    Parameters
    ----------
    max_attempts:
        Total attempts, initial call included.
    base_delay:
        Seconds to wait before the first retry.
    transient_phrases:
        Message fragments identifying transient failures for errors that
        carry no structured `transient` tag.
    """

    max_attempts: int = 11
    base_delay: float = 0.01
    transient_phrases: tuple[str, ...] = TRANSIENT_PHRASES

    @classmethod
    def from_settings(cls, settings: RpcSettings | None = None) -> "RetryPolicy":
        cfg = settings or default_settings
        return cls(
            max_attempts=cfg.max_attempts,
            base_delay=cfg.base_delay,
            transient_phrases=cfg.transient_phrases,
        )

    def is_transient(self, error: BaseException) -> bool:
        tag = getattr(error, "transient", None)
        if isinstance(tag, bool):
            return tag
        message = str(error)
        return any(phrase in message for phrase in self.transient_phrases)

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """
        Return True if retry number `attempt` (0-indexed) should be made for `error`.
        """
        if attempt < 0 or attempt >= self.max_attempts - 1:
            return False
        return self.is_transient(error)

    def delay_for(self, attempt: int) -> float:
        return (2**attempt) * self.base_delay

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Await `operation` until it succeeds, retrying transient failures.

        Non-transient errors propagate immediately. When the attempts are
        exhausted the last transient error propagates unchanged.
        """
        state = RetryState(max_attempts=self.max_attempts)

        while True:
            try:
                return await operation()
            except Exception as exc:
                if not self.should_retry(exc, state.retries):
                    raise

                delay = self.delay_for(state.retries)
                state.delays.append(delay)
                state.retries += 1
                logger.debug(
                    "Transient failure (%s); retry %d/%d in %.3fs",
                    exc,
                    state.retries,
                    self.max_attempts - 1,
                    delay,
                )
                await anyio.sleep(delay)
