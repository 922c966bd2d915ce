"""
Retry orchestration for page attempts.

State machine per harvest:

    PENDING -> RUNNING -> SUCCEEDED
                       -> RETRY_PENDING -> RUNNING ...
                       -> EXHAUSTED

Every error kind is retried identically up to max_attempts, including ones
that cannot succeed on retry (e.g. a malformed page URL). Each attempt gets
the full per-attempt timeout; there is no deadline shared across attempts.
"""

import asyncio
import time
from enum import Enum
from typing import Any, Awaitable, Callable

from .errors import ScrapeError, classify
from .logging_config import get_logger
from .metrics import Attempt, ScrapeOutcome
from .settings import RetryPolicy

logger = get_logger(__name__)

AttemptFn = Callable[[int], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[None]]


class RetryState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    RETRY_PENDING = "retry_pending"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class RetryOrchestrator:
    def __init__(self, policy: RetryPolicy, sleep: SleepFn = asyncio.sleep):
        self.policy = policy
        self._sleep = sleep
        self.state = RetryState.PENDING

    async def run(self, attempt_fn: AttemptFn) -> ScrapeOutcome:
        """
        Call attempt_fn(ordinal) until it returns or the attempt budget is spent.

        Returns a ScrapeOutcome; never raises for attempt failures. Task
        cancellation is not an attempt failure and propagates unchanged.
        """
        attempts: list[Attempt] = []
        last_error: ScrapeError | None = None
        ordinal = 1

        while True:
            self.state = RetryState.RUNNING
            logger.info("attempt_start", attempt=ordinal, max_attempts=self.policy.max_attempts)
            record = Attempt(ordinal=ordinal, started_at=time.perf_counter())
            attempts.append(record)

            try:
                payload = await attempt_fn(ordinal)
            except Exception as e:
                record.elapsed_s = time.perf_counter() - record.started_at
                last_error = classify(e)
                record.error_kind = last_error.kind
                logger.warning(
                    "attempt_failed",
                    attempt=ordinal,
                    kind=last_error.kind,
                    error=str(last_error),
                    elapsed_s=round(record.elapsed_s, 3),
                )
            else:
                record.elapsed_s = time.perf_counter() - record.started_at
                self.state = RetryState.SUCCEEDED
                logger.info("attempt_succeeded", attempt=ordinal, elapsed_s=round(record.elapsed_s, 3))
                return ScrapeOutcome.success(payload, attempts)

            if ordinal >= self.policy.max_attempts:
                self.state = RetryState.EXHAUSTED
                logger.error("attempts_exhausted", attempts=ordinal, kind=last_error.kind)
                return ScrapeOutcome.exhausted(last_error, attempts)

            self.state = RetryState.RETRY_PENDING
            logger.info("retry_scheduled", next_attempt=ordinal + 1, delay_s=self.policy.delay_s)
            await self._sleep(self.policy.delay_s)
            ordinal += 1
