from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import ScrapeError


@dataclass
class Attempt:
    """
    Record of one navigation-and-wait cycle inside a harvest.

    Fields:
        ordinal     : 1-based position in the retry loop.
        started_at  : time.perf_counter() reading when the attempt began.
        elapsed_s   : Wall time until the session returned or raised.
        error_kind  : ScrapeError.kind of the failure, None on success.
    """
    ordinal: int
    started_at: float
    elapsed_s: float = 0.0
    error_kind: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None


class OutcomeStatus(Enum):
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class ScrapeOutcome:
    """
    Result of one FetchService.fetch() call.

    Exactly one of payload / error is set. Only the final attempt's error is
    retained; earlier failures survive only as error_kind in `attempts`.
    """
    status: OutcomeStatus
    payload: Any = None
    error: ScrapeError | None = None
    attempts: list[Attempt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @classmethod
    def success(cls, payload: Any, attempts: list[Attempt]) -> "ScrapeOutcome":
        return cls(status=OutcomeStatus.SUCCEEDED, payload=payload, attempts=attempts)

    @classmethod
    def exhausted(cls, error: ScrapeError, attempts: list[Attempt]) -> "ScrapeOutcome":
        return cls(status=OutcomeStatus.EXHAUSTED, error=error, attempts=attempts)
