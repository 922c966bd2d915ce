from typing import Callable

from .browser import BrowserResource
from .logging_config import get_logger
from .metrics import ScrapeOutcome
from .retry import RetryOrchestrator, SleepFn
from .session import PageSession
from .settings import HarvestConfig, LaunchSettings, RetryPolicy, SessionConfig

logger = get_logger(__name__)

BrowserFactory = Callable[[LaunchSettings], BrowserResource]


class FetchService:
    """
    Top-level entry point for one harvest.

    Acquires a browser for the duration of fetch(), drives the retry loop
    over PageSession attempts, and releases the browser exactly once on
    every exit path. A browser that fails to start raises
    ResourceAcquisitionError straight to the caller without retrying.
    """

    def __init__(
        self,
        session_config: SessionConfig,
        retry_policy: RetryPolicy,
        launch: LaunchSettings,
        browser_factory: BrowserFactory = BrowserResource,
        sleep: SleepFn | None = None,
    ):
        self.session_config = session_config
        self.retry_policy = retry_policy
        self.launch = launch
        self._browser_factory = browser_factory
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: HarvestConfig, **kwargs) -> "FetchService":
        return cls(config.session_config(), config.retry_policy(), config.launch_settings(), **kwargs)

    def _orchestrator(self) -> RetryOrchestrator:
        if self._sleep is None:
            return RetryOrchestrator(self.retry_policy)
        return RetryOrchestrator(self.retry_policy, sleep=self._sleep)

    async def fetch(self) -> ScrapeOutcome:
        session = PageSession(self.session_config)
        orchestrator = self._orchestrator()

        async with self._browser_factory(self.launch) as browser:
            outcome = await orchestrator.run(lambda attempt: session.run(browser, attempt))

        if outcome.ok:
            logger.info("fetch_succeeded", attempts=outcome.attempt_count)
        else:
            logger.error(
                "fetch_failed",
                attempts=outcome.attempt_count,
                kind=outcome.error.kind,
                error=str(outcome.error),
            )
        return outcome
