import json
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import (
    HttpError,
    NavigationError,
    NavigationTimeout,
    ParseError,
    ResponseTimeout,
)
from .logging_config import get_logger
from .policy import NetworkFilter, ResponseMatcher
from .settings import SessionConfig

logger = get_logger(__name__)


class PageSession:
    """
    One navigation-and-wait cycle against the target page.

    - Opens a fresh browser context + page per attempt and always closes it
    - Aborts requests the NetworkFilter blocks before they hit the network
    - Registers the response wait before navigating, so a fast API call
      cannot fire before anyone is listening
    - Raises a ScrapeError subclass on failure; never retries
    """

    def __init__(self, config: SessionConfig):
        self.config = config
        self.network_filter = NetworkFilter.from_config(config)
        self.matcher = ResponseMatcher(config.target)

    async def run(self, browser, attempt: int = 1) -> Any:
        log = logger.bind(attempt=attempt)
        context = await browser.new_context(
            user_agent=self.config.user_agent,
            viewport={"width": self.config.viewport.width, "height": self.config.viewport.height},
            locale=self.config.locale,
            ignore_https_errors=self.config.ignore_https_errors,
        )

        try:
            await context.route("**/*", self._route_handler)
            page = await context.new_page()
            page.on("pageerror", lambda err: log.warning("page_js_error", error=str(err)))
            page.on("crash", lambda _: log.error("page_crashed"))

            log.info("awaiting_api", url=self.config.target.url, method=self.config.target.method)
            try:
                async with page.expect_response(
                    self.matcher.matches_response, timeout=self.config.attempt_timeout_ms
                ) as response_info:
                    await self._navigate(page, log)
                    await self._scroll(page, log)
            except PlaywrightTimeoutError as e:
                raise ResponseTimeout(
                    f"No {self.config.target.method} {self.config.target.url} response "
                    f"within {self.config.attempt_timeout_ms} ms"
                ) from e

            response = await response_info.value
            log.info("api_response", status=response.status)
            return await self._read_payload(response)

        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                log.warning("context_close_failed", error=str(e))

    async def _route_handler(self, route):
        request = route.request
        if self.network_filter.blocks(request.resource_type, request.url):
            await route.abort()
        else:
            await route.continue_()

    async def _navigate(self, page, log) -> None:
        log.info("navigating", url=self.config.page_url, timeout_ms=self.config.attempt_timeout_ms)
        try:
            await page.goto(
                self.config.page_url,
                wait_until=self.config.wait_until,
                timeout=self.config.attempt_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(f"Navigation to {self.config.page_url} timed out: {e}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {self.config.page_url} failed: {e}") from e
        log.info("navigation_complete")

    async def _scroll(self, page, log) -> None:
        # Best-effort nudge for lazily loaded content.
        try:
            await page.evaluate("(px) => window.scrollBy(0, px)", self.config.scroll_by_px)
        except Exception as e:
            log.warning("scroll_failed", error=str(e))

    async def _read_payload(self, response) -> Any:
        if not response.ok:
            try:
                text = await response.text()
            except PlaywrightError:
                text = ""
            raise HttpError(
                response.status,
                response.status_text,
                text[: self.config.body_excerpt_chars],
            )

        try:
            return await response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"API response is not valid JSON: {e}") from e
