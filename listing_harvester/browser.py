from playwright.async_api import async_playwright

from .errors import ResourceAcquisitionError
from .logging_config import get_logger
from .settings import LaunchSettings

logger = get_logger(__name__)


class BrowserResource:
    """
    The browser-session resource for one harvest: a Playwright driver plus
    one launched Chromium.

    - Single browser instance per context manager (__aenter__/__aexit__)
    - Entering yields the Browser, which spawns one context per attempt
    - A failed launch stops whatever was started and raises
      ResourceAcquisitionError, so __aexit__ is never needed in that case
    - Release is idempotent
    """

    def __init__(self, launch: LaunchSettings):
        self.launch = launch

        self._playwright = None
        self._browser = None

    async def __aenter__(self):
        logger.info(
            "browser_launching",
            headless=self.launch.headless,
            executable_path=self.launch.executable_path,
        )
        try:
            self._playwright = await async_playwright().start()

            launch_options = {"headless": self.launch.headless, "args": list(self.launch.args)}
            if self.launch.executable_path:
                launch_options["executable_path"] = self.launch.executable_path

            self._browser = await self._playwright.chromium.launch(**launch_options)
        except Exception as e:
            await self.close()
            raise ResourceAcquisitionError(f"Browser failed to start: {e}") from e

        return self._browser

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        if browser:
            logger.info("browser_closing")
            try:
                await browser.close()
            except Exception as e:
                logger.warning("browser_close_failed", error=str(e))
        if playwright:
            await playwright.stop()
