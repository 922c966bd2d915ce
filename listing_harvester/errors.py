"""
Failure taxonomy for a harvest run.

Every failure a page attempt can produce is mapped into one of these
exception types so the retry loop, the CLI and the HTTP server can report
them uniformly. `kind` is the short machine-readable name surfaced to
callers.
"""

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class ScrapeError(Exception):
    kind = "unknown"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)


class NavigationTimeout(ScrapeError):
    """The target page did not finish loading within the attempt timeout."""
    kind = "navigation_timeout"


class NavigationError(ScrapeError):
    """Navigation failed outright (DNS, TLS, connection reset, aborted)."""
    kind = "navigation_error"


class ResponseTimeout(ScrapeError):
    """No response matching the target API arrived within the attempt timeout."""
    kind = "response_timeout"


class HttpError(ScrapeError):
    """The target API answered with a non-2xx status."""
    kind = "http_error"

    def __init__(self, status: int, status_text: str = "", body_excerpt: str = ""):
        self.status = status
        self.status_text = status_text
        self.body_excerpt = body_excerpt
        reason = f"{status} {status_text}".strip()
        super().__init__(f"API HTTP Error {reason}. Body: {body_excerpt}")


class ParseError(ScrapeError):
    """The target API body could not be decoded as JSON."""
    kind = "parse_error"


class ResourceAcquisitionError(ScrapeError):
    """The browser could not be started."""
    kind = "resource_acquisition"


class UnknownError(ScrapeError):
    kind = "unknown"


def classify(exc: BaseException) -> ScrapeError:
    """
    Map an arbitrary exception onto the taxonomy.

    Already-classified errors pass through untouched. A bare Playwright
    timeout that escaped the session is treated as a response timeout,
    since navigation timeouts are converted at the call site.
    """
    if isinstance(exc, ScrapeError):
        return exc
    if isinstance(exc, PlaywrightTimeoutError):
        return ResponseTimeout(str(exc))
    message = str(exc) or type(exc).__name__
    return UnknownError(f"{type(exc).__name__}: {message}")
