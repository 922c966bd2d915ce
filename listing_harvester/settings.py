from pathlib import Path
from dataclasses import dataclass, field, fields
from pydantic import BaseModel, ConfigDict, Field
import yaml

from .logging_config import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_MAP_URL = (
    "https://www.realtor.ca/map#view=list&Sort=6-D&GeoIds=g30_c3nfkdtg"
    "&GeoName=Calgary%2C%20AB&PropertyTypeGroupID=1&TransactionTypeId=2"
    "&PropertySearchTypeId=3&NumberOfDays=1&OwnershipTypeGroupId=2&Currency=CAD"
)
DEFAULT_API_URL = "https://api2.realtor.ca/Listing.svc/PropertySearch_Post"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)


class TargetSpec(BaseModel):
    """The one API response an attempt waits for, keyed on exact URL and method."""
    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "POST"


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(default=1280, gt=0)
    height: int = Field(default=800, gt=0)


class SessionConfig(BaseModel):
    """
    Everything a single page attempt needs. Immutable for the lifetime
    of one fetch; shared by every attempt of that fetch.
    """
    model_config = ConfigDict(frozen=True)

    page_url: str
    target: TargetSpec
    attempt_timeout_ms: int = Field(default=90_000, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    viewport: Viewport = Viewport()
    locale: str = "en-US"
    wait_until: str = "networkidle"
    scroll_by_px: int = 100
    blocked_resource_types: frozenset[str] = frozenset()
    blocked_url_patterns: tuple[str, ...] = ()
    body_excerpt_chars: int = Field(default=200, ge=0)
    ignore_https_errors: bool = True


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    delay_s: float = Field(default=5.0, ge=0)


class LaunchSettings(BaseModel):
    """
    Browser launch parameters.

    For Playwright:
        chromium.launch(headless=..., executable_path=..., args=[...])
    """
    model_config = ConfigDict(frozen=True)

    headless: bool = True
    executable_path: str | None = None
    args: tuple[str, ...] = ()


@dataclass
class HarvestConfig:
    """
    Central configuration for a harvest.

    Values can be overridden via harvest_config.yaml at the project root.
    The component-facing values are built from it with session_config(),
    retry_policy() and launch_settings().
    """

    # Target
    map_url: str = DEFAULT_MAP_URL
    api_url: str = DEFAULT_API_URL
    api_method: str = "POST"

    # Page tuning
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1280
    viewport_height: int = 800
    browser_locale: str = "en-US"
    wait_until: str = "networkidle"
    scroll_by_px: int = 100
    body_excerpt_chars: int = 200

    # Retries
    attempt_timeout_ms: int = 90_000
    max_attempts: int = 3  # 1 initial attempt + 2 retries
    retry_delay_s: float = 5.0

    # Request blocking
    blocked_resource_types: list[str] = field(
        default_factory=lambda: ["image", "media", "font", "stylesheet", "other"]
    )
    blocked_url_patterns: list[str] = field(
        default_factory=lambda: [
            ".css",
            "google-analytics",
            "googletagmanager",
            "doubleclick",
            "scorecardresearch",
            "youtube",
            "intergient",
        ]
    )

    # Browser launch
    browser_headless: bool = True
    browser_executable_path: str | None = None
    browser_args: list[str] = field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--no-first-run",
            "--no-zygote",
            "--disable-gpu",
        ]
    )
    ignore_https_errors: bool = True

    # Server / output
    server_host: str = "0.0.0.0"
    server_port: int = 3001
    output_dir: str = "results"
    listing_base_url: str = "https://www.realtor.ca"

    def __post_init__(self):
        # Raises pydantic.ValidationError on out-of-range values (e.g. max_attempts: 0).
        self.session_config()
        self.retry_policy()
        self.launch_settings()

    def session_config(self) -> SessionConfig:
        return SessionConfig(
            page_url=self.map_url,
            target=TargetSpec(url=self.api_url, method=self.api_method),
            attempt_timeout_ms=self.attempt_timeout_ms,
            user_agent=self.user_agent,
            viewport=Viewport(width=self.viewport_width, height=self.viewport_height),
            locale=self.browser_locale,
            wait_until=self.wait_until,
            scroll_by_px=self.scroll_by_px,
            blocked_resource_types=frozenset(self.blocked_resource_types),
            blocked_url_patterns=tuple(self.blocked_url_patterns),
            body_excerpt_chars=self.body_excerpt_chars,
            ignore_https_errors=self.ignore_https_errors,
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, delay_s=self.retry_delay_s)

    def launch_settings(self) -> LaunchSettings:
        return LaunchSettings(
            headless=self.browser_headless,
            executable_path=self.browser_executable_path,
            args=tuple(self.browser_args),
        )

    @property
    def output_path(self) -> Path:
        p = Path(self.output_dir)
        return p if p.is_absolute() else PROJECT_ROOT / p


def load_harvest_config(path: str | Path | None = None) -> HarvestConfig:
    """
    Load HarvestConfig from YAML if present; otherwise use defaults.

    By default, looks for `harvest_config.yaml` at the project root.
    Unknown keys are ignored; invalid values (e.g. max_attempts below 1)
    raise pydantic.ValidationError.
    """
    if path is None:
        path = PROJECT_ROOT / "harvest_config.yaml"

    path = Path(path)

    if not path.exists():
        logger.info("config_not_found", path=str(path), fallback="defaults")
        return HarvestConfig()

    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        logger.warning("config_not_a_mapping", path=str(path), got=type(data).__name__)
        return HarvestConfig()

    allowed_keys = {f.name for f in fields(HarvestConfig)}
    ignored = sorted(k for k in data if k not in allowed_keys)
    if ignored:
        logger.warning("config_unknown_keys", path=str(path), keys=ignored)
    filtered = {k: v for k, v in data.items() if k in allowed_keys}

    return HarvestConfig(**filtered)
