"""
Policy module: decides which network traffic a page attempt lets through,
and which response is the payload we are waiting for.

The logic is:
- explicit
- pure (no I/O, no state)
- easily auditable

The browser layer (session.py) wires these into Playwright's route and
response events; nothing here knows about Playwright beyond reading
`.url` and `.request.method` off a response.
"""

from dataclasses import dataclass
from enum import Enum

from .settings import SessionConfig, TargetSpec


class FilterDecision(Enum):
    ALLOW = "allow"
    BLOCK = "block"


@dataclass(frozen=True)
class NetworkFilter:
    blocked_types: frozenset[str] = frozenset()
    blocked_patterns: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: SessionConfig) -> "NetworkFilter":
        return cls(
            blocked_types=frozenset(config.blocked_resource_types),
            blocked_patterns=tuple(config.blocked_url_patterns),
        )

    def decide(self, resource_type: str, url: str) -> FilterDecision:
        # The two rules are OR-combined: a URL pattern blocks even an allowed type.
        if resource_type in self.blocked_types:
            return FilterDecision.BLOCK
        if any(pattern in url for pattern in self.blocked_patterns):
            return FilterDecision.BLOCK
        return FilterDecision.ALLOW

    def blocks(self, resource_type: str, url: str) -> bool:
        return self.decide(resource_type, url) is FilterDecision.BLOCK


@dataclass(frozen=True)
class ResponseMatcher:
    target: TargetSpec

    def matches(self, url: str, method: str) -> bool:
        """Exact, case-sensitive match on both URL and method."""
        return url == self.target.url and method == self.target.method

    def matches_response(self, response) -> bool:
        """Predicate for page.expect_response()."""
        return self.matches(response.url, response.request.method)
