from listing_harvester.policy import FilterDecision, NetworkFilter, ResponseMatcher
from listing_harvester.settings import HarvestConfig, TargetSpec

from fakes import FakeResponse

API_URL = "https://api2.realtor.ca/Listing.svc/PropertySearch_Post"


def make_filter(types=(), patterns=()) -> NetworkFilter:
    return NetworkFilter(blocked_types=frozenset(types), blocked_patterns=tuple(patterns))


def test_blocked_type_is_blocked():
    f = make_filter(types=["image"], patterns=[".css"])
    assert f.decide("image", "https://x/a.png") is FilterDecision.BLOCK


def test_allowed_type_without_pattern_is_allowed():
    f = make_filter(types=["image"], patterns=[".css"])
    assert f.decide("script", "https://x/a.js") is FilterDecision.ALLOW


def test_pattern_blocks_even_an_allowed_type():
    f = make_filter(types=["image"], patterns=[".css"])
    assert f.decide("script", "https://x/a.css") is FilterDecision.BLOCK


def test_type_and_pattern_rules_are_independent():
    only_type = make_filter(types=["image"])
    only_pattern = make_filter(patterns=["doubleclick"])
    both = make_filter(types=["image"], patterns=["doubleclick"])

    cases = [
        ("image", "https://x/a.png"),
        ("script", "https://ad.doubleclick.net/x.js"),
        ("image", "https://ad.doubleclick.net/p.gif"),
        ("xhr", "https://api/x"),
    ]
    for resource_type, url in cases:
        expected = only_type.blocks(resource_type, url) or only_pattern.blocks(resource_type, url)
        assert both.blocks(resource_type, url) == expected


def test_empty_url_is_allowed():
    f = make_filter(patterns=[".css", "youtube"])
    assert f.decide("xhr", "") is FilterDecision.ALLOW


def test_empty_rules_allow_everything():
    assert make_filter().decide("image", "https://x/a.css") is FilterDecision.ALLOW


def test_filter_from_default_config_blocks_trackers():
    f = NetworkFilter.from_config(HarvestConfig().session_config())
    assert f.blocks("script", "https://www.googletagmanager.com/gtm.js")
    assert f.blocks("stylesheet", "https://www.realtor.ca/site.min.js")
    assert not f.blocks("xhr", API_URL)


def test_matcher_requires_exact_url_and_method():
    m = ResponseMatcher(TargetSpec(url=API_URL, method="POST"))
    assert m.matches(API_URL, "POST")
    assert not m.matches(API_URL, "GET")
    assert not m.matches(API_URL, "post")
    assert not m.matches(API_URL + "?x=1", "POST")
    assert not m.matches(API_URL[:-1], "POST")


def test_matcher_reads_playwright_response_shape():
    m = ResponseMatcher(TargetSpec(url=API_URL, method="POST"))
    assert m.matches_response(FakeResponse(url=API_URL, method="POST"))
    assert not m.matches_response(FakeResponse(url=API_URL, method="OPTIONS"))
