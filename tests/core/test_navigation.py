import pytest

from core.navigation import LocationKey, NavigationTracker, has_location_changed


@pytest.mark.parametrize(
    "previous, current",
    [
        ("https://a/x/y?q=1", "https://a/x/y?q=2"),
        ("https://a/x", "https://A/x"),
        ("https://a/x#top", "https://a/x#bottom"),
        ("HTTPS://a/x", "https://a/x"),
        ("https://a/Docs", "https://a/docs"),
        ("https://a", "https://a/"),
        ("https://a:443/x", "https://a/x"),
        ("https://user@a/x", "https://a/x"),
        ("https://a/hello%20world", "https://a/hello world"),
    ],
)
def test_same_page_is_not_a_change(previous, current):
    assert has_location_changed(previous, current) is False


@pytest.mark.parametrize(
    "previous, current",
    [
        ("https://a/x/y", "https://a/x/z"),
        ("https://a/x", "http://a/x"),
        ("https://a/x", "https://b/x"),
        ("https://a:8443/x", "https://a/x"),
        ("https://a/x", "https://a/x/"),
    ],
)
def test_page_level_difference_is_a_change(previous, current):
    assert has_location_changed(previous, current) is True


def test_identical_strings_short_circuit():
    assert has_location_changed("not a url", "not a url") is False


def test_missing_previous_counts_as_change():
    assert has_location_changed(None, "https://a/") is True


def test_location_key_drops_query_and_fragment():
    key = LocationKey.parse("https://Example.COM:443/Docs/Intro?x=1#part")
    assert key == LocationKey(scheme="https", authority="example.com", path="/docs/intro")


def test_location_key_keeps_ipv6_port():
    key = LocationKey.parse("http://[::1]:8080/app")
    assert key.authority == "[::1]:8080"


def test_tracker_only_replaces_location_on_real_change():
    tracker = NavigationTracker("https://a/x")

    assert tracker.observe("https://a/x?tab=2") is False
    assert tracker.location == "https://a/x"

    assert tracker.observe("https://a/y") is True
    assert tracker.location == "https://a/y"
    assert tracker.observe("https://a/y#section") is False
