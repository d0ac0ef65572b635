import pytest

from mediagrab.core.platform import Platform, detect_platform


@pytest.mark.parametrize("url,expected", [
    ("https://www.youtube.com/watch?v=abc", Platform.YOUTUBE),
    ("https://youtu.be/abc", Platform.YOUTUBE),
    ("https://m.facebook.com/watch/?v=1", Platform.FACEBOOK),
    ("https://fb.watch/xyz/", Platform.FACEBOOK),
    ("https://www.instagram.com/p/abc/", Platform.INSTAGRAM),
    ("https://twitter.com/user/status/1", Platform.TWITTER),
    ("https://x.com/user/status/1", Platform.TWITTER),
    ("https://www.linkedin.com/posts/abc", Platform.LINKEDIN),
    ("HTTPS://WWW.YOUTUBE.COM/watch?v=abc", Platform.YOUTUBE),
    ("https://vimeo.com/123", Platform.UNKNOWN),
])
def test_detect_known_hosts(url, expected):
    assert detect_platform(url) == expected


@pytest.mark.parametrize("value", [
    "",
    "not a url",
    "http://[::1",
    "youtube.com/watch?v=abc",
    "://",
])
def test_detect_unparsable_is_unknown(value):
    assert detect_platform(value) == Platform.UNKNOWN


def test_detect_is_deterministic():
    url = "https://www.youtube.com/watch?v=abc"
    assert {detect_platform(url) for _ in range(5)} == {Platform.YOUTUBE}
    assert len(Platform) == 6
