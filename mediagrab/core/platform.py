from enum import Enum
from urllib.parse import urlparse


class Platform(str, Enum):
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    UNKNOWN = "unknown"


# Checked in order, first substring match wins
PLATFORM_HOSTS = (
    (("youtube.com", "youtu.be"), Platform.YOUTUBE),
    (("facebook.com", "fb.watch"), Platform.FACEBOOK),
    (("instagram.com",), Platform.INSTAGRAM),
    (("twitter.com", "x.com"), Platform.TWITTER),
    (("linkedin.com",), Platform.LINKEDIN),
)


def detect_platform(url: str) -> Platform:
    """Classify a URL by its hostname. Never raises."""
    try:
        host = urlparse(url).hostname
    except (TypeError, ValueError, AttributeError):
        return Platform.UNKNOWN

    if not host:
        return Platform.UNKNOWN

    host = host.lower()
    if host.startswith("www."):
        host = host[len("www."):]

    for needles, platform in PLATFORM_HOSTS:
        if any(needle in host for needle in needles):
            return platform

    return Platform.UNKNOWN
