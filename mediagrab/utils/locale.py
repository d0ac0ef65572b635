from typing import Optional, Sequence
from urllib.parse import urlparse


def get_locale(
    accept_language: Optional[str],
    supported: Sequence[str] = ("en", "ja"),
    default: str = "en"
) -> str:
    """Extract locale from Accept-Language header"""
    if not accept_language:
        return default

    languages = []
    for lang in accept_language.split(","):
        parts = lang.strip().split(";")
        locale = parts[0].split("-")[0].lower()
        languages.append(locale)

    for locale in languages:
        if locale in supported:
            return locale

    return default


def safe_url_for_log(url: Optional[str]) -> str:
    """Safe URL for logging"""
    try:
        parsed = urlparse(url or "")
    except ValueError:
        return "invalid_url"
    if not parsed.scheme or not parsed.netloc:
        return "invalid_url"
    base_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    return f"{base_url}?..." if parsed.query else base_url
