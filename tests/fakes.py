from typing import Any, Dict, List, Optional

from mediagrab.core.errors import ExtractionError
from mediagrab.models.internal import MediaInfo
from mediagrab.services.extractor import MediaFile


def fmt(format_id: str, vcodec="none", acodec="none", **extra) -> Dict[str, Any]:
    """Raw yt-dlp format entry"""
    return {"format_id": format_id, "vcodec": vcodec, "acodec": acodec, **extra}


async def chunked(*parts: bytes):
    for part in parts:
        yield part


class FakeExtractor:
    """In-memory stand-in for yt-dlp keyed by URL"""

    def __init__(
        self,
        infos: Optional[Dict[str, Dict[str, Any]]] = None,
        files: Optional[Dict[str, Any]] = None,
    ):
        self.infos = infos or {}
        self.files = files or {}
        self.info_calls: List[str] = []
        self.file_calls: List[tuple] = []

    async def get_info(self, url: str, flatten_playlist: bool = False) -> MediaInfo:
        self.info_calls.append(url)
        raw = self.infos.get(url)
        if isinstance(raw, Exception):
            raise raw
        if raw is None:
            raise ExtractionError(f"unsupported URL: {url}")
        return MediaInfo.from_ytdlp(raw)

    async def get_file(self, url: str, format_str: str) -> MediaFile:
        self.file_calls.append((url, format_str))
        payload = self.files.get(url, b"media-bytes")
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, MediaFile):
            return payload
        return MediaFile(data=payload)


class FakeFallback:
    def __init__(self, result: Any = None):
        self.result = result
        self.calls: List[tuple] = []

    async def get_file(self, url: str, format_str: str) -> MediaFile:
        self.calls.append((url, format_str))
        if isinstance(self.result, Exception):
            raise self.result
        if self.result is None:
            raise ExtractionError("fallback produced nothing")
        return self.result
