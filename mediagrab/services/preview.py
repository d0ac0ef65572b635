import logging
import math
import secrets
from typing import Any, Dict, Optional, Union

from mediagrab.core.platform import detect_platform
from mediagrab.models.internal import MediaInfo, first_thumbnail
from mediagrab.models.response import MediaPreview, PlaylistEntry, PlaylistPreview
from mediagrab.services.extractor import MediaExtractor
from mediagrab.services.format import audio_quality_options

logger = logging.getLogger(__name__)


def seconds_to_timestamp(seconds: Optional[float]) -> Optional[str]:
    """Render a duration as H:MM:SS, or M:SS under an hour"""
    if seconds is None:
        return None
    try:
        seconds = float(seconds)
    except (TypeError, ValueError):
        return None
    if math.isnan(seconds) or math.isinf(seconds):
        return None

    s = int(math.floor(seconds))
    h, rem = divmod(s, 3600)
    m, sec = divmod(rem, 60)
    if h > 0:
        return f"{h}:{m:02d}:{sec:02d}"
    return f"{m}:{sec:02d}"


def _random_id() -> str:
    return secrets.token_hex(4)


class PreviewService:
    """Shape extractor metadata into preview payloads"""

    def __init__(self, extractor: MediaExtractor):
        self.extractor = extractor

    async def fetch(self, url: str, media_type: Optional[str] = None) -> Union[MediaPreview, PlaylistPreview]:
        info = await self.extractor.get_info(url, flatten_playlist=True)

        if info.is_playlist:
            return self.playlist(url, info)
        return self.single(url, info, media_type)

    @staticmethod
    def entry(source_url: str, raw: Dict[str, Any]) -> PlaylistEntry:
        entry_id = raw.get("id") or raw.get("url") or _random_id()
        return PlaylistEntry(
            id=str(entry_id),
            title=raw.get("title") or "Untitled",
            thumbnail=first_thumbnail(raw.get("thumbnail"), raw.get("thumbnails") or []),
            duration=seconds_to_timestamp(raw.get("duration")),
            url=raw.get("url") or raw.get("webpage_url") or source_url,
            selected=False,
        )

    def playlist(self, url: str, info: MediaInfo) -> PlaylistPreview:
        items = [self.entry(url, raw) for raw in info.entries]
        logger.info(f"Playlist preview with {len(items)} entries")
        return PlaylistPreview(
            title=info.title or "Playlist",
            author=info.author,
            platform=detect_platform(url),
            total_items=len(items),
            items=items,
        )

    def single(self, url: str, info: MediaInfo, media_type: Optional[str]) -> MediaPreview:
        audio_formats = None
        if media_type == "audio":
            audio_formats = audio_quality_options(info.formats)

        return MediaPreview(
            type=media_type or "video",
            title=info.title or "Untitled",
            author=info.author,
            description=info.description,
            duration=seconds_to_timestamp(info.duration),
            thumbnail=info.thumbnail_url,
            platform=detect_platform(url),
            source_url=url,
            audio_formats=audio_formats,
        )
