from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaKind(str, Enum):
    """Media category governing format selection for one delivery"""
    VIDEO = "video"
    AUDIO = "audio"

    @classmethod
    def parse(cls, value: Optional[str]) -> "MediaKind":
        """Anything other than "audio" means video"""
        return cls.AUDIO if value == cls.AUDIO.value else cls.VIDEO


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    return None


def _codec_present(codec: Any) -> bool:
    return bool(codec) and codec != "none"


class Format(BaseModel):
    """One encoding of a media item as reported by yt-dlp"""
    id: str
    video_codec_present: bool = False
    audio_codec_present: bool = False
    extension: Optional[str] = None
    height: Optional[int] = None
    total_bitrate: Optional[float] = None
    audio_bitrate: Optional[float] = None
    file_size: Optional[int] = None
    file_size_approx: Optional[int] = None
    direct_url: Optional[str] = None
    format_note: Optional[str] = None

    @property
    def is_muxed(self) -> bool:
        return self.video_codec_present and self.audio_codec_present

    @property
    def is_audio_only(self) -> bool:
        return self.audio_codec_present and not self.video_codec_present

    @property
    def size(self) -> Optional[int]:
        return self.file_size or self.file_size_approx

    @classmethod
    def from_ytdlp(cls, raw: Dict[str, Any]) -> "Format":
        return cls(
            id=str(raw.get("format_id") or ""),
            video_codec_present=_codec_present(raw.get("vcodec")),
            audio_codec_present=_codec_present(raw.get("acodec")),
            extension=raw.get("ext"),
            height=_int_or_none(raw.get("height")),
            total_bitrate=raw.get("tbr"),
            audio_bitrate=raw.get("abr"),
            file_size=_int_or_none(raw.get("filesize")),
            file_size_approx=_int_or_none(raw.get("filesize_approx")),
            direct_url=raw.get("url"),
            format_note=raw.get("format_note"),
        )


class MediaInfo(BaseModel):
    """Metadata for a URL: a single item or, with `_type == "playlist"`, a list of entries"""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    uploader: Optional[str] = None
    channel: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[float] = None
    thumbnail: Optional[str] = None
    thumbnails: List[Dict[str, Any]] = []
    formats: List[Format] = []
    type: Optional[str] = Field(default=None, alias="_type")
    entries: List[Dict[str, Any]] = []
    filesize: Optional[int] = None
    filesize_approx: Optional[int] = None
    webpage_url: Optional[str] = None

    @property
    def is_playlist(self) -> bool:
        return self.type == "playlist"

    @property
    def author(self) -> Optional[str]:
        return self.uploader or self.channel

    @property
    def thumbnail_url(self) -> Optional[str]:
        return first_thumbnail(self.thumbnail, self.thumbnails)

    @property
    def size(self) -> Optional[int]:
        return self.filesize or self.filesize_approx

    @classmethod
    def from_ytdlp(cls, raw: Dict[str, Any]) -> "MediaInfo":
        formats = [
            Format.from_ytdlp(f)
            for f in raw.get("formats") or []
            if isinstance(f, dict)
        ]
        return cls(
            title=raw.get("title"),
            uploader=raw.get("uploader"),
            channel=raw.get("channel"),
            description=raw.get("description"),
            duration=raw.get("duration"),
            thumbnail=raw.get("thumbnail"),
            thumbnails=[t for t in raw.get("thumbnails") or [] if isinstance(t, dict)],
            formats=formats,
            _type=raw.get("_type"),
            entries=[e for e in raw.get("entries") or [] if isinstance(e, dict)],
            filesize=_int_or_none(raw.get("filesize")),
            filesize_approx=_int_or_none(raw.get("filesize_approx")),
            webpage_url=raw.get("webpage_url"),
        )


def first_thumbnail(thumbnail: Optional[str], thumbnails: List[Dict[str, Any]]) -> Optional[str]:
    if thumbnail:
        return thumbnail
    if thumbnails:
        return thumbnails[0].get("url")
    return None
