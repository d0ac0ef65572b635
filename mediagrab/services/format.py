from typing import List, Optional, Sequence

from mediagrab.models.internal import Format, MediaKind
from mediagrab.models.response import AudioFormatOption

QUALITY_NAMES = ("Best", "Better", "Good")

AUDIO_CONTENT_TYPES = {
    "m4a": "audio/mp4",
    "mp4": "audio/mp4",
    "webm": "audio/webm",
    "aac": "audio/aac",
}

VIDEO_CONTENT_TYPES = {
    "webm": "video/webm",
    "mkv": "video/x-matroska",
}

DEFAULT_EXTENSIONS = {
    MediaKind.VIDEO: "mp4",
    MediaKind.AUDIO: "m4a",
}

# Container names used for ZIP entries, one per kind
ARCHIVE_EXTENSIONS = {
    MediaKind.VIDEO: "mp4",
    MediaKind.AUDIO: "mp3",
}

# yt-dlp selectors used when no concrete format was chosen
GENERIC_REQUESTS = {
    MediaKind.VIDEO: "best",
    MediaKind.AUDIO: "bestaudio",
}

# "Highest quality" selectors for archive entries
ARCHIVE_REQUESTS = {
    MediaKind.VIDEO: "best[ext=mp4][vcodec!=none][acodec!=none]/best[vcodec!=none][acodec!=none]/best",
    MediaKind.AUDIO: "bestaudio/best",
}


def _video_rank(f: Format):
    return (f.height or 0, f.total_bitrate or 0)


def _audio_rank(f: Format):
    return (f.audio_bitrate or 0, f.total_bitrate or 0)


def _ranked(formats: Sequence[Format], key) -> Format:
    # sorted() is stable, so equal keys keep input order
    return sorted(formats, key=key, reverse=True)[0]


def content_type_for(ext: Optional[str], kind: MediaKind) -> str:
    ext = (ext or "").lower()
    if kind == MediaKind.AUDIO:
        return AUDIO_CONTENT_TYPES.get(ext, "audio/mpeg")
    return VIDEO_CONTENT_TYPES.get(ext, "video/mp4")


class FormatSelector:
    """Deterministic format choice from an extractor's candidate list"""

    @staticmethod
    def best_video(formats: Sequence[Format]) -> Optional[Format]:
        """Muxed first, then video-only, then whatever came first"""
        if not formats:
            return None

        muxed = [f for f in formats if f.is_muxed]
        if muxed:
            return _ranked(muxed, _video_rank)

        video = [f for f in formats if f.video_codec_present]
        if video:
            return _ranked(video, _video_rank)

        return formats[0]

    @staticmethod
    def best_audio(formats: Sequence[Format]) -> Optional[Format]:
        """Audio-only first, then anything carrying audio, then whatever came first"""
        if not formats:
            return None

        audio_only = [f for f in formats if f.is_audio_only]
        if audio_only:
            return _ranked(audio_only, _audio_rank)

        for f in formats:
            if f.audio_codec_present:
                return f

        return formats[0]

    @staticmethod
    def best_for(kind: MediaKind, formats: Sequence[Format]) -> Optional[Format]:
        if kind == MediaKind.AUDIO:
            return FormatSelector.best_audio(formats)
        return FormatSelector.best_video(formats)

    @staticmethod
    def best_muxed(formats: Sequence[Format]) -> Optional[Format]:
        """Best muxed format, mp4 containers preferred; None when nothing is muxed"""
        muxed = [f for f in formats if f.is_muxed]
        pool = [f for f in muxed if f.extension == "mp4"] or muxed
        if not pool:
            return None
        return _ranked(pool, _video_rank)

    @staticmethod
    def best_audio_only(formats: Sequence[Format]) -> Optional[Format]:
        """Best audio-only format, m4a/mp4 containers preferred; None when there is none"""
        audio_only = [f for f in formats if f.is_audio_only]
        pool = [f for f in audio_only if f.extension in ("m4a", "mp4")] or audio_only
        if not pool:
            return None
        return _ranked(pool, _audio_rank)

    @staticmethod
    def strict_for(kind: MediaKind, formats: Sequence[Format]) -> Optional[Format]:
        if kind == MediaKind.AUDIO:
            return FormatSelector.best_audio_only(formats)
        return FormatSelector.best_muxed(formats)

    @staticmethod
    def find(formats: Sequence[Format], format_id: Optional[str]) -> Optional[Format]:
        if not format_id:
            return None
        for f in formats:
            if f.id == format_id:
                return f
        return None


def _bitrate(f: Format) -> Optional[float]:
    if f.audio_bitrate is not None:
        return f.audio_bitrate
    if f.total_bitrate is not None:
        return round(f.total_bitrate)
    return None


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def describe_audio_format(f: Format) -> str:
    bitrate = _bitrate(f)
    size = f.size
    parts = [
        f"{_format_number(bitrate)} kbps" if bitrate else None,
        f.extension.upper() if f.extension else None,
        f"{size / (1024 * 1024):.1f} MB" if size else None,
    ]
    return " • ".join(p for p in parts if p) or f.id


def audio_quality_options(formats: Sequence[Format], limit: int = 3) -> List[AudioFormatOption]:
    """
    Audio quality menu for preview.
    Unique audio-only formats, highest bitrate first, cut to the top tiers
    and labelled Best / Better / Good.
    """
    seen = set()
    options: List[AudioFormatOption] = []

    for f in formats:
        if not f.id or not f.is_audio_only or f.id in seen:
            continue
        seen.add(f.id)
        options.append(AudioFormatOption(
            format_id=f.id,
            ext=f.extension,
            abr=_bitrate(f),
            format_note=f.format_note,
            filesize=f.size,
            label=describe_audio_format(f),
        ))

    options.sort(key=lambda o: o.abr or 0, reverse=True)

    return [
        option.model_copy(update={"label": f"{name} - {option.label}"})
        for name, option in zip(QUALITY_NAMES, options[:limit])
    ]
