from typing import Any, Dict, Optional


class MediaGrabError(Exception):
    """Base class for errors raised by the resolution and delivery pipeline"""
    status_code = 500
    message_key = "error.resolution_failed"

    def __init__(self, reason: str = "", **params: Any):
        super().__init__(reason or self.message_key)
        self.reason = reason
        self.params = params


class DependencyUnavailableError(MediaGrabError):
    """A required external tool is missing; the fix is an install, not a code change"""
    status_code = 503
    message_key = "error.dependency_missing"
    help: Optional[Dict[str, Any]] = None


class ExtractorUnavailableError(DependencyUnavailableError):
    message_key = "error.ytdlp_missing"
    help = {
        "install": [
            "py -m pip install -U yt-dlp",
            "winget install yt-dlp.yt-dlp",
            "scoop install yt-dlp",
            "brew install yt-dlp",
        ],
        "env": "YTDLP_BINARY_PATH=/path/to/yt-dlp",
    }


class TranscoderUnavailableError(DependencyUnavailableError):
    message_key = "error.ffmpeg_missing"
    help = {
        "install": [
            "winget install ffmpeg",
            "brew install ffmpeg",
            "apt install ffmpeg",
        ],
        "env": "FFMPEG_PATH=/path/to/ffmpeg",
    }


class ResolutionError(MediaGrabError):
    """The extractor ran but produced nothing usable"""
    status_code = 500
    message_key = "error.resolution_failed"


class ExtractionError(ResolutionError):
    message_key = "error.extraction_failed"


class NoFormatError(ResolutionError):
    message_key = "error.no_format_url"


class EmptyPayloadError(ResolutionError):
    message_key = "error.empty_file"


class ClientDisconnectedError(MediaGrabError):
    """The requesting client went away while its media was still being fetched"""
    status_code = 499
    message_key = "error.client_disconnected"


def mentions_transcoder(*messages: str) -> bool:
    return any("ffmpeg" in (message or "").lower() for message in messages)
