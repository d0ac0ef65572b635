from .internal import Format, MediaInfo, MediaKind
from .request import DirectUrlRequest, PreviewRequest, ZipRequest
from .response import (
    AudioFormatOption,
    DirectLink,
    DirectLinkBatch,
    MediaPreview,
    PlaylistEntry,
    PlaylistPreview,
)

__all__ = [
    "AudioFormatOption",
    "DirectLink",
    "DirectLinkBatch",
    "DirectUrlRequest",
    "Format",
    "MediaInfo",
    "MediaKind",
    "MediaPreview",
    "PlaylistEntry",
    "PlaylistPreview",
    "PreviewRequest",
    "ZipRequest",
]
