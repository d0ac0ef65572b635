from .api import DEFAULT_SERVER, DownloadError, MediaGrabClient, parse_links
from .playlist import PlaylistSelection, parse_positions
from .progress import BatchReport, ProgressTracker, SavedFile, advertised_total

__all__ = [
    "DEFAULT_SERVER",
    "BatchReport",
    "DownloadError",
    "MediaGrabClient",
    "PlaylistSelection",
    "ProgressTracker",
    "SavedFile",
    "advertised_total",
    "parse_links",
    "parse_positions",
]
