from .errors import (
    DependencyUnavailableError,
    ExtractionError,
    ExtractorUnavailableError,
    MediaGrabError,
    ResolutionError,
    TranscoderUnavailableError,
)
from .platform import Platform, detect_platform

__all__ = [
    "DependencyUnavailableError",
    "ExtractionError",
    "ExtractorUnavailableError",
    "MediaGrabError",
    "Platform",
    "ResolutionError",
    "TranscoderUnavailableError",
    "detect_platform",
]
