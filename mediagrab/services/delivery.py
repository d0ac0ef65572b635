import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from mediagrab.config.settings import Config
from mediagrab.core.errors import (
    ClientDisconnectedError,
    EmptyPayloadError,
    ExtractionError,
    ExtractorUnavailableError,
    MediaGrabError,
    TranscoderUnavailableError,
    mentions_transcoder,
)
from mediagrab.models.internal import MediaKind
from mediagrab.services.extractor import DisconnectCheck, FileFetcher, MediaExtractor, MediaFile
from mediagrab.services.format import (
    DEFAULT_EXTENSIONS,
    GENERIC_REQUESTS,
    FormatSelector,
    content_type_for,
)
from mediagrab.utils.filename import content_disposition, media_filename
from mediagrab.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


@dataclass
class DeliveredMedia:
    """A fully materialized single-item download"""
    payload: bytes
    filename: str
    extension: str
    content_type: str
    format_str: str

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Disposition": content_disposition(self.filename),
            "Content-Length": str(len(self.payload)),
            "X-Content-Type-Options": "nosniff",
            "Cache-Control": "no-cache",
        }

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        for start in range(0, len(self.payload), chunk_size):
            yield self.payload[start:start + chunk_size]


class DeliveryService:
    """Resolve one URL to bytes, falling back to a file download when streaming fails"""

    def __init__(self, config: Config, extractor: MediaExtractor, fallback: FileFetcher):
        self.config = config
        self.extractor = extractor
        self.fallback = fallback

    async def deliver(
        self,
        url: str,
        kind: MediaKind,
        format_id: Optional[str] = None,
        is_disconnected: Optional[DisconnectCheck] = None
    ) -> DeliveredMedia:
        safe_url = safe_url_for_log(url)
        info = await self.extractor.get_info(url)

        selected = FormatSelector.find(info.formats, format_id)
        if selected is None:
            selected = FormatSelector.strict_for(kind, info.formats)

        format_str = selected.id if selected and selected.id else GENERIC_REQUESTS[kind]
        ext = (selected.extension if selected else None) or DEFAULT_EXTENSIONS[kind]
        logger.info(f"Format decided: {format_str} ({ext}) for {safe_url}")

        try:
            media = await self.extractor.get_file(url, format_str)
            payload = await media.read(is_disconnected)
        except ClientDisconnectedError:
            raise
        except (MediaGrabError, OSError) as primary_error:
            logger.warning(f"Streaming {safe_url} failed, trying file download: {primary_error}")
            media, payload = await self._fallback(url, format_str, primary_error)
            ext = media.extension or ext

        if not payload:
            raise EmptyPayloadError("empty file")

        filename = media_filename(info.title or "download", ext)
        logger.info(f"Delivering {filename} ({len(payload)} bytes)")

        return DeliveredMedia(
            payload=payload,
            filename=filename,
            extension=ext,
            content_type=content_type_for(ext, kind),
            format_str=format_str,
        )

    async def _fallback(
        self,
        url: str,
        format_str: str,
        primary_error: Exception
    ) -> Tuple[MediaFile, bytes]:
        try:
            media = await self.fallback.get_file(url, format_str)
            return media, await media.read()
        except (MediaGrabError, OSError) as fallback_error:
            logger.error(f"Fallback download failed: {fallback_error}")

            if isinstance(primary_error, ExtractorUnavailableError):
                raise primary_error
            if mentions_transcoder(str(primary_error), str(fallback_error)):
                raise TranscoderUnavailableError(str(primary_error)) from fallback_error
            raise ExtractionError(str(primary_error)) from fallback_error
