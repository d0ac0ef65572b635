import logging
import zipfile
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional, Sequence

from mediagrab.config.settings import Config, PartialFailurePolicy
from mediagrab.core.errors import ExtractionError, MediaGrabError, ResolutionError
from mediagrab.models.internal import MediaKind
from mediagrab.services.extractor import MediaExtractor
from mediagrab.services.format import ARCHIVE_EXTENSIONS, ARCHIVE_REQUESTS
from mediagrab.utils.filename import content_disposition, media_filename
from mediagrab.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "playlist.zip"


@dataclass
class ArchiveItem:
    url: str
    title: str
    size: Optional[int] = None


class ZipSink:
    """
    Write-only, non-seekable target for zipfile.
    zipfile falls back to data descriptors, so entries can be written while
    their size is still unknown and the output can be drained as it grows.
    """

    def __init__(self):
        self._buffer = bytearray()

    def write(self, data) -> int:
        self._buffer += data
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = bytes(self._buffer)
        self._buffer.clear()
        return data


class ArchiveService:
    """Build one streamed ZIP archive from several source URLs"""

    def __init__(self, config: Config, extractor: MediaExtractor):
        self.config = config
        self.extractor = extractor

    @property
    def skip_failures(self) -> bool:
        return self.config.download.partial_failure == PartialFailurePolicy.SKIP

    async def prepare(self, urls: Sequence[str]) -> List[ArchiveItem]:
        """Fetch titles and sizes, one URL at a time, in input order"""
        items: List[ArchiveItem] = []

        for url in urls:
            try:
                info = await self.extractor.get_info(url)
            except MediaGrabError as e:
                if not self.skip_failures:
                    raise
                logger.warning(f"Skipping {safe_url_for_log(url)} from archive: {e}")
                continue

            size = info.size
            if size is None and info.formats:
                # Fall back to the largest size any candidate reports
                sizes = [f.size for f in info.formats if f.size]
                size = max(sizes) if sizes else None

            items.append(ArchiveItem(url=url, title=info.title or "item", size=size))

        if not items:
            raise ResolutionError("no item could be resolved")

        return items

    @staticmethod
    def total_size(items: Sequence[ArchiveItem]) -> Optional[int]:
        """Sum of item sizes, or None unless every item reported one"""
        if not items or any(item.size is None for item in items):
            return None
        return sum(item.size for item in items)

    def headers(self, items: Sequence[ArchiveItem]) -> Dict[str, str]:
        headers = {
            "Content-Disposition": content_disposition(ARCHIVE_NAME),
            "Cache-Control": "no-cache",
            "X-Content-Type-Options": "nosniff",
        }
        total = self.total_size(items)
        if total:
            headers["X-Total-Size"] = str(total)
        return headers

    def _entry_name(self, item: ArchiveItem, kind: MediaKind, used: set) -> str:
        ext = ARCHIVE_EXTENSIONS[kind]
        name = media_filename(item.title, ext, default="item")
        counter = 2
        while name in used:
            name = media_filename(f"{item.title} ({counter})", ext, default="item")
            counter += 1
        used.add(name)
        return name

    async def stream(self, items: Sequence[ArchiveItem], kind: MediaKind) -> AsyncIterator[bytes]:
        """
        Yield archive bytes as they are produced.
        Entries are written sequentially in the order of `items`.
        """
        sink = ZipSink()
        archive = zipfile.ZipFile(
            sink,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.config.download.zip_compression_level,
        )
        used_names: set = set()
        format_str = ARCHIVE_REQUESTS[kind]

        for item in items:
            name = self._entry_name(item, kind, used_names)
            safe_url = safe_url_for_log(item.url)

            try:
                media = await self.extractor.get_file(item.url, format_str)
            except MediaGrabError as e:
                used_names.discard(name)
                if not self.skip_failures:
                    raise
                logger.warning(f"Skipping {safe_url} from archive: {e}")
                continue

            entry = None
            try:
                async for chunk in media.iter_chunks():
                    if entry is None:
                        entry = archive.open(name, mode="w", force_zip64=True)
                    entry.write(chunk)
                    data = sink.drain()
                    if data:
                        yield data
            except ExtractionError as e:
                if entry is not None or not self.skip_failures:
                    logger.error(f"Archive entry {name} failed: {e}")
                    raise
                used_names.discard(name)
                logger.warning(f"Skipping {safe_url} from archive: {e}")
                continue
            finally:
                if entry is not None:
                    entry.close()
                await media.aclose()

            if entry is None:
                archive.writestr(name, b"")
            logger.info(f"Archived {name}")

            data = sink.drain()
            if data:
                yield data

        archive.close()
        data = sink.drain()
        if data:
            yield data
