import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import aiofiles
import httpx

from mediagrab.client.progress import (
    BatchReport,
    ProgressCallback,
    ProgressTracker,
    SavedFile,
    advertised_total,
    filename_from_disposition,
    save_chunks,
)
from mediagrab.utils.filename import media_filename

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "http://127.0.0.1:8000"
CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """The server refused or failed a download"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def parse_links(text: str) -> List[str]:
    """Newline-delimited URLs, blank lines ignored"""
    return [line.strip() for line in text.splitlines() if line.strip()]


async def _error_message(response: httpx.Response) -> str:
    body = (await response.aread()).decode(errors="ignore")
    try:
        data = response.json()
    except ValueError:
        data = None
    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, dict):
        detail = detail.get("error")
    return detail or body or f"Download failed: {response.reason_phrase or response.status_code}"


class MediaGrabClient:
    """HTTP client for a mediagrab server with chunked progress tracking"""

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER,
        client: Optional[httpx.AsyncClient] = None,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(30.0, read=None))
        self.chunk_size = chunk_size

    async def __aenter__(self) -> "MediaGrabClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def preview(self, url: str, media_type: Optional[str] = None) -> Dict[str, Any]:
        response = await self.client.post("/preview", json={"url": url, "type": media_type})
        if response.status_code >= 400:
            raise DownloadError(await _error_message(response), response.status_code)
        return response.json()

    async def resolve_links(self, urls: Sequence[str], kind: str = "video") -> List[Dict[str, str]]:
        payload: Dict[str, Any] = {"kind": kind}
        if len(urls) == 1:
            payload["url"] = urls[0]
        else:
            payload["urls"] = list(urls)

        response = await self.client.post("/download-url", json=payload)
        if response.status_code >= 400:
            raise DownloadError(await _error_message(response), response.status_code)

        data = response.json()
        return data["items"] if "items" in data else [data]

    async def _fetch(
        self,
        request: httpx.Request,
        directory: str,
        default_name: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SavedFile:
        response = await self.client.send(request, stream=True)
        try:
            if response.status_code >= 400:
                raise DownloadError(await _error_message(response), response.status_code)

            tracker = ProgressTracker(advertised_total(response.headers))
            chunks: List[bytes] = []

            async for chunk in response.aiter_bytes(self.chunk_size):
                chunks.append(chunk)
                percent = tracker.update(len(chunk))
                if on_progress is not None:
                    on_progress(percent, tracker.received)
        finally:
            await response.aclose()

        filename = filename_from_disposition(response.headers.get("content-disposition")) or default_name
        saved = await save_chunks(chunks, directory, filename)
        if on_progress is not None:
            on_progress(100, tracker.received)
        return saved

    async def download(
        self,
        url: str,
        directory: str = ".",
        kind: str = "video",
        format_id: Optional[str] = None,
        title: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SavedFile:
        """Fetch one item through GET /download and save it"""
        params = {"url": url, "kind": kind}
        if format_id:
            params["formatId"] = format_id

        request = self.client.build_request("GET", "/download", params=params)
        default_name = media_filename(title or "download", "mp3" if kind == "audio" else "mp4")
        return await self._fetch(request, directory, default_name, on_progress)

    async def download_zip(
        self,
        urls: Sequence[str],
        directory: str = ".",
        kind: str = "video",
        on_progress: Optional[ProgressCallback] = None,
    ) -> SavedFile:
        """Fetch several items as one archive through POST /download-zip"""
        request = self.client.build_request("POST", "/download-zip", json={"urls": list(urls), "kind": kind})
        return await self._fetch(request, directory, "playlist.zip", on_progress)

    async def download_batch(
        self,
        links: Iterable[str],
        directory: str = ".",
        kind: str = "video",
        on_item: Optional[Callable[[BatchReport], None]] = None,
    ) -> BatchReport:
        """
        Download links one after another.
        A failing link is recorded and the batch moves on.
        """
        links = [link for link in links if link]
        if not links:
            raise DownloadError("No links found in file.")

        report = BatchReport(total=len(links))
        prefix = "audio" if kind == "audio" else "video"

        for index, link in enumerate(links, start=1):
            try:
                saved = await self.download(
                    link,
                    directory=directory,
                    kind=kind,
                    title=f"{prefix}_{index}",
                )
                report.saved.append(saved)
            except (DownloadError, httpx.HTTPError, OSError) as e:
                logger.warning(f"Batch item {index} ({link}) failed: {e}")
                report.failed.append(link)

            if on_item is not None:
                on_item(report)

        logger.info(f"Batch finished: {len(report.saved)} saved, {len(report.failed)} failed")
        return report

    async def download_links_file(self, path: str, **kwargs) -> BatchReport:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            text = await f.read()
        return await self.download_batch(parse_links(text), **kwargs)
