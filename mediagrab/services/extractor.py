import asyncio
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol

import aiofiles

from mediagrab.config.settings import Config
from mediagrab.core.errors import ClientDisconnectedError, ExtractionError
from mediagrab.models.internal import MediaInfo
from mediagrab.services.ytdlp import SubprocessExecutor, YTDLPCommandBuilder

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


@dataclass
class MediaFile:
    """
    Result of a file fetch: either a materialized buffer or a byte stream.
    `filename` is set when the bytes came from a file on disk.
    """
    data: Optional[bytes] = None
    chunks: Optional[AsyncIterator[bytes]] = None
    filename: Optional[str] = None

    @property
    def extension(self) -> Optional[str]:
        if not self.filename:
            return None
        ext = os.path.splitext(self.filename)[1]
        return ext[1:].lower() if ext else None

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        if self.data is not None:
            if self.data:
                yield self.data
            return
        if self.chunks is not None:
            async for chunk in self.chunks:
                if chunk:
                    yield chunk

    async def read(self, is_disconnected: Optional[DisconnectCheck] = None) -> bytes:
        """Normalize to one buffer so the total length is known"""
        if self.data is not None:
            return self.data

        parts = []
        try:
            async for chunk in self.iter_chunks():
                parts.append(chunk)
                if is_disconnected is not None and await is_disconnected():
                    raise ClientDisconnectedError("client disconnected during download")
        finally:
            await self.aclose()
        return b"".join(parts)

    async def aclose(self) -> None:
        if self.chunks is not None and hasattr(self.chunks, "aclose"):
            await self.chunks.aclose()


class MediaExtractor(Protocol):
    """Metadata and byte access for a source URL"""

    async def get_info(self, url: str, flatten_playlist: bool = False) -> MediaInfo:
        ...

    async def get_file(self, url: str, format_str: str) -> MediaFile:
        ...


class FileFetcher(Protocol):
    """Last-resort byte access used when the primary extractor fails"""

    async def get_file(self, url: str, format_str: str) -> MediaFile:
        ...


class YtDlpExtractor:
    """Structured access to yt-dlp: JSON metadata and stdout streaming"""

    def __init__(self, config: Config, executor=SubprocessExecutor):
        self.config = config
        self.commands = YTDLPCommandBuilder(config)
        self.executor = executor

    async def get_info(self, url: str, flatten_playlist: bool = False) -> MediaInfo:
        cmd = self.commands.build_info_command(url, flatten_playlist=flatten_playlist)

        try:
            result = await self.executor.run(cmd, timeout=self.config.ytdlp.info_timeout)
        except asyncio.TimeoutError:
            raise ExtractionError(f"metadata extraction timed out after {self.config.ytdlp.info_timeout:g}s")

        if result.returncode != 0:
            raise ExtractionError(result.error_summary())

        try:
            raw = json.loads(result.stdout.decode(errors="ignore"))
        except json.JSONDecodeError:
            raise ExtractionError("failed to parse yt-dlp output")

        if not isinstance(raw, dict):
            raise ExtractionError("unexpected yt-dlp output")

        return MediaInfo.from_ytdlp(raw)

    async def get_file(self, url: str, format_str: str) -> MediaFile:
        cmd = self.commands.build_stream_command(url, format_str)
        process = await self.executor.spawn(cmd)
        chunks = self.executor.stream(
            process,
            self.config.download.chunk_size,
            timeout=self.config.download.timeout_seconds,
            idle_timeout=self.config.download.idle_timeout,
        )
        return MediaFile(chunks=chunks)


class CommandLineExtractor:
    """
    Fallback: let yt-dlp write into a fresh request-scoped directory and read
    back the single file it produced. The directory is always removed.
    """

    def __init__(self, config: Config, executor=SubprocessExecutor):
        self.config = config
        self.commands = YTDLPCommandBuilder(config)
        self.executor = executor

    async def get_file(self, url: str, format_str: str) -> MediaFile:
        tmp_dir = tempfile.mkdtemp(prefix="mediagrab-", dir=self.config.download.temp_dir)
        try:
            template = os.path.join(tmp_dir, "download.%(ext)s")
            cmd = self.commands.build_download_command(url, format_str, template)
            logger.debug(f"Fallback download into {tmp_dir}")

            try:
                result = await self.executor.run(cmd, timeout=self.config.download.timeout_seconds)
            except asyncio.TimeoutError:
                raise ExtractionError(f"download timed out after {self.config.download.timeout_seconds}s")

            if result.returncode != 0:
                raise ExtractionError(result.error_summary())

            produced = sorted(name for name in os.listdir(tmp_dir) if not name.startswith("."))
            if not produced:
                raise ExtractionError("No file found after download")

            async with aiofiles.open(os.path.join(tmp_dir, produced[0]), "rb") as f:
                data = await f.read()

            return MediaFile(data=data, filename=produced[0])
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)
