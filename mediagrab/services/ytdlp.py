import asyncio
from collections import deque
from contextlib import suppress
from typing import AsyncIterator, List, NamedTuple, Optional

from mediagrab.config.settings import Config
from mediagrab.core.errors import ExtractionError, ExtractorUnavailableError

STDERR_MAX_LINES = 50


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes

    def error_summary(self, limit: int = 500) -> str:
        lines = [line for line in self.stderr.decode(errors="ignore").splitlines() if line.strip()]
        return "\n".join(lines[-5:])[:limit] or f"yt-dlp exited with code {self.returncode}"


class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def spawn(cmd: List[str]) -> asyncio.subprocess.Process:
        """Start a process, mapping a missing executable to ExtractorUnavailableError"""
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ExtractorUnavailableError(f"{cmd[0]}: {e}") from e

    @staticmethod
    async def run(cmd: List[str], timeout: float) -> CompletedProcess:
        """
        Run subprocess with timeout and proper cleanup.
        Prevents process leaks and ensures consistent error handling.
        """
        process = await SubprocessExecutor.spawn(cmd)

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr
            )

        except BaseException:
            # Timeout or cancellation: never leave the child running
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

    @staticmethod
    async def stream(
        process: asyncio.subprocess.Process,
        chunk_size: int,
        timeout: Optional[float] = None,
        idle_timeout: Optional[float] = None
    ) -> AsyncIterator[bytes]:
        """
        Yield stdout chunks of a running process.
        Raises ExtractionError when the process exits non-zero, when no output
        arrives for `idle_timeout` seconds, or when the whole stream takes
        longer than `timeout`. Closing the generator early kills the process.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout else None

        def next_wait() -> Optional[float]:
            remaining = deadline - loop.time() if deadline is not None else None
            if remaining is not None and remaining <= 0:
                raise ExtractionError(f"download timed out after {timeout:g}s")
            if idle_timeout is None:
                return remaining
            return idle_timeout if remaining is None else min(idle_timeout, remaining)

        stderr_lines: deque = deque(maxlen=STDERR_MAX_LINES)

        async def drain_stderr():
            """Drain stderr to prevent buffer deadlock"""
            while True:
                line = await process.stderr.readline()
                if not line:
                    break
                stderr_lines.append(line.decode(errors="ignore").strip())

        stderr_task = asyncio.create_task(drain_stderr())
        finished = False

        try:
            while True:
                try:
                    chunk = await asyncio.wait_for(process.stdout.read(chunk_size), timeout=next_wait())
                except asyncio.TimeoutError:
                    if deadline is not None and loop.time() >= deadline:
                        raise ExtractionError(f"download timed out after {timeout:g}s")
                    raise ExtractionError(f"download stalled: no data for {idle_timeout:g}s")
                if not chunk:
                    break
                yield chunk

            try:
                returncode = await asyncio.wait_for(process.wait(), timeout=next_wait())
            except asyncio.TimeoutError:
                raise ExtractionError("download timed out waiting for yt-dlp to exit")
            finished = True
            with suppress(asyncio.CancelledError):
                await stderr_task

            if returncode != 0:
                summary = "\n".join(line for line in stderr_lines if line)
                raise ExtractionError(summary[-500:] or f"yt-dlp exited with code {returncode}")
        finally:
            if not finished and process.returncode is None:
                process.kill()
                await process.wait()
            stderr_task.cancel()
            with suppress(asyncio.CancelledError):
                await stderr_task


class YTDLPCommandBuilder:
    """Build yt-dlp commands from explicit configuration"""

    def __init__(self, config: Config):
        self.config = config

    @property
    def binary(self) -> str:
        return self.config.ytdlp.binary_path or "yt-dlp"

    def _common(self) -> List[str]:
        cmd = [
            self.binary,
            "--socket-timeout", str(self.config.ytdlp.socket_timeout),
            "--retries", str(self.config.ytdlp.retries),
        ]
        if self.config.ytdlp.ffmpeg_path:
            cmd.extend(["--ffmpeg-location", self.config.ytdlp.ffmpeg_path])
        return cmd

    def build_version_command(self) -> List[str]:
        return [self.binary, "--version"]

    def build_info_command(self, url: str, flatten_playlist: bool = False) -> List[str]:
        """Build command for fetching metadata as a single JSON document"""
        cmd = self._common()
        cmd.append("--dump-single-json")
        cmd.append("--flat-playlist" if flatten_playlist else "--no-playlist")
        cmd.extend(["--", url])
        return cmd

    def build_stream_command(self, url: str, format_str: str) -> List[str]:
        """Build command that writes the selected format to stdout"""
        cmd = self._common()
        cmd.extend([
            "-f", format_str,
            "-o", "-",
            "--no-playlist",
            # Keep stdout clean for binary output
            "--no-progress",
            "--quiet",
            "--no-warnings",
        ])
        cmd.extend(["--", url])
        return cmd

    def build_download_command(self, url: str, format_str: str, output_template: str) -> List[str]:
        """Build command that downloads the selected format into a file"""
        cmd = self._common()
        cmd.extend([
            "-f", format_str,
            "-o", output_template,
            "--no-playlist",
            "--no-progress",
            "--no-part",
        ])
        cmd.extend(["--", url])
        return cmd


async def detect_version(builder: YTDLPCommandBuilder, timeout: float = 10.0) -> Optional[str]:
    """Installed yt-dlp version, or None when it cannot be run"""
    try:
        result = await SubprocessExecutor.run(builder.build_version_command(), timeout=timeout)
    except (ExtractorUnavailableError, asyncio.TimeoutError, OSError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.decode(errors="ignore").strip() or None
