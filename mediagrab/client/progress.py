import os
import re
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional
from urllib.parse import unquote

import aiofiles

from mediagrab.utils.filename import sanitize_filename

ProgressCallback = Callable[[Optional[int], int], None]


class ProgressTracker:
    """
    Sum received bytes and turn them into a percentage.
    Without an advertised total the percentage stays None (indeterminate).
    """

    def __init__(self, total: Optional[int] = None):
        self.total = total if total and total > 0 else None
        self.received = 0

    @property
    def percent(self) -> Optional[int]:
        if self.total is None:
            return None
        return min(100, self.received * 100 // self.total)

    def update(self, size: int) -> Optional[int]:
        self.received += size
        return self.percent


def advertised_total(headers: Mapping[str, str]) -> Optional[int]:
    """X-Total-Size (ZIP estimate) wins over Content-Length"""
    for name in ("x-total-size", "content-length"):
        value = headers.get(name)
        if value and value.strip().isdigit():
            return int(value)
    return None


_FILENAME_STAR = re.compile(r"filename\*\s*=\s*(?:UTF-8|utf-8)''([^;]+)")
_FILENAME = re.compile(r'filename\s*=\s*"?([^";]+)"?')


def filename_from_disposition(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    match = _FILENAME_STAR.search(header) or _FILENAME.search(header)
    if not match:
        return None
    name = sanitize_filename(os.path.basename(unquote(match.group(1).strip())))
    return name or None


@dataclass
class SavedFile:
    path: str
    size: int


async def save_chunks(chunks: List[bytes], directory: str, filename: str) -> SavedFile:
    """
    Assemble chunks into one object and persist it under `filename`.
    Written to a temporary sibling first, then renamed into place.
    """
    os.makedirs(directory, exist_ok=True)
    payload = b"".join(chunks)
    final_path = os.path.join(directory, filename)
    tmp_path = os.path.join(directory, f".{uuid.uuid4().hex}.part")

    try:
        async with aiofiles.open(tmp_path, "wb") as f:
            await f.write(payload)
        os.replace(tmp_path, final_path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    return SavedFile(path=final_path, size=len(payload))


@dataclass
class BatchReport:
    """Outcome of a batch-of-links run"""
    total: int
    saved: List[SavedFile] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def completed(self) -> int:
        return len(self.saved) + len(self.failed)

    @property
    def percent(self) -> int:
        if not self.total:
            return 100
        return self.completed * 100 // self.total
