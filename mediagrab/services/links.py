import logging
from typing import List, Sequence

from mediagrab.config.settings import Config, PartialFailurePolicy
from mediagrab.core.errors import MediaGrabError, NoFormatError
from mediagrab.models.internal import MediaKind
from mediagrab.models.response import DirectLink
from mediagrab.services.extractor import MediaExtractor
from mediagrab.services.format import DEFAULT_EXTENSIONS, FormatSelector
from mediagrab.utils.filename import media_filename
from mediagrab.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

# Direct links are served as-is, so an audio link without a known
# container is named like the original service named it
LINK_EXTENSIONS = {
    MediaKind.VIDEO: DEFAULT_EXTENSIONS[MediaKind.VIDEO],
    MediaKind.AUDIO: "mp3",
}


class DirectLinkService:
    """Resolve source URLs to direct media URLs without proxying bytes"""

    def __init__(self, config: Config, extractor: MediaExtractor):
        self.config = config
        self.extractor = extractor

    async def resolve(self, url: str, kind: MediaKind) -> DirectLink:
        info = await self.extractor.get_info(url)
        chosen = FormatSelector.best_for(kind, info.formats)

        if chosen is None or not chosen.direct_url:
            raise NoFormatError("No downloadable format URL found")

        ext = chosen.extension or LINK_EXTENSIONS[kind]
        return DirectLink(
            direct_url=chosen.direct_url,
            filename=media_filename(info.title or "download", ext),
        )

    async def resolve_many(self, urls: Sequence[str], kind: MediaKind) -> List[DirectLink]:
        """One result per input, in input order"""
        results: List[DirectLink] = []

        for url in urls:
            try:
                results.append(await self.resolve(url, kind))
            except MediaGrabError as e:
                if self.config.download.partial_failure == PartialFailurePolicy.ABORT:
                    raise
                logger.warning(f"Could not resolve {safe_url_for_log(url)}: {e}")
                results.append(DirectLink(direct_url="", filename=""))

        return results
