from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from mediagrab.models.internal import MediaKind


def _strip_or_none(v):
    if isinstance(v, str):
        v = v.strip()
    return v or None


OptionalUrl = Annotated[Optional[str], BeforeValidator(_strip_or_none)]


class PreviewRequest(BaseModel):
    url: OptionalUrl = Field(None, description="Source URL to preview")
    type: Optional[str] = Field(None, description="Requested media type (video, audio, photo)")


class DirectUrlRequest(BaseModel):
    url: OptionalUrl = Field(None, description="Single source URL")
    urls: Optional[List[str]] = Field(None, description="Selected playlist item URLs")
    kind: Optional[str] = Field(None, description="video or audio")
    platform: Optional[str] = Field(None, description="Platform tag reported by preview (informational)")

    @property
    def media_kind(self) -> MediaKind:
        return MediaKind.parse(self.kind)


class ZipRequest(BaseModel):
    urls: List[str] = Field(default_factory=list, description="Source URLs, at least two")
    kind: Optional[str] = Field(None, description="video or audio")

    @field_validator("urls", mode="before")
    @classmethod
    def drop_blank_urls(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [u.strip() for u in v if isinstance(u, str) and u.strip()]
        # Anything else is "fewer than two URLs"; the router answers 400
        return []

    @property
    def media_kind(self) -> MediaKind:
        return MediaKind.parse(self.kind)
