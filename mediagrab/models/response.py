from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from mediagrab.core.platform import Platform


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AudioFormatOption(CamelModel):
    """One entry of the audio quality menu"""
    format_id: str = Field(alias="formatId")
    ext: Optional[str] = None
    abr: Optional[float] = None
    format_note: Optional[str] = Field(default=None, alias="formatNote")
    filesize: Optional[int] = None
    label: Optional[str] = None


class MediaPreview(CamelModel):
    """Single item preview"""
    type: str = "video"
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    thumbnail: Optional[str] = None
    platform: Platform
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    audio_formats: Optional[List[AudioFormatOption]] = Field(default=None, alias="audioFormats")


class PlaylistEntry(CamelModel):
    id: str
    title: str
    thumbnail: Optional[str] = None
    duration: Optional[str] = None
    url: str
    selected: bool = False


class PlaylistPreview(CamelModel):
    """Flattened playlist preview"""
    type: Literal["playlist"] = "playlist"
    title: str
    author: Optional[str] = None
    platform: Platform
    total_items: int = Field(alias="totalItems")
    items: List[PlaylistEntry] = []


class DirectLink(CamelModel):
    direct_url: str = Field(alias="directUrl")
    filename: str


class DirectLinkBatch(CamelModel):
    items: List[DirectLink]
