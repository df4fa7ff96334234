"""Channel, video and playlist records built from YouTube Data API responses"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Tuple, Any
from datetime import datetime
from enum import Enum


def _parse_count(value: Any) -> Optional[int]:
    """Parse a count transmitted as decimal text; unparsable values become None"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


class Thumbnail(BaseModel):
    """Single thumbnail image"""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Image URL")


class ThumbnailSet(BaseModel):
    """Thumbnail variants returned by the API"""
    model_config = ConfigDict(frozen=True)

    default: Optional[Thumbnail] = None
    medium: Optional[Thumbnail] = None
    high: Optional[Thumbnail] = None

    @property
    def best_url(self) -> Optional[str]:
        """URL of the highest resolution thumbnail available"""
        for thumbnail in (self.high, self.medium, self.default):
            if thumbnail is not None:
                return thumbnail.url
        return None


class ChannelStatistics(BaseModel):
    """Channel-wide counters"""
    model_config = ConfigDict(frozen=True)

    view_count: int = Field(0, ge=0, description="Total channel views")
    subscriber_count: int = Field(0, ge=0, description="Subscriber count")
    video_count: int = Field(0, ge=0, description="Number of public videos")

    @field_validator('view_count', 'subscriber_count', 'video_count', mode='before')
    def parse_count(cls, v):
        """Counts arrive as decimal text; anything unusable counts as zero"""
        parsed = _parse_count(v)
        return parsed if parsed is not None else 0


class ChannelSummary(BaseModel):
    """Public channel information"""
    model_config = ConfigDict(frozen=True)

    channel_id: str = Field(..., description="YouTube channel ID")
    title: str = Field(..., description="Channel name")
    description: str = Field("", description="Channel description")
    custom_url: Optional[str] = Field(None, description="Custom channel URL (handle)")
    country: Optional[str] = Field(None, description="Channel country code")
    published_at: datetime = Field(..., description="Channel creation timestamp")
    thumbnails: ThumbnailSet = Field(default_factory=ThumbnailSet)
    statistics: ChannelStatistics = Field(default_factory=ChannelStatistics)
    banner_url: Optional[str] = Field(None, description="Banner image URL")
    keywords: Optional[str] = Field(None, description="Channel keywords from branding settings")


class VideoStatistics(BaseModel):
    """
    Per-video counters.

    Each count is optional: the API omits a counter when the owner hides it.
    ``None`` means unknown; the ``views``/``likes``/``comments`` properties
    give the value used in arithmetic, where unknown counts are zero.
    """
    model_config = ConfigDict(frozen=True)

    view_count: Optional[int] = Field(None, description="Number of views")
    like_count: Optional[int] = Field(None, description="Number of likes")
    comment_count: Optional[int] = Field(None, description="Number of comments")

    @field_validator('view_count', 'like_count', 'comment_count', mode='before')
    def parse_count(cls, v):
        return _parse_count(v)

    @property
    def views(self) -> int:
        return self.view_count if self.view_count is not None else 0

    @property
    def likes(self) -> int:
        return self.like_count if self.like_count is not None else 0

    @property
    def comments(self) -> int:
        return self.comment_count if self.comment_count is not None else 0


class VideoDefinition(str, Enum):
    """Video quality definition flag"""
    HD = "hd"
    SD = "sd"


class ContentDetails(BaseModel):
    """Duration and quality information"""
    model_config = ConfigDict(frozen=True)

    duration: str = Field("", description="Video duration in ISO 8601 format")
    definition: Optional[VideoDefinition] = Field(None, description="Quality definition")

    @field_validator('definition', mode='before')
    def parse_definition(cls, v):
        """Unknown definition values are treated as missing"""
        if isinstance(v, VideoDefinition):
            return v
        if isinstance(v, str) and v.lower() in ("hd", "sd"):
            return v.lower()
        return None


class VideoRecord(BaseModel):
    """Video as returned by the videos endpoint"""
    model_config = ConfigDict(frozen=True)

    video_id: str = Field(..., description="YouTube video ID")
    title: str = Field(..., description="Video title")
    description: str = Field("", description="Video description")
    published_at: datetime = Field(..., description="Publication date")
    thumbnails: ThumbnailSet = Field(default_factory=ThumbnailSet)
    statistics: VideoStatistics = Field(default_factory=VideoStatistics)
    content_details: ContentDetails = Field(default_factory=ContentDetails)
    tags: Tuple[str, ...] = Field(default=(), description="Free-text tags")
    category_id: Optional[str] = Field(None, description="YouTube category ID")
    default_language: Optional[str] = Field(None, description="Default language")

    @field_validator('tags', mode='before')
    def parse_tags(cls, v):
        if v is None:
            return ()
        return tuple(v)


class PlaylistSummary(BaseModel):
    """Public playlist information"""
    model_config = ConfigDict(frozen=True)

    playlist_id: str = Field(..., description="YouTube playlist ID")
    title: str = Field(..., description="Playlist title")
    description: str = Field("", description="Playlist description")
    published_at: datetime = Field(..., description="Creation timestamp")
    thumbnails: ThumbnailSet = Field(default_factory=ThumbnailSet)
    item_count: int = Field(0, ge=0, description="Number of items in the playlist")
