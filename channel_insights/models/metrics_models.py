"""Derived analytics records produced by the metrics services"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List
from datetime import datetime

from .channel_models import PlaylistSummary


class DerivedVideoMetric(BaseModel):
    """Per-video engagement metrics"""
    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str
    views: int = 0
    likes: int = 0
    comments: int = 0
    engagement_rate: float = Field(0.0, description="(likes + comments) / views * 100")
    like_rate: float = Field(0.0, description="likes / views * 100")
    comment_rate: float = Field(0.0, description="comments / views * 100")
    interaction_score: float = Field(0.0, description="(likes*1.5 + comments*3) / views * 1000")
    days_since_publish: int = Field(0, ge=0)
    views_per_day: float = 0.0


class PerformanceTiers(BaseModel):
    """Video counts per engagement tier relative to the set average"""
    model_config = ConfigDict(frozen=True)

    viral: int = 0
    high: int = 0
    average: int = 0
    below_average: int = 0


class ContentLengthBuckets(BaseModel):
    """Video counts by duration: short <= 1 min, medium <= 10 min, long > 10 min"""
    model_config = ConfigDict(frozen=True)

    short: int = 0
    medium: int = 0
    long: int = 0


class QualityBreakdown(BaseModel):
    """Video counts by quality definition"""
    model_config = ConfigDict(frozen=True)

    hd: int = 0
    sd: int = 0


class TagCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: str
    count: int


class HourBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int = Field(..., ge=0, le=23)
    uploads: int = 0


class DayBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: str
    uploads: int = 0


class MonthBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str = Field(..., description="'Mon YYYY' key, e.g. 'Jan 2024'")
    uploads: int = 0


class UploadHistograms(BaseModel):
    """Upload counts by hour of day, day of week and calendar month"""
    model_config = ConfigDict(frozen=True)

    by_hour: List[HourBucket] = Field(default_factory=list)
    by_day: List[DayBucket] = Field(default_factory=list)
    by_month: List[MonthBucket] = Field(default_factory=list)


class EngagementProfileEntry(BaseModel):
    """Average of a rate across the set, with its maximum as the scale"""
    model_config = ConfigDict(frozen=True)

    metric: str
    value: float
    full_mark: float


class AggregateReport(BaseModel):
    """Channel-wide aggregates over a set of videos"""
    model_config = ConfigDict(frozen=True)

    video_count: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0

    average_engagement_rate: float = 0.0
    average_like_rate: float = 0.0
    average_comment_rate: float = 0.0
    consistency: float = Field(0.0, description="100 minus the coefficient of variation of engagement rate, in percent")
    growth_rate: float = Field(0.0, description="Engagement change between the recent and older windows, in percent")

    performance_tiers: PerformanceTiers = Field(default_factory=PerformanceTiers)
    content_length: ContentLengthBuckets = Field(default_factory=ContentLengthBuckets)
    average_duration_minutes: float = 0.0
    quality: QualityBreakdown = Field(default_factory=QualityBreakdown)
    top_tags: List[TagCount] = Field(default_factory=list)
    upload_histograms: UploadHistograms = Field(default_factory=UploadHistograms)

    top_engagement_videos: List[DerivedVideoMetric] = Field(default_factory=list)
    top_interaction_videos: List[DerivedVideoMetric] = Field(default_factory=list)
    engagement_profile: List[EngagementProfileEntry] = Field(default_factory=list)

    # View-based performance figures
    average_views_per_day: float = 0.0
    peak_views: int = 0
    low_views: int = 0
    view_consistency: float = 0.0
    view_growth_rate: float = 0.0


class ChannelOverview(BaseModel):
    """Headline channel figures"""
    model_config = ConfigDict(frozen=True)

    channel_id: str
    title: str
    subscriber_count: int = 0
    view_count: int = 0
    video_count: int = 0
    average_views_per_video: int = 0
    channel_age: str = ""
    subscribers_display: str = "0"
    views_display: str = "0"
    videos_display: str = "0"


class DashboardReport(BaseModel):
    """Everything the dashboard renders for one channel"""
    model_config = ConfigDict(frozen=True)

    overview: ChannelOverview
    videos: List[DerivedVideoMetric] = Field(default_factory=list)
    aggregate: AggregateReport = Field(default_factory=AggregateReport)
    playlists: List[PlaylistSummary] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.now)
