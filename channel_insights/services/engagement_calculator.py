"""Per-video engagement metrics"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from ..models.channel_models import VideoRecord
from ..models.metrics_models import DerivedVideoMetric

LIKE_WEIGHT = 1.5
COMMENT_WEIGHT = 3.0


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps so they compare with aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_now(now: Optional[datetime] = None) -> datetime:
    return as_utc(now) if now is not None else datetime.now(timezone.utc)


def days_since(published_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since publication, never negative"""
    elapsed = resolve_now(now) - as_utc(published_at)
    return max(0, elapsed // timedelta(days=1))


def _percent(part: int, views: int) -> float:
    return (part / views) * 100 if views > 0 else 0.0


def compute_video_metric(video: VideoRecord, now: Optional[datetime] = None) -> DerivedVideoMetric:
    """
    Derive engagement figures for a single video.

    Unknown counts are treated as zero. With zero views every rate, including
    the interaction score, is zero. ``views_per_day`` falls back to the raw
    view count for videos published less than a day ago.

    Args:
        video: Video record from the API client
        now: Reference time (defaults to the current UTC time)

    Returns:
        DerivedVideoMetric for the video
    """
    stats = video.statistics
    views, likes, comments = stats.views, stats.likes, stats.comments

    interaction_score = 0.0
    if views > 0:
        interaction_score = (likes * LIKE_WEIGHT + comments * COMMENT_WEIGHT) / views * 1000

    days = days_since(video.published_at, now)

    return DerivedVideoMetric(
        video_id=video.video_id,
        title=video.title,
        views=views,
        likes=likes,
        comments=comments,
        engagement_rate=_percent(likes + comments, views),
        like_rate=_percent(likes, views),
        comment_rate=_percent(comments, views),
        interaction_score=interaction_score,
        days_since_publish=days,
        views_per_day=views / days if days > 0 else float(views),
    )


def compute_video_metrics(
    videos: Iterable[VideoRecord],
    now: Optional[datetime] = None
) -> List[DerivedVideoMetric]:
    """Derive metrics for every video, preserving input order"""
    reference = resolve_now(now)
    return [compute_video_metric(video, reference) for video in videos]
