"""Channel-wide aggregate statistics over a set of videos

Every function here is pure and total: empty inputs and zero averages produce
zero-valued results instead of raising.

Callers must pass videos ordered newest first. The growth-rate comparison
treats the head of the sequence as "recent" and the tail as "older", and the
engine never re-sorts its input.
"""

import math
from collections import Counter
from datetime import datetime, tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.logging import get_logger
from ..models.channel_models import VideoDefinition, VideoRecord
from ..models.metrics_models import (
    AggregateReport, ContentLengthBuckets, DayBucket, DerivedVideoMetric,
    EngagementProfileEntry, HourBucket, MonthBucket, PerformanceTiers,
    QualityBreakdown, TagCount, UploadHistograms
)
from .duration_parser import SHORT_MAX_MINUTES, parse_duration_minutes
from .engagement_calculator import as_utc, compute_video_metrics, resolve_now

logger = get_logger(__name__)

DEFAULT_GROWTH_WINDOW = 10
DEFAULT_TAG_LIMIT = 10
DEFAULT_TOP_VIDEOS = 5
MAX_MONTHS = 12
PROFILE_FULL_MARK = 100.0

# Tier boundaries as multiples of the set's average engagement rate
VIRAL_MULTIPLIER = 2.0
HIGH_MULTIPLIER = 1.2
BELOW_AVERAGE_MULTIPLIER = 0.8

MEDIUM_MAX_MINUTES = 10.0

DAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')
MONTH_ABBREVIATIONS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                       'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence"""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std_dev(values: Sequence[float]) -> float:
    """Standard deviation dividing by N, 0 for an empty sequence"""
    if not values:
        return 0.0
    avg = mean(values)
    variance = sum((value - avg) ** 2 for value in values) / len(values)
    return math.sqrt(variance)


def consistency_score(values: Sequence[float], min_count: int = 1) -> float:
    """
    Normalized inverse of the coefficient of variation.

    ``max(0, 100 - std/mean * 100)``; 0 when the mean is 0 or fewer than
    ``min_count`` values are given.
    """
    if len(values) < min_count:
        return 0.0
    avg = mean(values)
    if avg == 0:
        return 0.0
    return max(0.0, 100 - (population_std_dev(values) / avg) * 100)


def window_growth_rate(values: Sequence[float], window: int = DEFAULT_GROWTH_WINDOW) -> float:
    """
    Percentage change between the first and last ``window`` values.

    With values ordered newest first this compares recent against older
    content. Returns 0 when fewer than ``window`` values are given or the
    older average is 0.
    """
    if window <= 0 or len(values) < window:
        return 0.0
    recent_avg = mean(values[:window])
    older_avg = mean(values[-window:])
    if older_avg == 0:
        return 0.0
    return (recent_avg - older_avg) / older_avg * 100


def classify_performance_tiers(rates: Sequence[float]) -> PerformanceTiers:
    """
    Count rates per tier relative to their own average.

    viral: > 2x average; high: > 1.2x and <= 2x; average: >= 0.8x and <= 1.2x;
    below average: < 0.8x. Boundary values fall into the lower tier.
    """
    avg = mean(rates)
    viral_floor = avg * VIRAL_MULTIPLIER
    high_floor = avg * HIGH_MULTIPLIER
    average_floor = avg * BELOW_AVERAGE_MULTIPLIER

    viral = high = average = below = 0
    for rate in rates:
        if rate > viral_floor:
            viral += 1
        elif rate > high_floor:
            high += 1
        elif rate >= average_floor:
            average += 1
        else:
            below += 1

    return PerformanceTiers(viral=viral, high=high, average=average, below_average=below)


def content_length_buckets(videos: Sequence[VideoRecord]) -> ContentLengthBuckets:
    """Count videos as short (<= 1 min), medium (<= 10 min) or long"""
    short = medium = long = 0
    for video in videos:
        minutes = parse_duration_minutes(video.content_details.duration)
        if minutes <= SHORT_MAX_MINUTES:
            short += 1
        elif minutes <= MEDIUM_MAX_MINUTES:
            medium += 1
        else:
            long += 1
    return ContentLengthBuckets(short=short, medium=medium, long=long)


def average_duration_minutes(videos: Sequence[VideoRecord]) -> float:
    return mean([parse_duration_minutes(v.content_details.duration) for v in videos])


def quality_breakdown(videos: Sequence[VideoRecord]) -> QualityBreakdown:
    definitions = [video.content_details.definition for video in videos]
    return QualityBreakdown(
        hd=definitions.count(VideoDefinition.HD),
        sd=definitions.count(VideoDefinition.SD),
    )


def rank_tags(videos: Sequence[VideoRecord], limit: int = DEFAULT_TAG_LIMIT) -> List[TagCount]:
    """
    Most frequent tags across all videos, case-insensitive.

    Ties keep the order in which tags were first seen.
    """
    counts: Counter = Counter()
    for video in videos:
        for tag in video.tags:
            normalized = tag.strip().lower()
            if normalized:
                counts[normalized] += 1
    # most_common() is stable for equal counts
    return [TagCount(tag=tag, count=count) for tag, count in counts.most_common(limit)]


def _localize(value: datetime, tz: Optional[tzinfo]) -> datetime:
    value = as_utc(value)
    return value.astimezone(tz) if tz is not None else value


def month_key(year: int, month: int) -> str:
    """'Mon YYYY' label, independent of the process locale"""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def upload_histograms(videos: Sequence[VideoRecord], tz: Optional[tzinfo] = None) -> UploadHistograms:
    """
    Upload counts by hour of day, weekday and month.

    All 24 hours and all 7 weekdays (Sunday first) are always present. Only
    the 12 most recent months with uploads are kept, oldest first.

    Args:
        videos: Videos to bucket
        tz: Timezone to convert publish times into (None keeps their own zone)
    """
    by_hour = [0] * 24
    by_day = [0] * 7
    by_month: Dict[Tuple[int, int], int] = {}

    for video in videos:
        published = _localize(video.published_at, tz)
        by_hour[published.hour] += 1
        # isoweekday(): Monday=1 .. Sunday=7
        by_day[published.isoweekday() % 7] += 1
        key = (published.year, published.month)
        by_month[key] = by_month.get(key, 0) + 1

    recent_months = sorted(by_month)[-MAX_MONTHS:]

    return UploadHistograms(
        by_hour=[HourBucket(hour=hour, uploads=count) for hour, count in enumerate(by_hour)],
        by_day=[DayBucket(day=DAY_NAMES[i], uploads=count) for i, count in enumerate(by_day)],
        by_month=[
            MonthBucket(month=month_key(year, month), uploads=by_month[(year, month)])
            for year, month in recent_months
        ],
    )


def top_videos_by(
    metrics: Sequence[DerivedVideoMetric],
    field: str,
    limit: int = DEFAULT_TOP_VIDEOS
) -> List[DerivedVideoMetric]:
    """Highest ``limit`` videos by a metric field; ties keep input order"""
    return sorted(metrics, key=lambda metric: getattr(metric, field), reverse=True)[:limit]


def engagement_profile(
    metrics: Sequence[DerivedVideoMetric],
    consistency: float = 0.0,
    growth_rate: float = 0.0
) -> List[EngagementProfileEntry]:
    """
    Radar entries: average and maximum of each rate, then consistency and
    growth rate on a fixed scale of 100.
    """
    profile = []
    for label, field in (
        ('Like Rate', 'like_rate'),
        ('Comment Rate', 'comment_rate'),
        ('Engagement Rate', 'engagement_rate'),
    ):
        values = [getattr(metric, field) for metric in metrics]
        profile.append(EngagementProfileEntry(
            metric=label,
            value=mean(values),
            full_mark=max(values) if values else 0.0,
        ))
    profile.append(EngagementProfileEntry(metric='Consistency', value=consistency, full_mark=PROFILE_FULL_MARK))
    profile.append(EngagementProfileEntry(metric='Growth Rate', value=growth_rate, full_mark=PROFILE_FULL_MARK))
    return profile


def compute_aggregate_report(
    videos: Sequence[VideoRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    growth_window: int = DEFAULT_GROWTH_WINDOW,
    tag_limit: int = DEFAULT_TAG_LIMIT,
    top_videos: int = DEFAULT_TOP_VIDEOS,
) -> AggregateReport:
    """
    Compute channel-wide aggregates for a batch of videos.

    Args:
        videos: Videos ordered newest first (not re-sorted here)
        now: Reference time for day-based figures (defaults to current UTC time)
        tz: Timezone for the upload-time histograms
        growth_window: Size of the recent/older windows for growth rates
        tag_limit: Number of tags to keep in the ranking
        top_videos: Number of videos in the top engagement/interaction lists

    Returns:
        AggregateReport; an empty input yields an all-zero report with the
        fixed hour and weekday buckets present
    """
    videos = list(videos)
    metrics = compute_video_metrics(videos, resolve_now(now))
    logger.debug(f"Computing aggregate report for {len(videos)} videos")

    engagement_rates = [metric.engagement_rate for metric in metrics]
    views = [metric.views for metric in metrics]
    consistency = consistency_score(engagement_rates)
    growth_rate = window_growth_rate(engagement_rates, growth_window)

    return AggregateReport(
        video_count=len(metrics),
        total_views=sum(views),
        total_likes=sum(metric.likes for metric in metrics),
        total_comments=sum(metric.comments for metric in metrics),
        average_engagement_rate=mean(engagement_rates),
        average_like_rate=mean([metric.like_rate for metric in metrics]),
        average_comment_rate=mean([metric.comment_rate for metric in metrics]),
        consistency=consistency,
        growth_rate=growth_rate,
        performance_tiers=classify_performance_tiers(engagement_rates),
        content_length=content_length_buckets(videos),
        average_duration_minutes=average_duration_minutes(videos),
        quality=quality_breakdown(videos),
        top_tags=rank_tags(videos, tag_limit),
        upload_histograms=upload_histograms(videos, tz),
        top_engagement_videos=top_videos_by(metrics, 'engagement_rate', top_videos),
        top_interaction_videos=top_videos_by(metrics, 'interaction_score', top_videos),
        engagement_profile=engagement_profile(metrics, consistency, growth_rate),
        average_views_per_day=mean([metric.views_per_day for metric in metrics]),
        peak_views=max(views) if views else 0,
        low_views=min(views) if views else 0,
        view_consistency=consistency_score(views, min_count=2),
        view_growth_rate=window_growth_rate(views, growth_window),
    )
