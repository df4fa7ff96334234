"""Headline channel figures"""

from datetime import datetime
from typing import Optional

from ..models.channel_models import ChannelSummary
from ..models.metrics_models import ChannelOverview
from .engagement_calculator import as_utc, resolve_now
from .number_formatter import format_number


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def channel_age(published_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Human-readable channel age from calendar components.

    Uses the difference in calendar years when it is positive, otherwise the
    difference in calendar months, e.g. ``"3 years"`` or ``"5 months"``.
    """
    current = resolve_now(now)
    created = as_utc(published_at)
    years = current.year - created.year
    if years > 0:
        return _plural(years, "year")
    months = max(0, current.month - created.month)
    return _plural(months, "month")


def average_views_per_video(channel: ChannelSummary) -> int:
    """Rounded views per video; 0 for a channel without videos"""
    stats = channel.statistics
    if stats.video_count <= 0:
        return 0
    return round(stats.view_count / stats.video_count)


def compute_channel_overview(channel: ChannelSummary, now: Optional[datetime] = None) -> ChannelOverview:
    """Build the overview card figures for a channel"""
    stats = channel.statistics
    return ChannelOverview(
        channel_id=channel.channel_id,
        title=channel.title,
        subscriber_count=stats.subscriber_count,
        view_count=stats.view_count,
        video_count=stats.video_count,
        average_views_per_video=average_views_per_video(channel),
        channel_age=channel_age(channel.published_at, now),
        subscribers_display=format_number(stats.subscriber_count),
        views_display=format_number(stats.view_count),
        videos_display=format_number(stats.video_count),
    )
