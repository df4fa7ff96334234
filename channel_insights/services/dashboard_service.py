"""Dashboard assembly: fetch channel data and derive its analytics"""

import asyncio
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional, Sequence, Union

from ..clients.youtube_client import YouTubeClient
from ..core.exceptions import ConfigurationError, YouTubeAPIError
from ..core.logging import get_logger, log_performance
from ..core.settings import get_settings
from ..models.channel_models import ChannelSummary, PlaylistSummary, VideoRecord
from ..models.metrics_models import DashboardReport
from .aggregate_statistics import compute_aggregate_report
from .channel_metrics import compute_channel_overview
from .engagement_calculator import as_utc, compute_video_metrics, resolve_now
from .video_browser import SortField, filter_videos, sort_videos

logger = get_logger(__name__)


def newest_first(videos: Sequence[VideoRecord]) -> List[VideoRecord]:
    """Order videos by publish time, most recent first"""
    return sorted(videos, key=lambda video: as_utc(video.published_at), reverse=True)


def build_dashboard_report(
    channel: ChannelSummary,
    videos: Sequence[VideoRecord],
    playlists: Sequence[PlaylistSummary] = (),
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    search_term: str = "",
    sort_field: Union[SortField, str] = SortField.PUBLISHED_AT,
    descending: bool = True,
) -> DashboardReport:
    """
    Derive the full dashboard from already-fetched records.

    ``videos`` must already be ordered newest first. The aggregate always
    covers every video; ``search_term``, ``sort_field`` and ``descending``
    only shape the per-video table.
    """
    settings = get_settings()
    reference = resolve_now(now)

    return DashboardReport(
        overview=compute_channel_overview(channel, reference),
        videos=compute_video_metrics(
            sort_videos(filter_videos(videos, search_term), sort_field, descending),
            reference,
        ),
        aggregate=compute_aggregate_report(
            videos,
            now=reference,
            tz=tz,
            growth_window=settings.growth_window,
            tag_limit=settings.tag_limit,
            top_videos=settings.top_videos_limit,
        ),
        playlists=list(playlists),
        generated_at=reference,
    )


class DashboardService:
    """
    Fetches a channel's public data and turns it into a DashboardReport.

    Channel and video fetch failures propagate; playlists are optional and a
    failure there only leaves the playlist section empty.
    """

    def __init__(self, youtube_client: Optional[YouTubeClient] = None):
        """
        Initialize dashboard service.

        Args:
            youtube_client: YouTube API client (if None, created on first use)
        """
        self.settings = get_settings()
        self.youtube_client = youtube_client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.youtube_client:
            await self.youtube_client.__aexit__(exc_type, exc_val, exc_tb)

    def get_youtube_client(self) -> YouTubeClient:
        if self.youtube_client is None:
            if not self.settings.youtube_api_key:
                raise ConfigurationError("YOUTUBE_API_KEY is not set")
            self.youtube_client = YouTubeClient()
        return self.youtube_client

    async def fetch_channel_records(
        self,
        channel_input: str,
        max_results: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Resolve a channel and fetch its records.

        Returns:
            Dict with ``channel``, ``videos`` (newest first) and ``playlists``
        """
        client = self.get_youtube_client()
        limit = max_results or self.settings.max_videos

        channel_id = await client.resolve_channel_id(channel_input)
        logger.info(f"Resolved '{channel_input}' to channel {channel_id}")

        tasks = [
            asyncio.ensure_future(client.get_channel(channel_id)),
            asyncio.ensure_future(client.get_channel_videos(channel_id, limit)),
            asyncio.ensure_future(self._fetch_playlists(channel_id)),
        ]
        try:
            channel, videos, playlists = await asyncio.gather(*tasks)
        except Exception:
            # Stop the remaining requests before the client is closed
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return {
            "channel": channel,
            "videos": newest_first(videos),
            "playlists": playlists,
        }

    async def _fetch_playlists(self, channel_id: str) -> List[PlaylistSummary]:
        try:
            return await self.get_youtube_client().get_channel_playlists(channel_id)
        except YouTubeAPIError as e:
            logger.warning(f"Playlists unavailable for channel {channel_id}: {e}")
            return []

    @log_performance("build_dashboard")
    async def build_dashboard(
        self,
        channel_input: str,
        max_results: Optional[int] = None,
        now: Optional[datetime] = None,
        search_term: str = "",
        sort_field: Union[SortField, str] = SortField.PUBLISHED_AT,
        descending: bool = True,
    ) -> DashboardReport:
        """
        Fetch a channel and derive its dashboard.

        Args:
            channel_input: Channel ID, handle, URL or custom name
            max_results: Number of recent uploads to analyze
            now: Reference time for day-based figures
            search_term: Only list videos whose title or description contains it
            sort_field: Column the video table is ordered by
            descending: Order the video table from high to low
        """
        records = await self.fetch_channel_records(channel_input, max_results)
        return build_dashboard_report(
            records["channel"],
            records["videos"],
            records["playlists"],
            now=now,
            tz=self.settings.timezone,
            search_term=search_term,
            sort_field=sort_field,
            descending=descending,
        )


def create_dashboard_service(youtube_client: Optional[YouTubeClient] = None) -> DashboardService:
    """Factory function to create dashboard service"""
    return DashboardService(youtube_client=youtube_client)
