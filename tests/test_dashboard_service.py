"""Tests for dashboard assembly"""

import asyncio
import httpx
import pytest
from datetime import timedelta, timezone
from unittest.mock import AsyncMock, Mock

from channel_insights.clients.youtube_client import YouTubeClient
from channel_insights.core.exceptions import (
    ChannelNotFoundError, ConfigurationError, QuotaExceededError, YouTubeAPIError
)
from channel_insights.core.logging import get_performance_metrics, reset_performance_metrics
from channel_insights.core.settings import reload_settings
from channel_insights.services.video_browser import SortField
from channel_insights.services.dashboard_service import (
    DashboardService, build_dashboard_report, create_dashboard_service, newest_first
)


class TestNewestFirst:
    """Test publish-time ordering"""

    def test_orders_by_publish_time(self, sample_videos):
        shuffled = [sample_videos[1], sample_videos[2], sample_videos[0]]
        assert [v.video_id for v in newest_first(shuffled)] == ["new1", "mid2", "old3"]

    def test_mixed_offsets_compare_as_instants(self, make_video, now):
        plus_two = timezone(timedelta(hours=2))
        early_local = make_video("a", published_at=(now - timedelta(hours=1)).astimezone(plus_two))
        later_utc = make_video("b", published_at=now)
        assert [v.video_id for v in newest_first([early_local, later_utc])] == ["b", "a"]


class TestBuildDashboardReport:
    """Test report assembly from fetched records"""

    def test_report_sections(self, sample_channel, sample_videos, sample_playlists, now):
        report = build_dashboard_report(sample_channel, sample_videos, sample_playlists, now=now)

        assert report.generated_at == now
        assert report.overview.title == "Test Channel"
        assert [m.video_id for m in report.videos] == ["new1", "mid2", "old3"]
        assert report.aggregate.video_count == 3
        assert report.aggregate.total_views == 21000
        assert len(report.playlists) == 1

    def test_report_uses_configured_limits(self, monkeypatch, sample_channel, make_video_series, now):
        monkeypatch.setenv("TAG_LIMIT", "1")
        monkeypatch.setenv("TOP_VIDEOS_LIMIT", "2")
        reload_settings()

        videos = make_video_series([5.0, 4.0, 3.0, 2.0])
        report = build_dashboard_report(sample_channel, videos, now=now)

        assert len(report.aggregate.top_engagement_videos) == 2
        assert report.playlists == []

    def test_video_table_search_and_sort(self, sample_channel, sample_videos, now):
        report = build_dashboard_report(
            sample_channel, sample_videos, now=now,
            search_term="mid", sort_field="views", descending=False,
        )

        assert [m.video_id for m in report.videos] == ["mid2"]
        assert report.aggregate.video_count == 3

    def test_video_table_sorted_by_views(self, sample_channel, sample_videos, now):
        report = build_dashboard_report(sample_channel, sample_videos, now=now, sort_field=SortField.VIEWS)
        assert [m.video_id for m in report.videos] == ["mid2", "new1", "old3"]

    def test_unknown_sort_field(self, sample_channel, sample_videos, now):
        with pytest.raises(ValueError):
            build_dashboard_report(sample_channel, sample_videos, now=now, sort_field="duration")

    def test_empty_channel(self, sample_channel, now):
        report = build_dashboard_report(sample_channel, [], now=now)

        assert report.videos == []
        assert report.aggregate.video_count == 0
        assert report.aggregate.average_engagement_rate == 0
        assert report.overview.average_views_per_video == 12500


class TestDashboardService:
    """Test fetching and dashboard assembly through the service"""

    @pytest.fixture
    def dashboard_service(self, mock_youtube_client):
        return DashboardService(youtube_client=mock_youtube_client)

    @pytest.mark.asyncio
    async def test_fetch_channel_records(self, dashboard_service, mock_youtube_client):
        records = await dashboard_service.fetch_channel_records("@testchannel", max_results=3)

        mock_youtube_client.resolve_channel_id.assert_awaited_once_with("@testchannel")
        mock_youtube_client.get_channel.assert_awaited_once_with("UCabcdefghijklmnopqrstuv")
        mock_youtube_client.get_channel_videos.assert_awaited_once_with("UCabcdefghijklmnopqrstuv", 3)
        assert records["channel"].title == "Test Channel"
        assert [v.video_id for v in records["videos"]] == ["new1", "mid2", "old3"]
        assert records["playlists"][0].playlist_id == "PL123"

    @pytest.mark.asyncio
    async def test_fetch_uses_default_video_limit(self, dashboard_service, mock_youtube_client):
        await dashboard_service.fetch_channel_records("@testchannel")
        mock_youtube_client.get_channel_videos.assert_awaited_once_with("UCabcdefghijklmnopqrstuv", 50)

    @pytest.mark.asyncio
    async def test_playlist_failure_is_not_fatal(self, dashboard_service, mock_youtube_client):
        mock_youtube_client.get_channel_playlists = AsyncMock(side_effect=YouTubeAPIError("boom"))

        records = await dashboard_service.fetch_channel_records("@testchannel")

        assert records["playlists"] == []
        assert len(records["videos"]) == 3

    @pytest.mark.asyncio
    async def test_unreadable_playlist_error_is_not_fatal(self, dashboard_service, mock_youtube_client):
        error_response = Mock()
        error_response.status_code = 403
        error_response.content = b"<html>Forbidden</html>"
        error_response.json.side_effect = ValueError("Expecting value")

        youtube_client = YouTubeClient(api_key="test_api_key")
        http_client = AsyncMock()
        http_client.get.side_effect = httpx.HTTPStatusError(
            message="Forbidden", request=Mock(), response=error_response
        )
        youtube_client.client = http_client
        mock_youtube_client.get_channel_playlists = youtube_client.get_channel_playlists

        records = await dashboard_service.fetch_channel_records("@testchannel")

        assert records["playlists"] == []
        assert records["channel"].title == "Test Channel"

    @pytest.mark.asyncio
    async def test_channel_failure_propagates(self, dashboard_service, mock_youtube_client):
        mock_youtube_client.resolve_channel_id = AsyncMock(side_effect=ChannelNotFoundError("Channel not found: x"))

        with pytest.raises(ChannelNotFoundError):
            await dashboard_service.fetch_channel_records("x")
        mock_youtube_client.get_channel.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_fetch_cancels_pending_requests(self, dashboard_service, mock_youtube_client):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def slow_videos(channel_id, limit):
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return []

        async def failing_channel(channel_id):
            await started.wait()
            raise ChannelNotFoundError(f"Channel not found: {channel_id}")

        mock_youtube_client.get_channel = AsyncMock(side_effect=failing_channel)
        mock_youtube_client.get_channel_videos = AsyncMock(side_effect=slow_videos)

        with pytest.raises(ChannelNotFoundError):
            await dashboard_service.fetch_channel_records("@testchannel")

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_quota_failure_propagates(self, dashboard_service, mock_youtube_client):
        mock_youtube_client.get_channel_videos = AsyncMock(side_effect=QuotaExceededError("quota"))

        with pytest.raises(QuotaExceededError):
            await dashboard_service.build_dashboard("@testchannel")

    @pytest.mark.asyncio
    async def test_build_dashboard_video_table(self, dashboard_service, now):
        report = await dashboard_service.build_dashboard(
            "@testchannel", now=now, search_term="new", sort_field="comments"
        )

        assert [m.video_id for m in report.videos] == ["new1"]
        assert report.aggregate.video_count == 3

    @pytest.mark.asyncio
    async def test_build_dashboard(self, dashboard_service, now):
        reset_performance_metrics()

        report = await dashboard_service.build_dashboard("@testchannel", now=now)

        assert report.overview.channel_id == "UCabcdefghijklmnopqrstuv"
        assert report.aggregate.top_engagement_videos[0].video_id == "new1"
        assert report.aggregate.upload_histograms.by_hour[18].uploads == 1

        metrics = get_performance_metrics("build_dashboard")
        assert metrics["total_calls"] == 1
        assert metrics["successful_calls"] == 1

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, mock_youtube_client):
        async with create_dashboard_service(mock_youtube_client) as service:
            assert service.youtube_client is mock_youtube_client

        mock_youtube_client.__aexit__.assert_awaited_once()

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setenv("YOUTUBE_API_KEY", "")
        reload_settings()

        service = DashboardService()
        with pytest.raises(ConfigurationError):
            service.get_youtube_client()
