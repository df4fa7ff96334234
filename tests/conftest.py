"""Pytest configuration and shared fixtures"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence
from unittest.mock import Mock, AsyncMock

from channel_insights.core.settings import reload_settings
from channel_insights.models.channel_models import (
    ChannelSummary, ChannelStatistics, ContentDetails, PlaylistSummary,
    VideoRecord, VideoStatistics
)
from channel_insights.clients.youtube_client import YouTubeClient


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Setup test environment variables"""
    monkeypatch.setenv("YOUTUBE_API_KEY", "test_youtube_key")
    monkeypatch.setenv("MAX_DAILY_QUOTA", "10000")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "UTC")
    monkeypatch.setenv("LOG_TO_FILE", "false")
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def now():
    """Fixed reference time for day-based metrics"""
    return NOW


# Helper functions for tests
def create_test_video(
    video_id: str,
    views: Optional[int] = 1000,
    likes: Optional[int] = 50,
    comments: Optional[int] = 10,
    published_at: Optional[datetime] = None,
    duration: str = "PT4M30S",
    definition: str = "hd",
    tags: Sequence[str] = (),
    title: Optional[str] = None,
    description: str = "",
) -> VideoRecord:
    """Create a test video with specified parameters"""
    return VideoRecord(
        video_id=video_id,
        title=title or f"Test video {video_id}",
        description=description,
        published_at=published_at or NOW - timedelta(days=10),
        statistics=VideoStatistics(view_count=views, like_count=likes, comment_count=comments),
        content_details=ContentDetails(duration=duration, definition=definition),
        tags=tuple(tags),
    )


def create_video_series(rates: Sequence[float], views: int = 10000) -> List[VideoRecord]:
    """
    Videos with the given engagement rates (percent, likes only), newest first.
    """
    videos = []
    for i, rate in enumerate(rates):
        videos.append(create_test_video(
            video_id=f"vid{i}",
            views=views,
            likes=round(views * rate / 100),
            comments=0,
            published_at=NOW - timedelta(days=i + 1),
        ))
    return videos


@pytest.fixture
def sample_channel():
    """Sample channel summary"""
    return ChannelSummary(
        channel_id="UCabcdefghijklmnopqrstuv",
        title="Test Channel",
        description="A channel about testing",
        custom_url="@testchannel",
        country="US",
        published_at=datetime(2019, 3, 1, tzinfo=timezone.utc),
        statistics=ChannelStatistics(view_count=1500000, subscriber_count=25000, video_count=120),
    )


@pytest.fixture
def sample_videos():
    """Three videos, newest first"""
    return [
        create_test_video(
            "new1", views=1000, likes=50, comments=10,
            published_at=datetime(2024, 6, 10, 18, 0, tzinfo=timezone.utc),
            duration="PT45S", tags=["Python", "tutorial"],
        ),
        create_test_video(
            "mid2", views=20000, likes=400, comments=100,
            published_at=datetime(2024, 5, 20, 9, 30, tzinfo=timezone.utc),
            duration="PT8M", definition="sd", tags=["python", "asyncio"],
        ),
        create_test_video(
            "old3", views=0, likes=None, comments=None,
            published_at=datetime(2024, 4, 2, 14, 0, tzinfo=timezone.utc),
            duration="PT1H2M", tags=["Tutorial"],
        ),
    ]


@pytest.fixture
def sample_playlists():
    return [
        PlaylistSummary(
            playlist_id="PL123",
            title="Tutorials",
            published_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
            item_count=12,
        )
    ]


@pytest.fixture
def mock_youtube_client(sample_channel, sample_videos, sample_playlists):
    """Mock YouTube client"""
    client = Mock(spec=YouTubeClient)
    client.resolve_channel_id = AsyncMock(return_value=sample_channel.channel_id)
    client.get_channel = AsyncMock(return_value=sample_channel)
    client.get_channel_videos = AsyncMock(return_value=list(reversed(sample_videos)))
    client.get_channel_playlists = AsyncMock(return_value=sample_playlists)
    client.get_quota_usage = Mock(return_value=4)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_channel_response():
    """Mock YouTube channels API response data"""
    return {
        "items": [
            {
                "id": "UCabcdefghijklmnopqrstuv",
                "snippet": {
                    "title": "Test Channel",
                    "description": "A channel about testing",
                    "customUrl": "@testchannel",
                    "publishedAt": "2019-03-01T00:00:00Z",
                    "country": "US",
                    "thumbnails": {
                        "default": {"url": "https://yt3.ggpht.com/default.jpg"},
                        "high": {"url": "https://yt3.ggpht.com/high.jpg", "width": 800, "height": 800}
                    }
                },
                "statistics": {
                    "viewCount": "1500000",
                    "subscriberCount": "25000",
                    "hiddenSubscriberCount": False,
                    "videoCount": "120"
                },
                "brandingSettings": {
                    "channel": {"keywords": "testing python"},
                    "image": {"bannerExternalUrl": "https://yt3.ggpht.com/banner"}
                }
            }
        ]
    }


@pytest.fixture
def mock_uploads_response():
    """Mock channels?part=contentDetails response"""
    return {
        "items": [
            {
                "id": "UCabcdefghijklmnopqrstuv",
                "contentDetails": {"relatedPlaylists": {"uploads": "UUabcdefghijklmnopqrstuv"}}
            }
        ]
    }


@pytest.fixture
def mock_playlist_items_response():
    """Mock playlistItems API response data"""
    return {
        "items": [
            {"snippet": {"resourceId": {"kind": "youtube#video", "videoId": "abc123"}}},
            {"snippet": {"resourceId": {"kind": "youtube#video", "videoId": "def456"}}}
        ]
    }


@pytest.fixture
def mock_videos_response():
    """Mock YouTube videos API response data"""
    return {
        "items": [
            {
                "id": "abc123",
                "snippet": {
                    "title": "Async Python in 10 minutes",
                    "description": "Everything about asyncio",
                    "publishedAt": "2024-06-01T15:00:00Z",
                    "categoryId": "27",
                    "tags": ["Python", "asyncio"],
                    "thumbnails": {
                        "default": {"url": "https://i.ytimg.com/vi/abc123/default.jpg"}
                    }
                },
                "contentDetails": {"duration": "PT10M5S", "definition": "hd"},
                "statistics": {
                    "viewCount": "1000",
                    "likeCount": "50",
                    "commentCount": "10"
                }
            },
            {
                "id": "def456",
                "snippet": {
                    "title": "Quick tip",
                    "publishedAt": "2024-05-28T08:00:00Z",
                    "thumbnails": {}
                },
                "contentDetails": {"duration": "PT58S", "definition": "sd"},
                "statistics": {"viewCount": "500"}
            }
        ]
    }


@pytest.fixture
def mock_playlists_response():
    """Mock playlists API response data"""
    return {
        "items": [
            {
                "id": "PL123",
                "snippet": {
                    "title": "Tutorials",
                    "description": "All tutorials",
                    "publishedAt": "2023-01-01T00:00:00Z",
                    "thumbnails": {}
                },
                "contentDetails": {"itemCount": 12}
            }
        ]
    }


@pytest.fixture
def make_video():
    """Factory for single test videos"""
    return create_test_video


@pytest.fixture
def make_video_series():
    """Factory for newest-first video series with given engagement rates"""
    return create_video_series
