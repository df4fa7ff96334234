"""YouTube Data API client for channel, video and playlist data"""

import httpx
import asyncio
from typing import List, Dict, Any, Optional
from datetime import datetime
from urllib.parse import urlparse

from ..core.settings import get_settings
from ..core.exceptions import (
    ChannelNotFoundError, QuotaExceededError, RateLimitError, YouTubeAPIError
)
from ..core.logging import get_logger
from ..models.channel_models import (
    ChannelSummary, PlaylistSummary, ThumbnailSet, VideoRecord
)

logger = get_logger(__name__)

# YouTube API constants
YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
SEARCH_QUOTA_COST = 100
DEFAULT_QUOTA_COST = 1
MAX_ATTEMPTS = 3
MAX_PAGE_SIZE = 50
DEFAULT_RETRY_AFTER = 60


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class YouTubeClient:
    """
    YouTube Data API client for public channel analytics.
    Follows async patterns with proper error handling and quota management.
    """

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize YouTube API client.

        Args:
            api_key: YouTube Data API key (if None, loads from settings)
        """
        self.settings = get_settings()
        self.api_key = api_key or self.settings.youtube_api_key

        if not self.api_key:
            raise ValueError("YouTube API key is required")

        self.client = httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=10,
                max_keepalive_connections=5
            ),
            timeout=self.settings.request_timeout
        )

        self.base_url = YOUTUBE_API_BASE_URL
        self.quota_used = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    # Channel id resolution

    async def resolve_channel_id(self, channel_input: str) -> str:
        """
        Resolve user input to a channel ID.

        Accepts a raw ``UC...`` channel ID, an ``@handle``, a youtube.com URL
        (``/channel/``, ``/c/``, ``/user/`` or ``/@handle``) or a bare custom
        name, which is looked up by search and then as a legacy username.

        Raises:
            ChannelNotFoundError: When nothing matches the input
        """
        text = (channel_input or "").strip()
        if not text:
            raise ChannelNotFoundError("Channel not found: empty input")

        if text.startswith("UC") and len(text) == 24:
            return text

        if text.startswith("@"):
            return await self._channel_id_by_handle(text[1:])

        if "youtube.com" in text or "youtu.be" in text:
            url = text if "://" in text else f"https://{text}"
            path = urlparse(url).path

            if path.startswith("/channel/"):
                return path[len("/channel/"):].split("/")[0]
            if path.startswith("/c/"):
                return await self._channel_id_by_custom_url(path[len("/c/"):].split("/")[0])
            if path.startswith("/user/"):
                return await self._channel_id_by_username(path[len("/user/"):].split("/")[0])
            if path.startswith("/@"):
                return await self._channel_id_by_handle(path[2:].split("/")[0])

        try:
            return await self._channel_id_by_custom_url(text)
        except ChannelNotFoundError:
            logger.debug(f"No search match for '{text}', trying legacy username")
            return await self._channel_id_by_username(text)

    async def _channel_id_by_handle(self, handle: str) -> str:
        data = await self._make_request("channels", {"part": "id", "forHandle": handle})
        return self._first_item(data, handle)["id"]

    async def _channel_id_by_username(self, username: str) -> str:
        data = await self._make_request("channels", {"part": "id", "forUsername": username})
        return self._first_item(data, username)["id"]

    async def _channel_id_by_custom_url(self, custom_url: str) -> str:
        data = await self._make_request(
            "search",
            {"part": "id", "type": "channel", "q": custom_url},
            cost=SEARCH_QUOTA_COST
        )
        return self._first_item(data, custom_url)["id"]["channelId"]

    @staticmethod
    def _first_item(data: Dict[str, Any], query: str) -> Dict[str, Any]:
        items = data.get("items") or []
        if not items:
            raise ChannelNotFoundError(f"Channel not found: {query}")
        return items[0]

    # Data endpoints

    async def get_channel(self, channel_id: str) -> ChannelSummary:
        """
        Get public channel information.

        Raises:
            ChannelNotFoundError: When the channel does not exist
            QuotaExceededError: When API quota is exceeded
            YouTubeAPIError: For other API errors
        """
        logger.info(f"Fetching channel {channel_id}")
        data = await self._make_request(
            "channels",
            {"part": "snippet,statistics,brandingSettings", "id": channel_id}
        )
        return self._parse_channel_item(self._first_item(data, channel_id))

    async def get_channel_videos(self, channel_id: str, max_results: int = MAX_PAGE_SIZE) -> List[VideoRecord]:
        """
        Get the most recent uploads of a channel.

        Videos are returned in uploads-playlist order, which is newest first.

        Args:
            channel_id: YouTube channel ID
            max_results: Number of uploads to fetch (1-50)
        """
        logger.info(f"Fetching up to {max_results} videos for channel {channel_id}")

        channel_data = await self._make_request(
            "channels", {"part": "contentDetails", "id": channel_id}
        )
        channel_item = self._first_item(channel_data, channel_id)
        uploads_playlist_id = (
            channel_item.get("contentDetails", {})
            .get("relatedPlaylists", {})
            .get("uploads")
        )
        if not uploads_playlist_id:
            logger.warning(f"Channel {channel_id} has no uploads playlist")
            return []

        playlist_data = await self._make_request(
            "playlistItems",
            {
                "part": "snippet",
                "playlistId": uploads_playlist_id,
                "maxResults": max(1, min(max_results, MAX_PAGE_SIZE)),
            }
        )
        video_ids = [
            item["snippet"]["resourceId"]["videoId"]
            for item in playlist_data.get("items", [])
            if item.get("snippet", {}).get("resourceId", {}).get("videoId")
        ]
        if not video_ids:
            return []

        videos_data = await self._make_request(
            "videos",
            {"part": "snippet,statistics,contentDetails", "id": ",".join(video_ids)}
        )

        videos = []
        for item in videos_data.get("items", []):
            try:
                videos.append(self._parse_video_item(item))
            except (KeyError, ValueError) as e:
                logger.warning(f"Failed to parse video {item.get('id', 'unknown')}: {e}")
                continue

        logger.info(f"Fetched {len(videos)} videos for channel {channel_id}")
        return videos

    async def get_channel_playlists(self, channel_id: str) -> List[PlaylistSummary]:
        """Get up to 50 public playlists of a channel"""
        data = await self._make_request(
            "playlists",
            {"part": "snippet,contentDetails", "channelId": channel_id, "maxResults": MAX_PAGE_SIZE}
        )

        playlists = []
        for item in data.get("items", []):
            try:
                playlists.append(self._parse_playlist_item(item))
            except (KeyError, ValueError) as e:
                logger.warning(f"Failed to parse playlist {item.get('id', 'unknown')}: {e}")
                continue
        return playlists

    # Transport

    async def _make_request(
        self,
        endpoint: str,
        params: Dict[str, Any],
        cost: int = DEFAULT_QUOTA_COST
    ) -> Dict[str, Any]:
        """Make an API request with quota tracking and retry logic"""
        if self.quota_used + cost > self.settings.max_daily_quota:
            raise QuotaExceededError(f"Would exceed daily quota limit ({self.settings.max_daily_quota})")

        request_params = dict(params, key=self.api_key)

        for attempt in range(MAX_ATTEMPTS):
            try:
                response = await self.client.get(f"{self.base_url}/{endpoint}", params=request_params)

                if response.status_code == 429:
                    if attempt == MAX_ATTEMPTS - 1:
                        raise RateLimitError("YouTube API rate limit exceeded")
                    retry_after = self._retry_after_seconds(response)
                    logger.warning(f"Rate limited. Waiting {retry_after} seconds...")
                    await asyncio.sleep(retry_after)
                    continue

                response.raise_for_status()
                data = response.json()

                self.quota_used += cost
                logger.debug(f"Quota used: {self.quota_used}/{self.settings.max_daily_quota}")
                return data

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 403:
                    error_reason = self._error_reason(e.response)

                    if "quotaExceeded" in error_reason:
                        raise QuotaExceededError("YouTube API daily quota exceeded")
                    raise YouTubeAPIError(f"YouTube API access forbidden: {error_reason}")

                if status == 404:
                    raise ChannelNotFoundError(f"YouTube API resource not found: {endpoint}")

                if 400 <= status < 500 or attempt == MAX_ATTEMPTS - 1:
                    raise YouTubeAPIError(f"YouTube API error: {status}")

                # Exponential backoff for retries
                await asyncio.sleep(2 ** attempt)

            except httpx.RequestError as e:
                if attempt == MAX_ATTEMPTS - 1:
                    raise YouTubeAPIError(f"Network error: {str(e)}")
                await asyncio.sleep(2 ** attempt)

        raise YouTubeAPIError(f"YouTube API request to {endpoint} failed after {MAX_ATTEMPTS} attempts")

    @staticmethod
    def _retry_after_seconds(response: httpx.Response) -> int:
        """Seconds to wait from a retry-after header; HTTP-date values fall back to the default"""
        try:
            return int(response.headers.get('retry-after', DEFAULT_RETRY_AFTER))
        except (TypeError, ValueError):
            return DEFAULT_RETRY_AFTER

    @staticmethod
    def _error_reason(response: httpx.Response) -> str:
        """First error reason from an API error body, or "" when the body has none"""
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            return ""
        if not isinstance(error_data, dict):
            return ""
        error = error_data.get("error")
        errors = error.get("errors") if isinstance(error, dict) else None
        if not errors or not isinstance(errors[0], dict):
            return ""
        return errors[0].get("reason", "")

    # Parsing

    def _parse_channel_item(self, item: Dict[str, Any]) -> ChannelSummary:
        """Parse YouTube API channel item into Pydantic model"""
        snippet = item["snippet"]
        branding = item.get("brandingSettings", {})

        return ChannelSummary(
            channel_id=item["id"],
            title=snippet["title"],
            description=snippet.get("description", ""),
            custom_url=snippet.get("customUrl"),
            country=snippet.get("country"),
            published_at=_parse_timestamp(snippet["publishedAt"]),
            thumbnails=ThumbnailSet.model_validate(snippet.get("thumbnails", {})),
            statistics={
                "view_count": item.get("statistics", {}).get("viewCount"),
                "subscriber_count": item.get("statistics", {}).get("subscriberCount"),
                "video_count": item.get("statistics", {}).get("videoCount"),
            },
            banner_url=branding.get("image", {}).get("bannerExternalUrl"),
            keywords=branding.get("channel", {}).get("keywords"),
        )

    def _parse_video_item(self, item: Dict[str, Any]) -> VideoRecord:
        """Parse YouTube API video item into Pydantic model"""
        snippet = item["snippet"]
        stats = item.get("statistics", {})
        content = item.get("contentDetails", {})

        return VideoRecord(
            video_id=item["id"],
            title=snippet["title"],
            description=snippet.get("description", ""),
            published_at=_parse_timestamp(snippet["publishedAt"]),
            thumbnails=ThumbnailSet.model_validate(snippet.get("thumbnails", {})),
            statistics={
                "view_count": stats.get("viewCount"),
                "like_count": stats.get("likeCount"),
                "comment_count": stats.get("commentCount"),
            },
            content_details={
                "duration": content.get("duration", ""),
                "definition": content.get("definition"),
            },
            tags=snippet.get("tags") or (),
            category_id=snippet.get("categoryId"),
            default_language=snippet.get("defaultLanguage"),
        )

    def _parse_playlist_item(self, item: Dict[str, Any]) -> PlaylistSummary:
        """Parse YouTube API playlist item into Pydantic model"""
        snippet = item["snippet"]
        return PlaylistSummary(
            playlist_id=item["id"],
            title=snippet["title"],
            description=snippet.get("description", ""),
            published_at=_parse_timestamp(snippet["publishedAt"]),
            thumbnails=ThumbnailSet.model_validate(snippet.get("thumbnails", {})),
            item_count=item.get("contentDetails", {}).get("itemCount", 0),
        )

    def get_quota_usage(self) -> int:
        """Get current quota usage for this session"""
        return self.quota_used

    def reset_quota_tracking(self) -> None:
        """Reset quota tracking (call at start of new day)"""
        self.quota_used = 0
        logger.info("Quota tracking reset")
