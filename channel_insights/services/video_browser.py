"""Search and ordering for the video table"""

from enum import Enum
from typing import Callable, Dict, List, Sequence, Union

from ..models.channel_models import VideoRecord
from .engagement_calculator import as_utc


class SortField(str, Enum):
    """Columns the video table can be ordered by"""
    PUBLISHED_AT = "published_at"
    VIEWS = "views"
    LIKES = "likes"
    COMMENTS = "comments"


_SORT_KEYS: Dict[SortField, Callable[[VideoRecord], float]] = {
    SortField.PUBLISHED_AT: lambda video: as_utc(video.published_at).timestamp(),
    SortField.VIEWS: lambda video: video.statistics.views,
    SortField.LIKES: lambda video: video.statistics.likes,
    SortField.COMMENTS: lambda video: video.statistics.comments,
}


def filter_videos(videos: Sequence[VideoRecord], search_term: str = "") -> List[VideoRecord]:
    """Videos whose title or description contains the term, ignoring case"""
    term = (search_term or "").strip().lower()
    if not term:
        return list(videos)
    return [
        video for video in videos
        if term in video.title.lower() or term in video.description.lower()
    ]


def sort_videos(
    videos: Sequence[VideoRecord],
    field: Union[SortField, str] = SortField.PUBLISHED_AT,
    descending: bool = True
) -> List[VideoRecord]:
    """
    Order videos by a table column. Unknown counts sort as zero.

    Raises:
        ValueError: If the field is not a sortable column
    """
    key = _SORT_KEYS[SortField(field)]
    return sorted(videos, key=key, reverse=descending)
