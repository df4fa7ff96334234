"""Custom exceptions for the channel analytics system"""


class ChannelInsightsError(Exception):
    """Base exception for channel analytics system"""
    pass


class YouTubeAPIError(ChannelInsightsError):
    """Exception raised for YouTube Data API errors"""
    pass


class QuotaExceededError(YouTubeAPIError):
    """Exception raised when YouTube API quota is exceeded"""
    pass


class RateLimitError(YouTubeAPIError):
    """Exception raised when rate limits are exceeded"""
    pass


class ChannelNotFoundError(YouTubeAPIError):
    """Exception raised when a channel identifier cannot be resolved"""
    pass


class ConfigurationError(ChannelInsightsError):
    """Exception raised for configuration errors"""
    pass
