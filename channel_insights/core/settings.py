"""Application settings and configuration management"""

import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment-specific .env file
environment = os.getenv('ENVIRONMENT', 'development')
env_file = f'.env.{environment}'
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    load_dotenv()  # Fallback to .env


class Settings(BaseSettings):
    """
    Application configuration settings using Pydantic Settings.

    Environment variables will automatically override default values.
    """

    # YouTube Data API Settings
    youtube_api_key: str = Field(
        default="",
        alias="YOUTUBE_API_KEY",
        description="YouTube Data API key from Google Cloud Console"
    )
    max_daily_quota: int = Field(
        default=8000,
        description="Maximum YouTube API quota to use per day"
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds"
    )

    # Analytics Settings
    max_videos: int = Field(
        default=50,
        ge=1,
        le=50,
        description="Number of recent uploads fetched per channel"
    )
    growth_window: int = Field(
        default=10,
        ge=1,
        description="Number of videos in each window of the growth rate comparison"
    )
    tag_limit: int = Field(
        default=10,
        ge=1,
        description="Number of tags kept in the tag frequency ranking"
    )
    top_videos_limit: int = Field(
        default=5,
        ge=1,
        description="Number of videos kept in the top engagement/interaction lists"
    )
    display_timezone: str = Field(
        default="UTC",
        alias="DISPLAY_TIMEZONE",
        description="IANA timezone used for upload-time histograms"
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_to_file: bool = Field(
        default=False,
        alias="LOG_TO_FILE",
        description="Write rotating log files in addition to console output"
    )
    log_dir: str = Field(
        default="logs",
        alias="LOG_DIR",
        description="Directory for rotating log files"
    )

    # Environment and Runtime Settings
    environment: str = Field(
        default="development",
        description="Runtime environment (development, staging, production)"
    )

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of {valid_levels}')
        return v.upper()

    @field_validator('environment')
    def validate_environment(cls, v):
        """Validate environment is recognized"""
        valid_envs = ['development', 'staging', 'production']
        if v not in valid_envs:
            raise ValueError(f'environment must be one of {valid_envs}')
        return v

    @field_validator('display_timezone')
    def validate_display_timezone(cls, v):
        """Validate timezone is a known IANA zone"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f'display_timezone must be an IANA timezone, got {v!r}')
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == 'development'

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == 'production'

    @property
    def timezone(self) -> ZoneInfo:
        """Timezone object for display_timezone"""
        return ZoneInfo(self.display_timezone)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "ignore",
        "populate_by_name": True
    }


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings instance.

    Returns:
        Settings: Application configuration settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

def reload_settings() -> Settings:
    """
    Force reload of settings from environment variables.

    Returns:
        Settings: Fresh application configuration settings
    """
    global _settings
    _settings = None
    return get_settings()
