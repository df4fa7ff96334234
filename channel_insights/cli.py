"""Command-line interface for YouTube channel analytics"""

import asyncio
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .services.dashboard_service import build_dashboard_report, create_dashboard_service, newest_first
from .services.number_formatter import format_number
from .services.video_browser import SortField
from .models.channel_models import ChannelSummary, PlaylistSummary, VideoRecord
from .models.metrics_models import DashboardReport
from .core.settings import get_settings
from .core.exceptions import (
    ChannelNotFoundError, ConfigurationError, QuotaExceededError, YouTubeAPIError
)
from .core.logging import setup_logging, get_logger

logger = get_logger(__name__)


class ChannelInsightsCLI:
    """Command-line interface for channel analytics"""

    def __init__(self):
        try:
            self.settings = get_settings()
            logger.debug(f"CLI initialized - Environment: {self.settings.environment}")
        except Exception as e:
            print(f"❌ Configuration error: {e}")
            print("💡 Please check your .env file and ensure all required variables are set.")
            sys.exit(1)

    def create_parser(self) -> argparse.ArgumentParser:
        """Create command-line argument parser"""
        parser = argparse.ArgumentParser(
            prog="channel-insights",
            description="YouTube channel analytics dashboard",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        resolve_parser = subparsers.add_parser(
            'resolve',
            help='Resolve a channel handle, URL or name to its channel ID'
        )
        resolve_parser.add_argument('channel', type=str, help='Channel ID, @handle, URL or name')

        fetch_parser = subparsers.add_parser(
            'fetch',
            help='Fetch channel, video and playlist records and save them as JSON'
        )
        fetch_parser.add_argument('channel', type=str, help='Channel ID, @handle, URL or name')
        fetch_parser.add_argument(
            '--max-results',
            type=int,
            default=None,
            help='Number of recent uploads to fetch (default: settings max_videos)'
        )
        fetch_parser.add_argument(
            '--output',
            type=str,
            default="channel_data.json",
            help='Output file for fetched records (default: channel_data.json)'
        )

        report_parser = subparsers.add_parser(
            'report',
            help='Build the analytics dashboard for a channel'
        )
        report_parser.add_argument(
            'channel',
            type=str,
            nargs='?',
            help='Channel to fetch live (omit when using --input)'
        )
        report_parser.add_argument(
            '--input',
            type=str,
            help='Build the report from a file saved by the fetch command'
        )
        report_parser.add_argument(
            '--max-results',
            type=int,
            default=None,
            help='Number of recent uploads to analyze when fetching live'
        )
        report_parser.add_argument(
            '--search',
            type=str,
            default="",
            help='Only list videos whose title or description contains this text'
        )
        report_parser.add_argument(
            '--sort',
            type=str,
            choices=[field.value for field in SortField],
            default=SortField.PUBLISHED_AT.value,
            help='Column to order the video table by (default: published_at)'
        )
        report_parser.add_argument(
            '--ascending',
            action='store_true',
            help='Order the video table from low to high'
        )
        report_parser.add_argument(
            '--format',
            type=str,
            choices=['json', 'text'],
            default='text',
            help='Output format (default: text)'
        )
        report_parser.add_argument(
            '--output',
            type=str,
            help='Save the report to a file instead of printing it'
        )

        return parser

    async def resolve_command(self, args) -> None:
        """Execute resolve command"""
        async with create_dashboard_service() as service:
            channel_id = await service.get_youtube_client().resolve_channel_id(args.channel)
        print(channel_id)

    async def fetch_command(self, args) -> None:
        """Execute fetch command"""
        print(f"🚀 Fetching channel data for '{args.channel}'...")

        async with create_dashboard_service() as service:
            records = await service.fetch_channel_records(args.channel, args.max_results)
            quota = service.youtube_client.get_quota_usage()

        self._save_records_to_file(records, args.output)

        print("\n✅ Fetch complete!")
        print(f"   • Channel: {records['channel'].title}")
        print(f"   • Videos: {len(records['videos'])}")
        print(f"   • Playlists: {len(records['playlists'])}")
        print(f"   • Quota used: {quota}")
        print(f"   • Output saved to: {args.output}")

    async def report_command(self, args) -> None:
        """Execute report command"""
        if args.input:
            records = self._load_records_from_file(args.input)
            report = build_dashboard_report(
                records["channel"],
                records["videos"],
                records["playlists"],
                tz=self.settings.timezone,
                search_term=args.search,
                sort_field=args.sort,
                descending=not args.ascending,
            )
        elif args.channel:
            async with create_dashboard_service() as service:
                report = await service.build_dashboard(
                    args.channel,
                    args.max_results,
                    search_term=args.search,
                    sort_field=args.sort,
                    descending=not args.ascending,
                )
        else:
            print("❌ Provide a channel or --input file")
            sys.exit(2)

        if args.format == 'json':
            output = report.model_dump_json(indent=2)
        else:
            output = self.render_text_report(report)

        if args.output:
            Path(args.output).write_text(output, encoding='utf-8')
            print(f"💾 Report saved to: {args.output}")
        else:
            print(output)

    def _save_records_to_file(self, records: Dict[str, Any], filename: str) -> None:
        """Save fetched records to JSON file"""
        data = {
            "channel": records["channel"].model_dump(mode='json'),
            "videos": [video.model_dump(mode='json') for video in records["videos"]],
            "playlists": [playlist.model_dump(mode='json') for playlist in records["playlists"]],
        }
        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved {len(data['videos'])} videos to {filename}")

    def _load_records_from_file(self, filename: str) -> Dict[str, Any]:
        """Load records saved by the fetch command"""
        with open(filename, 'r', encoding='utf-8') as f:
            data = json.load(f)

        videos = [VideoRecord.model_validate(item) for item in data.get("videos", [])]
        return {
            "channel": ChannelSummary.model_validate(data["channel"]),
            "videos": newest_first(videos),
            "playlists": [PlaylistSummary.model_validate(item) for item in data.get("playlists", [])],
        }

    def render_text_report(self, report: DashboardReport) -> str:
        """Render a dashboard report as plain text"""
        overview = report.overview
        aggregate = report.aggregate
        lines = [
            f"📺 {overview.title} ({overview.channel_id})",
            f"   Subscribers: {overview.subscribers_display}   Views: {overview.views_display}   "
            f"Videos: {overview.videos_display}",
            f"   Avg views/video: {format_number(overview.average_views_per_video)}   "
            f"Channel age: {overview.channel_age}",
            "",
            f"📈 Engagement ({aggregate.video_count} recent videos)",
            f"   Avg engagement rate: {aggregate.average_engagement_rate:.2f}%",
            f"   Avg like rate: {aggregate.average_like_rate:.2f}%",
            f"   Avg comment rate: {aggregate.average_comment_rate:.3f}%",
            f"   Consistency: {aggregate.consistency:.1f}%",
            f"   Growth rate: {aggregate.growth_rate:+.1f}%",
            f"   Avg views/day: {format_number(round(aggregate.average_views_per_day))}",
            "",
            "🏆 Performance tiers",
            f"   Viral: {aggregate.performance_tiers.viral}   High: {aggregate.performance_tiers.high}   "
            f"Average: {aggregate.performance_tiers.average}   "
            f"Below average: {aggregate.performance_tiers.below_average}",
            "",
            "🎬 Content",
            f"   Avg duration: {aggregate.average_duration_minutes:.1f}m",
            f"   Short: {aggregate.content_length.short}   Medium: {aggregate.content_length.medium}   "
            f"Long: {aggregate.content_length.long}",
            f"   HD: {aggregate.quality.hd}   SD: {aggregate.quality.sd}",
        ]

        if aggregate.top_tags:
            tags = ", ".join(f"{tag.tag} ({tag.count})" for tag in aggregate.top_tags)
            lines.append(f"   Top tags: {tags}")

        busiest_hour = max(aggregate.upload_histograms.by_hour, key=lambda bucket: bucket.uploads, default=None)
        busiest_day = max(aggregate.upload_histograms.by_day, key=lambda bucket: bucket.uploads, default=None)
        if aggregate.video_count and busiest_hour and busiest_day:
            lines.append(f"   Most uploads: {busiest_day.day}s around {busiest_hour.hour}:00")

        if aggregate.top_engagement_videos:
            lines.append("")
            lines.append("🔥 Top engagement")
            for i, video in enumerate(aggregate.top_engagement_videos, 1):
                lines.append(
                    f"   {i}. {video.title[:50]} - {video.engagement_rate:.2f}% "
                    f"({format_number(video.views)} views)"
                )

        lines.append("")
        lines.append(f"🎞️  Videos ({len(report.videos)})")
        if not report.videos:
            lines.append("   No videos match")
        for video in report.videos:
            lines.append(
                f"   • {video.title[:50]} - {format_number(video.views)} views, "
                f"{format_number(video.likes)} likes, {format_number(video.comments)} comments, "
                f"{video.engagement_rate:.2f}%, {video.days_since_publish}d ago"
            )

        if report.playlists:
            lines.append("")
            lines.append(f"📂 Playlists: {len(report.playlists)}")

        return "\n".join(lines)


async def main():
    """Main CLI entry point"""
    setup_logging()
    cli = ChannelInsightsCLI()
    parser = cli.create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    try:
        if args.command == 'resolve':
            await cli.resolve_command(args)
        elif args.command == 'fetch':
            await cli.fetch_command(args)
        elif args.command == 'report':
            await cli.report_command(args)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        print("💡 Set YOUTUBE_API_KEY in your .env file, or use report --input.")
        sys.exit(1)
    except ChannelNotFoundError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except QuotaExceededError as e:
        print(f"⚠️  Quota exceeded: {e}")
        print("💡 Try reducing --max-results or wait for quota reset.")
        sys.exit(1)
    except YouTubeAPIError as e:
        print(f"❌ YouTube API error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        logger.exception("CLI command failed")
        sys.exit(1)


def run() -> None:
    """Console script entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    run()
