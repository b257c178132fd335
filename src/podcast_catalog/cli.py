"""
Command-line interface for the Podcast Catalog.

Usage:
    podcast-catalog serve                      # Run the REST API
    podcast-catalog add https://example.com/rss
    podcast-catalog feeds                      # List subscribed feeds
    podcast-catalog refresh FEED_ID            # Re-fetch one feed
    podcast-catalog refresh --all              # Re-fetch every feed
    podcast-catalog delete FEED_ID
    podcast-catalog episodes --tag ai --query llm
    podcast-catalog tag EPISODE_ID ai news     # Replace tags (none = clear)
    podcast-catalog tags                       # List all tags
"""

import argparse
import json
import logging
import sys

from podcast_catalog.catalog.service import CatalogService
from podcast_catalog.config import get_config
from podcast_catalog.errors import CatalogError
from podcast_catalog.ingestion.normalizer import format_duration_short
from podcast_catalog.models.entities import EpisodeFilters


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_serve(args, config, service):
    """Run the REST API with Flask's built-in server."""
    from podcast_catalog.api import create_app

    app = create_app(service=service, config=config)
    app.run(host=args.host or config.host, port=args.port or config.port)


def cmd_add(args, config, service):
    """Subscribe to a feed."""
    feed = service.add_feed(args.url)
    if args.output_json:
        _print_json(feed.to_dict())
        return
    print(f"Added '{feed.title}' ({feed.id}) with {len(feed.episodes)} episode(s)")


def cmd_feeds(args, config, service):
    """List subscribed feeds."""
    feeds = service.list_feeds()
    if args.output_json:
        _print_json({"feeds": [feed.to_dict() for feed in feeds]})
        return
    if not feeds:
        print("No feeds yet. Add one with: podcast-catalog add URL")
        return
    for feed in feeds:
        print(f"{feed.id}  {feed.title} ({feed.episode_count} episodes)")
        print(f"    {feed.url}  last fetched {feed.last_fetched_at}")


def cmd_refresh(args, config, service):
    """Refresh one feed or all of them."""
    if args.all:
        report = service.refresh_all()
        if args.output_json:
            print(report.to_json())
        else:
            print(f"Refreshed {len(report.refreshed)} feed(s)")
            for feed_id, error in report.errors.items():
                print(f"ERROR: {feed_id}: {error}")
        if report.errors:
            sys.exit(1)
        return

    if not args.feed_id:
        print("ERROR: Provide a FEED_ID or --all")
        sys.exit(1)

    feed = service.refresh_feed(args.feed_id)
    print(f"Refreshed '{feed.title}': {len(feed.episodes)} episode(s)")


def cmd_delete(args, config, service):
    """Delete a feed."""
    feed = service.delete_feed(args.feed_id)
    print(f"Deleted '{feed.title}' ({feed.id})")


def cmd_episodes(args, config, service):
    """List episodes across all feeds."""
    filters = EpisodeFilters(
        podcast_id=args.podcast_id,
        query=args.query,
        tag=args.tag,
    )
    episodes = service.list_episodes(filters)
    if args.output_json:
        _print_json({"episodes": [ep.to_dict() for ep in episodes]})
        return
    if not episodes:
        print("No episodes found.")
        return
    for ep in episodes:
        duration = format_duration_short(ep.duration)
        duration_info = f" [{duration}]" if duration else ""
        tags_info = f"  #{' #'.join(ep.tags)}" if ep.tags else ""
        print(f"- {ep.episode_title}{duration_info} -- {ep.podcast_title}")
        print(f"    {ep.pub_date}  id={ep.episode_id}{tags_info}")


def cmd_tag(args, config, service):
    """Replace an episode's tags."""
    tags = service.set_episode_tags(args.episode_id, list(args.tags))
    if tags:
        print(f"Tags for {args.episode_id}: {', '.join(tags)}")
    else:
        print(f"Cleared tags for {args.episode_id}")


def cmd_tags(args, config, service):
    """List all tags in use."""
    tags = service.list_tags()
    if args.output_json:
        _print_json({"tags": tags, "tagsByEpisodeId": service.tags_by_episode()})
        return
    for tag in tags:
        print(tag)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podcast-catalog",
        description="Podcast Catalog -- aggregate, search and tag podcast feeds",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def _json_flag(sub):
        sub.add_argument(
            "--output-json",
            action="store_true",
            default=False,
            help="Output result as JSON",
        )

    # serve
    sub_serve = subparsers.add_parser("serve", help="Run the REST API")
    sub_serve.add_argument("--host", default=None, help="Bind address")
    sub_serve.add_argument("--port", type=int, default=None, help="Port")
    sub_serve.set_defaults(func=cmd_serve)

    # add
    sub_add = subparsers.add_parser("add", help="Subscribe to a feed URL")
    sub_add.add_argument("url", help="RSS/Atom feed URL")
    _json_flag(sub_add)
    sub_add.set_defaults(func=cmd_add)

    # feeds
    sub_feeds = subparsers.add_parser("feeds", help="List subscribed feeds")
    _json_flag(sub_feeds)
    sub_feeds.set_defaults(func=cmd_feeds)

    # refresh
    sub_refresh = subparsers.add_parser("refresh", help="Re-fetch feeds")
    sub_refresh.add_argument("feed_id", nargs="?", default=None, help="Feed ID")
    sub_refresh.add_argument("--all", action="store_true", default=False, help="Refresh every feed")
    _json_flag(sub_refresh)
    sub_refresh.set_defaults(func=cmd_refresh)

    # delete
    sub_delete = subparsers.add_parser("delete", help="Delete a feed and its tags")
    sub_delete.add_argument("feed_id", help="Feed ID")
    sub_delete.set_defaults(func=cmd_delete)

    # episodes
    sub_episodes = subparsers.add_parser("episodes", help="List episodes")
    sub_episodes.add_argument("--podcast-id", default=None, help="Only this feed")
    sub_episodes.add_argument("--query", "-q", default=None, help="Search text")
    sub_episodes.add_argument("--tag", default=None, help="Only episodes with this tag")
    _json_flag(sub_episodes)
    sub_episodes.set_defaults(func=cmd_episodes)

    # tag
    sub_tag = subparsers.add_parser("tag", help="Replace an episode's tags")
    sub_tag.add_argument("episode_id", help="Episode ID")
    sub_tag.add_argument("tags", nargs="*", help="Tags (none clears them)")
    sub_tag.set_defaults(func=cmd_tag)

    # tags
    sub_tags = subparsers.add_parser("tags", help="List all tags")
    _json_flag(sub_tags)
    sub_tags.set_defaults(func=cmd_tags)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = get_config()
    setup_logging(args.log_level or config.log_level)
    service = CatalogService.from_config(config)

    try:
        args.func(args, config, service)
    except CatalogError as exc:
        print(f"ERROR: {exc.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
