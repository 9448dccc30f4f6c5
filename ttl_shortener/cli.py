"""
Command-line interface for the TTL URL shortener.

Runs the same service the HTTP API uses, against the configured record store
(STORE_BACKEND and friends, see config.py).

Usage:
    ttl-shortener shorten <url> [--expiry MS]
    ttl-shortener batch <url> [<url> ...] [--expiry MS]
    ttl-shortener active
    ttl-shortener recent
    ttl-shortener health
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from config import Config
from .common.logging_config import setup_logging
from .exceptions import ShortenerError, StoreError
from .factory import build_service, start_service
from .service import UrlShortenerService


class ShortenerCLI:
    """Command-line interface for URL shortener."""

    def __init__(self, config: Config, verbose: bool = False):
        """Initialize CLI."""
        self.config = config
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[UrlShortenerService] = None

    async def initialize(self):
        """Initialize record store and service."""
        self.service = build_service(self.config, self.logger)
        await start_service(self.service, self.logger)

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    @staticmethod
    def _emit(payload: dict, error: bool = False) -> int:
        print(json.dumps(payload, indent=2, default=str), file=sys.stderr if error else sys.stdout)
        return 1 if error else 0

    async def shorten(self, url: str, expiry: Optional[str] = None) -> int:
        """Shorten a URL."""
        result = await self.service.upsert(url, caller_expiry=expiry)
        return self._emit({
            "success": True,
            "shortCode": result.short_code,
            "action": result.action.value,
            "originalUrl": result.record.original_url,
        })

    async def batch(self, urls: List[str], expiry: Optional[str] = None) -> int:
        """Shorten several URLs."""
        results = await self.service.upsert_batch(urls, caller_expiry=expiry)
        return self._emit({
            "success": True,
            "results": [
                {"link": r.link, "shortCode": r.short_code, "action": r.tag}
                for r in results
            ],
        })

    async def active(self) -> int:
        """Show active records grouped by creation date."""
        stats = await self.service.active_stats()
        return self._emit({
            "success": True,
            "total": stats.total,
            "groups": [{"date": g.date, "count": g.count} for g in stats.groups],
        })

    async def recent(self) -> int:
        """Show the most recent records."""
        recent = await self.service.recent_urls()
        return self._emit({
            "success": True,
            "recent": [{"shortCode": code, "originalUrl": url} for code, url in recent],
        })

    async def health(self) -> int:
        """Check store health."""
        health = await self.service.health_check()
        code = self._emit({"success": health["overall"], "health": health}, error=not health["overall"])
        return code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ttl-shortener",
        description="TTL URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL with the default TTL
  %(prog)s shorten https://example.com/long/url

  # Shorten with a 10 minute TTL
  %(prog)s shorten https://example.com/long/url --expiry 600000

  # Shorten several URLs at once
  %(prog)s batch https://a.example https://b.example

  # Reports
  %(prog)s active
  %(prog)s recent
        """
    )

    parser.add_argument(
        "--store",
        choices=["memory", "pocketbase", "postgres"],
        help="Record store backend (default: from STORE_BACKEND env)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--expiry", help="TTL in milliseconds")

    batch_parser = subparsers.add_parser("batch", help="Shorten several URLs")
    batch_parser.add_argument("urls", nargs="+", help="URLs to shorten")
    batch_parser.add_argument("--expiry", help="TTL in milliseconds")

    subparsers.add_parser("active", help="Active records per creation date")
    subparsers.add_parser("recent", help="Most recently created records")
    subparsers.add_parser("health", help="Check record store health")

    return parser


async def main(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if config is None:
        config = Config(store_backend=args.store) if args.store else Config()

    cli = ShortenerCLI(config=config, verbose=args.verbose)

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url, args.expiry)
        elif args.command == "batch":
            return await cli.batch(args.urls, args.expiry)
        elif args.command == "active":
            return await cli.active()
        elif args.command == "recent":
            return await cli.recent()
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    except StoreError as e:
        return ShortenerCLI._emit({"success": False, "error": f"Record store error: {e}"}, error=True)
    except ShortenerError as e:
        return ShortenerCLI._emit({"success": False, "error": str(e)}, error=True)
    finally:
        await cli.cleanup()


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
