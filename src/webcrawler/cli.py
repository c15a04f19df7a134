"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional
from urllib.parse import urlparse

from webcrawler.config import (
    DEFAULT_POLITENESS_DELAY_S,
    DEFAULT_THREADS,
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    MAX_THREADS,
    CrawlerConfig,
)
from webcrawler.core import Crawler, CrawlStats

LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def http_url(value: str) -> str:
    """argparse type: an absolute http(s) URL."""
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise argparse.ArgumentTypeError(f"not an http(s) URL: {value!r}")
    return value.strip()


def thread_count(value: str) -> int:
    """argparse type: a worker count between 1 and MAX_THREADS."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if not 1 <= n <= MAX_THREADS:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_THREADS}")
    return n


def positive_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if f <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return f


def non_negative_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if f < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return f


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webcrawler",
        description="Crawl the web from a seed URL with a pool of worker threads.",
    )
    parser.add_argument("seed_url", type=http_url, help="Seed URL (e.g. https://example.com)")
    parser.add_argument(
        "--threads", type=thread_count, default=DEFAULT_THREADS,
        help=f"Number of worker threads, 1-{MAX_THREADS} (default: {DEFAULT_THREADS})",
    )
    parser.add_argument(
        "--duration", type=positive_float,
        help="Stop after this many seconds (default: run until no URLs are left)",
    )
    parser.add_argument(
        "--timeout", type=positive_float, default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument(
        "--delay", type=non_negative_float, default=DEFAULT_POLITENESS_DELAY_S,
        help=f"Pause per worker between requests in seconds (default: {DEFAULT_POLITENESS_DELAY_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--interval", type=positive_float, default=1.0,
        help="Seconds between progress updates (default: 1)",
    )
    parser.add_argument("--quiet", action="store_true", help="Hide progress and summary")
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )
    return parser


def setup_logging(level: str) -> None:
    """Send log records to stderr and quiet the HTTP stack."""
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_progress(elapsed: float, pages: int, queued: int) -> None:
    """Print real-time progress to stderr."""
    progress = f"\r\033[K[{elapsed:6.1f}s] Pages processed: {pages} | Queue: {queued}"
    sys.stderr.write(progress)
    sys.stderr.flush()


def print_summary(stats: CrawlStats, elapsed: float) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("\n" + "=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Pages processed:        {stats.pages_processed}\n")
    sys.stderr.write(f"URLs discovered:        {stats.discovered}\n")
    sys.stderr.write(f"Failed fetches:         {stats.fetch_failures}\n")
    sys.stderr.write(f"Elapsed:                {elapsed:.1f}s\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            label = "Connection errors" if error_type == "connection_error" else f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def run_crawl(
    crawler: Crawler,
    seed_url: str,
    duration: Optional[float],
    interval: float,
    verbose: bool,
) -> CrawlStats:
    """
    Run a crawl until it runs out of URLs, duration expires or the user hits Ctrl-C.

    The crawler is always stopped before returning.
    """
    started = time.monotonic()
    deadline = None if duration is None else started + duration
    crawler.start(seed_url)
    try:
        while True:
            wait_for = interval
            if deadline is not None:
                wait_for = max(0.0, min(interval, deadline - time.monotonic()))
            exhausted = crawler.wait(wait_for)
            if verbose:
                print_progress(time.monotonic() - started, crawler.pages_processed(), crawler.queue_size())
            if exhausted:
                logger.info("No URLs left to crawl")
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping crawl")
    finally:
        crawler.stop()
    return crawler.stats()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = CrawlerConfig(
            thread_count=args.threads,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            politeness_delay_s=args.delay,
        )
    except ValueError as e:
        parser.error(str(e))
    crawler = Crawler(config)

    if not args.quiet:
        sys.stderr.write(f"Starting crawl from: {args.seed_url}\n")
        sys.stderr.write(f"Threads: {args.threads}\n")
        if args.duration:
            sys.stderr.write(f"Duration: {args.duration:g}s\n")
        sys.stderr.write("\n")

    started = time.monotonic()
    stats = run_crawl(crawler, args.seed_url, args.duration, args.interval, verbose=not args.quiet)

    if not args.quiet:
        print_summary(stats, time.monotonic() - started)

    return 0
