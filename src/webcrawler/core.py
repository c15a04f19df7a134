"""
Core crawling logic: the worker pool and its start/stop lifecycle.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from webcrawler.config import CrawlerConfig
from webcrawler.fetcher import Fetcher, FetchResult, RequestsFetcher
from webcrawler.frontier import Frontier
from webcrawler.links import extract_links

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during a crawl."""
    pages_processed: int = 0
    fetch_failures: int = 0
    discovered: int = 0
    started_at: Optional[str] = None
    stopped_at: Optional[str] = None
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, status_code: Optional[int]) -> None:
        """Record a failed fetch by status code category."""
        self.fetch_failures += 1
        if status_code is None:
            self.error_counts["connection_error"] += 1
        else:
            self.error_counts[str(status_code)] += 1

    def record_page(self) -> None:
        self.pages_processed += 1


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class Crawler:
    """
    Multi-threaded crawler.

    ``start()`` seeds the frontier and launches the workers, then returns.
    Each worker pops a URL, fetches it, pushes the links it finds and
    sleeps for the politeness delay. ``stop()`` closes the frontier and
    joins every worker before returning.

    Starting a running crawler raises RuntimeError; stopping a stopped one
    does nothing. A crawler can be started again after ``stop()``, and
    begins from an empty frontier.
    """

    def __init__(self, config: Optional[CrawlerConfig] = None, fetcher: Optional[Fetcher] = None) -> None:
        self.config = config or CrawlerConfig()
        self.fetcher: Fetcher = fetcher if fetcher is not None else RequestsFetcher(
            pool_size=self.config.thread_count
        )
        self.frontier = Frontier()
        self._stats = CrawlStats()
        self._stats_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._running = threading.Event()
        self._stopping = threading.Event()
        self._workers: List[threading.Thread] = []

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def start(self, seed_url: str) -> None:
        """Seed the frontier with seed_url and launch the worker threads."""
        if not seed_url or not seed_url.strip():
            raise ValueError("seed URL must not be empty")
        seed_url = seed_url.strip()

        with self._lifecycle_lock:
            if self._running.is_set():
                raise RuntimeError("Crawler is already running")

            self.frontier.reset()
            with self._stats_lock:
                self._stats = CrawlStats(started_at=utc_now_iso())
            self.frontier.push(seed_url)
            self._stopping.clear()
            self._running.set()

            self._workers = [
                threading.Thread(
                    target=self._worker_loop,
                    name=f"crawler-worker-{i + 1}",
                    daemon=True,
                )
                for i in range(self.config.thread_count)
            ]
            for worker in self._workers:
                worker.start()

        logger.info("Crawl started from %s with %d workers", seed_url, self.config.thread_count)

    def stop(self) -> None:
        """Close the frontier, wait for every worker to exit and release the fetcher."""
        with self._lifecycle_lock:
            if not self._running.is_set():
                return
            self._running.clear()
            self._stopping.set()
            self.frontier.finish()

            for worker in self._workers:
                worker.join()
            self._workers = []

            self.fetcher.close()
            with self._stats_lock:
                self._stats.stopped_at = utc_now_iso()

        logger.info("Crawl stopped after %d pages", self.pages_processed())

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the crawl runs out of URLs.

        Returns True when nothing is pending or being processed, False if
        timeout expired first. Does not stop the workers.
        """
        return self.frontier.wait_idle(timeout)

    def pages_processed(self) -> int:
        with self._stats_lock:
            return self._stats.pages_processed

    def queue_size(self) -> int:
        return self.frontier.size()

    def stats(self) -> CrawlStats:
        """Snapshot of the current statistics."""
        with self._stats_lock:
            s = self._stats
            return CrawlStats(
                pages_processed=s.pages_processed,
                fetch_failures=s.fetch_failures,
                discovered=self.frontier.discovered_count(),
                started_at=s.started_at,
                stopped_at=s.stopped_at,
                error_counts=defaultdict(int, s.error_counts),
            )

    def _worker_loop(self) -> None:
        while self._running.is_set():
            url, ok = self.frontier.pop()
            if not ok:
                break
            try:
                self._process(url)
            finally:
                self.frontier.task_done()
            self._politeness_pause()
        logger.debug("%s exiting", threading.current_thread().name)

    def _process(self, url: str) -> None:
        result = self._fetch(url)
        if not result.ok:
            logger.warning("Failed to fetch %s: %s", url, result.error or f"HTTP {result.status_code}")
            with self._stats_lock:
                self._stats.record_error(result.status_code)
            return

        links = extract_links(result.text, result.final_url or url)
        with self._stats_lock:
            self._stats.record_page()

        new_links = sum(1 for link in links if self.frontier.push(link))
        logger.debug("Fetched %s (%s, +%d new links)", url, result.status_code, new_links)

    def _fetch(self, url: str) -> FetchResult:
        try:
            return self.fetcher.fetch(url, self.config.timeout_s, self.config.user_agent)
        except Exception as e:
            logger.exception("Fetcher raised for %s", url)
            return FetchResult(url=url, error=f"{type(e).__name__}: {e}")

    def _politeness_pause(self) -> None:
        delay = self.config.politeness_delay_s
        if delay <= 0:
            return
        # stop() cuts the pause short
        self._stopping.wait(delay)
