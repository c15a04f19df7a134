"""
Test configuration and fixtures for crawler tests
"""

import threading
import time

import pytest

from webcrawler.config import CrawlerConfig
from webcrawler.fetcher import FetchResult


class FakeFetcher:
    """In-memory fetcher: url -> html body. Unknown URLs are 404s."""

    def __init__(self, pages=None, errors=None, block=None):
        self.pages = dict(pages or {})
        self.errors = dict(errors or {})
        # URLs whose fetch waits on this event before returning
        self.block = set(block or ())
        self.release = threading.Event()
        self.calls = []
        self.close_calls = 0
        self._lock = threading.Lock()

    def fetch(self, url, timeout, user_agent):
        with self._lock:
            self.calls.append((url, timeout, user_agent))
        if url in self.block:
            self.release.wait(5)
        if url in self.errors:
            error = self.errors[url]
            if isinstance(error, Exception):
                raise error
            return FetchResult(url=url, error=error)
        if url not in self.pages:
            return FetchResult(url=url, status_code=404, error="HTTP 404")
        return FetchResult(url=url, status_code=200, body=self.pages[url].encode("utf-8"))

    def close(self):
        self.close_calls += 1

    def fetched_urls(self):
        with self._lock:
            return [c[0] for c in self.calls]


def wait_until(predicate, timeout=5.0, interval=0.01):
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def fast_config():
    """Config with no politeness delay and a short timeout"""
    return CrawlerConfig(thread_count=4, timeout_s=5.0, politeness_delay_s=0)


@pytest.fixture
def make_fetcher():
    return FakeFetcher
