"""
Multi-threaded web crawler with a shared, deduplicating URL frontier.
"""
from webcrawler.config import CrawlerConfig, MAX_THREADS
from webcrawler.core import Crawler, CrawlStats
from webcrawler.fetcher import Fetcher, FetchResult, RequestsFetcher
from webcrawler.frontier import Frontier
from webcrawler.links import extract_links

__version__ = "1.0.0"
__all__ = [
    "Crawler",
    "CrawlerConfig",
    "CrawlStats",
    "Fetcher",
    "FetchResult",
    "Frontier",
    "MAX_THREADS",
    "RequestsFetcher",
    "extract_links",
]
