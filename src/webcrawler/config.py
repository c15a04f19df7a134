"""
Crawler configuration and its validated defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

# Workers are network-bound, so several threads per CPU is fine; cap it anyway
MAX_THREADS: int = min(64, (os.cpu_count() or 1) * 8)

DEFAULT_THREADS = 4
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_USER_AGENT = "webcrawler/1.0"
DEFAULT_POLITENESS_DELAY_S = 0.1


@dataclass(slots=True)
class CrawlerConfig:
    """
    Settings for a Crawler.

    Attributes:
        thread_count: Number of worker threads (1..MAX_THREADS).
        timeout_s: Per-request HTTP timeout in seconds.
        user_agent: User-Agent header sent with every request.
        politeness_delay_s: Pause each worker takes after every URL it handles.
    """
    thread_count: int = DEFAULT_THREADS
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    politeness_delay_s: float = DEFAULT_POLITENESS_DELAY_S

    def __post_init__(self) -> None:
        if isinstance(self.thread_count, bool) or not isinstance(self.thread_count, int):
            raise ValueError(f"thread_count must be an integer, got {self.thread_count!r}")
        if not 1 <= self.thread_count <= MAX_THREADS:
            raise ValueError(f"thread_count must be between 1 and {MAX_THREADS}, got {self.thread_count}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive, got {self.timeout_s}")
        if self.politeness_delay_s < 0:
            raise ValueError(f"politeness_delay_s must not be negative, got {self.politeness_delay_s}")
        if not self.user_agent or not self.user_agent.strip():
            raise ValueError("user_agent must not be empty")
