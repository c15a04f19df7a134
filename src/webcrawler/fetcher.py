"""
HTTP fetching for crawl workers.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter


@dataclass(slots=True)
class FetchResult:
    """Outcome of fetching a single URL."""
    url: str
    status_code: Optional[int] = None
    body: bytes = b""
    final_url: Optional[str] = None
    encoding: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded with the response charset, falling back to UTF-8."""
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class Fetcher(Protocol):
    """Anything that can fetch a URL for the crawler."""

    def fetch(self, url: str, timeout: float, user_agent: str) -> FetchResult:
        ...

    def close(self) -> None:
        ...


class RequestsFetcher:
    """
    Fetcher backed by ``requests``.

    Each thread gets its own Session, since sessions are not guaranteed to
    be thread-safe. Redirects are followed and the final body returned.
    After ``close()`` the fetcher can be used again; threads then get
    fresh sessions.
    """

    def __init__(self, pool_size: int = 10) -> None:
        self._pool_size = pool_size
        self._local = threading.local()
        self._lock = threading.Lock()
        self._sessions: List[requests.Session] = []
        self._generation = 0

    def _session(self) -> requests.Session:
        with self._lock:
            generation = self._generation
            if getattr(self._local, "generation", None) == generation:
                return self._local.session
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=self._pool_size, pool_maxsize=self._pool_size)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            self._sessions.append(session)
        self._local.session = session
        self._local.generation = generation
        return session

    @property
    def open_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def fetch(self, url: str, timeout: float, user_agent: str) -> FetchResult:
        try:
            resp = self._session().get(
                url,
                timeout=timeout,
                allow_redirects=True,
                headers={"User-Agent": user_agent},
            )
        except requests.RequestException as e:
            return FetchResult(url=url, error=f"{type(e).__name__}: {e}")

        result = FetchResult(
            url=url,
            status_code=resp.status_code,
            body=resp.content,
            final_url=resp.url,
            encoding=resp.encoding,
        )
        if not 200 <= resp.status_code < 300:
            result.error = f"HTTP {resp.status_code}"
        return result

    def close(self) -> None:
        """Close every session handed out so far. Safe to call repeatedly."""
        with self._lock:
            sessions, self._sessions = self._sessions, []
            self._generation += 1
        for session in sessions:
            session.close()

    def __enter__(self) -> "RequestsFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
