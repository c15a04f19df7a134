"""
RequestsFetcher Tests

The requests Session is mocked; no network access.
"""

import threading
from unittest.mock import MagicMock, patch

import requests

from webcrawler.fetcher import FetchResult, RequestsFetcher


def make_response(status=200, content=b"<html></html>", url="http://example.com/", encoding="utf-8"):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    resp.url = url
    resp.encoding = encoding
    return resp


@patch("webcrawler.fetcher.requests.Session")
def test_fetch_success(mock_session_cls):
    session = mock_session_cls.return_value
    session.get.return_value = make_response(url="http://example.com/final")

    fetcher = RequestsFetcher()
    result = fetcher.fetch("http://example.com/start", 30.0, "TestBot/1.0")

    session.get.assert_called_once_with(
        "http://example.com/start",
        timeout=30.0,
        allow_redirects=True,
        headers={"User-Agent": "TestBot/1.0"},
    )
    assert result.ok
    assert result.status_code == 200
    assert result.final_url == "http://example.com/final"
    assert result.text == "<html></html>"


@patch("webcrawler.fetcher.requests.Session")
def test_fetch_non_success_status(mock_session_cls):
    mock_session_cls.return_value.get.return_value = make_response(status=503)

    result = RequestsFetcher().fetch("http://example.com", 30.0, "TestBot/1.0")

    assert not result.ok
    assert result.status_code == 503
    assert result.error == "HTTP 503"


@patch("webcrawler.fetcher.requests.Session")
def test_fetch_network_error(mock_session_cls):
    mock_session_cls.return_value.get.side_effect = requests.ConnectionError("refused")

    result = RequestsFetcher().fetch("http://example.com", 30.0, "TestBot/1.0")

    assert not result.ok
    assert result.status_code is None
    assert result.error.startswith("ConnectionError")
    assert "refused" in result.error


@patch("webcrawler.fetcher.requests.Session")
def test_fetch_timeout(mock_session_cls):
    mock_session_cls.return_value.get.side_effect = requests.Timeout("read timed out")

    result = RequestsFetcher().fetch("http://example.com", 0.1, "TestBot/1.0")

    assert not result.ok
    assert result.error.startswith("Timeout")


@patch("webcrawler.fetcher.requests.Session")
def test_one_session_per_thread(mock_session_cls):
    mock_session_cls.side_effect = lambda: MagicMock(get=MagicMock(return_value=make_response()))
    fetcher = RequestsFetcher()

    fetcher.fetch("http://example.com/1", 1, "ua")
    fetcher.fetch("http://example.com/2", 1, "ua")
    assert fetcher.open_sessions == 1

    threads = [
        threading.Thread(target=fetcher.fetch, args=("http://example.com/t", 1, "ua"))
        for _ in range(3)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert fetcher.open_sessions == 4
    assert mock_session_cls.call_count == 4


@patch("webcrawler.fetcher.requests.Session")
def test_close_closes_sessions_and_allows_reuse(mock_session_cls):
    sessions = []

    def new_session():
        s = MagicMock(get=MagicMock(return_value=make_response()))
        sessions.append(s)
        return s

    mock_session_cls.side_effect = new_session

    with RequestsFetcher() as fetcher:
        fetcher.fetch("http://example.com", 1, "ua")
    sessions[0].close.assert_called_once()
    assert fetcher.open_sessions == 0

    fetcher.close()
    sessions[0].close.assert_called_once()

    # A closed fetcher hands out a fresh session
    fetcher.fetch("http://example.com", 1, "ua")
    assert len(sessions) == 2
    assert fetcher.open_sessions == 1


def test_fetch_result_text_decoding():
    assert FetchResult(url="u", body="häj".encode("latin-1"), encoding="latin-1").text == "häj"
    assert FetchResult(url="u", body=b"\xff ok").text == "� ok"
    assert FetchResult(url="u", body=b"ok", encoding="no-such-codec").text == "ok"


def test_fetch_result_ok():
    assert FetchResult(url="u", status_code=204).ok
    assert not FetchResult(url="u", status_code=301).ok
    assert not FetchResult(url="u").ok
    assert not FetchResult(url="u", status_code=200, error="boom").ok
