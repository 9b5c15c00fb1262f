"""Tests for HTTP client retry logic and the player fetcher."""

import asyncio

from player_cipher.core.http_client import (
    _MAX_BACKOFF,
    _NETWORK_ERRORS,
    _RETRYABLE_STATUS_CODES,
    HTTPClient,
    HttpPlayerFetcher,
)


class TestRetryConfig:
    def test_retryable_status_codes(self):
        assert 429 in _RETRYABLE_STATUS_CODES
        assert 503 in _RETRYABLE_STATUS_CODES
        # Client errors (except 429) are NOT retried
        assert 403 not in _RETRYABLE_STATUS_CODES
        assert 404 not in _RETRYABLE_STATUS_CODES

    def test_max_backoff_is_capped(self):
        assert _MAX_BACKOFF == 30.0

    def test_network_error_types(self):
        error_names = {cls.__name__ for cls in _NETWORK_ERRORS}
        assert {"TimeoutException", "ConnectError", "ReadError", "WriteError"} <= error_names


class TestBackoff:
    def test_attempt_0(self):
        wait = HTTPClient._backoff(0)
        assert 1.0 <= wait <= 2.0  # 2^0 + jitter(0,1)

    def test_caps_at_max(self):
        assert HTTPClient._backoff(100) <= _MAX_BACKOFF


class TestClientInit:
    def test_default_headers_set(self):
        client = HTTPClient()
        assert "User-Agent" in client._default_headers

    def test_custom_headers_override(self):
        client = HTTPClient(headers={"User-Agent": "test-agent"})
        assert client._default_headers["User-Agent"] == "test-agent"

    def test_explicit_retry_count(self):
        assert HTTPClient(max_retries=0)._max_retries == 0


class _RecordingClient:
    def __init__(self, proxy):
        self.proxy = proxy
        self.requests = []
        self.closed = False

    async def get_text(self, url, **kwargs):
        self.requests.append((url, kwargs))
        return "var a=1;"

    async def close(self):
        self.closed = True


class TestHttpPlayerFetcher:
    def _fetcher(self, monkeypatch):
        monkeypatch.setattr(
            "player_cipher.core.http_client.HTTPClient",
            lambda proxy=None: _RecordingClient(proxy),
        )
        return HttpPlayerFetcher(base_url="https://www.youtube.com")

    def test_relative_player_made_absolute(self, monkeypatch):
        fetcher = self._fetcher(monkeypatch)
        body = asyncio.run(fetcher("/s/player/abc/base.js", {}))
        assert body == "var a=1;"
        client = fetcher._clients[None]
        assert client.requests[0][0] == "https://www.youtube.com/s/player/abc/base.js"

    def test_options_forwarded(self, monkeypatch):
        fetcher = self._fetcher(monkeypatch)
        options = {"headers": {"X-Test": "1"}, "cookies": {"SID": "a"}, "timeout": 5}
        asyncio.run(fetcher("https://cdn.test/base.js", options))
        _, kwargs = fetcher._clients[None].requests[0]
        assert kwargs == {"headers": {"X-Test": "1"}, "cookies": {"SID": "a"}, "timeout": 5}

    def test_one_client_per_proxy(self, monkeypatch):
        fetcher = self._fetcher(monkeypatch)

        async def run():
            await fetcher("/a.js", {"proxy": "http://p1:8080"})
            await fetcher("/b.js", {"proxy": "http://p1:8080"})
            await fetcher("/c.js", {"proxy": "http://p2:8080"})

        asyncio.run(run())
        assert set(fetcher._clients) == {"http://p1:8080", "http://p2:8080"}
        assert len(fetcher._clients["http://p1:8080"].requests) == 2

    def test_close_releases_clients(self, monkeypatch):
        fetcher = self._fetcher(monkeypatch)
        asyncio.run(fetcher("/a.js", None))
        client = fetcher._clients[None]
        asyncio.run(fetcher.close())
        assert client.closed
        assert fetcher._clients == {}
