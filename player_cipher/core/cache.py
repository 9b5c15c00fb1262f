"""
Per-player memoization of extracted functions.

A player URL is fetched and parsed at most once at a time: concurrent
callers for the same URL await a single shared task and all receive the
same fragments or the same exception. Only successes are remembered; a
failed attempt is forgotten so the next call retries from scratch.

All bookkeeping happens on the event loop without an ``await`` between the
lookup and the insertion, so creating the in-flight task is exactly-once
per key.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from . import extractor
from .diagnostics import PlayerDumpRecorder, get_dump_recorder
from .errors import ExtractionError

logger = logging.getLogger(__name__)

FetchFunc = Callable[[str, dict[str, Any]], Awaitable[str]]
FragmentList = tuple[str, ...]


class ExtractionCache:
    """Keyed memoization of player URL -> extracted fragment list."""

    def __init__(self, fetch: FetchFunc, recorder: PlayerDumpRecorder | None = None):
        self._fetch = fetch
        self._recorder = recorder or get_dump_recorder()
        self._results: dict[str, FragmentList] = {}
        self._pending: dict[str, asyncio.Task] = {}

    def __len__(self):
        return len(self._results)

    def cached(self, player_url: str) -> FragmentList | None:
        return self._results.get(player_url)

    def invalidate(self, player_url: str | None = None) -> int:
        """Forget one memoized player (or all of them). Returns how many were dropped."""
        if player_url is None:
            count = len(self._results)
            self._results.clear()
            return count
        return 1 if self._results.pop(player_url, None) is not None else 0

    async def get_fragments(
        self, player_url: str, options: dict[str, Any] | None = None
    ) -> FragmentList:
        """
        Return the fragment list for *player_url*, fetching it if needed.

        Raises ExtractionError when the fetch fails or the player has no
        recognizable decipher function.
        """
        cached = self._results.get(player_url)
        if cached is not None:
            return cached

        task = self._pending.get(player_url)
        if task is None:
            logger.debug("Starting extraction for %s", player_url)
            task = asyncio.ensure_future(self._load(player_url, options or {}))
            self._pending[player_url] = task
            task.add_done_callback(lambda t, key=player_url: self._settle(key, t))
        else:
            logger.debug("Joining in-flight extraction for %s", player_url)

        # A cancelled waiter must not cancel the work other callers share.
        return await asyncio.shield(task)

    def _settle(self, player_url: str, task: asyncio.Task):
        if self._pending.get(player_url) is task:
            del self._pending[player_url]
        if task.cancelled():
            return
        if task.exception() is None:
            self._results[player_url] = task.result()
            logger.debug("Cached %d fragment(s) for %s", len(task.result()), player_url)

    async def _load(self, player_url: str, options: dict[str, Any]) -> FragmentList:
        try:
            body = await self._fetch(player_url, options)
        except Exception as e:
            logger.warning("Failed to fetch player %s: %s", player_url, e)
            raise ExtractionError(
                f"Could not fetch player {player_url}: {e!s}",
                error_code="player.fetch_failed",
            ) from e

        self._recorder.record(player_url, body)
        logger.debug("Player fetched, length=%d", len(body) if body else 0)

        functions = extractor.extract(body or "")
        if not functions.has_decipher:
            logger.warning("Could not extract decipher function from player %s", player_url)
            self._recorder.dump_last()
            raise ExtractionError(
                "Could not extract functions",
                error_code="player.no_decipher",
            )

        return tuple(functions.as_list())
