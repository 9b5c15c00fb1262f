"""
Entry points composing the extraction cache and the format resolver.

``resolve_batch`` is all-or-nothing: if the player cannot be extracted, or
deciphering any single format faults, the whole batch resolves to ``{}``.
Callers cannot tell an empty input from a failed batch by the result alone.
"""

import asyncio
import logging
import threading
from collections.abc import Iterable
from typing import Any

from .core.cache import ExtractionCache, FetchFunc, FragmentList
from .core.diagnostics import set_debug
from .core.http_client import HttpPlayerFetcher
from .core.sandbox import SandboxEvaluator
from .models.format import FormatDescriptor
from .resolver import FormatResolver

logger = logging.getLogger(__name__)


class PlayerCipherService:
    """Resolves format URLs for any number of player versions."""

    def __init__(
        self,
        fetch: FetchFunc | None = None,
        sandbox: SandboxEvaluator | None = None,
    ):
        self._fetcher = None
        if fetch is None:
            self._fetcher = HttpPlayerFetcher()
            fetch = self._fetcher
        self.cache = ExtractionCache(fetch)
        self.resolver = FormatResolver(sandbox)

    async def get_fragments(
        self, player_url: str, options: dict[str, Any] | None = None
    ) -> FragmentList:
        return await self.cache.get_fragments(player_url, options)

    async def resolve_batch(
        self,
        formats: Iterable[FormatDescriptor | dict[str, Any]],
        player_url: str,
        options: dict[str, Any] | None = None,
    ) -> dict[str, FormatDescriptor]:
        """
        Resolve a batch of formats with one player. Never raises.

        Returns resolved URL -> descriptor, or ``{}`` when anything in the
        batch failed.
        """
        try:
            formats = list(formats)
            logger.debug("Start for player %s | formats=%d", player_url, len(formats))
            fragments = await self.get_fragments(player_url, options)
            # dukpy evaluation blocks, so the batch runs in a worker thread.
            resolved = await asyncio.to_thread(self.resolver.resolve_formats, formats, fragments)
            logger.debug("Done. Deciphered count=%d", len(resolved))
            return resolved
        except Exception as e:
            logger.warning("Failed to resolve formats with player %s: %s", player_url, e)
            return {}

    async def close(self):
        if self._fetcher is not None:
            await self._fetcher.close()


_service: PlayerCipherService | None = None
_singleton_lock = threading.Lock()


def get_service() -> PlayerCipherService:
    """Get or create the process-wide service (thread-safe)."""
    global _service
    if _service is None:
        with _singleton_lock:
            if _service is None:
                _service = PlayerCipherService()
    return _service


async def get_fragments(player_url: str, options: dict[str, Any] | None = None) -> FragmentList:
    return await get_service().get_fragments(player_url, options)


async def resolve_batch(
    formats: Iterable[FormatDescriptor | dict[str, Any]],
    player_url: str,
    options: dict[str, Any] | None = None,
) -> dict[str, FormatDescriptor]:
    return await get_service().resolve_batch(formats, player_url, options)


__all__ = [
    "PlayerCipherService",
    "get_fragments",
    "get_service",
    "resolve_batch",
    "set_debug",
]
