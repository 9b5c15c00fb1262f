"""
Diagnostics: verbose tracing toggle and the player body recorder.

Neither has any effect on resolution results. The recorder keeps the last
few fetched player scripts so a failed extraction can be reported with the
exact body that broke it.
"""

import logging
import re
import threading
from collections import deque
from pathlib import Path

from ..config import get_dump_dir, get_settings

logger = logging.getLogger(__name__)

# Number of player bodies kept in memory
DUMP_HISTORY = 3

_PACKAGE_LOGGER = "player_cipher"

_debug_enabled: bool | None = None
_singleton_lock = threading.Lock()


def set_debug(enabled: bool):
    """Enable or disable tracing of every extraction/decipher/transform step."""
    global _debug_enabled
    _debug_enabled = bool(enabled)
    logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG if _debug_enabled else logging.INFO)


def is_debug_enabled() -> bool:
    if _debug_enabled is None:
        return get_settings().debug
    return _debug_enabled


class PlayerDumpRecorder:
    """
    Keeps the most recent player bodies and optionally writes them to disk.

    ``record()`` is called once per successful player fetch. When a dump
    directory is configured each body is also persisted there; a failed
    write is logged and the in-memory history is kept regardless.
    """

    def __init__(self, dump_dir: Path | None = None, history: int = DUMP_HISTORY):
        self._dump_dir = dump_dir
        self._bodies: deque[tuple[str, str]] = deque(maxlen=history)

    def record(self, name: str, body: str):
        self._bodies.appendleft((name, body))
        if self._dump_dir is not None:
            self._write(_safe_filename(name), body)

    @property
    def bodies(self) -> list[tuple[str, str]]:
        """Recorded (name, body) pairs, newest first."""
        return list(self._bodies)

    def latest(self) -> tuple[str, str] | None:
        return self._bodies[0] if self._bodies else None

    def dump_last(self) -> Path | None:
        """
        Write the newest body as player-script.js and log a report request.

        Returns the written path, or None when nothing was recorded or no
        dump directory is configured.
        """
        latest = self.latest()
        if latest is None or not latest[1]:
            return None

        name, body = latest
        saved = self._write("player-script.js", body) if self._dump_dir is not None else None
        logger.warning(
            "Could not parse player %s, the platform may have changed its obfuscation. "
            "Please report this issue with the saved player script (%s).",
            name,
            saved or "set DEBUG_DUMP_DIR to keep a copy",
        )
        return saved

    def clear(self):
        self._bodies.clear()

    def _write(self, filename: str, body: str) -> Path | None:
        path = self._dump_dir / filename
        try:
            path.write_text(body, encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to save player body to %s: %s", path, e)
            return None
        logger.debug("Saved player body to %s (%d chars)", path, len(body))
        return path


def _safe_filename(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_")
    return (cleaned or "player")[-120:]


_recorder: PlayerDumpRecorder | None = None


def get_dump_recorder() -> PlayerDumpRecorder:
    """Get or create the process-wide recorder (thread-safe)."""
    global _recorder
    if _recorder is None:
        with _singleton_lock:
            if _recorder is None:
                _recorder = PlayerDumpRecorder(dump_dir=get_dump_dir())
    return _recorder
