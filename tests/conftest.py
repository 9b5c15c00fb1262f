"""Shared fixtures: small player scripts and a fake fetch capability."""

import asyncio
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


def _read(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


class FakeFetch:
    """Async fetch capability returning canned bodies and counting calls."""

    def __init__(self, body=None, bodies=None, error=None, delay=0.01):
        self.body = body
        self.bodies = bodies or {}
        self.error = error
        self.delay = delay
        self.calls = []

    async def __call__(self, player_url, options):
        self.calls.append((player_url, options))
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        body = self.bodies.get(player_url, self.body)
        if isinstance(body, list):
            return body.pop(0)
        return body


@pytest.fixture
def player_js():
    # Decipher, then one helper object, then the n-transform. Helper methods
    # take two parameters so only the real transform has the
    # single-parameter shape.
    return _read("player_basic.js")


@pytest.fixture
def throwing_player_js():
    return _read("player_throwing.js")


@pytest.fixture
def no_decipher_js():
    return _read("player_no_decipher.js")


@pytest.fixture
def make_fetch():
    return FakeFetch
