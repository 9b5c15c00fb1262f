"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from player_cipher.core.cache import ExtractionCache
from player_cipher.core.diagnostics import PlayerDumpRecorder
from player_cipher.main import app
from player_cipher.service import PlayerCipherService

PLAYER = "/s/player/abc123/player_ias.vflset/en_US/base.js"


@pytest.fixture
def install_service(monkeypatch):
    def install(fetch):
        service = PlayerCipherService(fetch=fetch)
        service.cache = ExtractionCache(fetch, recorder=PlayerDumpRecorder())
        monkeypatch.setattr("player_cipher.routes.api.get_service", lambda: service)
        return service

    return install


@pytest.fixture
def client():
    return TestClient(app)


class TestRoot:
    def test_lists_endpoints(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["resolve"] == "/api/resolve"


class TestResolve:
    def test_resolves_formats(self, client, install_service, make_fetch, player_js):
        install_service(make_fetch(body=player_js))
        response = client.post(
            "/api/resolve",
            json={
                "player_url": PLAYER,
                "formats": [
                    {
                        "itag": 18,
                        "signatureCipher": "s=abcdef&url=https%3A%2F%2Fx.test%2Fv%3Fn%3Dxyz",
                    }
                ],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["count"] == 1
        fmt = data["formats"]["https://x.test/v?n=XYZ&sig=fedcb"]
        assert fmt["itag"] == 18
        assert fmt["url"] == "https://x.test/v?n=XYZ&sig=fedcb"

    def test_failed_batch_is_empty(self, client, install_service, make_fetch):
        install_service(make_fetch(error=RuntimeError("connection reset")))
        response = client.post(
            "/api/resolve",
            json={"player_url": PLAYER, "formats": [{"itag": 18, "url": "https://x.test/v"}]},
        )
        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["formats"] == {}

    def test_missing_formats_rejected(self, client):
        response = client.post("/api/resolve", json={"player_url": PLAYER})
        assert response.status_code == 422


class TestFragments:
    def test_returns_split_fragments(self, client, install_service, make_fetch, player_js):
        install_service(make_fetch(body=player_js))
        response = client.post("/api/fragments", json={"player_url": PLAYER})
        assert response.status_code == 200
        data = response.json()
        assert data["decipher"].startswith("function(a,b)")
        assert len(data["helpers"]) == 1
        assert data["n_transform"] == "function(c){return c.toUpperCase()}"

    def test_unparseable_player(self, client, install_service, make_fetch, no_decipher_js):
        install_service(make_fetch(body=no_decipher_js))
        response = client.post("/api/fragments", json={"player_url": PLAYER})
        assert response.status_code == 502
        assert response.json()["detail"]["error_code"] == "player.no_decipher"


class TestCacheAndHealth:
    def test_clear_cache(self, client, install_service, make_fetch, player_js):
        service = install_service(make_fetch(body=player_js))
        client.post("/api/fragments", json={"player_url": PLAYER})
        assert client.get("/api/health").json()["cached_players"] == 1

        response = client.delete("/api/cache", params={"player_url": PLAYER})
        assert response.json() == {"success": True, "cleared": 1}
        assert len(service.cache) == 0

    def test_health(self, client, install_service, make_fetch):
        install_service(make_fetch(body=""))
        data = client.get("/api/health").json()
        assert data["status"] == "ok"
        assert data["cached_players"] == 0
