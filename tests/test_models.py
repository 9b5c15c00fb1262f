"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from player_cipher.models import (
    ErrorResponse,
    FormatDescriptor,
    FragmentsRequest,
    ResolveRequest,
    ResolveResponse,
)


class TestFormatDescriptor:
    def test_platform_aliases(self):
        fmt = FormatDescriptor.model_validate(
            {"itag": 18, "mimeType": "video/mp4", "signatureCipher": "s=a&url=b"}
        )
        assert fmt.mime_type == "video/mp4"
        assert fmt.signature_cipher == "s=a&url=b"

    def test_python_names_accepted(self):
        fmt = FormatDescriptor(itag=18, signature_cipher="s=a&url=b")
        assert fmt.signature_cipher == "s=a&url=b"

    def test_extra_fields_kept(self):
        fmt = FormatDescriptor.model_validate({"itag": 18, "url": "u", "qualityLabel": "360p"})
        assert fmt.to_platform_dict() == {"itag": 18, "url": "u", "qualityLabel": "360p"}

    def test_cipher_payload_prefers_signature_cipher(self):
        assert FormatDescriptor(signatureCipher="new", cipher="old").cipher_payload == "new"
        assert FormatDescriptor(cipher="old").cipher_payload == "old"
        assert FormatDescriptor().cipher_payload is None

    def test_needs_decipher(self):
        assert FormatDescriptor(signatureCipher="s=a").needs_decipher
        assert not FormatDescriptor(url="https://x.test/v").needs_decipher

    def test_invalid_itag(self):
        with pytest.raises(ValidationError):
            FormatDescriptor(itag="abc")


class TestRequests:
    def test_fetch_options_empty(self):
        assert FragmentsRequest(player_url="/base.js").fetch_options() == {}

    def test_fetch_options(self):
        request = FragmentsRequest(
            player_url="/base.js", headers={"X-A": "1"}, proxy="http://proxy:8080"
        )
        assert request.fetch_options() == {"headers": {"X-A": "1"}, "proxy": "http://proxy:8080"}

    def test_resolve_request_parses_formats(self):
        request = ResolveRequest(
            player_url="/base.js", formats=[{"itag": 18, "signatureCipher": "s=a&url=b"}]
        )
        assert request.formats[0].cipher_payload == "s=a&url=b"

    def test_player_url_required(self):
        with pytest.raises(ValidationError):
            ResolveRequest(formats=[])


class TestResponses:
    def test_resolve_response_defaults(self):
        response = ResolveResponse(success=False, player_url="/base.js")
        assert response.count == 0
        assert response.formats == {}

    def test_error_response(self):
        err = ErrorResponse(error="boom", error_code="player.fetch_failed")
        assert err.success is False
        assert err.error_code == "player.fetch_failed"
