"""Tests for the Gemini and relay providers. No network access is used."""

from pathlib import Path
import json
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.models import ImagePayload, InlineImage
from core.providers import GeminiProvider, RelayProvider, get_provider

PAYLOAD = ImagePayload(data="Zm9v", media_type="image/jpeg")


def gemini_response(parts=None, text=None):
    candidates = None
    if parts is not None:
        candidates = [SimpleNamespace(content=SimpleNamespace(parts=parts))]
    return SimpleNamespace(text=text, candidates=candidates)


def inline_part(data, mime_type):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def text_part(text):
    return SimpleNamespace(inline_data=None, text=text)


class TestGeminiProvider:

    def test_recognize_uses_recognition_model(self):
        client = MagicMock()
        client.models.generate_content.return_value = gemini_response(text="Yes")
        provider = GeminiProvider(api_key="k", recognition_model="rec-model", client=client)

        assert provider.recognize(PAYLOAD, "is it a cat?") == "Yes"

        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "rec-model"
        image_part, prompt = kwargs["contents"]
        assert prompt == "is it a cat?"
        assert image_part.inline_data.data == b"foo"
        assert image_part.inline_data.mime_type == "image/jpeg"

    def test_recognize_none_text_is_empty(self):
        client = MagicMock()
        client.models.generate_content.return_value = gemini_response(text=None)
        provider = GeminiProvider(api_key="k", client=client)
        assert provider.recognize(PAYLOAD, "?") == ""

    def test_generate_requests_image_and_keeps_part_order(self):
        client = MagicMock()
        client.models.generate_content.return_value = gemini_response(parts=[
            text_part("here you go"),
            inline_part(b"bar", "image/png"),
        ])
        provider = GeminiProvider(api_key="k", image_model="img-model", client=client)

        parts = provider.generate(PAYLOAD, "make it ghibli")

        assert parts == [None, InlineImage(data="YmFy", media_type="image/png")]
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "img-model"
        assert list(kwargs["config"].response_modalities) == ["IMAGE"]

    def test_generate_without_candidates(self):
        client = MagicMock()
        client.models.generate_content.return_value = gemini_response(parts=None)
        provider = GeminiProvider(api_key="k", client=client)
        assert provider.generate(PAYLOAD, "x") == []

    def test_errors_propagate(self):
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError("quota")
        provider = GeminiProvider(api_key="k", client=client)
        with pytest.raises(RuntimeError, match="quota"):
            provider.recognize(PAYLOAD, "x")


def relay_with(handler):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return RelayProvider(relay_url="https://relay.test/api", http_client=http)


class TestRelayProvider:

    def test_recognize_posts_action_and_image(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"result": "yes"})

        assert relay_with(handler).recognize(PAYLOAD, "ignored") == "yes"
        assert seen["body"] == {
            "action": "recognize",
            "image": {"base64": "Zm9v", "mimeType": "image/jpeg"},
        }

    def test_generate_parses_data_url(self):
        def handler(request):
            return httpx.Response(200, json={"imageUrl": "data:image/png;base64,YmFy"})

        assert relay_with(handler).generate(PAYLOAD, "ignored") == [
            InlineImage(data="YmFy", media_type="image/png")
        ]

    def test_generate_null_image_url_is_no_parts(self):
        def handler(request):
            return httpx.Response(200, json={"imageUrl": None})

        assert relay_with(handler).generate(PAYLOAD, "ignored") == []

    def test_server_error_raises(self):
        def handler(request):
            return httpx.Response(500, json={"error": "Internal Server Error"})

        with pytest.raises(httpx.HTTPStatusError):
            relay_with(handler).recognize(PAYLOAD, "ignored")

    def test_requires_url(self, monkeypatch):
        monkeypatch.delenv("RELAY_URL", raising=False)
        with pytest.raises(ValueError, match="Relay URL"):
            RelayProvider()


def test_get_provider_unknown_name():
    with pytest.raises(ValueError, match="Unknown provider"):
        get_provider("dalle")
