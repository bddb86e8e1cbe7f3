"""Remote vision model providers: Gemini directly, or through the server relay."""

from __future__ import annotations

import base64
import logging
import os
from abc import ABC, abstractmethod

import httpx

from core.encoder import split_data_url
from core.models import ImagePayload, InlineImage

logger = logging.getLogger(__name__)

DEFAULT_RECOGNITION_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_TIMEOUT_S = 120.0


def resolve_api_key(explicit: str | None, *env_names: str) -> str:
    """Return the explicit key if given, else the first non-empty env variable."""
    if explicit and explicit.strip():
        return explicit.strip()
    for name in env_names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


class VisionProvider(ABC):
    """Base interface for the two remote model operations."""

    provider_name: str = "base"

    @abstractmethod
    def recognize(self, payload: ImagePayload, prompt: str) -> str:
        """Return the model's free-text answer about the image."""

    @abstractmethod
    def generate(self, payload: ImagePayload, prompt: str) -> list[InlineImage | None]:
        """Return the ordered response parts; ``None`` marks a part without image data."""


class GeminiProvider(VisionProvider):
    """Google Gemini provider using the google-genai SDK."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        recognition_model: str = DEFAULT_RECOGNITION_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        client=None,
    ) -> None:
        self.api_key = resolve_api_key(api_key, "GEMINI_API_KEY", "GOOGLE_API_KEY")
        self.recognition_model = recognition_model
        self.image_model = image_model
        self.timeout_s = timeout_s
        self._client = client
        if not self.api_key and client is None:
            raise ValueError(
                "Gemini API key is required. Set GEMINI_API_KEY/GOOGLE_API_KEY or pass api_key."
            )

    def _get_client(self):
        if self._client is None:
            from google import genai
            from google.genai import types

            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout_s * 1000)),
            )
        return self._client

    @staticmethod
    def _contents(payload: ImagePayload, prompt: str) -> list:
        from google.genai import types

        return [
            types.Part.from_bytes(
                data=base64.b64decode(payload.data),
                mime_type=payload.media_type,
            ),
            prompt,
        ]

    def recognize(self, payload: ImagePayload, prompt: str) -> str:
        client = self._get_client()
        logger.info("Classifying image via Gemini model=%s", self.recognition_model)

        response = client.models.generate_content(
            model=self.recognition_model,
            contents=self._contents(payload, prompt),
        )
        return response.text or ""

    def generate(self, payload: ImagePayload, prompt: str) -> list[InlineImage | None]:
        from google.genai import types

        client = self._get_client()
        logger.info("Generating image via Gemini model=%s", self.image_model)

        response = client.models.generate_content(
            model=self.image_model,
            contents=self._contents(payload, prompt),
            config=types.GenerateContentConfig(
                response_modalities=[types.Modality.IMAGE],
            ),
        )

        if not response.candidates or response.candidates[0].content is None:
            return []

        parts: list[InlineImage | None] = []
        for part in response.candidates[0].content.parts or []:
            inline = part.inline_data
            if inline is None or not inline.data:
                parts.append(None)
                continue
            data = inline.data
            if isinstance(data, bytes):
                data = base64.b64encode(data).decode("ascii")
            parts.append(InlineImage(data=data, media_type=inline.mime_type or "image/png"))
        return parts


class RelayProvider(VisionProvider):
    """Sends both operations to the server-side relay so the Gemini key stays off the client."""

    provider_name = "relay"

    def __init__(
        self,
        relay_url: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.relay_url = relay_url or os.environ.get("RELAY_URL", "")
        if not self.relay_url:
            raise ValueError("Relay URL is required. Set RELAY_URL or pass relay_url.")
        self._http = http_client or httpx.Client(timeout=timeout_s)

    def _post(self, action: str, payload: ImagePayload) -> dict:
        body = {
            "action": action,
            "image": {"base64": payload.data, "mimeType": payload.media_type},
        }
        logger.info("Calling relay action=%s url=%s", action, self.relay_url)
        resp = self._http.post(self.relay_url, json=body)
        resp.raise_for_status()
        return resp.json()

    def recognize(self, payload: ImagePayload, prompt: str) -> str:
        # The relay holds its own fixed prompt; ``prompt`` is not sent.
        return self._post("recognize", payload).get("result") or ""

    def generate(self, payload: ImagePayload, prompt: str) -> list[InlineImage | None]:
        image_url = self._post("generate", payload).get("imageUrl")
        if not image_url:
            return []
        media_type, data = split_data_url(image_url)
        return [InlineImage(data=data, media_type=media_type)]

    def close(self) -> None:
        self._http.close()


def get_provider(name: str, **kwargs) -> VisionProvider:
    """Factory function to get a provider by name."""
    providers: dict[str, type[VisionProvider]] = {
        "gemini": GeminiProvider,
        "relay": RelayProvider,
    }
    if name not in providers:
        raise ValueError(f"Unknown provider: {name}. Available: {list(providers.keys())}")
    return providers[name](**kwargs)
