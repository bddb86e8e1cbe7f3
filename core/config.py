"""Runtime configuration loaded from the environment and ``.env``."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from core.providers import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_RECOGNITION_MODEL,
    DEFAULT_TIMEOUT_S,
    VisionProvider,
    get_provider,
    resolve_api_key,
)

logger = logging.getLogger(__name__)


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"REQUEST_TIMEOUT_S must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"REQUEST_TIMEOUT_S must be positive, got {value}")
    return value


@dataclass
class Settings:
    provider: str = "gemini"
    api_key: str = ""
    recognition_model: str = DEFAULT_RECOGNITION_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    relay_url: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> Settings:
        if load_dotenv_file:
            load_dotenv()
        return cls(
            provider=os.environ.get("CHARACTER_PROVIDER", "gemini").strip().lower() or "gemini",
            api_key=resolve_api_key(None, "GEMINI_API_KEY", "GOOGLE_API_KEY"),
            recognition_model=os.environ.get("RECOGNITION_MODEL") or DEFAULT_RECOGNITION_MODEL,
            image_model=os.environ.get("IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
            relay_url=os.environ.get("RELAY_URL", "").strip(),
            timeout_s=_parse_timeout(os.environ.get("REQUEST_TIMEOUT_S")),
        )


def build_provider(settings: Settings) -> VisionProvider:
    """Construct the configured provider; called once per process."""
    logger.info("Building %s provider (timeout=%ss)", settings.provider, settings.timeout_s)
    if settings.provider == "relay":
        return get_provider("relay", relay_url=settings.relay_url, timeout_s=settings.timeout_s)
    if settings.provider == "gemini":
        return get_provider(
            "gemini",
            api_key=settings.api_key,
            recognition_model=settings.recognition_model,
            image_model=settings.image_model,
            timeout_s=settings.timeout_s,
        )
    return get_provider(settings.provider)
