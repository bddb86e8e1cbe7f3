"""Data models for the character creator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AppState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"


PENDING_STATES = frozenset({AppState.ANALYZING, AppState.GENERATING})


@dataclass(frozen=True)
class ImagePayload:
    """An uploaded image in transport-safe form.

    ``data`` is standard base64 of the original bytes and ``media_type`` is the
    content type declared by the source file.
    """

    data: str
    media_type: str


@dataclass(frozen=True)
class UploadedImage:
    """A user upload as received; it is encoded into an ImagePayload on submit."""

    content: Any
    media_type: str
    name: str = ""


@dataclass(frozen=True)
class InlineImage:
    """One image part returned inline by the remote model."""

    data: str
    media_type: str

    def to_data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a single user session.

    Instances are immutable; the orchestrator replaces the whole record on every
    transition so readers never observe a half-applied change.
    """

    phase: AppState = AppState.IDLE
    uploaded_image: UploadedImage | None = None
    result: str | None = None
    error_message: str = ""

    @property
    def is_pending(self) -> bool:
        return self.phase in PENDING_STATES

    @property
    def can_submit(self) -> bool:
        return self.phase is AppState.IDLE and self.uploaded_image is not None
