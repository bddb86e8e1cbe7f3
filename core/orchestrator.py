"""Session state machine sequencing encode, recognition and transformation."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable

from core.encoder import encode_image
from core.models import AppState, SessionState, UploadedImage
from core.recognition import RecognitionClient
from core.transformation import TransformationClient
from prompts.templates import (
    ANALYZING_MESSAGE,
    GENERATING_MESSAGE,
    GENERATION_FAILED_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    NOT_A_SUBJECT_MESSAGE,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]


def status_message(phase: AppState) -> str:
    if phase is AppState.ANALYZING:
        return ANALYZING_MESSAGE
    if phase is AppState.GENERATING:
        return GENERATING_MESSAGE
    return ""


class SessionOrchestrator:
    """Owns the SessionState of one user session and drives it through a submission.

    Every ``upload``/``reset``/``submit`` takes a new request id. A submission only
    commits results while its id is still current, so a late response from a
    superseded submission is dropped instead of overwriting the newer session.
    """

    def __init__(
        self,
        recognizer: RecognitionClient,
        transformer: TransformationClient,
        on_change: StateListener | None = None,
    ) -> None:
        self.recognizer = recognizer
        self.transformer = transformer
        self.on_change = on_change
        self._state = SessionState()
        self._request_id = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def request_id(self) -> int:
        return self._request_id

    # ------------------------------------------------------------------
    # External events
    # ------------------------------------------------------------------

    def upload(self, image: UploadedImage) -> None:
        with self._lock:
            self._request_id += 1
            self._state = SessionState(uploaded_image=image)
            state = self._state
        logger.info("Image uploaded (%s, request=%d)", image.media_type, self._request_id)
        self._notify(state)

    def reset(self) -> None:
        with self._lock:
            self._request_id += 1
            self._state = SessionState()
            state = self._state
        logger.info("Session reset (request=%d)", self._request_id)
        self._notify(state)

    def submit(self) -> bool:
        """Run one submission to completion. Returns False if it was not accepted."""
        with self._lock:
            if not self._state.can_submit:
                logger.warning("Submit rejected in phase=%s", self._state.phase.value)
                return False
            self._request_id += 1
            request_id = self._request_id
            image = self._state.uploaded_image
            self._state = replace(self._state, phase=AppState.ANALYZING, result=None, error_message="")
            state = self._state
        logger.info("Submission %d started", request_id)

        try:
            self._notify(state)
            self._run(request_id, image)
        except BaseException:
            # e.g. a UI control-flow exception raised from the listener
            self._abort(request_id)
            raise
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self, request_id: int, image: UploadedImage) -> None:
        try:
            payload = encode_image(image.content, image.media_type)
            is_character = self.recognizer.classify(payload)
        except Exception:
            logger.exception("Submission %d failed during analysis", request_id)
            self._fail(request_id, GENERIC_ERROR_MESSAGE)
            return

        if not is_character:
            self._fail(request_id, NOT_A_SUBJECT_MESSAGE)
            return

        if not self._commit(request_id, phase=AppState.GENERATING):
            return

        try:
            result = self.transformer.transform(payload)
        except Exception:
            logger.exception("Submission %d failed during generation", request_id)
            self._fail(request_id, GENERIC_ERROR_MESSAGE)
            return

        if result is None:
            self._fail(request_id, GENERATION_FAILED_MESSAGE)
        else:
            self._commit(request_id, phase=AppState.SUCCESS, result=result)

    def _abort(self, request_id: int) -> None:
        """Move a still-pending submission to ERROR without notifying listeners."""
        with self._lock:
            if request_id != self._request_id or not self._state.is_pending:
                return
            self._state = replace(
                self._state, phase=AppState.ERROR, error_message=GENERIC_ERROR_MESSAGE
            )
        logger.warning("Submission %d aborted while pending", request_id)

    def _fail(self, request_id: int, message: str) -> bool:
        return self._commit(request_id, phase=AppState.ERROR, error_message=message)

    def _commit(self, request_id: int, **changes) -> bool:
        with self._lock:
            if request_id != self._request_id:
                logger.debug(
                    "Dropping stale completion for request %d (current=%d)",
                    request_id, self._request_id,
                )
                return False
            self._state = replace(self._state, **changes)
            state = self._state
        logger.info("Submission %d -> %s", request_id, state.phase.value)
        self._notify(state)
        return True

    def _notify(self, state: SessionState) -> None:
        if not self.on_change:
            return
        try:
            self.on_change(state)
        except Exception:
            logger.exception("State listener failed for phase=%s", state.phase.value)
