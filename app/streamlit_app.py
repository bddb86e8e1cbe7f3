"""Streamlit UI for the Ghibli character creator.

Upload a picture of a person, animal or character; Gemini checks that it shows a
subject and then renders it as a Ghibli-style illustration for download.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import streamlit as st

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.config import Settings, build_provider
from core.imaging import (
    DOWNLOAD_FILE_NAME,
    DOWNLOAD_MIME,
    download_bytes,
    load_preview,
    result_bytes,
    within_upload_limit,
)
from core.models import AppState, SessionState, UploadedImage
from core.orchestrator import SessionOrchestrator, status_message
from core.providers import VisionProvider
from core.recognition import RecognitionClient
from core.transformation import TransformationClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ============================================================================
# Page config
# ============================================================================

st.set_page_config(
    page_title="Ghibli Character Creator",
    layout="centered",
)

st.markdown("""
<style>
    .block-container { max-width: 760px; }
    div[data-testid="stImage"] img { border-radius: 10px; }
</style>
""", unsafe_allow_html=True)


# ============================================================================
# Provider (one per process) and session state
# ============================================================================


@st.cache_resource
def get_shared_provider() -> VisionProvider:
    return build_provider(Settings.from_env())


try:
    provider = get_shared_provider()
except ValueError as e:
    st.error(str(e))
    st.info(
        "Tip: create a .env file with GEMINI_API_KEY (or GOOGLE_API_KEY), "
        "or set CHARACTER_PROVIDER=relay with RELAY_URL."
    )
    st.stop()


def init_session_state():
    defaults = {
        "orchestrator": None,
        "upload_id": None,
        "uploader_key": 0,
    }
    for key, val in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = val
    if st.session_state["orchestrator"] is None:
        st.session_state["orchestrator"] = SessionOrchestrator(
            RecognitionClient(provider),
            TransformationClient(provider),
        )


init_session_state()
orchestrator: SessionOrchestrator = st.session_state["orchestrator"]


def handle_reset():
    orchestrator.reset()
    st.session_state["upload_id"] = None
    # A new key gives a fresh, empty file uploader
    st.session_state["uploader_key"] += 1


# ============================================================================
# Page
# ============================================================================

st.title("Ghibli Character Creator")
st.caption("Upload a character, and we'll transform it into a Ghibli-style masterpiece!")

state: SessionState = orchestrator.state

if state.is_pending:
    # A previous run was interrupted while a remote call was in flight
    st.warning("A previous request is still pending.")
    st.button("Start Over", on_click=handle_reset)
    st.stop()

if state.phase is AppState.SUCCESS and state.result:
    st.subheader("Your Ghibli Character!")
    image_bytes, _ = result_bytes(state.result)
    st.image(image_bytes, caption="Generated Ghibli-style character", use_container_width=True)

    dl_col, reset_col = st.columns(2)
    with dl_col:
        st.download_button(
            label="Download",
            data=download_bytes(state.result),
            file_name=DOWNLOAD_FILE_NAME,
            mime=DOWNLOAD_MIME,
            type="primary",
            use_container_width=True,
        )
    with reset_col:
        st.button("Start Over", on_click=handle_reset, use_container_width=True)
    st.stop()

uploaded = st.file_uploader(
    "Click to upload an image",
    type=["png", "jpg", "jpeg", "gif", "webp"],
    help="PNG, JPG, GIF up to 10MB",
    key=f"uploader_{st.session_state['uploader_key']}",
)

if uploaded is not None and not within_upload_limit(uploaded.size):
    st.error("Please upload an image of at most 10MB.")
    uploaded = None

if uploaded is not None and uploaded.file_id != st.session_state["upload_id"]:
    st.session_state["upload_id"] = uploaded.file_id
    orchestrator.upload(UploadedImage(
        content=uploaded.getvalue(),
        media_type=uploaded.type,
        name=uploaded.name,
    ))
    state = orchestrator.state

if state.uploaded_image is not None:
    try:
        st.image(load_preview(state.uploaded_image.content), caption="Preview")
    except ValueError:
        st.warning("Could not render a preview for this file.")

if state.error_message:
    st.error(f"Oops! {state.error_message}")
    st.button("Start Over", on_click=handle_reset)

status_box = st.empty()


def render_status(current: SessionState) -> None:
    message = status_message(current.phase)
    if message:
        status_box.info(message)
    else:
        status_box.empty()


if st.button(
    "Create My Ghibli Character",
    type="primary",
    disabled=not state.can_submit,
    use_container_width=True,
):
    orchestrator.on_change = render_status
    try:
        with st.spinner("Working on it..."):
            orchestrator.submit()
    finally:
        orchestrator.on_change = None
    st.rerun()
