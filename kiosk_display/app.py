"""Kiosk now-playing page.

Run with: streamlit run kiosk_display/app.py
"""

import streamlit as st

from kiosk_display.api_client import KioskApiClient
from kiosk_display.config import display_settings
from kiosk_display.poller import DisplayPoller
from kiosk_display.reconciler import DisplayReconciler
from kiosk_display.tiles import now_playing
from spotify_kiosk.logging_config import setup_logging

st.set_page_config(
    page_title=display_settings.page_title,
    page_icon="🎵",
    layout="wide",
    initial_sidebar_state="collapsed",
)


@st.cache_resource
def configure_logging() -> None:
    """Configure logging once per Streamlit process."""
    setup_logging(display_settings.log_level)


@st.cache_resource
def get_api_client() -> KioskApiClient:
    """One API client (and connection pool) shared by every browser session."""
    return KioskApiClient(
        display_settings.api_base_url,
        timeout=display_settings.request_timeout_seconds,
    )


def get_poller() -> DisplayPoller:
    """Poller for this browser session, created on first use."""
    if "poller" not in st.session_state:
        st.session_state.poller = DisplayPoller(
            get_api_client(),
            DisplayReconciler(),
            recent_fallback=display_settings.recent_fallback,
        )
    return st.session_state.poller


@st.fragment(run_every=display_settings.poll_interval_seconds)
def track_fragment():
    """Poll the kiosk API and redraw the track."""
    state = get_poller().poll()
    now_playing.render_track(state)


@st.fragment(run_every=display_settings.progress_tick_seconds)
def progress_fragment():
    """Redraw the progress bar between polls."""
    state = get_poller().tick()
    now_playing.render_progress(state)


def main():
    """Now-playing layout."""
    configure_logging()
    now_playing.inject_kiosk_styles()
    track_fragment()
    progress_fragment()


if __name__ == "__main__":
    main()
