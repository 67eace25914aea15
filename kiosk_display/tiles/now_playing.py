"""Now-playing tile: artwork, track metadata, progress bar and status."""

from html import escape

import streamlit as st

from kiosk_display.reconciler import DisplayState, DisplayStatus

KIOSK_CSS = """
<style>
    #MainMenu, header, footer, [data-testid="stToolbar"] { display: none !important; }
    html, body, .stApp {
        background: #000;
        color: #fff;
        cursor: none;
        user-select: none;
        -webkit-user-select: none;
    }
    .stApp * { pointer-events: none; }
    .np-background {
        position: fixed; inset: 0; z-index: -1;
        background-size: cover; background-position: center;
        filter: blur(40px) brightness(0.4);
    }
    .np-art { width: 100%; max-width: 480px; border-radius: 12px; box-shadow: 0 8px 32px rgba(0,0,0,0.6); }
    .np-art-empty { width: 100%; max-width: 480px; aspect-ratio: 1; border-radius: 12px; background: #222; }
    .np-title { font-size: 3rem; font-weight: 700; margin: 0.5rem 0; }
    .np-artist { font-size: 1.8rem; opacity: 0.85; }
    .np-album { font-size: 1.3rem; opacity: 0.6; }
    .np-progress { width: 100%; height: 8px; background: rgba(255,255,255,0.2); border-radius: 4px; }
    .np-progress-fill { height: 100%; background: #1DB954; border-radius: 4px; }
    .np-times { display: flex; justify-content: space-between; font-size: 1.1rem; opacity: 0.8; }
    .np-status { font-size: 1rem; }
    .np-status::before { content: "●"; margin-right: 0.4rem; color: #1DB954; }
    .np-status.paused::before, .np-status.empty::before { color: #f5a623; }
    .np-status.error::before { color: #e74c3c; }
</style>
"""


def inject_kiosk_styles() -> None:
    """Hide Streamlit chrome and block pointer/selection input."""
    st.markdown(KIOSK_CSS, unsafe_allow_html=True)


def render_track(state: DisplayState) -> None:
    """
    Render artwork and track metadata.

    Args:
        state: Current display state from the reconciler.
    """
    art_url = escape(state.artwork_url, quote=True)
    if art_url:
        st.markdown(
            f'<div class="np-background" style="background-image: url({art_url})"></div>',
            unsafe_allow_html=True,
        )

    col_art, col_meta = st.columns([2, 3], vertical_alignment="center")

    with col_art:
        if art_url:
            st.markdown(f'<img class="np-art" src="{art_url}" alt="">', unsafe_allow_html=True)
        else:
            st.markdown('<div class="np-art-empty"></div>', unsafe_allow_html=True)

    with col_meta:
        st.markdown(
            f"""
            <div class="np-title">{escape(state.title)}</div>
            <div class="np-artist">{escape(state.artist_line)}</div>
            <div class="np-album">{escape(state.album)}</div>
            """,
            unsafe_allow_html=True,
        )


def render_progress(state: DisplayState) -> None:
    """
    Render progress bar, elapsed/total times and the status indicator.

    Args:
        state: Current (possibly interpolated) display state.
    """
    status_class = "" if state.status == DisplayStatus.PLAYING else state.status.value
    st.markdown(
        f"""
        <div class="np-progress"><div class="np-progress-fill" style="width: {state.progress_percent:.2f}%"></div></div>
        <div class="np-times"><span>{state.elapsed_text}</span><span>{state.total_text}</span></div>
        <div class="np-status {status_class}">{escape(state.status_text)}</div>
        """,
        unsafe_allow_html=True,
    )
