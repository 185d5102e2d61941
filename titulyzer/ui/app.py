"""Titulyzer -- Streamlit UI.

Multi-page application for uploading videos, browsing the analysis
history and searching past analyses.
"""

from __future__ import annotations

import streamlit as st

from titulyzer.ui.api_client import (
    check_health,
    get_analyses,
    search_analyses,
    transcription_download_url,
    upload_video,
)

VIDEO_TYPES = ["mp4", "avi", "mov", "mkv", "wmv", "flv", "webm"]

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Titulyzer", layout="wide")


def render_analysis(analysis: dict) -> None:  # type: ignore[type-arg]
    """Render one analysis: summary, tags, metadata and transcript link."""
    st.write(analysis.get("summary", ""))
    tags = analysis.get("tags") or []
    if tags:
        st.write(" ".join(f"`{t}`" for t in tags))

    col_a, col_b, col_c = st.columns(3)
    col_a.metric("AI model", str(analysis.get("ai_model", "N/A")))
    duration = analysis.get("duration")
    col_b.metric("Duration", f"{duration:.0f}s" if duration else "N/A")
    col_c.metric("Created", str(analysis.get("created_at") or "N/A")[:10])

    filename = analysis.get("filename")
    if filename:
        st.markdown(f"[Download transcript]({transcription_download_url(filename)})")


# ---------------------------------------------------------------------------
# Sidebar -- navigation + API status
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("Titulyzer")
    st.markdown("---")

    page = st.radio(
        "Navigate",
        ["Upload Video", "History", "Search"],
        label_visibility="collapsed",
    )

    st.markdown("---")

    # API connection indicator
    api_healthy = check_health()
    if api_healthy:
        st.markdown(":green_circle: API connected")
    else:
        st.markdown(":red_circle: API unreachable")

# ---------------------------------------------------------------------------
# Page: Upload Video
# ---------------------------------------------------------------------------
if page == "Upload Video":
    st.header("Upload Video")
    st.write("Upload a video to transcribe it and generate a title, description and tags.")

    uploaded_file = st.file_uploader("Choose a video", type=VIDEO_TYPES)

    if st.button("Analyse", disabled=uploaded_file is None):
        if not api_healthy:
            st.error("Cannot upload: the API server is not reachable.")
        elif uploaded_file is not None:
            with st.spinner("Extracting audio, transcribing and generating content..."):
                result = upload_video(uploaded_file.getvalue(), uploaded_file.name)
            if result:
                st.success("Video analysed successfully.")
                st.subheader(result.get("title", ""))
                st.markdown(result.get("description", ""))
                render_analysis(result)
                with st.expander("Transcript"):
                    st.write(result.get("transcription", ""))
            # Error case is already handled inside upload_video via st.error

# ---------------------------------------------------------------------------
# Page: History
# ---------------------------------------------------------------------------
elif page == "History":
    st.header("History")

    if not api_healthy:
        st.warning("The API server is not reachable. Cannot load the history.")
    else:
        analyses = get_analyses()
        if not analyses:
            st.info("No analyses yet. Upload a video to get started.")
        for analysis in analyses:
            label = analysis.get("title") or analysis.get("original_name") or analysis["filename"]
            with st.expander(label):
                render_analysis(analysis)

# ---------------------------------------------------------------------------
# Page: Search
# ---------------------------------------------------------------------------
elif page == "Search":
    st.header("Search")
    query = st.text_input("Filename or text", placeholder="e.g. interview.mp4 or machine learning")

    if st.button("Search", disabled=not query.strip()):
        results, search_type = search_analyses(query)
        st.caption(f"Searched by {search_type}")
        if not results:
            st.info("No matching analyses.")
        for analysis in results:
            label = analysis.get("title") or analysis.get("original_name") or analysis["filename"]
            with st.expander(label):
                render_analysis(analysis)
