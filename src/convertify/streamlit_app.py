import os

import streamlit as st

from convertify.client import ConvertifyClient
from convertify.conversion.catalog import category_of, format_file_size, source_format_of
from convertify.conversion.flow import ConversionFlow, FlowState, SelectedFile
from convertify.conversion.options import (
    AUDIO_BITRATES,
    QUALITY_TIERS,
    RESOLUTIONS,
    InvalidOptions,
    option_categories,
    options_for_category,
)
from convertify.conversion.session import ConversionSession
from convertify.conversion.validation import DEFAULT_MAX_SIZE

API_BASE = os.getenv("CONVERTIFY_API_BASE", os.getenv("API_BASE", "http://localhost:8080")).rstrip("/")
UI_MODE = os.getenv("CONVERTIFY_UI_MODE", "local").lower()
STEP_DELAY = float(os.getenv("CONVERTIFY_UI_STEP_DELAY", "0.3"))

TABS = [("documents", "Documents"), ("images", "Images"), ("audio", "Audio"), ("video", "Video"), ("archives", "Archives")]


def _flow() -> ConversionFlow:
    # Session-scoped: a browser reload starts a fresh flow and history.
    if "session" not in st.session_state:
        st.session_state["session"] = ConversionSession()
    if "flow" not in st.session_state:
        converter = ConvertifyClient(API_BASE).as_converter() if UI_MODE == "api" else None
        kwargs = {"converter": converter} if converter else {}
        st.session_state["flow"] = ConversionFlow(
            session=st.session_state["session"], step_delay=STEP_DELAY, **kwargs
        )
        st.session_state["upload_key"] = 0
    return st.session_state["flow"]


def _reset(flow: ConversionFlow) -> None:
    flow.reset()
    # Bump the uploader key to clear any previously uploaded file widget state
    st.session_state["upload_key"] += 1


def _options_panel(flow: ConversionFlow) -> dict[str, object] | None:
    """Render option widgets; return the values for the source's category."""
    source = source_format_of(flow.file.name) if flow.file else ""
    categories = option_categories(source, flow.target_format)
    if not categories:
        return None

    values: dict[str, dict[str, object]] = {}
    st.markdown("**Conversion Options**")
    for category, tab in zip(categories, st.tabs([c.capitalize() for c in categories])):
        with tab:
            if category == "images":
                values[category] = {
                    "quality": st.slider("Quality", 10, 100, 80, key="opt-images-quality"),
                    "width": int(st.number_input("Width (px)", min_value=1, value=1280, key="opt-images-width")),
                    "height": int(st.number_input("Height (px)", min_value=1, value=720, key="opt-images-height")),
                    "preserve_aspect_ratio": st.toggle("Preserve aspect ratio", value=True, key="opt-images-aspect"),
                }
            elif category == "documents":
                page_range = st.selectbox("Page range", ["all", "custom"], key="opt-documents-range")
                if page_range == "custom":
                    page_range = st.text_input("Pages", placeholder="e.g. 1-5, 8, 11-13", key="opt-documents-pages") or "all"
                values[category] = {
                    "page_range": page_range,
                    "include_annotations": st.toggle("Include annotations", value=True, key="opt-documents-annotations"),
                }
            elif category == "audio":
                values[category] = {
                    "quality_tier": st.selectbox(
                        "Audio quality",
                        QUALITY_TIERS,
                        index=2,
                        format_func=lambda t: f"{t.capitalize()} ({AUDIO_BITRATES[t]}kbps)",
                        key="opt-audio-quality",
                    )
                }
            elif category == "video":
                values[category] = {
                    "quality_tier": st.selectbox("Quality preset", QUALITY_TIERS, index=2, key="opt-video-quality"),
                    "resolution": st.selectbox("Resolution", RESOLUTIONS, index=1, key="opt-video-resolution"),
                    "bitrate_kbps": st.slider("Bitrate (kbps)", 500, 8000, 1800, step=100, key="opt-video-bitrate"),
                }

    source_category = category_of(source)
    if source_category not in values:
        return None
    try:
        return options_for_category(source_category, values[source_category]).model_dump()
    except InvalidOptions as e:
        st.warning(str(e))
        return None


def _history(session: ConversionSession) -> None:
    files = session.files
    if not files:
        return
    with st.expander(f"This session ({len(files)})"):
        for f in files:
            st.write(
                f"{f.name} → {f.target_format.upper()} · {format_file_size(f.size)} · "
                f"{f.status} · {f.created_at:%H:%M:%S}"
            )
        if st.button("Clear finished"):
            session.clear_completed()
            st.rerun()


def main() -> None:
    st.set_page_config(page_title="Convertify", page_icon="🔄", layout="centered")
    st.title("Convert Your Files")
    st.caption("Upload a file and convert it to your desired format in seconds.")
    if UI_MODE == "api":
        st.caption(f"API base: {API_BASE}")

    flow = _flow()

    labels = [label for _, label in TABS]
    current = next(i for i, (key, _) in enumerate(TABS) if key == flow.category)
    chosen = st.radio("File type", labels, index=current, horizontal=True)
    chosen_key = TABS[labels.index(chosen)][0]
    if chosen_key != flow.category:
        flow.select_category(chosen_key)
        st.session_state["upload_key"] += 1
        st.rerun()

    uploaded = st.file_uploader(
        f"Drop a file or click to browse (up to {DEFAULT_MAX_SIZE // 1024 // 1024}MB)",
        key=f"uploader-{st.session_state['upload_key']}",
    )
    if uploaded is not None and flow.state in (FlowState.IDLE, FlowState.READY):
        if flow.file is None or flow.file.name != uploaded.name or flow.file.size != uploaded.size:
            if not flow.select_file(SelectedFile(name=uploaded.name, data=uploaded.getvalue())):
                st.error(flow.error or "Invalid file")

    if flow.state == FlowState.READY:
        choices = flow.target_choices()
        values = [v for v, _ in choices]
        if values:
            index = values.index(flow.target_format) if flow.target_format in values else 0
            picked = st.selectbox("Convert to:", values, index=index, format_func=dict(choices).get)
            flow.set_target_format(picked)
            flow.set_options(_options_panel(flow))
        else:
            st.info("No conversions are offered for this file type.")

        if st.button("Convert Now", type="primary", disabled=not flow.target_format):
            bar = st.progress(0, text="Converting...")
            flow.convert(on_progress=lambda pct: bar.progress(pct, text=f"Converting... {pct}%"))
            st.rerun()
        elif flow.notice:
            st.warning(flow.notice)

    if flow.state == FlowState.COMPLETED and flow.result is not None:
        st.success(flow.notice or "Conversion complete!")
        st.download_button(
            label="Download",
            data=flow.result.data,
            file_name=flow.result.filename,
            mime=flow.result.content_type,
        )
        if st.button("Convert Another File"):
            _reset(flow)
            st.rerun()

    if flow.state == FlowState.FAILED:
        st.error(flow.error or "Conversion failed")
        if st.button("Try Again"):
            _reset(flow)
            st.rerun()

    _history(st.session_state["session"])


if __name__ == "__main__":
    main()
