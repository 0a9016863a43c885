import pytest

from convertify.conversion.flow import (
    CONVERT_ERROR,
    INTERRUPTED,
    MISSING_INPUT,
    ConversionFlow,
    FlowState,
    SelectedFile,
    build_local_result,
)
from convertify.conversion.session import ConversionSession


@pytest.fixture
def flow():
    return ConversionFlow(sleep=lambda _: None, step_delay=0)


def test_starts_idle(flow):
    assert flow.state == FlowState.IDLE
    assert flow.file is None
    assert flow.progress == 0


def test_selecting_file_moves_to_ready_with_suggestion(flow):
    assert flow.select_file(SelectedFile("report.docx", b"doc"))
    assert flow.state == FlowState.READY
    assert flow.target_format == "pdf"
    assert [v for v, _ in flow.target_choices()] == ["pdf", "docx", "txt"]


def test_reselecting_clears_downstream_state(flow):
    flow.select_file(SelectedFile("photo.jpg", b"img"))
    flow.set_target_format("gif")
    flow.set_options({"quality": 50})
    flow.select_file(SelectedFile("song.mp3", b"snd"))
    assert flow.state == FlowState.READY
    assert flow.file.name == "song.mp3"
    assert flow.target_format == "wav"
    assert flow.options is None


def test_oversized_file_is_rejected_without_state_change():
    flow = ConversionFlow(sleep=lambda _: None, max_size_bytes=4)
    assert not flow.select_file(SelectedFile("big.pdf", b"12345"))
    assert flow.state == FlowState.IDLE
    assert flow.error.startswith("File too large")


def test_convert_requires_file_and_format(flow):
    assert not flow.convert()
    assert flow.notice == MISSING_INPUT
    assert flow.state == FlowState.IDLE

    flow.select_file(SelectedFile("bundle.zip", b"zip"))
    assert flow.target_format == ""
    assert not flow.convert()
    assert flow.notice == MISSING_INPUT
    assert flow.state == FlowState.READY


def test_successful_conversion_reports_monotonic_progress(flow):
    seen = []
    flow.select_file(SelectedFile("report.docx", b"doc"))
    assert flow.convert(on_progress=seen.append)
    assert seen == list(range(0, 101, 10))
    assert flow.state == FlowState.COMPLETED
    assert flow.progress == 100
    assert flow.result.filename == "converted.pdf"
    assert flow.result.content_type == "application/pdf"
    assert flow.result.locator.startswith("blob:")
    assert b"Source file: report.docx" in flow.result.data


def test_failure_moves_to_failed_and_reset_returns_to_idle():
    def broken(file, target_format, options):
        raise RuntimeError("encoder down")

    flow = ConversionFlow(converter=broken, sleep=lambda _: None)
    flow.select_file(SelectedFile("photo.png", b"img"))
    assert not flow.convert()
    assert flow.state == FlowState.FAILED
    assert flow.error == CONVERT_ERROR
    assert flow.notice == "Conversion failed"

    flow.reset()
    assert flow.state == FlowState.IDLE
    assert flow.error is None


def test_category_change_cancels_in_flight_progress(flow):
    flow.select_file(SelectedFile("clip.mp4", b"vid"))

    def switch_tab(pct):
        if pct == 30:
            flow.select_category("images")

    assert not flow.convert(on_progress=switch_tab)
    assert flow.category == "images"
    assert flow.state == FlowState.IDLE
    assert flow.progress == 0
    assert flow.result is None


def test_select_file_ignored_while_converting(flow):
    flow.select_file(SelectedFile("a.txt", b"a"))
    attempts = []

    def try_select(pct):
        attempts.append(flow.select_file(SelectedFile("b.txt", b"b")))

    flow.convert(on_progress=try_select)
    assert not any(attempts)
    assert flow.result is not None


def test_session_tracks_conversions():
    session = ConversionSession()
    flow = ConversionFlow(session=session, sleep=lambda _: None)
    flow.select_file(SelectedFile("report.docx", b"doc"))
    flow.convert()
    entry = session.current
    assert entry.name == "report.docx"
    assert entry.source_format == "docx"
    assert entry.status == "completed"
    assert entry.progress == 100
    assert entry.result_url == flow.result.locator


def test_local_result_unknown_format_is_plain_text():
    result = build_local_result(SelectedFile("x.bin", b""), "flac")
    assert result.content_type == "text/plain"
    assert result.filename == "converted.flac"
    assert b"demo FLAC file" in result.data


class ScriptRerun(BaseException):
    """Stands in for the control-flow exception Streamlit raises to stop a run."""


def test_interrupted_run_returns_to_ready():
    session = ConversionSession()
    flow = ConversionFlow(session=session, sleep=lambda _: None)
    flow.select_file(SelectedFile("report.docx", b"doc"))

    def interrupt(pct):
        if pct == 30:
            raise ScriptRerun()

    with pytest.raises(ScriptRerun):
        flow.convert(on_progress=interrupt)

    assert flow.state == FlowState.READY
    assert flow.file.name == "report.docx"
    assert flow.target_format == "pdf"
    assert flow.progress == 0
    assert session.current.status == "failed"
    assert session.current.error == INTERRUPTED

    assert flow.convert()
    assert flow.state == FlowState.COMPLETED
    assert session.current.status == "completed"
