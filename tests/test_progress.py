import pytest

from mdextract.progress import ProgressReporter
from mdextract.types import ProgressReport


def test_reports_are_delivered_synchronously(reporter, reports):
    returned = reporter.emit("pdf_page", "Extracting page 1", current_page=1, total_pages=3)

    assert reports == [returned]
    assert returned == ProgressReport("pdf_page", "Extracting page 1", current_page=1, total_pages=3)


@pytest.mark.parametrize("value,expected", [(-0.2, 0.0), (0.4, 0.4), (1.7, 1.0)])
def test_progress_is_clamped(reporter, value, expected):
    assert reporter.emit("llm_load_progress", "loading", progress=value).progress == expected


def test_total_pages_tracks_latest_document(reporter):
    assert reporter.total_pages is None
    reporter.emit("pdf_page", "page", current_page=1, total_pages=4)
    reporter.emit("pdf_extract_complete", "done")
    assert reporter.total_pages == 4


def test_failure_reports_carry_error(reporter, reports, caplog):
    error = RuntimeError("boom")
    reporter.fail("ocr_page_error", "OCR failed on page 2", error)

    assert reports[0].error is error
    assert "OCR failed on page 2" in caplog.text


def test_no_callback_is_allowed():
    report = ProgressReporter().emit("start_quick", "Starting")
    assert report.stage == "start_quick"
